#!filepath: tests/utils/test_logger.py
import pytest
from loguru import logger

from maxent.config.log_config import LogConfig
from maxent.utils.logger import Logging, init_logging, logs


def _capture():
    captured = []
    sink_id = logger.add(lambda msg: captured.append(str(msg)))
    return captured, sink_id


def test_catch_logs_and_reraises():
    @logs.catch(msg="boom")
    def fails():
        raise RuntimeError("bad")

    captured, sink_id = _capture()
    with pytest.raises(RuntimeError):
        fails()
    logger.remove(sink_id)

    assert any("boom" in line for line in captured)


def test_catch_logs_time():
    @logs.catch(log_time=True)
    def ok():
        return 3

    captured, sink_id = _capture()
    assert ok() == 3
    logger.remove(sink_id)

    assert any("[TIME] ok" in line for line in captured)


def test_file_sink(tmp_path):
    log = Logging(log_dir=str(tmp_path / "logs"), log_level="DEBUG")
    log.info("hello file")
    logger.complete()

    files = list((tmp_path / "logs").glob("*.log"))
    assert files
    assert "hello file" in files[0].read_text(encoding="utf-8")

    logger.remove()


def test_init_logging_applies_level(tmp_path):
    init_logging(LogConfig(level="WARNING"))
    assert logs.level == "WARNING"
    assert logs.log_dir is None

    logger.remove()
