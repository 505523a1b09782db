from .app_config import AppConfig
from .log_config import LogConfig
from .training_config import Algorithms, DataIndexers, TrainingParameters

__all__ = [
    "AppConfig",
    "LogConfig",
    "Algorithms",
    "DataIndexers",
    "TrainingParameters",
]
