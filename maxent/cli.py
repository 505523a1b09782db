#!filepath: maxent/cli.py
from pathlib import Path
from typing import List, Optional

import typer
from rich import print
from rich.table import Table

from maxent import __version__
from maxent.artifact.model_artifact import ModelArtifact, save_model
from maxent.artifact.model_store import ModelStore
from maxent.config.app_config import AppConfig
from maxent.model.event_stream import FileEventStream
from maxent.observability.instrumentation import Instrumentation
from maxent.training.engines import TrainReportEngine
from maxent.training.registry import TrainerRegistry
from maxent.utils.logger import init_logging

app = typer.Typer(help="Maximum entropy model trainer CLI")


@app.command()
def version():
    print(f"v{__version__}")


@app.command()
def train(
    events: Path = typer.Argument(..., help="event file, one 'outcome ctx1 ctx2 ...' per line"),
    model: Path = typer.Argument(..., help="output model artifact"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config"),
    algorithm: Optional[str] = typer.Option(None, "--algorithm", "-a"),
    iterations: Optional[int] = typer.Option(None, "--iterations", "-i"),
    cutoff: Optional[int] = typer.Option(None, "--cutoff"),
    threads: Optional[int] = typer.Option(None, "--threads"),
    report: Optional[Path] = typer.Option(None, "--report", help="write the iteration history as CSV"),
):
    """
    Train a model from an event file and save it as an artifact
    """
    cfg = AppConfig.load(config)
    init_logging(cfg.log)

    params = cfg.training.with_overrides(
        Algorithm=algorithm, Iterations=iterations, Cutoff=cutoff, Threads=threads
    )

    print(f"[green]Training {params.algorithm} on {events}[/green]")

    inst = Instrumentation(enabled=True)
    trainer = TrainerRegistry.with_defaults().create(params, inst=inst)

    with inst.timer("train", record=False):
        trained = trainer.train(FileEventStream(events))

    with inst.timer("save"):
        save_model(trained, model)

    inst.generate_timeline_report(str(model))

    engine = TrainReportEngine()
    if report is not None:
        engine.write(trainer.ctx, report)

    summary = engine.summarize(trainer.ctx)
    table = Table(title=f"{params.algorithm} -> {model}")
    table.add_column("metric")
    table.add_column("value", justify="right")
    for key, value in summary.items():
        table.add_row(key, f"{value:.6g}" if isinstance(value, float) else str(value))
    print(table)


@app.command("eval")
def evaluate(
    model: Path = typer.Argument(..., help="model artifact"),
    context: List[str] = typer.Argument(..., help="predicates, optionally name=value"),
):
    """
    Print the outcome distribution for one context
    """
    from maxent.model.event_stream import parse_contexts

    loaded = ModelStore().get(model)
    names, values = parse_contexts(context)
    probs = loaded.eval(names, values)

    print(f"[bold]{loaded.best_outcome(probs)}[/bold]")
    print(loaded.all_outcomes(probs))


@app.command()
def info(model: Path = typer.Argument(..., help="model artifact")):
    """
    Show the manifest and sizes of a model artifact
    """
    artifact = ModelArtifact.read(model)

    table = Table(title=str(model))
    table.add_column("key")
    table.add_column("value")
    for key, value in artifact.manifest.items():
        table.add_row(key, value)
    table.add_row("outcomes", str(artifact.model.num_outcomes))
    table.add_row("predicates", str(artifact.model.num_preds))
    print(table)


if __name__ == "__main__":
    app()

# python -m maxent.cli train events.txt model.bin
