#!filepath: maxent/__init__.py

from .utils.logger import Logging, logs
from .utils.errors import ConfigurationError, InvalidFormatError, StructuralError
from .config.app_config import AppConfig
from .config.training_config import TrainingParameters
from .training.trainer import train_model
from .training.registry import TrainerRegistry
from .artifact.model_artifact import load_model, save_model

__version__ = "0.1.0"

__all__ = [
    "logs", "Logging",
    "ConfigurationError", "StructuralError", "InvalidFormatError",
    "AppConfig",
    "TrainingParameters",
    "train_model",
    "TrainerRegistry",
    "save_model", "load_model",
    "__version__",
]
