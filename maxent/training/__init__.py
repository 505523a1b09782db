from .context import TrainingContext
from .evaluator import ModelEvaluator
from .trainer import EventTrainer, train_model
from .registry import TrainerRegistry

__all__ = [
    "TrainingContext",
    "ModelEvaluator",
    "EventTrainer",
    "train_model",
    "TrainerRegistry",
]
