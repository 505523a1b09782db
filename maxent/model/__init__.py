"""
Event model, label tables, indexed training matrix and the evaluable
models produced by the trainers.
"""
from .event import Event
from .index_table import IndexTable
from .data_indexer import (
    DataIndexer,
    IndexedMatrix,
    OnePassDataIndexer,
    TwoPassDataIndexer,
    create_data_indexer,
)
from .base_model import AbstractModel, ModelType, TrainingInfo
from .maxent_model import MaxentModel
from .naive_bayes_model import NaiveBayesModel

__all__ = [
    "Event",
    "IndexTable",
    "DataIndexer",
    "IndexedMatrix",
    "OnePassDataIndexer",
    "TwoPassDataIndexer",
    "create_data_indexer",
    "AbstractModel",
    "ModelType",
    "TrainingInfo",
    "MaxentModel",
    "NaiveBayesModel",
]
