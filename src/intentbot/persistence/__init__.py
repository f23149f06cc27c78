"""Persistence layer for trained models."""

from intentbot.persistence.serialization import JsonSerializer
from intentbot.persistence.model_store import ModelFile, ModelStore, TrainedModel

__all__ = [
    "JsonSerializer",
    "ModelFile",
    "ModelStore",
    "TrainedModel",
]
