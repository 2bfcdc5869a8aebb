"""Projection of node trees onto JSON values and their serialization."""

from .projector import JsonProjector, JsonValue, project
from .serializer import JsonSerializer, serialize

__all__ = [
    "JsonProjector",
    "JsonSerializer",
    "JsonValue",
    "project",
    "serialize",
]
