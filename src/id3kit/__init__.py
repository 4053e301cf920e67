"""id3kit: ID3 decision-tree induction for categorical tabular data."""

from loguru import logger

from id3kit.classifier import ID3Classifier
from id3kit.exceptions import (
    ArgumentError,
    DegenerateInputError,
    FeaturesNotFoundError,
    ID3Error,
    MalformedSnapshotError,
)
from id3kit.logging import PACKAGE_NAME, enable_logging

logger.disable(PACKAGE_NAME)  # noqa: RUF067 - Disable logging for the id3kit package by default

__all__ = [
    "ArgumentError",
    "DegenerateInputError",
    "FeaturesNotFoundError",
    "ID3Classifier",
    "ID3Error",
    "MalformedSnapshotError",
    "enable_logging",
]
