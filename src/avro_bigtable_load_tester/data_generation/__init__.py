"""Synthetic data generation exports."""

from .data_generator import (
    DataGenerationError,
    DataGenerationTimeoutError,
    DataGenerator,
    DataGeneratorRequest,
)

__all__ = [
    "DataGenerationError",
    "DataGenerationTimeoutError",
    "DataGenerator",
    "DataGeneratorRequest",
]
