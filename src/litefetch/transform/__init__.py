"""Data-driven transform pipeline."""

from .functions import TRANSFORMS, TransformFunction
from .pipeline import apply_transforms
from .types import TransformRule

__all__ = [
    "TransformRule",
    "TransformFunction",
    "TRANSFORMS",
    "apply_transforms",
]
