"""Value Objects - Immutable objects defined by their attributes"""

from .confidence_score import ConfidenceScore
__all__ = [
    "ConfidenceScore",
]
