"""Domain layer - configuration models."""
from domain.models import ContourOptions

__all__ = [
    'ContourOptions',
]
