"""
Casos de uso de la aplicacion.
"""
from .review_use_cases import ReviewUseCases

__all__ = ["ReviewUseCases"]
