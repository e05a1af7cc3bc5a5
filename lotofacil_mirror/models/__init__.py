"""ORM models."""

from lotofacil_mirror.models.resultado import Resultado

__all__ = ["Resultado"]
