"""SQLAlchemy database models."""

from folio.models.base import Base
from folio.models.content import ContentEntry

__all__ = [
    "Base",
    "ContentEntry",
]
