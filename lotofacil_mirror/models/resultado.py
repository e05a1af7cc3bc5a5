"""Lotofácil results, one row per draw (concurso).

Columns:
- concurso (PK)
- data: draw date
- dezenas: drawn numbers as "01 02 03 ..." in the operator's order

Rows are append-only: the synchronizer inserts with ON CONFLICT DO NOTHING
and nothing updates or deletes them.
"""

from __future__ import annotations

import datetime as dt

from sqlalchemy import Date, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from lotofacil_mirror.models.base import Base


class Resultado(Base):
    """One official draw result."""

    __tablename__ = "resultados"

    concurso: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    data: Mapped[dt.date] = mapped_column(Date, nullable=False)
    dezenas: Mapped[str] = mapped_column(Text, nullable=False)
