"""Repository layer for result persistence."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from lotofacil_mirror.models.resultado import Resultado
from lotofacil_mirror.schemas.resultado import Draw


class ResultadoRepository:
    """Read and append-only write operations for `resultados`."""

    def latest_concurso(self, session: Session) -> int:
        """Highest stored draw number, or 0 when the table is empty."""

        value = session.scalar(select(func.max(Resultado.concurso)))
        return int(value) if value is not None else 0

    def concurso_bounds(self, session: Session) -> tuple[int, int]:
        """(lowest, highest) stored draw numbers; (0, 0) when empty."""

        row = session.execute(
            select(func.min(Resultado.concurso), func.max(Resultado.concurso))
        ).one()
        if row[0] is None:
            return 0, 0
        return int(row[0]), int(row[1])

    def existing_between(self, session: Session, first: int, last: int) -> set[int]:
        """Stored draw numbers within [first, last]."""

        if last < first:
            return set()
        stmt = select(Resultado.concurso).where(
            Resultado.concurso >= first,
            Resultado.concurso <= last,
        )
        return {int(n) for n in session.scalars(stmt)}

    def insert_ignore(self, session: Session, draw: Draw) -> bool:
        """Insert a draw unless one with the same concurso exists.

        Returns True if a row was written, False on conflict.
        """

        values = {
            "concurso": draw.concurso,
            "data": draw.data,
            "dezenas": draw.encoded_dezenas,
        }

        dialect = session.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(Resultado).values(**values).on_conflict_do_nothing(
                index_elements=["concurso"]
            )
        elif dialect == "sqlite":
            stmt = sqlite_insert(Resultado).values(**values).on_conflict_do_nothing(
                index_elements=["concurso"]
            )
        else:
            if session.get(Resultado, draw.concurso) is not None:
                return False
            session.add(Resultado(**values))
            session.flush()
            return True

        result = session.execute(stmt)
        return bool(result.rowcount)

    def list_recent(self, session: Session, limit: int) -> Sequence[Resultado]:
        """The `limit` most recent results, newest first."""

        stmt = select(Resultado).order_by(Resultado.concurso.desc()).limit(int(limit))
        return list(session.scalars(stmt).all())
