"""Reconcile the local results table with the upstream lottery API.

One run is a single linear pass:

1. read the highest local concurso (0 when empty);
2. fetch the upstream latest draw (a failure here aborts the run);
3. collect every missing number: those above the local max plus gaps
   left by earlier failed attempts;
4. fetch, normalize and insert each one in ascending order, recording a
   per-draw outcome instead of aborting on failure.

Re-running is safe: inserts are conflict-free and the work list is always
recomputed from what is actually stored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lotofacil_mirror.errors import UpstreamError
from lotofacil_mirror.repositories.resultado_repository import ResultadoRepository
from lotofacil_mirror.schemas.resultado import Draw


logger = logging.getLogger(__name__)


class DrawSource(Protocol):
    def fetch_latest(self) -> Draw: ...

    def fetch_draw(self, concurso: int) -> Draw | None: ...


class OutcomeStatus(str, Enum):
    ADDED = "added"
    EXISTING = "existing"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class DrawOutcome:
    concurso: int
    status: OutcomeStatus
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status in (OutcomeStatus.ADDED, OutcomeStatus.EXISTING)


@dataclass(frozen=True)
class SyncSummary:
    local_max: int
    remote_max: int
    outcomes: list[DrawOutcome] = field(default_factory=list)
    pending: list[int] = field(default_factory=list)

    @property
    def records_added(self) -> int:
        return sum(1 for o in self.outcomes if o.status is OutcomeStatus.ADDED)

    @property
    def failures(self) -> list[DrawOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def up_to_date(self) -> bool:
        return not self.outcomes and not self.pending

    @property
    def message(self) -> str:
        if self.up_to_date:
            return "Already up to date."
        if self.failures or self.pending:
            return (
                f"Sync finished with {self.records_added} new draw(s); "
                f"{len(self.failures)} failed, {len(self.pending)} left for the next run."
            )
        return f"Sync finished with {self.records_added} new draw(s)."


class SyncService:
    """Backfill missing draws from an upstream source."""

    def __init__(
        self,
        source: DrawSource,
        repository: ResultadoRepository | None = None,
        max_backfill: int | None = None,
    ) -> None:
        self._source = source
        self._repo = repository or ResultadoRepository()
        self._max_backfill = max_backfill if max_backfill and max_backfill > 0 else None

    def missing_concursos(self, session: Session, remote_max: int) -> list[int]:
        """Draw numbers in upstream's range that are not stored locally, ascending."""

        lowest, highest = self._repo.concurso_bounds(session)
        first = lowest if lowest > 0 else 1
        if remote_max < first:
            return []

        existing = self._repo.existing_between(session, first, remote_max)
        return [n for n in range(first, remote_max + 1) if n not in existing]

    def sync(self, session: Session) -> SyncSummary:
        """Bring `resultados` up to date with upstream.

        Raises:
            UpstreamError: the latest draw could not be fetched.
        """

        local_max = self._repo.latest_concurso(session)
        logger.info("Latest stored draw: %s", local_max)

        latest = self._source.fetch_latest()
        remote_max = latest.concurso
        logger.info("Latest upstream draw: %s", remote_max)

        missing = self.missing_concursos(session, remote_max)
        # End the read transaction before the per-draw commits start.
        session.commit()

        if not missing:
            logger.info("Database already up to date")
            return SyncSummary(local_max=local_max, remote_max=remote_max)

        missing, pending = self._select_batch(missing, local_max)
        if pending:
            logger.warning(
                "Backfill capped at %s draws; %s left for the next run",
                self._max_backfill,
                len(pending),
            )

        logger.info("Backfilling %s draw(s): %s..%s", len(missing), missing[0], missing[-1])

        outcomes: list[DrawOutcome] = []
        for concurso in missing:
            draw_or_outcome = self._fetch(concurso, latest)
            if isinstance(draw_or_outcome, DrawOutcome):
                outcome = draw_or_outcome
            else:
                outcome = self._store(session, draw_or_outcome)
            outcomes.append(outcome)

            if outcome.ok:
                logger.info("Draw %s %s", concurso, outcome.status.value)
            else:
                logger.warning("Draw %s %s: %s", concurso, outcome.status.value, outcome.detail)

        summary = SyncSummary(
            local_max=local_max,
            remote_max=remote_max,
            outcomes=outcomes,
            pending=pending,
        )
        logger.info(summary.message)
        return summary

    def _select_batch(self, missing: list[int], local_max: int) -> tuple[list[int], list[int]]:
        """Split missing numbers into (this run, later runs) under the cap.

        Draws newer than `local_max` take the budget first so failing gaps
        cannot starve them; leftover budget goes to gap retries.
        """

        if self._max_backfill is None or len(missing) <= self._max_backfill:
            return missing, []

        newer = [n for n in missing if n > local_max]
        gaps = [n for n in missing if n <= local_max]
        chosen = set(newer[: self._max_backfill])
        chosen.update(gaps[: self._max_backfill - len(chosen)])

        return sorted(chosen), [n for n in missing if n not in chosen]

    def _fetch(self, concurso: int, latest: Draw) -> Draw | DrawOutcome:
        if concurso == latest.concurso:
            return latest

        try:
            draw = self._source.fetch_draw(concurso)
        except UpstreamError as exc:
            return DrawOutcome(concurso, OutcomeStatus.FAILED, exc.message)

        if draw is None:
            return DrawOutcome(concurso, OutcomeStatus.NOT_FOUND, "Draw not published upstream")
        return draw

    def _store(self, session: Session, draw: Draw) -> DrawOutcome:
        try:
            inserted = self._repo.insert_ignore(session, draw)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Failed to store draw %s", draw.concurso)
            return DrawOutcome(draw.concurso, OutcomeStatus.FAILED, f"Storage error: {exc.__class__.__name__}")

        status = OutcomeStatus.ADDED if inserted else OutcomeStatus.EXISTING
        return DrawOutcome(draw.concurso, status)
