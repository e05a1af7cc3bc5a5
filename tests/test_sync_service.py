from __future__ import annotations

import datetime as dt

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from lotofacil_mirror.errors import UpstreamError
from lotofacil_mirror.models.resultado import Resultado
from lotofacil_mirror.repositories.resultado_repository import ResultadoRepository
from lotofacil_mirror.services.sync_service import OutcomeStatus, SyncService


def _stored(session) -> list[int]:
    return list(session.scalars(select(Resultado.concurso).order_by(Resultado.concurso)))


def _seed(session, source, *numbers: int) -> None:
    repo = ResultadoRepository()
    for n in numbers:
        repo.insert_ignore(session, source.draws[n])
    session.commit()


def test_empty_table_backfills_every_draw_in_order(db_session, source):
    source.publish(1, 2)

    summary = SyncService(source).sync(db_session)

    assert summary.local_max == 0
    assert summary.remote_max == 2
    assert summary.records_added == 2
    assert [o.concurso for o in summary.outcomes] == [1, 2]
    assert _stored(db_session) == [1, 2]
    # The latest draw is reused rather than fetched twice.
    assert source.calls == ["latest", 1]


def test_up_to_date_table_makes_no_backfill_calls(db_session, source):
    source.publish(*range(1, 11))
    _seed(db_session, source, *range(1, 11))

    summary = SyncService(source).sync(db_session)

    assert summary.up_to_date
    assert summary.records_added == 0
    assert summary.message == "Already up to date."
    assert source.calls == ["latest"]


def test_second_run_without_upstream_change_adds_nothing(db_session, source):
    source.publish(1, 2, 3)
    service = SyncService(source)

    first = service.sync(db_session)
    second = service.sync(db_session)

    assert first.records_added == 3
    assert second.records_added == 0
    assert second.up_to_date
    assert db_session.scalar(select(func.count()).select_from(Resultado)) == 3


def test_only_draws_after_local_max_are_fetched(db_session, source):
    source.publish(*range(1, 6))
    _seed(db_session, source, 1, 2, 3)

    summary = SyncService(source).sync(db_session)

    assert summary.local_max == 3
    assert [o.concurso for o in summary.outcomes] == [4, 5]
    assert source.calls == ["latest", 4]
    assert _stored(db_session) == [1, 2, 3, 4, 5]


def test_failed_draw_does_not_block_later_ones_and_is_retried(db_session, source):
    source.publish(*range(1, 6))
    source.failing.add(3)
    service = SyncService(source)

    first = service.sync(db_session)

    assert _stored(db_session) == [1, 2, 4, 5]
    assert first.records_added == 4
    assert [o.concurso for o in first.failures] == [3]
    assert first.failures[0].status is OutcomeStatus.FAILED
    assert "failed" in first.message

    source.failing.clear()
    source.calls.clear()
    second = service.sync(db_session)

    assert source.calls == ["latest", 3]
    assert [(o.concurso, o.status) for o in second.outcomes] == [(3, OutcomeStatus.ADDED)]
    assert _stored(db_session) == [1, 2, 3, 4, 5]


def test_unpublished_draw_is_reported_not_found(db_session, source):
    source.publish(1, 3)

    summary = SyncService(source).sync(db_session)

    statuses = {o.concurso: o.status for o in summary.outcomes}
    assert statuses == {1: OutcomeStatus.ADDED, 2: OutcomeStatus.NOT_FOUND, 3: OutcomeStatus.ADDED}
    assert _stored(db_session) == [1, 3]


def test_operator_date_and_numbers_are_normalized(db_session, source):
    source.publish(1, data="05/12/2025", dezenas=["2", "11", "05", 7, "25"])

    SyncService(source).sync(db_session)

    row = db_session.get(Resultado, 1)
    assert row.data == dt.date(2025, 12, 5)
    assert row.data.isoformat() == "2025-12-05"
    # Operator order is preserved; values are zero-padded.
    assert row.dezenas == "02 11 05 07 25"


def test_unreachable_upstream_aborts_the_run(db_session, source):
    source.publish(1, 2)
    source.latest_error = UpstreamError(message="Request to upstream failed")

    with pytest.raises(UpstreamError):
        SyncService(source).sync(db_session)

    assert _stored(db_session) == []
    assert source.calls == ["latest"]


def test_backfill_cap_leaves_remaining_draws_for_later_runs(db_session, source):
    source.publish(*range(1, 6))
    service = SyncService(source, max_backfill=2)

    first = service.sync(db_session)

    assert [o.concurso for o in first.outcomes] == [1, 2]
    assert first.pending == [3, 4, 5]
    assert not first.up_to_date

    second = service.sync(db_session)
    third = service.sync(db_session)

    assert [o.concurso for o in second.outcomes] == [3, 4]
    assert [o.concurso for o in third.outcomes] == [5]
    assert third.pending == []
    assert _stored(db_session) == [1, 2, 3, 4, 5]


def test_zero_cap_means_unbounded(db_session, source):
    source.publish(*range(1, 8))

    summary = SyncService(source, max_backfill=0).sync(db_session)

    assert summary.records_added == 7
    assert summary.pending == []


def test_storage_failure_is_counted_and_skipped(db_session, source):
    class FlakyRepository(ResultadoRepository):
        def insert_ignore(self, session, draw):
            if draw.concurso == 2:
                raise OperationalError("INSERT INTO resultados", {}, Exception("disk I/O error"))
            return super().insert_ignore(session, draw)

    source.publish(1, 2, 3)

    summary = SyncService(source, repository=FlakyRepository()).sync(db_session)

    assert summary.records_added == 2
    assert [(o.concurso, o.status) for o in summary.failures] == [(2, OutcomeStatus.FAILED)]
    assert "Storage error" in summary.failures[0].detail
    assert _stored(db_session) == [1, 3]


def test_gap_is_backfilled_even_when_local_max_matches_remote(db_session, source):
    source.publish(*range(1, 5))
    _seed(db_session, source, 1, 2, 4)

    summary = SyncService(source).sync(db_session)

    assert [(o.concurso, o.status) for o in summary.outcomes] == [(3, OutcomeStatus.ADDED)]
    assert _stored(db_session) == [1, 2, 3, 4]


def test_draws_below_earliest_stored_are_not_requested(db_session, source):
    source.publish(*range(1, 13))
    _seed(db_session, source, 10, 11)

    summary = SyncService(source).sync(db_session)

    assert [o.concurso for o in summary.outcomes] == [12]
    assert source.calls == ["latest"]


def test_failing_gaps_do_not_starve_newer_draws_under_the_cap(db_session, source):
    source.publish(*range(1, 8))
    _seed(db_session, source, 1, 5)
    source.failing.update({2, 3, 4})
    service = SyncService(source, max_backfill=2)

    first = service.sync(db_session)

    assert [o.concurso for o in first.outcomes] == [6, 7]
    assert first.pending == [2, 3, 4]
    assert _stored(db_session) == [1, 5, 6, 7]

    for _ in range(3):
        later = service.sync(db_session)
        assert [o.status for o in later.outcomes] == [OutcomeStatus.FAILED, OutcomeStatus.FAILED]
    assert _stored(db_session) == [1, 5, 6, 7]

    source.failing.clear()
    service.sync(db_session)
    service.sync(db_session)
    assert _stored(db_session) == list(range(1, 8))


def test_leftover_budget_goes_to_gap_retries(db_session, source):
    source.publish(*range(1, 7))
    _seed(db_session, source, 1, 4)

    summary = SyncService(source, max_backfill=3).sync(db_session)

    # 5 and 6 are newer than the stored max; one slot remains for the gap at 2.
    assert [o.concurso for o in summary.outcomes] == [2, 5, 6]
    assert summary.pending == [3]
