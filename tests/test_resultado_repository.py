from __future__ import annotations

import datetime as dt

from lotofacil_mirror.repositories.resultado_repository import ResultadoRepository
from lotofacil_mirror.schemas.resultado import Draw


def _draw(concurso: int) -> Draw:
    return Draw(concurso=concurso, data=dt.date(2025, 1, concurso), dezenas=(1, 2, 3))


def test_latest_concurso_is_zero_when_empty(db_session):
    repo = ResultadoRepository()

    assert repo.latest_concurso(db_session) == 0
    assert repo.concurso_bounds(db_session) == (0, 0)


def test_insert_ignore_is_a_no_op_on_conflict(db_session):
    repo = ResultadoRepository()

    assert repo.insert_ignore(db_session, _draw(7)) is True
    db_session.commit()
    assert repo.insert_ignore(db_session, Draw(concurso=7, data=dt.date(2030, 1, 1), dezenas=(9,))) is False
    db_session.commit()

    rows = repo.list_recent(db_session, limit=10)
    assert len(rows) == 1
    assert rows[0].data == dt.date(2025, 1, 7)
    assert rows[0].dezenas == "01 02 03"


def test_bounds_and_existing_between(db_session):
    repo = ResultadoRepository()
    for n in (3, 5, 9):
        repo.insert_ignore(db_session, _draw(n))
    db_session.commit()

    assert repo.latest_concurso(db_session) == 9
    assert repo.concurso_bounds(db_session) == (3, 9)
    assert repo.existing_between(db_session, 4, 9) == {5, 9}
    assert repo.existing_between(db_session, 9, 4) == set()


def test_list_recent_orders_newest_first_and_limits(db_session):
    repo = ResultadoRepository()
    for n in (2, 1, 4, 3):
        repo.insert_ignore(db_session, _draw(n))
    db_session.commit()

    assert [r.concurso for r in repo.list_recent(db_session, limit=3)] == [4, 3, 2]
