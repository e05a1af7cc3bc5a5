"""Recent results API. No business logic here."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from lotofacil_mirror.db import get_session
from lotofacil_mirror.repositories.resultado_repository import ResultadoRepository
from lotofacil_mirror.schemas.resultado import ResultadoSchema, ResultadosQuerySchema
from lotofacil_mirror.utils.responses import ok


resultados_bp = Blueprint("resultados", __name__)

_repo = ResultadoRepository()
_schema = ResultadoSchema(many=True)


@resultados_bp.get("/resultados")
def list_resultados():
    """Most recent draws, newest first."""

    query_schema = ResultadosQuerySchema(
        default_limit=int(current_app.config["RESULTS_DEFAULT_LIMIT"]),
        max_limit=int(current_app.config["RESULTS_MAX_LIMIT"]),
    )
    args = query_schema.load(request.args.to_dict())

    rows = _repo.list_recent(get_session(), limit=args["limit"])
    return ok(_schema.dump(rows))
