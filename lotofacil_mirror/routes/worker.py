"""Sync trigger for external schedulers (cron). No business logic here."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app

from lotofacil_mirror.clients.caixa_client import get_caixa_client
from lotofacil_mirror.db import get_session
from lotofacil_mirror.schemas.sync import SyncSummarySchema
from lotofacil_mirror.services.sync_service import SyncService
from lotofacil_mirror.utils.responses import ok


logger = logging.getLogger(__name__)

worker_bp = Blueprint("worker", __name__)

_summary_schema = SyncSummarySchema()


@worker_bp.route("/worker/run", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
def run_sync():
    """Run one synchronization pass and report what changed."""

    logger.info("Sync triggered")
    service = SyncService(
        get_caixa_client(),
        max_backfill=int(current_app.config["SYNC_MAX_BACKFILL"]),
    )
    summary = service.sync(get_session())
    return ok(_summary_schema.dump(summary))
