"""Run one result synchronization outside the web app (e.g. from cron).

Usage:
  python scripts/sync_results.py
  python scripts/sync_results.py --max-backfill 0 --database-url sqlite:///./lotofacil.db

Option defaults come from the environment configuration (see
lotofacil_mirror.config), so the script and the worker endpoint share limits.
"""

from __future__ import annotations

import argparse
import logging
import pathlib
import sys
from collections.abc import Sequence

from dotenv import load_dotenv

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

# Config values are read at import time, so .env must be loaded first.
load_dotenv()

from lotofacil_mirror.clients.caixa_client import CaixaClient  # noqa: E402
from lotofacil_mirror.config import BaseConfig, get_config  # noqa: E402
from lotofacil_mirror.db import create_app_engine, create_session_factory  # noqa: E402
from lotofacil_mirror.errors import UpstreamError  # noqa: E402
from lotofacil_mirror.models.base import Base  # noqa: E402
from lotofacil_mirror.services.sync_service import SyncService  # noqa: E402


logger = logging.getLogger(__name__)


def build_parser(config: type[BaseConfig]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Backfill missing lotofácil draws into the database")
    parser.add_argument(
        "--database-url",
        dest="database_url",
        type=str,
        default=config.DATABASE_URL,
        help="Override DB connection string (e.g. sqlite:///./lotofacil.db)",
    )
    parser.add_argument("--api-url", dest="api_url", type=str, default=config.CAIXA_API_URL)
    parser.add_argument(
        "--max-backfill",
        dest="max_backfill",
        type=int,
        default=config.SYNC_MAX_BACKFILL,
        help="Max draws fetched in this run (0 = no limit)",
    )
    parser.add_argument("--timeout", dest="timeout_seconds", type=float, default=config.UPSTREAM_TIMEOUT_SECONDS)
    parser.add_argument("--retries", dest="retries", type=int, default=config.UPSTREAM_RETRIES)
    parser.add_argument("--backoff", dest="backoff", type=float, default=config.UPSTREAM_BACKOFF)
    return parser


def main(argv: Sequence[str] | None = None, config: type[BaseConfig] | None = None) -> int:
    """Sync local results with the upstream API; exit 1 if upstream is unreachable."""

    args = build_parser(config or get_config()).parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    engine = create_app_engine(str(args.database_url))
    Base.metadata.create_all(bind=engine)
    session_factory = create_session_factory(engine)

    client = CaixaClient(
        args.api_url,
        timeout_seconds=float(args.timeout_seconds),
        retries=int(args.retries),
        backoff_factor=float(args.backoff),
    )
    service = SyncService(client, max_backfill=int(args.max_backfill))

    try:
        with session_factory() as db:
            summary = service.sync(db)
    except UpstreamError as exc:
        logger.error("Sync aborted: %s", exc.message)
        return 1
    finally:
        client.close()
        engine.dispose()

    for outcome in summary.failures:
        logger.warning("Draw %s not stored (%s): %s", outcome.concurso, outcome.status.value, outcome.detail)
    logger.info("%s Last known draw: %s", summary.message, summary.remote_max)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
