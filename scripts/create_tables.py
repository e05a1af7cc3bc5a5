"""Create database tables in the configured database.

Reads DATABASE_URL (or PG* vars) from .env / environment and creates the
`resultados` table.

Usage:
  python scripts/create_tables.py
"""

from __future__ import annotations

import logging
import pathlib
import sys

from dotenv import load_dotenv
from sqlalchemy import text

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from lotofacil_mirror.config import resolve_database_url  # noqa: E402
from lotofacil_mirror.db import create_app_engine  # noqa: E402
from lotofacil_mirror.models.base import Base  # noqa: E402


logger = logging.getLogger(__name__)


def main() -> int:
    """Create all ORM tables in the target database."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    load_dotenv()
    env_local = PROJECT_ROOT / ".env.local"
    if env_local.exists():
        load_dotenv(dotenv_path=env_local, override=True)

    engine = create_app_engine(resolve_database_url())
    try:
        Base.metadata.create_all(bind=engine)

        # The listing endpoint and date lookups both benefit from a date index.
        if engine.dialect.name == "postgresql":
            with engine.begin() as conn:
                conn.execute(text("CREATE INDEX IF NOT EXISTS ix_resultados_data ON resultados (data)"))
    finally:
        engine.dispose()

    logger.info("Tables created (or already exist).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
