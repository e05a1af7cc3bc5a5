"""WSGI entrypoint for Gunicorn.

Usage:
  gunicorn -w 2 -b 0.0.0.0:3000 wsgi:app
"""

import atexit

from lotofacil_mirror import create_app
from lotofacil_mirror.clients.caixa_client import close_upstream
from lotofacil_mirror.db import dispose_db

app = create_app()
atexit.register(dispose_db, app)
atexit.register(close_upstream, app)
