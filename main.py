"""Vercel/dev-server entrypoint.

Vercel's Flask detection looks for an `app` object in `main.py`; locally,
`python main.py` serves on $PORT (default 3000).
"""

import os

from lotofacil_mirror import create_app

app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "3000")), debug=bool(app.config.get("DEBUG")))
