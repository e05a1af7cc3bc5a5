"""HTTP client for the CAIXA Portal de Loterias results API."""

from __future__ import annotations

import logging
from typing import Any

import requests
from flask import Flask, current_app
from marshmallow import ValidationError as MarshmallowValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from lotofacil_mirror.errors import UpstreamError
from lotofacil_mirror.schemas.resultado import CaixaDrawSchema, Draw


logger = logging.getLogger(__name__)


def build_http_session(retries: int, backoff_factor: float) -> requests.Session:
    """Create a requests session with retry/backoff for transient network errors."""

    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=backoff_factor,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET",),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=4, pool_maxsize=4)

    session = requests.Session()
    # The CAIXA gateway rejects requests without a browser-like agent.
    session.headers.update({"User-Agent": "Mozilla/5.0", "Accept": "application/json"})
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class CaixaClient:
    """Fetch draws from `{base_url}` (latest) and `{base_url}/{n}`."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 10.0,
        retries: int = 3,
        backoff_factor: float = 0.3,
        http: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._http = http or build_http_session(retries=retries, backoff_factor=backoff_factor)
        self._schema = CaixaDrawSchema()

    @property
    def base_url(self) -> str:
        return self._base_url

    def fetch_latest(self) -> Draw:
        """Fetch the most recent draw. Any failure raises UpstreamError."""

        draw = self._fetch(self._base_url)
        if draw is None:
            raise UpstreamError(message="Latest draw not available upstream", details={"url": self._base_url})
        return draw

    def fetch_draw(self, concurso: int) -> Draw | None:
        """Fetch one draw by number.

        Returns None when upstream answers 404 (draw not published).
        """

        draw = self._fetch(f"{self._base_url}/{int(concurso)}")
        if draw is not None and draw.concurso != int(concurso):
            raise UpstreamError(
                message=f"Upstream returned draw {draw.concurso} when asked for {concurso}",
                details={"requested": int(concurso), "received": draw.concurso},
            )
        return draw

    def close(self) -> None:
        self._http.close()

    def _fetch(self, url: str) -> Draw | None:
        try:
            resp = self._http.get(url, timeout=self._timeout_seconds)
        except requests.RequestException as exc:
            raise UpstreamError(message=f"Request to {url} failed: {exc}", details={"url": url}) from exc

        if resp.status_code == 404:
            return None

        try:
            resp.raise_for_status()
        except requests.HTTPError as exc:
            raise UpstreamError(
                message=f"Upstream responded {resp.status_code} for {url}",
                details={"url": url, "status": resp.status_code},
            ) from exc

        try:
            payload: Any = resp.json()
        except ValueError as exc:
            raise UpstreamError(message=f"Upstream returned invalid JSON for {url}", details={"url": url}) from exc

        if not isinstance(payload, dict):
            raise UpstreamError(message=f"Upstream returned non-object payload for {url}", details={"url": url})

        try:
            return self._schema.load(payload)
        except MarshmallowValidationError as exc:
            raise UpstreamError(
                message=f"Malformed draw payload from {url}",
                details=exc.messages,
            ) from exc


def init_upstream(app: Flask) -> None:
    """Create the app-scoped upstream client."""

    app.extensions["caixa_client"] = CaixaClient(
        str(app.config["CAIXA_API_URL"]),
        timeout_seconds=float(app.config["UPSTREAM_TIMEOUT_SECONDS"]),
        retries=int(app.config["UPSTREAM_RETRIES"]),
        backoff_factor=float(app.config["UPSTREAM_BACKOFF"]),
    )
    logger.debug("Upstream results API: %s", app.config["CAIXA_API_URL"])


def get_caixa_client() -> CaixaClient:
    client: CaixaClient | None = current_app.extensions.get("caixa_client")
    if client is None:
        raise RuntimeError("Upstream client not initialized")
    return client


def close_upstream(app: Flask) -> None:
    client: CaixaClient | None = app.extensions.pop("caixa_client", None)
    if client is not None:
        client.close()
