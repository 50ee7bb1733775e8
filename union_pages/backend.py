r"""Thin client for the hosted PostgREST-style backend.

The site's data lives in a hosted database-as-a-service that exposes each
table under ``/rest/v1/<table>`` and stored procedures under
``/rest/v1/rpc/<name>``. This module wraps the handful of verbs the resolver
and the menu service need (select, insert, update, delete, rpc), centralising
authentication headers, timeouts, and error handling.

Example
-------
>>> from union_pages.backend import BackendClient
>>> client = BackendClient(
...     "https://example.supabase.co/rest/v1", api_key="anon-key"
... )  # doctest: +SKIP
>>> client.select("downloads", filters={"id": "eq.f1"})  # doctest: +SKIP
[{'id': 'f1', 'name': 'Statut.pdf', ...}]
"""

from __future__ import annotations

import collections.abc as cabc
import json
import logging
import typing as typ
from http import HTTPStatus

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .errors import BackendError

if typ.TYPE_CHECKING:
    from .config import BackendConfig

logger = logging.getLogger(__name__)

Row = dict[str, typ.Any]
Filters = cabc.Mapping[str, str]


def eq(value: object) -> str:
    """Return a PostgREST equality filter for ``value``."""
    return f"eq.{value}"


def in_(values: cabc.Iterable[object]) -> str:
    """Return a PostgREST ``in`` filter for ``values``."""
    quoted = ",".join(f'"{value}"' for value in values)
    return f"in.({quoted})"


class BackendClient:
    """Wrapper around the REST endpoints of the hosted backend.

    The client is safe to share between the worker threads used for shortcode
    lookups as long as the underlying ``requests.Session`` is; a fresh session
    is created per client by default. The default session retries reads on
    connection errors and 5xx responses; writes are never replayed.
    """

    def __init__(
        self,
        rest_url: str,
        *,
        api_key: str | None = None,
        session: requests.Session | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Initialise the client with the REST root and optional credentials.

        Parameters
        ----------
        rest_url : str
            Base URL under which tables are exposed, e.g.
            ``https://<project>.supabase.co/rest/v1``.
        api_key : str | None, optional
            Service or anon key; sent both as ``apikey`` and as a bearer token.
        session : requests.Session, optional
            Preconfigured session to reuse connections. Defaults to a new
            session that retries idempotent reads on 5xx and connection
            errors.
        timeout : float, optional
            Per-request timeout in seconds. Defaults to ``10.0``.
        """
        self._rest_url = rest_url.rstrip("/")
        self._session = session or _build_session()
        self.timeout = timeout
        self._headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": "union-pages/0.1",
        }
        if api_key:
            self._headers["apikey"] = api_key
            self._headers["Authorization"] = f"Bearer {api_key}"

    @classmethod
    def from_config(
        cls, config: BackendConfig, *, session: requests.Session | None = None
    ) -> BackendClient:
        """Build a client from the ``backend`` section of the site config."""
        return cls(
            config.rest_url,
            api_key=config.api_key,
            session=session,
            timeout=config.timeout,
        )

    def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Filters | None = None,
        order: str | None = None,
        limit: int | None = None,
    ) -> list[Row]:
        """Return rows from ``table`` matching the PostgREST ``filters``."""
        params: dict[str, str] = {"select": columns}
        if filters:
            params.update(filters)
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = str(limit)
        payload = self._request("GET", table, params=params)
        if not isinstance(payload, list):
            msg = f"Expected a list of rows from '{table}', got {type(payload).__name__}"
            raise BackendError(msg)
        return payload

    def select_one(
        self, table: str, *, columns: str = "*", filters: Filters
    ) -> Row | None:
        """Return the single row matching ``filters`` or ``None`` when absent."""
        rows = self.select(table, columns=columns, filters=filters, limit=2)
        if len(rows) > 1:
            msg = f"Expected at most one row from '{table}' for {dict(filters)!r}"
            raise BackendError(msg)
        return rows[0] if rows else None

    def insert(self, table: str, rows: cabc.Sequence[Row]) -> None:
        """Insert ``rows`` into ``table`` in a single request."""
        if not rows:
            return
        self._request(
            "POST",
            table,
            body=list(rows),
            extra_headers={"Prefer": "return=minimal"},
        )

    def update(self, table: str, values: Row, *, filters: Filters) -> list[Row]:
        """Patch every row in ``table`` matching ``filters`` with ``values``.

        Returns the patched rows, so an empty list means nothing matched.
        """
        self._require_filters("update", table, filters)
        rows = self._request(
            "PATCH",
            table,
            params=dict(filters),
            body=values,
            extra_headers={"Prefer": "return=representation"},
        )
        return list(rows or [])

    def delete(self, table: str, *, filters: Filters) -> None:
        """Delete rows in ``table`` matching ``filters``.

        PostgREST refuses unfiltered deletes; pass ``{"id": "not.is.null"}``
        to clear a table explicitly.
        """
        self._require_filters("delete", table, filters)
        self._request("DELETE", table, params=dict(filters))

    def rpc(self, function: str, arguments: Row) -> typ.Any:  # noqa: ANN401
        """Invoke a stored procedure and return its decoded JSON result."""
        return self._request("POST", f"rpc/{function}", body=arguments)

    @staticmethod
    def _require_filters(verb: str, table: str, filters: Filters) -> None:
        if not filters:
            msg = f"Refusing to {verb} '{table}' without a filter"
            raise ValueError(msg)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: cabc.Mapping[str, str] | None = None,
        body: object | None = None,
        extra_headers: cabc.Mapping[str, str] | None = None,
    ) -> typ.Any:  # noqa: ANN401
        url = f"{self._rest_url}/{path}"
        headers = dict(self._headers)
        if extra_headers:
            headers.update(extra_headers)
        logger.debug("%s %s params=%s", method, url, params)
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=body,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            msg = f"Failed to reach backend for {method} {path}: {exc}"
            raise BackendError(msg) from exc

        if response.status_code >= HTTPStatus.BAD_REQUEST:
            snippet = response.text[:200]
            msg = (
                f"Backend {method} {path} failed with status "
                f"{response.status_code}: {snippet}"
            )
            raise BackendError(msg, status_code=response.status_code)

        if response.status_code == HTTPStatus.NO_CONTENT or not response.content:
            return None
        try:
            return response.json()
        except json.JSONDecodeError as exc:
            msg = f"Backend response for {method} {path} was not valid JSON"
            raise BackendError(msg) from exc


def _build_session() -> requests.Session:
    """Return a session that retries GETs; writes are never replayed."""
    session = requests.Session()
    retry = Retry(
        total=3,
        connect=2,
        read=2,
        backoff_factor=0.5,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


__all__ = ["BackendClient", "Row", "eq", "in_"]
