import logging
import os
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

_SECRET_GETTER = None
_TOKEN_GETTER = None


class ApiError(RuntimeError):
    def __init__(self, status_code: int, detail: Any):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"API error {status_code}: {detail}")

    @property
    def message(self) -> str:
        if isinstance(self.detail, dict):
            return str(self.detail.get("detail") or self.detail)
        return str(self.detail)


def _build_session():
    session = requests.Session()
    retry = Retry(
        total=2,
        backoff_factor=0.5,
        status_forcelist=(502, 503, 504),
        allowed_methods=("GET", "PUT", "DELETE"),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=10, pool_maxsize=10)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


_SESSION = _build_session()


def configure(secret_getter, token_getter):
    global _SECRET_GETTER, _TOKEN_GETTER
    _SECRET_GETTER = secret_getter
    _TOKEN_GETTER = token_getter


def _get_secret(path, default=None):
    if _SECRET_GETTER is None:
        return default
    return _SECRET_GETTER(path, default)


def api_base_url():
    return (
        _get_secret(("app", "API_BASE_URL"))
        or _get_secret(("API_BASE_URL",))
        or os.getenv("API_BASE_URL")
        or ""
    )


def is_enabled():
    return bool(api_base_url())


def request(
    method: str,
    path: str,
    params: dict | None = None,
    json: dict | None = None,
    timeout: int = 10,
    authenticated: bool = True,
) -> Any:
    base = api_base_url().rstrip("/")
    if not base:
        raise RuntimeError("API_BASE_URL not configured")
    headers = {}
    if authenticated:
        token = _TOKEN_GETTER() if _TOKEN_GETTER else None
        if not token:
            raise ApiError(401, "Not signed in")
        headers["Authorization"] = f"Bearer {token}"
    url = f"{base}{path}"
    response = _SESSION.request(method, url, params=params, json=json, headers=headers, timeout=timeout)
    if not response.ok:
        try:
            detail = response.json()
        except ValueError:
            detail = response.text
        logger.warning("%s %s failed with %s", method, path, response.status_code)
        raise ApiError(response.status_code, detail)
    if response.status_code == 204:
        return None
    return response.json()
