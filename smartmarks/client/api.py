from __future__ import annotations

import httpx

from smartmarks.client.config import ClientConfig
from smartmarks.client.errors import ServiceUnavailable


def error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return f"request failed with status {response.status_code}"


class ApiClient:
    """Thin JSON client for the Smartmarks REST surface under ``/api/v1``."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        options = {"base_url": f"{base_url.rstrip('/')}/api/v1", "transport": transport}
        if timeout is not None:
            options["timeout"] = timeout
        self._http = httpx.Client(**options)
        self.token = token

    @classmethod
    def from_config(cls, config: ClientConfig, transport=None) -> "ApiClient":
        return cls(
            config.base_url,
            token=config.token,
            timeout=config.timeout,
            transport=transport,
        )

    @property
    def token(self) -> str | None:
        return self._token

    @token.setter
    def token(self, value: str | None) -> None:
        self._token = value
        if value:
            self._http.headers["Authorization"] = f"Bearer {value}"
        else:
            self._http.headers.pop("Authorization", None)

    def request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise ServiceUnavailable(f"cannot reach server: {exc}") from exc

    def close(self) -> None:
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
