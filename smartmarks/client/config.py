from __future__ import annotations

import os
from dataclasses import dataclass


DEFAULT_BASE_URL = "http://127.0.0.1:8072"


@dataclass
class ClientConfig:
    base_url: str = DEFAULT_BASE_URL
    token: str | None = None
    timeout: float | None = None
    poll_interval: float = 2.0

    @classmethod
    def from_env(cls) -> "ClientConfig":
        timeout = os.environ.get("SMARTMARKS_TIMEOUT")
        return cls(
            base_url=os.environ.get("SMARTMARKS_URL", DEFAULT_BASE_URL).rstrip("/"),
            token=os.environ.get("SMARTMARKS_TOKEN") or None,
            timeout=float(timeout) if timeout else None,
            poll_interval=float(os.environ.get("SMARTMARKS_POLL_INTERVAL", "2")),
        )
