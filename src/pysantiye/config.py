"""Client configuration for pysantiye."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pysantiye._constants import DEFAULT_SCHEMA, REALTIME_PATH, REST_PATH
from pysantiye.exceptions import SantiyeConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class SantiyeConfig:
    """Client configuration.

    Parameters
    ----------
    url : str
        Project base URL, e.g. ``https://abcd.supabase.co``. REST and
        realtime endpoints are derived from it.
    api_key : str
        Public (anon) API key sent as ``apikey`` with every request.
    access_token : str or None
        Signed-in user's JWT. When unset the API key doubles as bearer
        token, which only grants anonymous row-level access.
    schema : str
        Database schema that holds the dashboard tables.
    request_timeout : float
        Total timeout in seconds for a single REST request.
    realtime_enabled : bool
        Open the realtime websocket for change subscriptions. When
        disabled, subscriptions degrade to a handle that never fires.
    heartbeat_interval : float
        Seconds between Phoenix heartbeats on the realtime socket.
    join_timeout : float
        Seconds to wait for a channel join reply.
    """

    url: str
    api_key: str
    access_token: str | None = None
    schema: str = DEFAULT_SCHEMA
    request_timeout: float = 10.0
    realtime_enabled: bool = True
    heartbeat_interval: float = 25.0
    join_timeout: float = 10.0

    def __post_init__(self) -> None:
        if not self.url or not self.url.strip():
            raise SantiyeConfigError("url must be non-empty")
        if not self.api_key or not self.api_key.strip():
            raise SantiyeConfigError("api_key must be non-empty")
        # Frozen dataclass: normalise through object.__setattr__.
        object.__setattr__(self, "url", self.url.strip().rstrip("/"))

    @property
    def rest_url(self) -> str:
        return f"{self.url}{REST_PATH}"

    @property
    def realtime_url(self) -> str:
        """Websocket URL for the realtime service."""
        if self.url.startswith("https://"):
            base = "wss://" + self.url[len("https://") :]
        elif self.url.startswith("http://"):
            base = "ws://" + self.url[len("http://") :]
        else:
            base = self.url
        return f"{base}{REALTIME_PATH}"

    @property
    def bearer_token(self) -> str:
        return self.access_token or self.api_key

    @classmethod
    def from_env(cls, **overrides: Any) -> SantiyeConfig:
        """Create configuration from environment variables.

        Reads ``SANTIYE_URL``, ``SANTIYE_API_KEY`` and the optional
        ``SANTIYE_*`` variables below. Explicit keyword arguments override
        environment values.

        Raises
        ------
        SantiyeConfigError
            If a numeric variable cannot be parsed or url/key are missing.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "SANTIYE_URL": "url",
            "SANTIYE_API_KEY": "api_key",
            "SANTIYE_ACCESS_TOKEN": "access_token",
            "SANTIYE_SCHEMA": "schema",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_FLOAT_MAP = {
            "SANTIYE_REQUEST_TIMEOUT": "request_timeout",
            "SANTIYE_HEARTBEAT_INTERVAL": "heartbeat_interval",
            "SANTIYE_JOIN_TIMEOUT": "join_timeout",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = float(val)
            except ValueError as exc:
                raise SantiyeConfigError(f"{env_key} must be a number, got {val!r}") from exc

        if "realtime_enabled" not in overrides:
            config_kwargs["realtime_enabled"] = _env_bool(env.get("SANTIYE_REALTIME_ENABLED"), True)

        config_kwargs.update(overrides)

        missing = [name for name in ("url", "api_key") if not config_kwargs.get(name)]
        if missing:
            raise SantiyeConfigError(f"Missing configuration: {', '.join(missing)}")

        return cls(**config_kwargs)
