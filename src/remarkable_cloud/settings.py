from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from ._version import __version__

DEFAULT_GROUP = "auth0|5a68dc51cb30df3877a1d7c4"


class EndpointOptions(BaseModel):
    """Discovery parameters; unset fields fall back to RemarkableSettings."""

    environment: Optional[str] = None  # deployment tier
    group: Optional[str] = None  # account partition
    api_ver: Optional[int] = None  # discovery API version


class RemarkableSettings(BaseSettings):
    """
    Client settings.

    Env support:
      - REMARKABLE_* variables (REMARKABLE_DEVICE_TOKEN, REMARKABLE_HTTP_TIMEOUT, ...)
      - values from a local .env file
    """

    auth_url: str = "https://my.remarkable.com"
    service_manager_url: str = (
        "https://service-manager-production-dot-remarkable-production.appspot.com"
    )
    user_agent: str = f"remarkable-cloud/{__version__}"
    device_desc: str = "desktop-windows"

    environment: str = "production"
    group: str = DEFAULT_GROUP
    storage_api_ver: int = 2
    notifications_api_ver: int = 1

    device_token: Optional[SecretStr] = None
    device_token_file: Path = Field(
        default_factory=lambda: Path.home() / ".config" / "remarkable-cloud" / "device_token"
    )

    # None means no timeout at all, matching the service's own behaviour
    http_timeout: Optional[float] = None

    log_level: Optional[str] = None
    log_format: str = "plain"

    model_config = SettingsConfigDict(
        env_prefix="REMARKABLE_",
        env_file=".env",
        extra="ignore",
    )

    def endpoint_query(self, options: EndpointOptions | None, *, default_api_ver: int) -> dict[str, str]:
        opts = options or EndpointOptions()
        return {
            "environment": opts.environment or self.environment,
            "group": opts.group or self.group,
            "apiVer": str(opts.api_ver if opts.api_ver is not None else default_api_ver),
        }


@lru_cache
def get_settings(**kwargs) -> RemarkableSettings:
    # Only include kwargs that are not None, so defaults in RemarkableSettings are used
    filtered = {k: v for k, v in kwargs.items() if v is not None}
    return RemarkableSettings(**filtered)
