"""
Settings for the Kubernetes-backed payload store.

Pydantic v2 settings management to enforce strict validation, zero token
leakage, and fast failure on invalid configuration.
"""

from functools import lru_cache
from typing import Annotated, Optional

from pydantic import AnyHttpUrl, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    """
    Store settings parsed from the environment (prefix VERIFIER_STORE_).
    """

    api_server_url: Annotated[
        AnyHttpUrl,
        Field(description="Base URL of the Kubernetes API server"),
    ]

    token: Annotated[
        Optional[SecretStr],
        Field(
            default=None,
            description="Bearer token, redacted from logs",
        ),
    ]

    verify_tls: Annotated[
        bool,
        Field(
            default=True,
            description="Verify the API server certificate",
        ),
    ]

    request_timeout_seconds: Annotated[
        float,
        Field(
            default=10.0,
            gt=0,
            description="Per-request timeout for secret reads",
        ),
    ]

    model_config = SettingsConfigDict(
        env_prefix="VERIFIER_STORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )


@lru_cache(maxsize=1)
def get_store_settings() -> StoreSettings:
    """
    Cached settings provider.

    Settings are read once per process.
    """
    return StoreSettings()
