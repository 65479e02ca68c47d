"""
Runtime configuration for the object set verifier.

This module centralizes environment-driven configuration for the
verification core: payload conventions (compression suffix, document
separator), resource limits, and the default extra-object policy.

Configuration is read-only at runtime and must not influence verification
outcomes in non-deterministic ways.
"""

from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class VerifierConfig(BaseModel):
    """
    Runtime configuration for the object set verifier.

    Configuration is environment-driven, read-only at runtime, and shared
    by every verification call made with it.
    """

    # ------------------------------------------------------------------
    # Diff policy
    # ------------------------------------------------------------------

    CHECK_EXTRA_OBJECTS: bool = Field(
        False,
        description=(
            "Flag objects present in storage but absent from the expected "
            "set. Call sites may override this per verification."
        ),
    )

    STRICT_IDENTITY_COLLISIONS: bool = Field(
        False,
        description=(
            "Fail the build when two documents resolve to the same object "
            "identity instead of keeping the last one."
        ),
    )

    # ------------------------------------------------------------------
    # Payload conventions
    # ------------------------------------------------------------------

    COMPRESSION_SUFFIX: str = Field(
        ".br",
        description="Payload key suffix marking a brotli-compressed blob",
    )

    DOCUMENT_SEPARATOR: str = Field(
        "---\n",
        description="Literal separator between serialized object documents",
    )

    # ------------------------------------------------------------------
    # Safety and resource limits
    # ------------------------------------------------------------------

    MAX_DECOMPRESSED_SIZE_MB: int = Field(
        64,
        description="Upper bound on a single decompressed payload",
    )

    FETCH_TIMEOUT_SECONDS: Optional[float] = Field(
        None,
        description=(
            "Deadline for fetching all payload sources of one declaration. "
            "None leaves timing entirely to the data-access collaborator."
        ),
    )

    # ------------------------------------------------------------------
    # Validators (Pydantic v2)
    # ------------------------------------------------------------------

    @field_validator("COMPRESSION_SUFFIX")
    @classmethod
    def validate_compression_suffix(cls, v: str) -> str:
        if not v or not v.startswith("."):
            raise ValueError(
                f"COMPRESSION_SUFFIX must be a non-empty extension "
                f"starting with '.', got '{v}'"
            )
        return v

    @field_validator("DOCUMENT_SEPARATOR")
    @classmethod
    def validate_document_separator(cls, v: str) -> str:
        if not v:
            raise ValueError("DOCUMENT_SEPARATOR must not be empty.")
        return v

    @field_validator("MAX_DECOMPRESSED_SIZE_MB")
    @classmethod
    def validate_max_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("MAX_DECOMPRESSED_SIZE_MB must be positive.")
        return v

    @field_validator("FETCH_TIMEOUT_SECONDS")
    @classmethod
    def validate_fetch_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("FETCH_TIMEOUT_SECONDS must be positive when set.")
        return v

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def max_decompressed_bytes(self) -> int:
        return self.MAX_DECOMPRESSED_SIZE_MB * 1024 * 1024

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "VerifierConfig":
        """
        Load configuration from environment variables.

        All values are parsed once and must remain immutable.
        """

        def env_bool(name: str, default: bool) -> bool:
            raw = os.getenv(name)
            if raw is None:
                return default
            return raw.lower() in {"1", "true", "yes", "on"}

        timeout_env = os.getenv("VERIFIER_FETCH_TIMEOUT_SECONDS")

        return cls(
            CHECK_EXTRA_OBJECTS=env_bool(
                "VERIFIER_CHECK_EXTRA_OBJECTS", False
            ),
            STRICT_IDENTITY_COLLISIONS=env_bool(
                "VERIFIER_STRICT_IDENTITY_COLLISIONS", False
            ),
            COMPRESSION_SUFFIX=os.getenv(
                "VERIFIER_COMPRESSION_SUFFIX", ".br"
            ),
            DOCUMENT_SEPARATOR=os.getenv(
                "VERIFIER_DOCUMENT_SEPARATOR", "---\n"
            ),
            MAX_DECOMPRESSED_SIZE_MB=int(
                os.getenv("VERIFIER_MAX_DECOMPRESSED_SIZE_MB", "64")
            ),
            FETCH_TIMEOUT_SECONDS=(
                float(timeout_env)
                if timeout_env
                else None
            ),
        )

    model_config = {
        "frozen": True,
    }
