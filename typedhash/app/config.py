"""
Centralized configuration for typed hash identifiers.

Pydantic v2 settings management: values are read from the environment
once, validated, and frozen for the lifetime of the process.

None of these settings can change the wire format. Numeric hash type
ids and their byte layouts are fixed by the registry.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# -------------------------------------------------------------------------
# Settings Model
# -------------------------------------------------------------------------

class HashSettings(BaseSettings):
    """
    Application settings parsed from the environment.

    Fails fast at startup if a value is malformed.
    """

    # ---------------------------------------------------------------------
    # Hashing defaults
    # ---------------------------------------------------------------------

    default_hash_type_id: Annotated[
        int,
        Field(
            default=1,
            ge=1,
            description=(
                "Hash type used when a caller does not name one. "
                "Must be a registered, non-NIL type id."
            ),
        ),
    ]

    # ---------------------------------------------------------------------
    # Operational Boundaries
    # ---------------------------------------------------------------------

    max_payload_size_kb: Annotated[
        int,
        Field(
            default=1024,
            ge=1,
            description="Upper bound on HTTP request bodies that are hashed",
        ),
    ]

    log_level: Annotated[
        str,
        Field(
            default="INFO",
            description="Root log level for the HTTP service",
        ),
    ]

    model_config = SettingsConfigDict(
        env_prefix="TYPEDHASH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    # ---------------------------------------------------------------------
    # Validators (Pydantic v2)
    # ---------------------------------------------------------------------

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unsupported log level '{v}'")
        return level

    @property
    def max_payload_size_bytes(self) -> int:
        return self.max_payload_size_kb * 1024


# -------------------------------------------------------------------------
# Settings Dependency Provider
# -------------------------------------------------------------------------

@lru_cache(maxsize=1)
def get_settings() -> HashSettings:
    """
    Process-wide settings singleton.
    """
    return HashSettings()
