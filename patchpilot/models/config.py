"""Configuration models for patchpilot."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

DEFAULT_CREDENTIAL_NAME = "OPENAI_API_KEY"
DEFAULT_MODEL_ID = "gpt-4o-mini"

T = TypeVar("T", int, float)


class ConfigurationError(Exception):
    """Raised when the environment holds an invalid review configuration."""

    pass


def _split(value: str, separator: str) -> tuple[str, ...]:
    """Split a delimited environment value, dropping blank entries."""
    return tuple(item.strip() for item in value.split(separator) if item.strip())


def _parse_number(
    environ: Mapping[str, str],
    name: str,
    cast: type[T],
) -> T | None:
    """Parse an optional numeric environment variable.

    Raises:
        ValueError: If the variable is set but is not a number.
    """
    raw = environ.get(name, "").strip()
    if not raw:
        return None

    try:
        return cast(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a {cast.__name__}, got {raw!r}") from e


@dataclass(frozen=True)
class ReviewConfig:
    """Settings for one review invocation.

    Built once per webhook delivery and passed to the filter pipeline and the
    dispatch loop. All collections are tuples so the value stays immutable.
    """

    max_patch_length: int | None = None
    target_label: str | None = None
    ignore_list: tuple[str, ...] = ()
    ignore_patterns: tuple[str, ...] = ()
    include_patterns: tuple[str, ...] = ()
    credential_name: str = DEFAULT_CREDENTIAL_NAME
    api_endpoint: str | None = None
    model_id: str = DEFAULT_MODEL_ID
    temperature: float = 1.0
    top_p: float = 1.0
    max_tokens: int | None = None
    language: str | None = None
    prompt: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_patch_length is not None and self.max_patch_length < 0:
            raise ValueError(
                f"max_patch_length must be non-negative, got {self.max_patch_length}"
            )

        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError(f"temperature must be between 0.0 and 2.0, got {self.temperature}")

        if not 0.0 <= self.top_p <= 1.0:
            raise ValueError(f"top_p must be between 0.0 and 1.0, got {self.top_p}")

        if self.max_tokens is not None and self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")

        if not self.credential_name:
            raise ValueError("credential_name cannot be empty")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ReviewConfig:
        """Load configuration from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            ReviewConfig instance.

        Raises:
            ConfigurationError: If a variable is malformed or out of range.
        """
        if environ is None:
            environ = os.environ

        try:
            return cls._from_mapping(environ)
        except ValueError as e:
            raise ConfigurationError(f"Invalid review configuration: {e}") from e

    @classmethod
    def _from_mapping(cls, environ: Mapping[str, str]) -> ReviewConfig:
        temperature = _parse_number(environ, "temperature", float)
        top_p = _parse_number(environ, "top_p", float)

        return cls(
            max_patch_length=_parse_number(environ, "MAX_PATCH_LENGTH", int),
            target_label=environ.get("TARGET_LABEL") or None,
            ignore_list=_split(environ.get("IGNORE") or environ.get("ignore") or "", "\n"),
            ignore_patterns=_split(environ.get("IGNORE_PATTERNS", ""), ","),
            include_patterns=_split(environ.get("INCLUDE_PATTERNS", ""), ","),
            credential_name=environ.get("REVIEW_API_KEY_NAME") or DEFAULT_CREDENTIAL_NAME,
            api_endpoint=environ.get("OPENAI_API_ENDPOINT") or None,
            model_id=environ.get("MODEL") or DEFAULT_MODEL_ID,
            temperature=1.0 if temperature is None else temperature,
            top_p=1.0 if top_p is None else top_p,
            max_tokens=_parse_number(environ, "max_tokens", int),
            language=environ.get("LANGUAGE") or None,
            prompt=environ.get("PROMPT") or None,
        )

    def sampling_params(self) -> dict[str, Any]:
        """Model parameters passed to the review service."""
        params: dict[str, Any] = {
            "temperature": self.temperature,
            "top_p": self.top_p,
        }
        if self.max_tokens is not None:
            params["max_tokens"] = self.max_tokens
        return params
