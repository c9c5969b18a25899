"""Error types shared by the pipeline and provider adapters."""
from __future__ import annotations

from typing import Any, Dict, Optional


class ClubFinderError(Exception):
    pass


class ConfigurationError(ClubFinderError, ValueError):
    """Missing or unusable provider credentials. Fatal for the request."""


class ValidationError(ClubFinderError, ValueError):
    """Missing or malformed request fields. Fatal for the request."""


class ProviderRequestError(ClubFinderError):
    """A search, routing or polygon provider call did not succeed.

    Recovered locally by the pipeline: the affected keyword or entity is
    skipped and the run continues.
    """

    def __init__(
        self,
        provider: str,
        message: str,
        status: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.provider = provider
        self.status = status
        self.context = dict(context or {})
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        parts = [f"{self.provider}: {base}"]
        if self.status is not None:
            parts.append(f"status={self.status}")
        for key in sorted(self.context):
            parts.append(f"{key}={self.context[key]}")
        return " ".join(parts)


class BudgetExceededError(ProviderRequestError):
    pass


class ConversionError(ClubFinderError):
    """A raw provider hit lacks a usable identifier, name or location."""
