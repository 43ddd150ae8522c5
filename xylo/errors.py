"""Error types raised by the configuration and generation engine."""
from __future__ import annotations

from typing import Iterable, List


class XyloError(Exception):
    """Base class for failures the calling layer reports to the user."""

    kind = "Error"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.kind}: {self.detail}"


class InvalidConfig(XyloError, ValueError):
    """The configuration source does not deserialize into a valid Config."""

    kind = "Invalid config"


class ProfileNotFound(XyloError, LookupError):
    """The requested (or default) profile name matches no profile."""

    kind = "Profile not found"

    def __init__(self, name: str, available: Iterable[str] = ()) -> None:
        self.name = name
        self.available: List[str] = list(available)
        listing = ", ".join(self.available) or "<none>"
        super().__init__(f"'{name}'. Available profiles: {listing}")


class GenerationFailure(XyloError, RuntimeError):
    """Serializing a well-formed in-memory configuration failed."""

    kind = "Generation failure"
