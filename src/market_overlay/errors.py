"""Error taxonomy for upstream providers.

Degenerate numeric input (empty series, zero anchors, NaN) is not an error
anywhere in the package: derivations return ``None`` instead of raising.
"""

from __future__ import annotations


class OverlayError(Exception):
    """Base class for overlay errors."""


class UpstreamUnavailable(OverlayError):
    """A provider answered with a non-success status or could not be reached.

    ``status`` is ``None`` for network-level failures.
    """

    def __init__(self, provider: str, status: int | None = None, detail: str = "") -> None:
        self.provider = provider
        self.status = status
        self.detail = detail
        where = f"HTTP {status}" if status is not None else "network error"
        super().__init__(f"{provider} unavailable ({where}){': ' + detail if detail else ''}")


class MalformedResponse(OverlayError):
    """A provider answered 2xx but the body lacks the expected fields."""

    def __init__(self, provider: str, detail: str) -> None:
        self.provider = provider
        self.detail = detail
        super().__init__(f"{provider} returned a malformed response: {detail}")


class MissingApiKey(OverlayError):
    """A provider that requires a credential has none configured."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"{provider} API key is not configured")
