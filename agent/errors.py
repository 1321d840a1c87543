"""
agent/errors.py — The four ways a summary can fail.

  FetchError         — the page itself couldn't be retrieved
  TransportError     — the Gemini API couldn't be reached (DNS, TLS, timeout)
  ProviderError      — Gemini answered with a non-2xx status
  ResponseShapeError — Gemini answered 2xx but not with the JSON we expect

None of these are retried. str(error) is the message shown to the user.
"""


class SummaryError(Exception):
    """Base class for summarization failures."""

    http_status: int | None = None


class FetchError(SummaryError):
    """The target page could not be retrieved."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Could not fetch {url}: {reason}")


class TransportError(SummaryError):
    """The provider API was unreachable or timed out."""


class ProviderError(SummaryError):
    """The provider returned a non-success HTTP status."""

    def __init__(self, status: int, message: str, reason: str = "") -> None:
        self.http_status = status
        self.message = message
        self.reason = reason
        label = f"{status} {reason}" if reason else str(status)
        super().__init__(f"Gemini API error {label}: {message}")


class ResponseShapeError(SummaryError):
    """The provider response didn't have the expected JSON structure."""

    def __init__(self, message: str, body: str = "") -> None:
        self.body = body
        super().__init__(message)
