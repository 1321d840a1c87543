"""
agent/state.py — PageFetchResult, SummaryResult and SummaryStatus.

Design principles:
  - Dataclasses, not dicts — typos become AttributeError, not silent new keys
  - One SummaryResult per summarization call, owned by that call, never shared
  - Explicit status — a result is either RUNNING, SUCCESS or FAILED, and
    FAILED always carries a human-readable error

Nothing here is persisted. Each object lives for exactly one request.

USAGE:
  from agent.state import SummaryResult, SummaryStatus

  result = SummaryResult(url="https://example.com", model="models/gemini-2.5-flash-lite")
  result.record_success("The page describes ...")
  print(result.status)        # SummaryStatus.SUCCESS
  print(result.summary)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


# ── Page fetch ─────────────────────────────────────────────────────────────────

@dataclass
class PageFetchResult:
    """
    Raw page body as fetched. No validation beyond decoding to text.

    The page's HTTP status isn't checked — a 404 page still has a body,
    and that body is what gets sanitized and summarized.
    """
    url: str
    body: str
    status_code: int = 0

    @property
    def size(self) -> int:
        return len(self.body)


# ── Status enum ────────────────────────────────────────────────────────────────

class SummaryStatus(str, Enum):
    """
    RUNNING  → pipeline in progress
    SUCCESS  → summary text produced
    FAILED   → stopped at the first failing step, error explains which
    """
    RUNNING = "running"
    SUCCESS = "success"
    FAILED  = "failed"


# ── SummaryResult ──────────────────────────────────────────────────────────────

@dataclass
class SummaryResult:
    """
    Outcome of one summarization call.

    There is no partial success: either summary is set and status is
    SUCCESS, or error is set and status is FAILED.

    http_status is the Gemini response status when the failure came from
    the provider (e.g. 429), otherwise None.
    """

    url: str
    model: str = ""

    summary: str = ""
    """Model output, verbatim. Empty unless status is SUCCESS."""

    error: str = ""
    """Human-readable failure message. Empty unless status is FAILED."""

    http_status: int | None = None

    status: SummaryStatus = SummaryStatus.RUNNING

    # ── Timing ─────────────────────────────────────────────────────────────────
    started_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    completed_at: str = ""
    duration_ms: float = 0.0

    # ── Convenience methods ────────────────────────────────────────────────────

    def record_success(self, summary: str) -> None:
        """Mark as SUCCESS with the model's text."""
        self.summary = summary
        self.status = SummaryStatus.SUCCESS
        self.completed_at = datetime.now(timezone.utc).isoformat()

    def record_failure(self, error: str, http_status: int | None = None) -> None:
        """Mark as FAILED. The summary stays empty."""
        self.error = error
        self.http_status = http_status
        self.status = SummaryStatus.FAILED
        self.completed_at = datetime.now(timezone.utc).isoformat()

    @property
    def success(self) -> bool:
        return self.status == SummaryStatus.SUCCESS

    @property
    def word_count(self) -> int:
        return len(self.summary.split())
