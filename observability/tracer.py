"""
observability/tracer.py — Span-based tracing for one summarization run.

THE CORE CONCEPT:
  Every step in the pipeline is a Span: a named unit of work with a start
  time, end time, status, and metadata dict.

  A Trace collects the spans for one run. It can be saved to disk as JSON,
  which gives a permanent record of what happened for a given URL:
    - How large the fetched page was, and its HTTP status
    - How much text survived sanitizing
    - Which model was called, with how big a prompt
    - Which step failed, and why

WHAT GETS TRACED:
  - fetch     → body_chars, status_code
  - sanitize  → content_chars
  - generate  → model, prompt_chars, summary_chars
  - run       → overall: status, http_status, summary_chars, duration

USAGE:
  tracer = Tracer(url="https://example.com", model="models/gemini-2.5-flash-lite")

  with tracer.span("fetch") as span:
      page = await fetch_page(url)
      span.metadata["body_chars"] = page.size

  tracer.finish(result)
  path = tracer.save(Path("traces"))
"""

import json
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from pathlib import Path


# ── Span ──────────────────────────────────────────────────────────────────────

@dataclass
class Span:
    """
    One named step in the pipeline.

    status is "success" or "error".
    """
    name: str
    step: int
    started_at: float       # time.monotonic() — for duration math
    ended_at: float = 0.0
    duration_ms: float = 0.0
    status: str = "success"
    metadata: dict = field(default_factory=dict)
    error: str = ""

    def finish(self, status: str = "success", error: str = "") -> None:
        self.ended_at = time.monotonic()
        self.duration_ms = round((self.ended_at - self.started_at) * 1000, 2)
        self.status = status
        self.error = error


# ── Trace ─────────────────────────────────────────────────────────────────────

@dataclass
class Trace:
    """Complete record of one run: all spans + summary stats."""
    run_id: str
    url: str
    model: str
    started_at: str         # ISO timestamp
    completed_at: str = ""
    spans: list[Span] = field(default_factory=list)

    # Summary stats (filled by finish())
    status: str = "running"
    error: str = ""
    http_status: int | None = None
    summary_chars: int = 0
    total_duration_ms: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


# ── Tracer ────────────────────────────────────────────────────────────────────

class Tracer:
    """
    Collects spans for one run and optionally saves the trace to disk.

    On error inside a span's with-block the span is marked "error" and the
    exception is re-raised — the tracer never swallows errors.
    """

    def __init__(self, url: str, model: str = "", run_id: str | None = None) -> None:
        self._run_id = run_id or uuid.uuid4().hex[:12]
        self._started = time.monotonic()
        self._trace = Trace(
            run_id=self._run_id,
            url=url,
            model=model,
            started_at=datetime.now(timezone.utc).isoformat(),
        )
        self._step_counter = 0

    @property
    def run_id(self) -> str:
        return self._run_id

    @property
    def trace(self) -> Trace:
        return self._trace

    def elapsed_ms(self) -> float:
        return round((time.monotonic() - self._started) * 1000, 2)

    @contextmanager
    def span(self, name: str):
        """
        Context manager that creates, times, and closes a span.

        Works inside coroutines too — awaiting inside the with-block is fine:
            with tracer.span("generate") as span:
                text = await client.generate_async(prompt, model=model)
                span.metadata["summary_chars"] = len(text)
        """
        self._step_counter += 1
        s = Span(name=name, step=self._step_counter, started_at=time.monotonic())
        self._trace.spans.append(s)
        try:
            yield s
            s.finish(status="success")
        except Exception as exc:
            s.finish(status="error", error=f"{type(exc).__name__}: {exc}")
            raise

    def finish(self, result) -> None:
        """
        Populate summary stats from the final SummaryResult.
        Call this after all spans are done.
        """
        self._trace.completed_at = datetime.now(timezone.utc).isoformat()
        self._trace.total_duration_ms = self.elapsed_ms()
        self._trace.status = result.status.value
        self._trace.error = result.error
        self._trace.http_status = result.http_status
        self._trace.summary_chars = len(result.summary)

    def save(self, log_dir: Path) -> Path:
        """
        Write the trace to {log_dir}/{run_id}.json.
        Returns the path written. Creates the directory if needed.
        """
        log_dir.mkdir(parents=True, exist_ok=True)

        path = log_dir / f"{self._run_id}.json"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self._trace.to_dict(), f, indent=2, default=str)

        return path
