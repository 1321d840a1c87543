"""
tests/unit/test_summarizer.py — Unit tests for agent/summarizer.py

Covers: summarize() pipeline order and data flow, defaults for model and
        template, error propagation, summarize_url() error → result
        conversion, tracing, summarize_page() entry point.
"""

import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from agent.errors import FetchError, ProviderError, ResponseShapeError, TransportError
from agent.state import PageFetchResult, SummaryStatus
from agent.summarizer import Summarizer, summarize_page
from config import settings
from observability.tracer import Tracer
from prompts.summary import DEFAULT_SUMMARY_PROMPT


# ── Fixtures ──────────────────────────────────────────────────────────────────

URL = "https://example.com/article"
HTML = (
    "<html><head><title>T</title><style>.a{}</style></head>"
    "<body><p>Hello <b>world</b></p><script>track()</script></body></html>"
)


def mock_client(summary_text: str = "A short summary.") -> MagicMock:
    client = MagicMock()
    client.generate_async = AsyncMock(return_value=summary_text)
    return client


def page(body: str = HTML, url: str = URL) -> PageFetchResult:
    return PageFetchResult(url=url, body=body, status_code=200)


# ── Summarizer.summarize() ────────────────────────────────────────────────────

class TestSummarize:
    @pytest.mark.asyncio
    async def test_returns_model_text_verbatim(self):
        client = mock_client("  Verbatim summary.\n")
        with patch("agent.summarizer.fetch_page", new_callable=AsyncMock, return_value=page()):
            text = await Summarizer(client=client).summarize(
                URL, "key", "models/m", "Summarize: {content}"
            )
        assert text == "  Verbatim summary.\n"

    @pytest.mark.asyncio
    async def test_prompt_contains_sanitized_text(self):
        client = mock_client()
        with patch("agent.summarizer.fetch_page", new_callable=AsyncMock, return_value=page()):
            await Summarizer(client=client).summarize(URL, "key", "models/m", "Summarize: {content}")

        prompt = client.generate_async.call_args.args[0]
        assert prompt == "Summarize: T Hello world"

    @pytest.mark.asyncio
    async def test_passes_model_and_api_key_to_client(self):
        client = mock_client()
        with patch("agent.summarizer.fetch_page", new_callable=AsyncMock, return_value=page()):
            await Summarizer(client=client).summarize(URL, "key-42", "models/pro", "{content}")

        kwargs = client.generate_async.call_args.kwargs
        assert kwargs["model"] == "models/pro"
        assert kwargs["api_key"] == "key-42"

    @pytest.mark.asyncio
    async def test_defaults_model_and_template(self):
        client = mock_client()
        with patch("agent.summarizer.fetch_page", new_callable=AsyncMock, return_value=page()):
            await Summarizer(client=client).summarize(URL, "key")

        prompt = client.generate_async.call_args.args[0]
        assert client.generate_async.call_args.kwargs["model"] == settings.gemini_model
        assert prompt == DEFAULT_SUMMARY_PROMPT.replace("{content}", "T Hello world")

    @pytest.mark.asyncio
    async def test_template_without_token_drops_content(self):
        client = mock_client()
        with patch("agent.summarizer.fetch_page", new_callable=AsyncMock, return_value=page()):
            await Summarizer(client=client).summarize(URL, "key", "models/m", "Just say hi")

        assert client.generate_async.call_args.args[0] == "Just say hi"

    @pytest.mark.asyncio
    async def test_fetches_with_summary_timeout(self):
        client = mock_client()
        with patch("agent.summarizer.fetch_page", new_callable=AsyncMock, return_value=page()) as mock_fetch:
            await Summarizer(client=client).summarize(URL, "key", "models/m", "{content}")

        mock_fetch.assert_awaited_once_with(URL, timeout=settings.summary_timeout_seconds)

    @pytest.mark.asyncio
    async def test_long_page_is_capped_before_prompting(self):
        client = mock_client()
        body = "<p>" + "x" * 50_000 + "</p>"
        with patch("agent.summarizer.fetch_page", new_callable=AsyncMock, return_value=page(body)):
            await Summarizer(client=client).summarize(URL, "key", "models/m", "{content}")

        assert len(client.generate_async.call_args.args[0]) == settings.max_content_chars

    @pytest.mark.asyncio
    async def test_fetch_error_propagates_and_model_not_called(self):
        client = mock_client()
        with patch(
            "agent.summarizer.fetch_page",
            new_callable=AsyncMock,
            side_effect=FetchError(URL, "timeout after 15.0s"),
        ):
            with pytest.raises(FetchError):
                await Summarizer(client=client).summarize(URL, "key", "models/m", "{content}")

        client.generate_async.assert_not_called()

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self):
        client = MagicMock()
        client.generate_async = AsyncMock(side_effect=ProviderError(429, "rate limited"))
        with patch("agent.summarizer.fetch_page", new_callable=AsyncMock, return_value=page()):
            with pytest.raises(ProviderError):
                await Summarizer(client=client).summarize(URL, "key", "models/m", "{content}")

    @pytest.mark.asyncio
    async def test_records_one_span_per_step(self):
        client = mock_client("four words right here")
        tracer = Tracer(url=URL, model="models/m")
        with patch("agent.summarizer.fetch_page", new_callable=AsyncMock, return_value=page()):
            await Summarizer(client=client).summarize(
                URL, "key", "models/m", "{content}", tracer=tracer
            )

        spans = tracer.trace.spans
        assert [s.name for s in spans] == ["fetch", "sanitize", "generate"]
        assert spans[0].metadata["body_chars"] == len(HTML)
        assert spans[1].metadata["content_chars"] == len("T Hello world")
        assert spans[2].metadata["model"] == "models/m"
        assert spans[2].metadata["summary_chars"] == len("four words right here")

    @pytest.mark.asyncio
    async def test_failed_step_span_marked_error(self):
        client = MagicMock()
        client.generate_async = AsyncMock(side_effect=TransportError("Gemini API timeout after 15.0s"))
        tracer = Tracer(url=URL)
        with patch("agent.summarizer.fetch_page", new_callable=AsyncMock, return_value=page()):
            with pytest.raises(TransportError):
                await Summarizer(client=client).summarize(
                    URL, "key", "models/m", "{content}", tracer=tracer
                )

        assert tracer.trace.spans[-1].name == "generate"
        assert tracer.trace.spans[-1].status == "error"
        assert "TransportError" in tracer.trace.spans[-1].error


# ── Summarizer.summarize_url() ────────────────────────────────────────────────

class TestSummarizeUrl:
    @pytest.mark.asyncio
    async def test_success_result(self):
        client = mock_client("One two three.")
        with patch("agent.summarizer.fetch_page", new_callable=AsyncMock, return_value=page()):
            result = await Summarizer(client=client).summarize_url(URL, "key", "models/m", "{content}")

        assert result.status == SummaryStatus.SUCCESS
        assert result.success is True
        assert result.summary == "One two three."
        assert result.error == ""
        assert result.model == "models/m"
        assert result.word_count == 3
        assert result.duration_ms >= 0

    @pytest.mark.asyncio
    async def test_provider_error_becomes_failed_result(self):
        client = MagicMock()
        client.generate_async = AsyncMock(side_effect=ProviderError(429, "rate limited"))
        with patch("agent.summarizer.fetch_page", new_callable=AsyncMock, return_value=page()):
            result = await Summarizer(client=client).summarize_url(URL, "key", "models/m", "{content}")

        assert result.status == SummaryStatus.FAILED
        assert result.summary == ""
        assert result.http_status == 429
        assert "429" in result.error
        assert "rate limited" in result.error

    @pytest.mark.asyncio
    async def test_fetch_error_becomes_failed_result(self):
        client = mock_client()
        with patch(
            "agent.summarizer.fetch_page",
            new_callable=AsyncMock,
            side_effect=FetchError(URL, "ConnectError: dns failure"),
        ):
            result = await Summarizer(client=client).summarize_url(URL, "key", "models/m", "{content}")

        assert result.status == SummaryStatus.FAILED
        assert URL in result.error
        assert result.http_status is None

    @pytest.mark.asyncio
    async def test_shape_error_becomes_failed_result(self):
        raw = json.dumps({"candidates": []})
        client = MagicMock()
        client.generate_async = AsyncMock(
            side_effect=ResponseShapeError(f"Unexpected Gemini response: {raw}", raw)
        )
        with patch("agent.summarizer.fetch_page", new_callable=AsyncMock, return_value=page()):
            result = await Summarizer(client=client).summarize_url(URL, "key", "models/m", "{content}")

        assert result.status == SummaryStatus.FAILED
        assert raw in result.error

    @pytest.mark.asyncio
    async def test_unexpected_exception_propagates(self):
        client = MagicMock()
        client.generate_async = AsyncMock(side_effect=RuntimeError("bug"))
        with patch("agent.summarizer.fetch_page", new_callable=AsyncMock, return_value=page()):
            with pytest.raises(RuntimeError):
                await Summarizer(client=client).summarize_url(URL, "key", "models/m", "{content}")

    @pytest.mark.asyncio
    async def test_trace_finished_with_result(self):
        client = MagicMock()
        client.generate_async = AsyncMock(side_effect=ProviderError(500, "boom"))
        tracer = Tracer(url=URL)
        with patch("agent.summarizer.fetch_page", new_callable=AsyncMock, return_value=page()):
            await Summarizer(client=client).summarize_url(
                URL, "key", "models/m", "{content}", tracer=tracer
            )

        assert tracer.trace.status == "failed"
        assert tracer.trace.http_status == 500
        assert tracer.trace.completed_at != ""

    @pytest.mark.asyncio
    async def test_trace_written_when_trace_dir_set(self, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "trace_dir", str(tmp_path))
        tracer = Tracer(url=URL, run_id="run123")
        with patch("agent.summarizer.fetch_page", new_callable=AsyncMock, return_value=page()):
            await Summarizer(client=mock_client()).summarize_url(
                URL, "key", "models/m", "{content}", tracer=tracer
            )

        data = json.loads((tmp_path / "run123.json").read_text())
        assert data["status"] == "success"
        assert [s["name"] for s in data["spans"]] == ["fetch", "sanitize", "generate"]

    @pytest.mark.asyncio
    async def test_no_trace_file_by_default(self, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "trace_dir", "")
        monkeypatch.chdir(tmp_path)
        with patch("agent.summarizer.fetch_page", new_callable=AsyncMock, return_value=page()):
            await Summarizer(client=mock_client()).summarize_url(URL, "key", "models/m", "{content}")

        assert list(tmp_path.iterdir()) == []


# ── summarize_page() ──────────────────────────────────────────────────────────

class TestSummarizePage:
    @pytest.mark.asyncio
    async def test_builds_client_with_api_key(self):
        with patch("agent.summarizer.GeminiClient") as mock_cls, \
             patch("agent.summarizer.fetch_page", new_callable=AsyncMock, return_value=page()):
            mock_cls.return_value.generate_async = AsyncMock(return_value="Summary.")
            result = await summarize_page(URL, "key-1", "models/m", "{content}")

        mock_cls.assert_called_once_with("key-1")
        assert result.success is True
        assert result.summary == "Summary."

    @pytest.mark.asyncio
    async def test_concurrent_calls_are_independent(self):
        async def fake_fetch(url, timeout=None):
            return PageFetchResult(url=url, body=f"<p>{url}</p>", status_code=200)

        client = MagicMock()
        client.generate_async = AsyncMock(side_effect=lambda prompt, **_: f"sum:{prompt}")
        summarizer = Summarizer(client=client)

        with patch("agent.summarizer.fetch_page", side_effect=fake_fetch):
            a, b = await asyncio.gather(
                summarizer.summarize_url("https://a.example", "k", "models/m", "{content}"),
                summarizer.summarize_url("https://b.example", "k", "models/m", "{content}"),
            )

        assert a.summary == "sum:https://a.example"
        assert b.summary == "sum:https://b.example"
