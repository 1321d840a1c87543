"""
agent/summarizer.py — Fetch → sanitize → compose → generate for one URL.

THE PIPELINE:

  1. fetch_page(url)              15s   → FetchError on any transport failure
  2. sanitize_markup(body)              → tag-free text, <= 10,000 chars
  3. compose_prompt(template, text)     → {content} replaced
  4. client.generate_async(prompt)  15s → TransportError / ProviderError /
                                          ResponseShapeError
  5. return candidates[0].content.parts[0].text, verbatim

  No retries anywhere. The first failing step ends the run.

TWO WAYS TO CALL IT:

  await summarizer.summarize(...)      → str, raises SummaryError subclasses
  await summarizer.summarize_url(...)  → SummaryResult, never raises for
                                         the four failure kinds; the error
                                         message is in result.error

  summarize_url() is what a UI wants: one object with either text or a
  message to show. summarize() is for callers that want to branch on the
  exception type.

  Anything that isn't a SummaryError is a bug and propagates from both.

USAGE:
  from agent.summarizer import summarize_page

  result = await summarize_page("https://example.com/article", api_key="...")
  if result.success:
      print(result.summary)
  else:
      print(result.error, result.http_status)
"""

import logging
from pathlib import Path

from agent.errors import SummaryError
from agent.state import SummaryResult
from config import settings
from llm.client import GeminiClient
from observability.tracer import Tracer
from prompts.summary import DEFAULT_SUMMARY_PROMPT, compose_prompt
from tools.extract import sanitize_markup
from tools.fetch import fetch_page

logger = logging.getLogger(__name__)


class Summarizer:
    """
    Produces a plain-text summary of one web page.

    Holds no per-call state — one instance can run any number of
    concurrent summarize() calls.
    """

    def __init__(self, client: GeminiClient | None = None) -> None:
        self._client = client or GeminiClient()

    async def summarize(
        self,
        url: str,
        api_key: str | None = None,
        model: str | None = None,
        prompt_template: str | None = None,
        *,
        tracer: Tracer | None = None,
    ) -> str:
        """
        Run the full pipeline and return the model's text verbatim.

        Args:
            url:             Page to summarize.
            api_key:         Gemini key. None → the client's default key.
            model:           None → settings.gemini_model.
            prompt_template: Must contain {content} for the page text to be
                             included. None → DEFAULT_SUMMARY_PROMPT.
            tracer:          Optional — records one span per step.

        Raises:
            FetchError, TransportError, ProviderError, ResponseShapeError
        """
        model = model or settings.gemini_model
        if prompt_template is None:
            prompt_template = DEFAULT_SUMMARY_PROMPT
        if tracer is None:
            tracer = Tracer(url=url, model=model)

        with tracer.span("fetch") as span:
            page = await fetch_page(url, timeout=settings.summary_timeout_seconds)
            span.metadata["body_chars"] = page.size
            span.metadata["status_code"] = page.status_code

        with tracer.span("sanitize") as span:
            content = sanitize_markup(page.body, settings.max_content_chars)
            span.metadata["content_chars"] = len(content)

        prompt = compose_prompt(prompt_template, content)

        with tracer.span("generate") as span:
            span.metadata["model"] = model
            span.metadata["prompt_chars"] = len(prompt)
            text = await self._client.generate_async(prompt, model=model, api_key=api_key)
            span.metadata["summary_chars"] = len(text)

        return text

    async def summarize_url(
        self,
        url: str,
        api_key: str | None = None,
        model: str | None = None,
        prompt_template: str | None = None,
        *,
        tracer: Tracer | None = None,
    ) -> SummaryResult:
        """
        Same pipeline as summarize(), but failures come back as a FAILED
        SummaryResult instead of an exception.

        Pass a tracer to inspect the spans afterwards; otherwise one is
        created per call.
        """
        model = model or settings.gemini_model
        result = SummaryResult(url=url, model=model)
        if tracer is None:
            tracer = Tracer(url=url, model=model)

        try:
            text = await self.summarize(
                url, api_key, model, prompt_template, tracer=tracer
            )
        except SummaryError as e:
            logger.warning("summary failed for %s: %s", url, e)
            result.record_failure(str(e), e.http_status)
        else:
            result.record_success(text)
            logger.info("summary for %s: %d words", url, result.word_count)
        finally:
            result.duration_ms = tracer.elapsed_ms()
            tracer.finish(result)
            _save_trace(tracer)

        return result


async def summarize_page(
    url: str,
    api_key: str | None = None,
    model: str | None = None,
    prompt_template: str | None = None,
) -> SummaryResult:
    """
    One-shot entry point: build a Summarizer and summarize url.

    Never raises for fetch/provider failures — check result.success.
    """
    summarizer = Summarizer(client=GeminiClient(api_key))
    return await summarizer.summarize_url(url, api_key, model, prompt_template)


def _save_trace(tracer: Tracer) -> None:
    """Write the trace when settings.trace_dir is set. Trace I/O never fails a run."""
    if not settings.trace_dir:
        return
    try:
        path = tracer.save(Path(settings.trace_dir))
    except OSError as e:
        logger.warning("could not write trace %s: %s", tracer.run_id, e)
        return
    logger.debug("trace saved → %s", path)
