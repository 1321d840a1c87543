"""
app.py — Streamlit front end for page titles + Gemini summaries.

Sidebar:  API key, model picker (filled from the models endpoint),
          prompt template editor
Main:     paste a URL → title lookup and summary run concurrently,
          the summary (or the failure message) and the run's spans are shown

Run with:
  uv run streamlit run app.py
"""

import asyncio
import sys
from dataclasses import asdict
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

import streamlit as st

from agent.errors import SummaryError
from agent.state import SummaryResult
from agent.summarizer import Summarizer
from config import settings
from llm.client import GeminiClient
from observability.logging_config import setup_logging
from observability.tracer import Tracer
from prompts.summary import CONTENT_TOKEN, DEFAULT_SUMMARY_PROMPT
from tools.fetch import fetch_page_title

setup_logging(settings.log_level)

# ── Page config ───────────────────────────────────────────────────────────────

st.set_page_config(
    page_title="clippy.ai — Link Summaries",
    layout="wide",
    page_icon="📎",
)

# ── Sidebar ───────────────────────────────────────────────────────────────────

with st.sidebar:
    st.title("📎 Link Summaries")
    st.divider()

    st.subheader("Gemini")
    api_key = st.text_input(
        "API key",
        value=settings.gemini_api_key,
        type="password",
    )

    if st.button("Load models", disabled=not api_key):
        try:
            st.session_state["models"] = GeminiClient(api_key).list_models()
        except SummaryError as e:
            st.session_state.pop("models", None)
            st.error(str(e))

    models = st.session_state.get("models") or [settings.gemini_model]
    default_index = models.index(settings.gemini_model) if settings.gemini_model in models else 0
    model = st.selectbox("Model", models, index=default_index)

    st.divider()
    prompt_template = st.text_area(
        "Prompt template",
        value=DEFAULT_SUMMARY_PROMPT,
        height=260,
    )
    if CONTENT_TOKEN not in prompt_template:
        st.caption(f"⚠️ Template has no {CONTENT_TOKEN} — the page text won't be sent.")

    st.divider()
    st.caption(f"**Timeouts:** {settings.title_timeout_seconds:.0f}s title, "
               f"{settings.summary_timeout_seconds:.0f}s summary")
    st.caption(f"**Content cap:** {settings.max_content_chars:,} chars")

# ── Helpers ───────────────────────────────────────────────────────────────────

async def _title_and_summary(
    url: str, tracer: Tracer
) -> tuple[str, SummaryResult]:
    """Title lookup and summary are independent — run them side by side."""
    summarizer = Summarizer(client=GeminiClient(api_key))
    title, result = await asyncio.gather(
        fetch_page_title(url),
        summarizer.summarize_url(url, api_key, model, prompt_template, tracer=tracer),
    )
    return title, result


def _render_spans_table(spans: list[dict]) -> None:
    """Render a spans list as a Streamlit dataframe."""
    if not spans:
        st.caption("No spans recorded.")
        return

    import pandas as pd

    rows = []
    for s in spans:
        meta = s.get("metadata", {})
        meta_str = ", ".join(f"{k}={v}" for k, v in meta.items() if v != "" and v is not None)
        rows.append({
            "Step": s.get("step", ""),
            "Name": s.get("name", ""),
            "Status": s.get("status", ""),
            "Duration ms": s.get("duration_ms", 0),
            "Metadata": meta_str[:120],
            "Error": s.get("error", ""),
        })

    st.dataframe(pd.DataFrame(rows), width="stretch", hide_index=True)


# ── Main ──────────────────────────────────────────────────────────────────────

st.header("Summarize a link")

url = st.text_input("URL", placeholder="https://example.com/article")

if st.button("Summarize", type="primary", disabled=not url.strip()):
    tracer = Tracer(url=url.strip(), model=model)
    with st.spinner("Fetching page and asking Gemini..."):
        title, result = asyncio.run(_title_and_summary(url.strip(), tracer))
    st.session_state["last_run"] = (title, result, tracer.trace)

if "last_run" in st.session_state:
    title, result, trace = st.session_state["last_run"]

    st.subheader(title)
    st.caption(result.url)

    if result.success:
        st.success(f"{result.word_count} words in {result.duration_ms / 1000:.1f}s")
        st.write(result.summary)
    else:
        st.error(result.error)

    with st.expander("Trace", expanded=False):
        st.caption(f"Run `{trace.run_id}` — {trace.model}")
        _render_spans_table([asdict(s) for s in trace.spans])
