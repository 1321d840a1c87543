"""
observability/logging_config.py — JSON log lines on stdout.

WHAT A LINE LOOKS LIKE:
  {"timestamp": "2026-10-19T09:12:44+0000", "level": "WARNING",
   "logger": "agent.summarizer", "message": "summary failed for ...",
   "service": "clippy-summarizer"}

  Every module logs through logging.getLogger(__name__); this file only
  decides where those records go and how they are rendered.

STREAMLIT RERUNS:
  app.py calls setup_logging() at import, and Streamlit re-executes app.py
  on every widget interaction. The handler installed here is named, and a
  repeat call swaps out only that handler, so reruns never stack duplicate
  handlers and handlers installed by someone else (pytest's caplog,
  Streamlit's own) are left alone.

QUIET LOGGERS:
  httpx logs every request line at INFO, and Gemini request URLs carry
  ?key=<api key>. Those loggers are held at WARNING whatever level the
  app runs at.

USAGE:
  from observability.logging_config import setup_logging
  setup_logging(settings.log_level)
"""

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "clippy-summarizer"
HANDLER_NAME = "clippy-json-stdout"
QUIET_LOGGERS = ("httpx", "httpcore")


def setup_logging(log_level: str = "INFO") -> logging.Handler:
    """
    Route root-logger records to stdout as JSON. Safe to call repeatedly.

    An unknown level name falls back to INFO. Returns the installed handler.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(_json_formatter())
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return handler


def _json_formatter() -> JsonFormatter:
    return JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
        static_fields={"service": SERVICE_NAME},
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )
