"""
tools/extract.py — Turn raw page markup into a title and into plain text.

THE CORE CONCEPT: Scan, don't parse
  Real-world HTML is messy: unclosed tags, stray '<' in inline scripts,
  attributes full of '>' characters, pages that are half HTML and half
  something else. A full DOM parser either chokes on that or spends most
  of its effort building a tree we immediately throw away.

  Both jobs here only need a linear scan:
    - extract_title()   — find <title ...> ... </title>, decode, trim
    - sanitize_markup() — drop tags, drop <script>/<style> bodies,
                          collapse whitespace, cut to a size budget

  The scanner accepts any input and never raises. The price is that it
  has no idea about nesting: an unterminated <script> hides everything
  after it. That trade is accepted.

ENTITY DECODING:
  Only the handful of named references that routinely show up in <title>
  text are decoded. Everything else is left exactly as written.
  Decoding is one pass over the original text, so "&amp;lt;" becomes
  "&lt;" and stays that way.

USAGE:
  from tools.extract import extract_title, sanitize_markup

  title = extract_title(html, "https://example.com/post")
  text = sanitize_markup(html)          # <= 10,000 chars
"""

import re

import httpx

from config import settings


# ── Entity decoding ────────────────────────────────────────────────────────────

_ENTITIES = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
    "&nbsp;": " ",
}
_ENTITY_PATTERN = re.compile("|".join(re.escape(e) for e in _ENTITIES))


def decode_entities(text: str) -> str:
    """
    Replace the small fixed set of named character references.

    Each match is substituted once; replacement text is never re-scanned.
    Unknown references (&copy;, &#8212;, ...) pass through untouched.
    """
    return _ENTITY_PATTERN.sub(lambda m: _ENTITIES[m.group(0)], text)


# ── Title extraction ───────────────────────────────────────────────────────────

# re.ASCII keeps the case-insensitive match to plain a-z/A-Z so that
# match offsets always index the original string.
_TITLE_OPEN = re.compile(r"<title", re.IGNORECASE | re.ASCII)
_TITLE_CLOSE = re.compile(r"</title>", re.IGNORECASE | re.ASCII)


def extract_title(markup: str, url: str) -> str:
    """
    Return a display title for a page.

    Order of preference:
      1. Text of the first <title> element — entity-decoded and trimmed
      2. The host part of url
      3. url itself, unchanged

    Never raises. Same input always gives the same output.

    Args:
        markup: Raw page body. May be empty or not HTML at all.
        url:    The URL the markup was fetched from.
    """
    title = _title_from_markup(markup)
    if title:
        return title
    return _fallback_title(url)


def _title_from_markup(markup: str) -> str:
    """Text between '<title ...>' and '</title>', or '' if either end is missing."""
    opening = _TITLE_OPEN.search(markup)
    if opening is None:
        return ""

    gt = markup.find(">", opening.start())
    if gt == -1:
        return ""

    content_start = gt + 1
    closing = _TITLE_CLOSE.search(markup, content_start)
    if closing is None:
        return ""

    return decode_entities(markup[content_start:closing.start()]).strip()


# Characters a hostname may not contain. httpx percent-encodes some of
# these (space, '<', '^') instead of rejecting them, so '%' is here too.
_FORBIDDEN_HOST_CHARS = frozenset(" #%/<>?@[\\]^|")


def _fallback_title(url: str) -> str:
    """
    Host component of url if it is an absolute URL with a valid host,
    else url verbatim. IPv6 hosts keep their brackets.
    """
    try:
        parsed = httpx.URL(url)
        host = parsed.host
    except (httpx.InvalidURL, ValueError):
        return url

    if not parsed.scheme or not host:
        return url
    if ":" in host:
        return f"[{host}]"
    if _FORBIDDEN_HOST_CHARS.intersection(host):
        return url
    return host


# ── Markup sanitizing ──────────────────────────────────────────────────────────

_EXCLUDED_OPEN = ("script", "style")
_EXCLUDED_CLOSE = ("/script", "/style")


def sanitize_markup(markup: str, max_chars: int | None = None) -> str:
    """
    Strip markup down to whitespace-normalized plain text.

    One left-to-right pass with two flags:
      in_tag      — between '<' and '>'; characters go to tag_buf only
      in_excluded — inside <script>/<style>; characters are dropped

    Every '>' emits one space, so words on either side of a removed tag
    stay separated. Whitespace is then collapsed to single spaces and the
    result is cut to max_chars characters (hard cut, not on a word).

    Args:
        markup:    Raw page body.
        max_chars: Size budget. Defaults to settings.max_content_chars.

    Returns:
        Plain text, len() <= max_chars. "" for empty or all-markup input.
    """
    if max_chars is None:
        max_chars = settings.max_content_chars

    out: list[str] = []
    tag_buf: list[str] = []
    in_tag = False
    in_excluded = False

    for ch in markup:
        if ch == "<":
            in_tag = True
            tag_buf.clear()
        elif ch == ">":
            tag_name = "".join(tag_buf).lower()
            if tag_name.startswith(_EXCLUDED_OPEN):
                in_excluded = True
            elif tag_name.startswith(_EXCLUDED_CLOSE):
                in_excluded = False
            in_tag = False
            out.append(" ")
        elif in_tag:
            tag_buf.append(ch)
        elif not in_excluded:
            out.append(ch)

    text = " ".join("".join(out).split())
    return truncate_chars(text, max_chars)


def truncate_chars(text: str, max_chars: int) -> str:
    """
    Cut text to at most max_chars characters.

    Counts characters, not bytes or words — a multi-byte character is
    never split. No marker is appended; the prompt just sees less text.
    """
    if len(text) <= max_chars:
        return text
    return text[:max_chars]
