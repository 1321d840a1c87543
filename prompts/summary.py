"""
prompts/summary.py — Default summary prompt + {content} substitution.

The template is user-editable, so it can contain anything — JSON
examples, code, stray braces. Only the literal token {content} is
replaced. str.format() would choke on the first unrelated "{", so it
isn't used.

A template without {content} is sent as-is and the page text is
dropped. That's the existing behaviour and it's kept.
"""

CONTENT_TOKEN = "{content}"

DEFAULT_SUMMARY_PROMPT = """\
Summarize the main content of the following webpage in 3-5 sentences.

IMPORTANT: Detect the language of the webpage. If the webpage is written in \
Danish, you MUST write the entire summary in Danish. If it is written in \
English, write in English. For any other language, write in English.

Webpage content:
{content}

Remember: if the webpage above is in Danish, your summary MUST be in Danish."""


def compose_prompt(template: str, content: str) -> str:
    """Replace every {content} in template with content."""
    return template.replace(CONTENT_TOKEN, content)
