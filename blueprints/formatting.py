from __future__ import annotations

import re

from markupsafe import Markup, escape

_BOLD = re.compile(r"\*\*(.+?)\*\*")
_CODE = re.compile(r"`([^`]+)`")


def _inline(text: str) -> str:
    text = _BOLD.sub(r"<strong>\1</strong>", text)
    return _CODE.sub(r"<code>\1</code>", text)


def format_description(text: str | None) -> Markup:
    """Render the lightweight markup teachers use in descriptions.

    Headings (``#``), bullets (``-``/``*``), ``**bold**`` and ``code`` are
    supported; everything is escaped first.
    """
    if not text:
        return Markup("<em>No description.</em>")
    sanitized = str(escape(text.strip())).replace("\r\n", "\n")
    lines = []
    for raw_line in sanitized.split("\n"):
        line = raw_line.strip()
        if not line:
            lines.append("")
            continue
        if line.startswith("#"):
            level = min(len(line) - len(line.lstrip("#")), 3)
            content = _inline(line.lstrip("#").strip())
            lines.append(f"<strong class=\"heading-{level}\">{content}</strong>")
        elif line.startswith("- ") or line.startswith("* "):
            lines.append(f"&bull; {_inline(line[2:].strip())}")
        else:
            lines.append(_inline(line))
    return Markup("<br>".join(lines))
