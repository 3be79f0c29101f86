"""HTML formatter for PHP Insight.

The HTML report is the Markdown report passed through a small regex based
converter that understands exactly the constructs our generators emit:
headers, fenced code, inline code, bold text, bullet lists and pipe tables.
"""

import html
import re

from ..models import Report
from .base import BaseFormatter
from .markdown_formatter import MarkdownFormatter

_HEADER = re.compile(r"^(#{1,6})\s+(.*)$")
_LIST_ITEM = re.compile(r"^\s*[-*]\s+(.*)$")
_TABLE_ROW = re.compile(r"^\s*\|.*\|\s*$")
_TABLE_SEP = re.compile(r"^\s*\|?(\s*:?-{3,}:?\s*\|)+\s*(:?-{3,}:?\s*)?\|?\s*$")
_CODE_SPAN = re.compile(r"`([^`]*)`")
_BOLD = re.compile(r"\*\*(.+?)\*\*")

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ font-family: -apple-system, "Segoe UI", Helvetica, Arial, sans-serif;
       max-width: 960px; margin: 2rem auto; padding: 0 1rem; color: #24292f; line-height: 1.5; }}
h1, h2, h3 {{ border-bottom: 1px solid #d0d7de; padding-bottom: .3em; }}
table {{ border-collapse: collapse; margin: 1rem 0; }}
th, td {{ border: 1px solid #d0d7de; padding: 6px 13px; text-align: left; }}
th {{ background: #f6f8fa; }}
code {{ background: #f6f8fa; padding: .2em .4em; border-radius: 6px; font-size: 85%; }}
pre {{ background: #f6f8fa; padding: 16px; overflow: auto; border-radius: 6px; }}
pre code {{ padding: 0; background: none; }}
</style>
</head>
<body>
{body}
</body>
</html>
"""


def _inline(text: str) -> str:
    """Escape text and convert inline code and bold markup."""
    parts = _CODE_SPAN.split(text)
    out = []
    for i, part in enumerate(parts):
        if i % 2:
            out.append(f"<code>{html.escape(part)}</code>")
        else:
            out.append(_BOLD.sub(r"<strong>\1</strong>", html.escape(part)))
    return "".join(out)


def _cells(row: str) -> list[str]:
    return [cell.strip() for cell in row.strip().strip("|").split("|")]


def _table(header: list[str], rows: list[list[str]]) -> str:
    head = "".join(f"<th>{_inline(cell)}</th>" for cell in header)
    body = "".join(
        "<tr>" + "".join(f"<td>{_inline(cell)}</td>" for cell in row) + "</tr>" for row in rows
    )
    return f"<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"


def markdown_to_html(text: str) -> str:
    """Convert the Markdown subset used by our reports to an HTML fragment."""
    lines = text.split("\n")
    out: list[str] = []
    in_list = False

    def close_list() -> None:
        nonlocal in_list
        if in_list:
            out.append("</ul>")
            in_list = False

    i = 0
    while i < len(lines):
        line = lines[i]

        if line.startswith("```"):
            close_list()
            language = line[3:].strip()
            block = []
            i += 1
            while i < len(lines) and not lines[i].startswith("```"):
                block.append(lines[i])
                i += 1
            i += 1  # closing fence
            css = f' class="language-{html.escape(language)}"' if language else ""
            out.append(f"<pre><code{css}>{html.escape(chr(10).join(block))}</code></pre>")
            continue

        if _TABLE_ROW.match(line) and i + 1 < len(lines) and _TABLE_SEP.match(lines[i + 1]):
            close_list()
            header = _cells(line)
            i += 2
            rows = []
            while i < len(lines) and _TABLE_ROW.match(lines[i]):
                rows.append(_cells(lines[i]))
                i += 1
            out.append(_table(header, rows))
            continue

        header_match = _HEADER.match(line)
        item_match = _LIST_ITEM.match(line)
        if header_match:
            close_list()
            level = len(header_match.group(1))
            out.append(f"<h{level}>{_inline(header_match.group(2))}</h{level}>")
        elif item_match:
            if not in_list:
                out.append("<ul>")
                in_list = True
            out.append(f"<li>{_inline(item_match.group(1))}</li>")
        elif not line.strip():
            close_list()
        else:
            close_list()
            out.append(f"<p>{_inline(line)}</p>")
        i += 1

    close_list()
    return "\n".join(out)


def html_page(title: str, markdown: str) -> str:
    return PAGE_TEMPLATE.format(title=html.escape(title), body=markdown_to_html(markdown))


class HtmlFormatter(BaseFormatter):
    """Markdown report wrapped in a styled standalone HTML page."""

    def format(self, report: Report) -> str:
        markdown = MarkdownFormatter(self.detailed, self.config).format(report)
        return html_page(report.title, markdown)
