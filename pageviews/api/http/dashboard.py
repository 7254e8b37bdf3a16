"""HTML rendering of a dashboard report."""
from __future__ import annotations

from html import escape
from typing import List

from pageviews.domain.analytics.models import Report

_STYLE = """
    .tg {border-collapse:collapse;border-spacing:0;table-layout:fixed;width:320px}
    .tg td, .tg th {border:1px solid black;font-family:Arial, sans-serif;font-size:14px;
                    font-weight:normal;overflow:hidden;padding:10px 5px;word-break:normal;
                    text-align:left;vertical-align:top}
"""

# Змінює лише параметр date, тож ключ доступу k у URL зберігається
_SCRIPT = """
    function chooseDate(input) {
        var url = new URL(window.location.href);
        if (input.value) { url.searchParams.set("date", input.value); }
        else { url.searchParams.delete("date"); }
        window.location.href = url.toString();
    }
"""


def _group_table(group: str, entries: dict) -> List[str]:
    rows = [
        f"<h5>/{escape(group)}</h5>",
        '<table class="tg">',
        '<colgroup><col style="width: 70px"><col style="width: 250px"></colgroup>',
        "<thead><tr><th>Page Views</th><th>URL</th></tr></thead>",
        "<tbody>",
    ]
    for url, count in sorted(entries.items(), key=lambda item: (-item[1], item[0])):
        rows.append(f"<tr><td>{int(count)}</td><td>{escape(url)}</td></tr>")
    rows += ["</tbody>", "</table>"]
    return rows


def render_dashboard(report: Report) -> str:
    """Render ``report`` as a standalone HTML page."""
    day = escape(report.date)
    body: List[str] = [
        f"<h1>{day}</h1>",
        f'<input type="date" id="date" value="{day}" onchange="chooseDate(this)">',
        f"<h2>Unique Sessions: {report.session_count}</h2>",
        f"<h3>Page Views: {report.total_hits}</h3>",
    ]
    for group in sorted(report.url_hits):
        body.extend(_group_table(group, report.url_hits[group]))

    return "\n".join([
        "<!DOCTYPE html>",
        '<html lang="en">',
        f'<head><meta charset="utf-8"><title>Analytics {day}</title><style>{_STYLE}</style></head>',
        "<body>",
        f"<script>{_SCRIPT}</script>",
        '<section id="about">',
        *body,
        "</section>",
        "</body>",
        "</html>",
    ])
