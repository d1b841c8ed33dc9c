"""Turn an article record into the HTML body and metadata sent to Omnipub."""

from __future__ import annotations

import html

from .models import ArticleRecord, RenderedItem

# Only these two literal tags are neutralised; all other markup passes through.
_SCRIPT_REPLACEMENTS = (
    ("</script>", "&lt;/script&gt;"),
    ("<script", "&lt;script"),
)


def neutralize_scripts(content: str) -> str:
    """Escape literal ``<script`` and ``</script>`` occurrences, case-sensitively."""
    for needle, replacement in _SCRIPT_REPLACEMENTS:
        content = content.replace(needle, replacement)
    return content


def build_html(article: ArticleRecord) -> str:
    parts = [f"<h1>{html.escape(article.title)}</h1>\n"]
    if article.excerpt:
        parts.append(f"<p>{html.escape(article.excerpt)}</p>\n")
    parts.append("<div>\n")
    parts.append(neutralize_scripts(article.content))
    parts.append("\n</div>\n")
    parts.append("<h3>Metadata</h3>\n")
    # Link and dates are written as-is, unlike title and excerpt.
    parts.append(f'<p>Source Url: <a href="{article.link}">{article.link}</a></p>')
    parts.append(f"<p>Published Date: {article.publish_date}</p>")
    parts.append(f"<p>Updated Date: {article.updated_date}</p>")
    return "".join(parts)


def build_metadata(article: ArticleRecord) -> dict[str, str]:
    return {
        "title": article.title,
        "creation_date": article.publish_date,
        "source_url": article.link,
    }


def render(article: ArticleRecord) -> RenderedItem:
    return RenderedItem(html=build_html(article), metadata=build_metadata(article))
