"""Stylesheet and standalone document wrapping for exported HTML."""

from __future__ import annotations

from .rich_text import escape_html

STYLESHEET = """<style>
  .page-icon { font-size: 3em; margin-bottom: 0.5em; }
  .indent { margin-left: 1.5em; }
  .toggle { margin: 1em 0; border: 1px solid #e0e0e0; border-radius: 4px; }
  .toggle summary { padding: 0.75em 1em; cursor: pointer; font-weight: 500; }
  .toggle summary:hover { background: #f5f5f5; }
  .toggle-content { padding: 0.5em 1em 1em; border-top: 1px solid #e0e0e0; }
  .callout { display: flex; gap: 0.75em; padding: 1em; margin: 1em 0; border-radius: 4px; background: #f7f6f3; }
  .callout-icon { font-size: 1.2em; }
  .callout-content { flex: 1; }
  .callout-gray_background { background: #f1f1ef; }
  .callout-brown_background { background: #f4eeee; }
  .callout-orange_background { background: #fbecdd; }
  .callout-yellow_background { background: #fbf3db; }
  .callout-green_background { background: #edf3ec; }
  .callout-blue_background { background: #e7f3f8; }
  .callout-purple_background { background: #f4f0f7; }
  .callout-pink_background { background: #f9f0f3; }
  .callout-red_background { background: #fdebec; }
  .image-container { margin: 1.5em 0; text-align: center; }
  .image-container img { max-width: 100%; height: auto; border-radius: 4px; }
  .image-container figcaption { margin-top: 0.5em; font-size: 0.9em; color: #666; }
  .video-container, .audio-container { margin: 1.5em 0; }
  .video-container iframe, .video-container video { width: 100%; aspect-ratio: 16/9; border-radius: 4px; }
  .audio-container audio { width: 100%; }
  .table-container { overflow-x: auto; margin: 1.5em 0; }
  .table-container table { width: 100%; border-collapse: collapse; }
  .table-container th, .table-container td { padding: 0.5em 1em; border: 1px solid #e0e0e0; text-align: left; }
  .table-container th { background: #f5f5f5; font-weight: 600; }
  .columns { display: flex; gap: 1.5em; margin: 1em 0; }
  .column { flex: 1; min-width: 0; }
  .todo-item { display: flex; align-items: flex-start; gap: 0.5em; margin: 0.5em 0; }
  .todo-item input { margin-top: 0.25em; }
  blockquote { margin: 1em 0; padding-left: 1em; border-left: 3px solid #e0e0e0; color: #555; }
  pre { background: #f5f5f5; padding: 1em; border-radius: 4px; overflow-x: auto; }
  code { font-family: 'SF Mono', Monaco, 'Andale Mono', monospace; font-size: 0.9em; }
  p code { background: #f0f0f0; padding: 0.2em 0.4em; border-radius: 3px; }
  .code-caption { margin-top: 0.5em; font-size: 0.85em; color: #666; }
  .embed-container, .bookmark, .link-preview { margin: 1em 0; }
  .bookmark { display: block; padding: 1em; border: 1px solid #e0e0e0; border-radius: 4px; text-decoration: none; color: inherit; }
  .bookmark:hover { background: #f5f5f5; }
  .child-page, .child-database { padding: 0.5em; margin: 0.5em 0; background: #f7f6f3; border-radius: 4px; }
  .file-attachment { margin: 1em 0; }
  .file-caption { margin-top: 0.25em; font-size: 0.85em; color: #666; }
  .equation { font-family: 'Times New Roman', serif; font-size: 1.1em; margin: 1em 0; }
  hr { border: none; border-top: 1px solid #e0e0e0; margin: 2em 0; }
  @media (max-width: 768px) { .columns { flex-direction: column; } }
</style>
"""

_DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <meta name="description" content="{description}">
  <title>{title}</title>
  <style>
    body {{
      max-width: 800px;
      margin: 0 auto;
      padding: 2rem;
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
      line-height: 1.6;
      color: #333;
    }}
    h1 {{ font-size: 2.5rem; margin-bottom: 1rem; }}
    h2 {{ font-size: 2rem; margin-top: 2rem; margin-bottom: 1rem; }}
    h3 {{ font-size: 1.5rem; margin-top: 1.5rem; margin-bottom: 0.75rem; }}
    p {{ margin-bottom: 1rem; }}
    img {{ max-width: 100%; height: auto; border-radius: 8px; margin: 1.5rem 0; }}
  </style>
</head>
<body>
{body}
</body>
</html>
"""


def render_html_document(title: str, description: str, body_html: str) -> str:
    """Wrap an exported fragment in a complete HTML5 document."""
    return _DOCUMENT_TEMPLATE.format(
        title=escape_html(title),
        description=escape_html(description).replace('"', "&quot;"),
        body=body_html,
    )
