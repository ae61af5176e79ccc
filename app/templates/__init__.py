"""Template rendering utilities."""

from deps import html

_STYLE = """
    body { font-family: system-ui, sans-serif; max-width: 42rem; margin: 2rem auto; padding: 0 1rem; }
    h1 { font-size: 1.25rem; font-weight: 600; }
    ul { list-style: none; padding: 0; }
    li { margin: 0.5rem 0; }
    a { color: #2563eb; text-decoration: none; }
    a:hover { text-decoration: underline; }
    code { background: #f1f5f9; padding: 0 0.25rem; border-radius: 0.25rem; }
    .meta { color: #64748b; font-size: 0.875rem; margin-top: 1.5rem; }
"""

_BASE_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{title}</title>
  <style>{css}</style>
</head>
<body>
{content}
</body>
</html>
"""

_ROOT_HTML = """  <h1>{title}</h1>
  <p>Ports legacy BASIC (QBasic, GW-BASIC, QuickBASIC, VB-DOS, ...) to QB64-PE and checks source for compatibility problems.</p>
  <p>Endpoints:</p>
  <ul>
    <li><a href="/docs">/docs</a> — Swagger UI</li>
    <li><a href="/redoc">/redoc</a> — ReDoc</li>
    <li><a href="/health">/health</a> — Liveness</li>
    <li><code>POST /port</code> — Port source to QB64-PE</li>
    <li><code>POST /port/report</code> — Porting report as Markdown</li>
    <li><code>POST /check</code> — Compatibility issues</li>
    <li><code>POST /keyboard-safety</code> — Keyboard buffer analysis</li>
    <li><a href="/dialects">/dialects</a> — Supported source dialects ({dialect_count})</li>
    <li><code>GET /keywords/{{word}}</code> — Keyword lookup</li>
  </ul>
  <p class="meta">Send JSON such as <code>{{"code": "PRINT 1"}}</code>. See <a href="/docs">/docs</a> for details.</p>
"""

_TEMPLATES = {
    "root.html": _ROOT_HTML,
}


def render_template(template_name: str, **kwargs) -> str:
    """Render a template with the given variables (values are HTML-escaped)."""
    template = _TEMPLATES[template_name]
    escaped = {k: html.escape(str(v)) for k, v in kwargs.items()}
    content = template.format(**escaped)
    title_val = escaped.get("title", "BASIC Porter")
    # String replacement for the base template avoids CSS brace conflicts
    return _BASE_HTML.replace("{title}", title_val).replace("{css}", _STYLE).replace("{content}", content)
