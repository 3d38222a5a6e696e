from __future__ import annotations

import html
import json
import re
import secrets
from pathlib import Path

MERMAID_CDN = "https://cdn.jsdelivr.net/npm/mermaid@10/dist/mermaid.esm.min.mjs"

_DIAGRAM_ID_RE = re.compile(r"[A-Za-z][A-Za-z0-9_-]*")

# Passed to mermaid.initialize; "strict" keeps text encoded and click handlers off.
DEFAULT_MERMAID_CONFIG = {
    "startOnLoad": False,
    "theme": "default",
    "securityLevel": "strict",
    "fontFamily": "Fira Code, monospace",
    "logLevel": "error",
}

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
  body {{ font-family: sans-serif; margin: 2rem; }}
  .mermaid-error {{ color: #b00020; }}
</style>
</head>
<body>
<h1>{title}</h1>
<div id="{container_id}" class="mermaid" aria-label="Mermaid diagram"></div>
<div id="{container_id}-error" class="mermaid-error" role="alert" aria-live="polite" hidden>
  <p>Error rendering diagram:</p>
  <pre></pre>
</div>
<script type="module">
import mermaid from "{cdn}";

let initialized = false;

function initializeMermaid(config) {{
  if (initialized) {{
    return;
  }}
  mermaid.initialize(config);
  initialized = true;
}}

const chart = {chart};
const container = document.getElementById("{container_id}");
const errorBox = document.getElementById("{container_id}-error");

try {{
  initializeMermaid({config});
  const {{ svg }} = await mermaid.render("{diagram_id}", chart);
  container.innerHTML = svg;
}} catch (err) {{
  errorBox.querySelector("pre").textContent = err instanceof Error ? err.message : "Failed to render diagram";
  errorBox.hidden = false;
  console.error("Mermaid rendering error:", err);
}}
</script>
</body>
</html>
"""


def new_diagram_id() -> str:
    """Fresh id for mermaid.render; mermaid caches by id, so never reuse one for new content."""
    return f"mermaid-{secrets.token_hex(5)}"


def render_html(
    syntax: str,
    title: str = "",
    diagram_id: str | None = None,
    mermaid_config: dict | None = None,
) -> str:
    """
    Wrap emitted Mermaid text in a standalone HTML page.

    The page initializes mermaid.js once, renders under ``diagram_id`` (a new
    one per call when omitted) and shows any renderer error verbatim.
    """

    diagram_id = diagram_id or new_diagram_id()
    if _DIAGRAM_ID_RE.fullmatch(diagram_id) is None:
        raise ValueError(f"invalid diagram id '{diagram_id}'")
    config = {**DEFAULT_MERMAID_CONFIG, **(mermaid_config or {})}
    return _PAGE_TEMPLATE.format(
        title=html.escape(title or "Gantt chart"),
        container_id=f"{diagram_id}-container",
        diagram_id=diagram_id,
        cdn=MERMAID_CDN,
        chart=_script_literal(syntax),
        config=_script_literal(config),
    )


def write_html(
    out_path: str,
    syntax: str,
    title: str = "",
    diagram_id: str | None = None,
) -> Path:
    """Render the page to ``out_path`` (parents created) and return the resolved path."""

    path = Path(out_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_html(syntax, title=title, diagram_id=diagram_id), encoding="utf-8")
    return path.resolve()


def _script_literal(value: object) -> str:
    # JSON is a valid JS literal; "</" would close the <script> element early.
    return json.dumps(value).replace("</", "<\\/")
