import html
import secrets
import string

from .types import SafeMarkup

MERMAID_RUNTIME_URL = "https://cdn.jsdelivr.net/npm/mermaid@10/dist/mermaid.min.js"

_BASE36 = string.digits + string.ascii_lowercase


def new_graph_element_id(length: int = 13) -> str:
    return "graph_" + "".join(secrets.choice(_BASE36) for _ in range(length))


def render_graph_markup(element_id: str, mermaid_code: str) -> SafeMarkup:
    """Wrap diagram text in a self-rendering HTML block.

    The diagram source is HTML-escaped, so model output cannot inject markup;
    the Mermaid runtime reads it back as text and draws the SVG in place.
    Unparseable diagrams are reported inside the block by the runtime.
    """
    if not (mermaid_code or "").strip():
        raise ValueError("Mermaid content is empty.")

    escaped = html.escape(mermaid_code)
    safe_id = html.escape(element_id, quote=True)
    markup = f"""
<div style="padding: 8px;">
  <pre class="mermaid" id="{safe_id}">{escaped}</pre>
  <div id="{safe_id}_error" style="color:#b91c1c;font-family:monospace;"></div>
</div>
<script>
  function formatMermaidError(err) {{
    if (!err) return "unknown error";
    if (typeof err === "string") return err;
    if (err.message) return err.message;
    if (err.str) return err.str;
    try {{
      return JSON.stringify(err, null, 2);
    }} catch (_) {{
      return String(err);
    }}
  }}

  function renderMermaid() {{
    const errorBox = document.getElementById("{safe_id}_error");
    try {{
      mermaid.initialize({{ startOnLoad: false, securityLevel: "loose" }});
      const nodes = [document.getElementById("{safe_id}")];
      mermaid.run({{ nodes }}).catch((err) => {{
        errorBox.textContent = "Mermaid render error: " + formatMermaidError(err);
      }});
    }} catch (err) {{
      errorBox.textContent = "Mermaid init error: " + formatMermaidError(err);
    }}
  }}

  if (window.mermaid) {{
    renderMermaid();
  }} else {{
    const script = document.createElement("script");
    script.src = "{MERMAID_RUNTIME_URL}";
    script.onload = renderMermaid;
    script.onerror = function() {{
      document.getElementById("{safe_id}_error").textContent = "Failed to load Mermaid runtime.";
    }};
    document.head.appendChild(script);
  }}
</script>
"""
    return SafeMarkup(markup)
