"""
Comment body rendering.
"""

_HTML_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#039;",
    }
)


def render_body_html(body: str) -> str:
    """
    Render a plain-text comment body as HTML.

    Escapes markup characters, then turns newlines into ``<br>``.
    """
    return body.translate(_HTML_ESCAPES).replace("\n", "<br>")
