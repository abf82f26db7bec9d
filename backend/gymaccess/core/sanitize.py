"""Text sanitization utilities to prevent XSS attacks."""

import html


def sanitize_text(value: str | None) -> str | None:
    """HTML-escape user-supplied free text that member portals render.

    Surrounding whitespace is stripped as well.
    """
    if value is None:
        return None
    return html.escape(value.strip(), quote=True)
