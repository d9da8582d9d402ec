"""Shared constants and helpers used by the endpoint, client and server."""

from __future__ import annotations

DEFAULT_MAX_CONTENT_SIZE = 3 * 1024 * 1024
DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"
DEFAULT_TIMEOUT = 30.0

_ERROR_PAGE = """
    <!DOCTYPE html>
    <html>
      <head>
        <meta charset="utf-8" />
        <title>{code} {message}</title>
      </head>
      <body>
        <h1>{code} {message}</h1>
      </body>
    </html>
"""


def _error_page(code: int, message: str) -> str:
    """Render the minimal HTML error body with every line stripped."""
    page = _ERROR_PAGE.format(code=code, message=message)
    return "\n".join(line.strip() for line in page.strip().splitlines())
