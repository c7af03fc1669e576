"""ShelfCache Fallbacks - Synthesized Responses.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import html

from shelfcache_core.http.message import Response

OFFLINE_STYLE = (
    "body{font-family:system-ui,-apple-system,Segoe UI,Roboto,Helvetica,Arial,sans-serif;"
    "margin:0;padding:2rem;background:#121212;color:#f5f5f5;display:flex;"
    "flex-direction:column;align-items:center;justify-content:center;text-align:center}"
    "h1{font-size:1.8rem;margin-bottom:0.5rem}p{max-width:600px;line-height:1.5}"
    "a{color:#4dabf7;text-decoration:none;font-weight:600;margin-top:1rem;display:inline-block}"
    "a:hover{text-decoration:underline}"
)


def offline_response(title: str, home: str = "/index.html") -> Response:
    """Build the self-contained offline document served when a navigation fails.

    Args:
        title: Document title
        home: Link target back to the application

    Returns:
        200 text/html response with no external dependencies
    """
    document = (
        '<!doctype html><html lang="en"><head><meta charset="utf-8"/>'
        f"<title>{html.escape(title)}</title>"
        '<meta name="viewport" content="width=device-width,initial-scale=1"/>'
        f"<style>{OFFLINE_STYLE}</style></head><body>"
        "<h1>You're Offline</h1>"
        "<p>The requested page isn't cached yet. Core features like your personal "
        "library will still load once this page is revisited online. Uploaded files "
        "remain stored locally.</p>"
        f'<a href="{html.escape(home, quote=True)}">Return to Home</a>'
        "</body></html>"
    )
    return Response(
        status=200,
        headers={"Content-Type": "text/html; charset=utf-8"},
        body=document.encode("utf-8"),
    )


def service_unavailable_response(message: str = "Upstream API unreachable") -> Response:
    """Build the 503 returned when an uncached upstream cannot be reached."""
    return Response(
        status=503,
        headers={"Content-Type": "text/plain; charset=utf-8"},
        body=message.encode("utf-8"),
    )


__all__ = ["offline_response", "service_unavailable_response"]
