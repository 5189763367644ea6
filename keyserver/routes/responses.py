"""Response builders shared by the route renderers.

Bodies are deliberately bare: plain-text responses carry no Content-Type
header (clients such as ``curl >> authorized_keys`` only want the bytes), JSON
responses carry ``application/json``, and 404/406/500 responses have an empty
body. Every successful and 406 response carries ``X-Keys-Version``.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi.responses import JSONResponse
from starlette.responses import Response

from keyserver.constants import VERSION_HEADER


def text_response(body: str, version: str, headers: Optional[dict[str, str]] = None) -> Response:
    """HTTP 200 with a plain-text body and no explicit Content-Type."""
    return Response(
        content=body,
        status_code=200,
        headers={VERSION_HEADER: version, **(headers or {})},
    )


def json_response(payload: dict[str, Any], version: str) -> JSONResponse:
    """HTTP 200 with a JSON body."""
    return JSONResponse(content=payload, status_code=200, headers={VERSION_HEADER: version})


def not_acceptable(version: str) -> Response:
    """HTTP 406 for a content type the renderer cannot produce."""
    return Response(status_code=406, headers={VERSION_HEADER: version})


def not_found() -> Response:
    """HTTP 404 with an empty body."""
    return Response(status_code=404)


def internal_error() -> Response:
    """HTTP 500 with an empty body. Error details stay in the logs."""
    return Response(status_code=500)
