"""HTTP function that parses one receipt image per request."""

from __future__ import annotations

import logging

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from .config import CarbonSnapConfig, load_config
from .receipt import fallback_payload
from .service import ReceiptParser
from .vision import ReceiptVisionBackend, create_backend

logger = logging.getLogger(__name__)

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def _image_data(body: object) -> str:
    image_data = body.get("imageData") if isinstance(body, dict) else None
    if not isinstance(image_data, str) or not image_data:
        raise ValueError("imageData is required")
    return image_data


def create_app(
    config: CarbonSnapConfig | None = None,
    *,
    backend: ReceiptVisionBackend | None = None,
) -> Starlette:
    """Create the Starlette app exposing the receipt parser.

    ``backend`` overrides the one built from ``config``.
    """
    if backend is None:
        backend = create_backend(config or load_config())
    parser = ReceiptParser(backend)

    async def parse_receipt(request: Request) -> Response:
        if request.method == "OPTIONS":
            return Response(headers=CORS_HEADERS)

        try:
            body = await request.json()
            receipt = await parser.parse(_image_data(body))
        except Exception as e:
            logger.exception("Error in ai-receipt-parser")
            return JSONResponse(
                fallback_payload(str(e)), status_code=500, headers=CORS_HEADERS
            )

        return JSONResponse(receipt.to_dict(), headers=CORS_HEADERS)

    async def health(_: Request) -> JSONResponse:
        return JSONResponse({"status": "ok", "backend": parser.backend.name})

    routes = [
        Route("/ai-receipt-parser", parse_receipt, methods=["POST", "OPTIONS"]),
        Route("/health", health, methods=["GET"]),
    ]
    return Starlette(debug=False, routes=routes)


__all__ = ["CORS_HEADERS", "create_app"]
