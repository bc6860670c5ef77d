from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request, Response

from menucart.infrastructure.feed.catalog_signature import (
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    CatalogWebhookVerifier,
)
from menucart.wiring.dependencies import get_webhook_feed, get_webhook_verifier

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/webhooks/catalog")
async def catalog_webhook(
    request: Request,
    verifier: CatalogWebhookVerifier = Depends(get_webhook_verifier),
) -> Response:
    body = await request.body()
    if not verifier.verify(body, request.headers.get(SIGNATURE_HEADER), request.headers.get(TIMESTAMP_HEADER)):
        return Response(status_code=403)

    try:
        payload = json.loads(body.decode("utf-8")) if body else {}
    except (ValueError, UnicodeDecodeError):
        logger.exception("Failed to parse catalog webhook body")
        return Response(status_code=400)

    delivered = get_webhook_feed().publish(payload)
    logger.info("Catalog webhook received", extra={"subscribers": delivered})
    return Response(status_code=202)
