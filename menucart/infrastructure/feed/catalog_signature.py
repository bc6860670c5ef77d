from __future__ import annotations

import hashlib
import hmac
import logging
import time

SIGNATURE_HEADER = "X-Catalog-Signature"
TIMESTAMP_HEADER = "X-Catalog-Timestamp"
SIGNATURE_VERSION = "v1"

logger = logging.getLogger(__name__)


class CatalogWebhookVerifier:
    """
    Checks catalog change notifications signed as
    `X-Catalog-Signature: v1=<hex>` over `"<timestamp>." + body`, where the
    timestamp comes from `X-Catalog-Timestamp` (unix seconds).

    Without a configured secret, unsigned notifications are accepted only in
    dev/local. Once a secret is set every notification must be signed and
    fresh within `tolerance` seconds.
    """

    def __init__(self, secret: str | None, env: str = "dev", tolerance: int = 300) -> None:
        self._secret = secret
        self._env = env.lower()
        self._tolerance = tolerance

    @property
    def requires_signature(self) -> bool:
        return bool(self._secret) or self._env not in {"dev", "local"}

    def sign(self, body: bytes, timestamp: int) -> str:
        if not self._secret:
            raise ValueError("Cannot sign catalog notifications without a secret.")
        message = f"{timestamp}.".encode("utf-8") + body
        digest = hmac.new(self._secret.encode("utf-8"), message, hashlib.sha256).hexdigest()
        return f"{SIGNATURE_VERSION}={digest}"

    def verify(
        self,
        body: bytes,
        signature: str | None,
        timestamp: str | None,
        now: float | None = None,
    ) -> bool:
        if not self.requires_signature:
            if not signature:
                logger.warning("Unsigned catalog notification accepted in dev mode")
            return True

        if not self._secret:
            logger.error("CATALOG_WEBHOOK_SECRET is not set; rejecting catalog notification")
            return False
        if not signature or not timestamp:
            logger.warning("Catalog notification missing signature headers")
            return False

        try:
            sent_at = int(timestamp)
        except ValueError:
            logger.warning("Catalog notification timestamp is not an integer", extra={"reason": timestamp[:40]})
            return False

        current = time.time() if now is None else now
        if abs(current - sent_at) > self._tolerance:
            logger.warning("Catalog notification outside replay window", extra={"reason": f"ts={sent_at}"})
            return False

        return hmac.compare_digest(self.sign(body, sent_at), signature.strip())
