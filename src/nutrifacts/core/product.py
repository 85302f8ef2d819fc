"""Open Food Facts product response envelope handling."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

FOUND_STATUS = 1


class ProductLoadError(ValueError):
    """The product response was unusable: undecodable, not found, or malformed."""


def load_product(raw: bytes | str | Mapping[str, Any]) -> dict[str, Any]:
    """
    Unwrap the product record from an API v2 product response.

    Args:
        raw: Response body as bytes or text, or an already decoded mapping
             of the form {"status": 1, "product": {...}}

    Returns:
        The product record, unmodified

    Raises:
        ProductLoadError: If the body is not JSON, the product was not found,
            or the product is not an object
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            logger.warning("Product response is not UTF-8: %s", exc)
            raise ProductLoadError(f"Failed to decode product response: {exc}")

    if isinstance(raw, str):
        try:
            payload: Any = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Product response is not JSON: %s", exc)
            raise ProductLoadError(f"Product response is not valid JSON: {exc}")
    else:
        payload = raw

    if not isinstance(payload, Mapping):
        raise ProductLoadError("Product response is not a JSON object")

    status = payload.get("status")
    if status != FOUND_STATUS:
        code = payload.get("code") or "unknown barcode"
        logger.warning("Product %s not found (status=%r)", code, status)
        raise ProductLoadError(f"Product not found: {code}")

    product = payload.get("product")
    if not isinstance(product, Mapping):
        raise ProductLoadError("Product response has no product object")
    return dict(product)
