"""Utilities for human-friendly purchase codes and their QR payloads."""

from __future__ import annotations

import json
import random
import re
import secrets
from datetime import datetime, timezone

# Excludes look-alike characters (I, L, O, 0, 1).
PURCHASE_CODE_ALPHABET: str = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
PURCHASE_CODE_PREFIX: str = "FG"
PURCHASE_CODE_LENGTH: int = 6

# Accepts L: codes issued before the alphabet dropped it are still honoured.
PURCHASE_CODE_PATTERN: str = r"^FG-\d{4}-[ABCDEFGHJKLMNPQRSTUVWXYZ23456789]{6}$"
_PURCHASE_CODE_RE = re.compile(PURCHASE_CODE_PATTERN)

QR_PAYLOAD_TYPE: str = "FARM2GO_PURCHASE"


def generate_purchase_code(
    year: int | None = None,
    rng: random.Random | None = None,
) -> str:
    """Return a purchase code of the form ``FG-YYYY-XXXXXX``.

    The code is distinct from the order id and is what buyers show at
    pickup. Pass ``rng`` for reproducible codes.
    """
    if year is None:
        year = datetime.now(timezone.utc).year
    if not 1000 <= year <= 9999:
        raise ValueError(f"year must have four digits: {year}")

    if rng is None:
        suffix = "".join(
            secrets.choice(PURCHASE_CODE_ALPHABET) for _ in range(PURCHASE_CODE_LENGTH)
        )
    else:
        suffix = "".join(
            rng.choice(PURCHASE_CODE_ALPHABET) for _ in range(PURCHASE_CODE_LENGTH)
        )

    return f"{PURCHASE_CODE_PREFIX}-{year}-{suffix}"


def is_valid_purchase_code(code: str) -> bool:
    """Return True if ``code`` follows the purchase code format."""
    return bool(_PURCHASE_CODE_RE.match(code))


def build_qr_payload(
    purchase_code: str,
    *,
    total_amount: float,
    purchase_date: str,
    farm_name: str | None = None,
    product_name: str | None = None,
) -> str:
    """Return the JSON string encoded into an order's pickup QR code."""
    if not is_valid_purchase_code(purchase_code):
        raise ValueError(f"Invalid purchase code: {purchase_code}")

    payload = {
        "type": QR_PAYLOAD_TYPE,
        "code": purchase_code,
        "farm": farm_name or "Unknown Farm",
        "amount": total_amount,
        "date": purchase_date,
        "product": product_name or "Farm Products",
        "verified": True,
    }
    return json.dumps(payload)
