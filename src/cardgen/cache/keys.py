"""Cache key generation."""

from __future__ import annotations

import base64
import json
from typing import Any

_SIGNATURE_LENGTH = 10


def art_cache_key(token_id: str) -> str:
    return str(token_id)


def analysis_cache_key(token_id: str) -> str:
    return str(token_id)


def card_details_cache_key(
    token_id: str,
    traits: list[dict[str, Any]],
    description: str,
) -> str:
    """Key card details on the token plus short trait/description signatures.

    The signatures are the leading characters of the base64 encoding, so a
    changed description or trait list yields a new entry.
    """
    traits_sig = _signature(json.dumps(traits, separators=(",", ":"), ensure_ascii=False))
    desc_sig = _signature(description)
    return f"{token_id}_{traits_sig}_{desc_sig}"


def _signature(text: str) -> str:
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return encoded[:_SIGNATURE_LENGTH]
