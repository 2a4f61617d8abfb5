"""Card defaults, placeholder NFT data and parsing of model-generated cards."""

from __future__ import annotations

import json
import logging
import re
import unicodedata

from pydantic import ValidationError

from cardgen.types import CardDetails, CardMove, NFTData, NFTTrait

logger = logging.getLogger(__name__)

FALLBACK_DESCRIPTION = (
    "A character with a modern anime style, featuring unique hair and clothing."
)

DEFAULT_CARD_DETAILS = CardDetails(
    cardName="Default Character",
    typeIcon="🫘",
    hp="100 HP",
    move=CardMove(name="Basic Attack", atk="30"),
    weakness="🔥 x2",
    resistance="💧 -20",
    retreatCost="🌟",
    rarity="★",
)

DEFAULT_CARD_COLOR = "#ff5722"

_PLACEHOLDER_IMAGE = "https://placehold.co/600x600/f8f3e6/222222/png?text=Azuki+%23{token_id}"

_PLACEHOLDER_TRAITS = [
    ("Type", "Human"),
    ("Hair", "Basic"),
    ("Clothing", "Kimono"),
    ("Eyes", "Calm"),
    ("Mouth", "Neutral"),
    ("Background", "Off White"),
]

# First match wins; checked against the lowercased trait value.
_COLOR_RULES: list[tuple[tuple[str, ...], str]] = [
    (("red", "orange", "fire"), "#ff5722"),
    (("blue", "water", "ocean"), "#2196f3"),
    (("yellow", "gold", "electric"), "#ffc107"),
    (("brown", "earth", "stone"), "#795548"),
    (("green", "forest", "nature"), "#4caf50"),
]

_COLOR_TRAIT_TYPES = {"Background", "Clothing", "Hair", "Skin"}

_EMOJI_FIELDS = ("typeIcon", "weakness", "resistance", "retreatCost", "rarity")

_FENCE_RE = re.compile(r"```json\s*|\s*```")


def placeholder_nft(token_id: str) -> NFTData:
    """NFT data used when OpenSea is unavailable."""
    return NFTData(
        identifier=str(token_id),
        image_url=_PLACEHOLDER_IMAGE.format(token_id=token_id),
        name=f"Azuki #{token_id}",
        traits=[NFTTrait(trait_type=t, value=v) for t, v in _PLACEHOLDER_TRAITS],
    )


def card_color(traits: list[NFTTrait]) -> str:
    """Pick a card frame color from the first color-bearing trait."""
    for trait in traits:
        if trait.trait_type not in _COLOR_TRAIT_TYPES:
            continue
        value = trait.value.lower()
        for words, color in _COLOR_RULES:
            if any(w in value for w in words):
                return color
        return DEFAULT_CARD_COLOR
    return DEFAULT_CARD_COLOR


def display_traits(traits: list[NFTTrait]) -> list[NFTTrait]:
    """Traits shown on the card face; the background is left out."""
    return [t for t in traits if t.trait_type != "Background"]


def parse_card_details(text: str) -> CardDetails:
    """Parse a model reply into CardDetails.

    Strips markdown code fences and NFC-normalizes the emoji fields.
    Raises ValueError when the reply is not a valid card object.
    """
    cleaned = _FENCE_RE.sub("", text).strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ValueError(f"Card details are not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("Card details must be a JSON object")

    for field in _EMOJI_FIELDS:
        if isinstance(data.get(field), str):
            data[field] = unicodedata.normalize("NFC", data[field])

    try:
        return CardDetails.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Card details have an unexpected shape: {e}") from e
