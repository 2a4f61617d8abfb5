"""Tests for card helpers."""

import unicodedata

import pytest

from cardgen.cards import (
    DEFAULT_CARD_COLOR,
    DEFAULT_CARD_DETAILS,
    card_color,
    display_traits,
    parse_card_details,
    placeholder_nft,
)
from cardgen.prompts import card_details_prompt, full_body_art_prompt, image_analysis_prompt
from cardgen.types import NFTTrait


def _t(trait_type, value):
    return NFTTrait(trait_type=trait_type, value=value)


class TestCardColor:
    @pytest.mark.parametrize("value, color", [
        ("Red Kimono", "#ff5722"),
        ("Ocean Blue", "#2196f3"),
        ("Gold Chain", "#ffc107"),
        ("Stone Grey", "#795548"),
        ("Forest Green", "#4caf50"),
    ])
    def test_color_words(self, value, color):
        assert card_color([_t("Clothing", value)]) == color

    def test_first_color_trait_wins(self):
        traits = [_t("Type", "Blue Spirit"), _t("Hair", "Green Spiky"), _t("Clothing", "Red")]
        assert card_color(traits) == "#4caf50"

    def test_unmatched_first_trait_gives_default(self):
        traits = [_t("Background", "Off White"), _t("Hair", "Blue")]
        assert card_color(traits) == DEFAULT_CARD_COLOR

    def test_no_traits(self):
        assert card_color([]) == "#ff5722"


class TestParseCardDetails:
    def test_plain_json(self, card_json):
        details = parse_card_details(card_json)
        assert details.rarity == "★★★"
        assert details.moveDescription == "Ignites the battlefield."

    def test_strips_fences(self, card_json):
        assert parse_card_details(f"```json\n{card_json}\n```").cardName == "Kael Emberstrike"

    def test_numeric_attack_accepted(self):
        text = (
            '{"cardName":"A","typeIcon":"⚡","hp":120,"move":{"name":"Zap","atk":40},'
            '"weakness":"🪨 x2","resistance":"💧 -20","retreatCost":"🌟","rarity":"★"}'
        )
        details = parse_card_details(text)
        assert details.move.atk == "40"
        assert details.hp == "120"

    def test_emoji_fields_nfc_normalized(self, card_json):
        decomposed = card_json.replace("🌟", "🌟 Cafe\u0301")
        details = parse_card_details(decomposed)
        assert details.retreatCost == "🌟 Caf\u00e9"
        assert unicodedata.is_normalized("NFC", details.retreatCost)

    def test_not_json(self):
        with pytest.raises(ValueError):
            parse_card_details("no card here")

    def test_not_an_object(self):
        with pytest.raises(ValueError):
            parse_card_details("[1, 2]")

    def test_missing_fields(self):
        with pytest.raises(ValueError):
            parse_card_details('{"cardName": "Only a name"}')


class TestDefaults:
    def test_default_card(self):
        assert DEFAULT_CARD_DETAILS.cardName == "Default Character"
        assert DEFAULT_CARD_DETAILS.move.atk == "30"
        assert DEFAULT_CARD_DETAILS.typeIcon == "🫘"

    def test_placeholder_nft(self):
        nft = placeholder_nft("42")
        assert nft.name == "Azuki #42"
        assert nft.image_url.endswith("Azuki+%2342")

    def test_display_traits_drop_background(self):
        traits = [_t("Hair", "Pink"), _t("Background", "Off White")]
        assert [t.trait_type for t in display_traits(traits)] == ["Hair"]


class TestPrompts:
    def test_image_analysis(self):
        assert "Type: Human" in image_analysis_prompt("Type: Human")

    def test_card_details_keeps_json_braces(self):
        prompt = card_details_prompt("Hair: Pink", "female")
        assert '{"cardName":"Kael Emberstrike"' in prompt
        assert prompt.endswith("Traits: Hair: Pink\nDescription: female")

    def test_full_body_art(self):
        assert full_body_art_prompt("a ninja") == (
            "a full-body anime episode wide angle shot of a ninja "
            "--niji 6 --ar 5:8 --p mx5sxok"
        )
