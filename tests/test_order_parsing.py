"""Golden tests for deterministic new-order parsing."""

import pytest

from delivery_intake.domain.order_parsing import (
    looks_like_neighborhood_first,
    parse_compact_structured,
    parse_flexible,
    parse_neighborhood_first,
    parse_order_message,
    split_lines,
)
from delivery_intake.domain.orders import (
    COMPACT_FORMAT_HINT,
    NEIGHBORHOOD_FIRST_FORMAT_HINT,
    ParsedOrder,
    ParseFailure,
)


class TestCompactStructured:
    """Phone / items / amount / neighborhood schema."""

    def test_complete_order(self):
        text = "612345678\n2 robes + 1 sac\n15k\nBonapriso"

        result = parse_order_message(text)

        assert isinstance(result, ParsedOrder)
        assert result.format == "compact"
        assert result.phone == "612345678"
        assert result.items == "2 robes + 1 sac"
        assert result.amount_due == 15000
        assert result.quartier == "Bonapriso"
        assert result.carrier is None

    def test_blank_lines_are_ignored(self):
        text = "\n612345678\n\n2 robes\n  15000  \nAkwa\n"

        result = parse_compact_structured(text)

        assert result.valid
        assert result.amount_due == 15000

    def test_masked_phone(self):
        result = parse_compact_structured("6xx345678\nSac\n15000\nAkwa")

        assert result.phone == "600345678"

    def test_spaced_amount(self):
        result = parse_compact_structured("612345678\nSac\n14 000\nAkwa")

        assert result.amount_due == 14000

    def test_carrier_detected_anywhere(self):
        result = parse_compact_structured("612345678\nSac\n15k\nAkwa Men Travel")

        assert result.carrier == "Men Travel"
        assert result.quartier == "Akwa Men Travel"

    def test_phone_must_start_with_6(self):
        result = parse_compact_structured("712345678\nSac\n15000\nAkwa")

        assert isinstance(result, ParseFailure)
        assert "Doit commencer par 6" in result.error
        assert result.expected_format == COMPACT_FORMAT_HINT

    def test_phone_must_have_9_digits(self):
        result = parse_compact_structured("61234567\nSac\n15000\nAkwa")

        assert not result.valid
        assert "Doit avoir 9 chiffres" in result.error

    def test_items_too_short(self):
        result = parse_compact_structured("612345678\nS\n15000\nAkwa")

        assert not result.valid
        assert result.error.startswith("Produits invalides")

    @pytest.mark.parametrize("amount_line", ["bientôt", "50"])
    def test_invalid_amount(self, amount_line):
        result = parse_compact_structured(f"612345678\nSac\n{amount_line}\nAkwa")

        assert not result.valid
        assert result.error.startswith("Montant invalide")

    def test_too_few_lines(self):
        result = parse_compact_structured("612345678\nSac")

        assert not result.valid
        assert "reçu 2" in result.error


class TestNeighborhoodFirst:
    """Neighborhood / items... / amount / phone schema."""

    def test_complete_order(self):
        text = "Bessengue\nChaussures\nSac\n14000\n651 07 35 74"

        result = parse_order_message(text)

        assert isinstance(result, ParsedOrder)
        assert result.format == "neighborhood_first"
        assert result.phone == "651073574"
        assert result.items == "Chaussures, Sac"
        assert result.amount_due == 14000
        assert result.quartier == "Bessengue"

    def test_eight_digit_phone_is_padded(self):
        result = parse_neighborhood_first("Akwa\nRobe\n5000\n61234567")

        assert result.phone == "612345670"

    def test_ten_digit_phone_rejected(self):
        result = parse_neighborhood_first("Akwa\nRobe\n5000\n6123456789")

        assert isinstance(result, ParseFailure)
        assert "Doit avoir 8-9 chiffres" in result.error
        assert result.expected_format == NEIGHBORHOOD_FIRST_FORMAT_HINT

    def test_first_line_must_not_be_number(self):
        result = parse_neighborhood_first("612345678\nRobe\n5000\n699887766")

        assert not result.valid
        assert "première ligne" in result.error

    def test_k_amount(self):
        result = parse_neighborhood_first("Deido\nChaussures\n14k\n651073574")

        assert result.amount_due == 14000


class TestNeighborhoodFirstPrecondition:
    """When the Neighborhood-First schema is attempted at all."""

    def test_true_for_text_first_phone_last(self):
        lines = split_lines("Akwa\nRobe\n5000\n651 07 35 74")
        assert looks_like_neighborhood_first(lines)

    def test_false_for_phone_first(self):
        lines = split_lines("612345678\nRobe\n5000\nAkwa")
        assert not looks_like_neighborhood_first(lines)

    def test_false_for_short_message(self):
        assert not looks_like_neighborhood_first(["Akwa", "612345678"])


class TestDispatch:
    """Schema priority in parse_order_message."""

    def test_four_line_garbage_returns_compact_failure(self):
        """A 4+ line message is an attempted structured order."""
        result = parse_order_message("Bonjour\ncomment\nça\nva")

        assert isinstance(result, ParseFailure)
        assert result.expected_format == COMPACT_FORMAT_HINT

    def test_short_message_falls_back_to_flexible(self):
        result = parse_order_message("612345678 2 robes 15k")

        assert isinstance(result, ParsedOrder)
        assert result.format == "flexible"

    @pytest.mark.parametrize(
        "phone,items,amount,quartier",
        [
            ("612345678", "2 robes", 15000, "Akwa"),
            ("699887766", "1 sac + chaussures", 8500, "Deido"),
            ("655443322", "Perruque", 25000, "Bonapriso"),
        ],
    )
    def test_compact_fields_are_recovered(self, phone, items, amount, quartier):
        result = parse_order_message(f"{phone}\n{items}\n{amount}\n{quartier}")

        assert result.phone == phone
        assert result.items == items
        assert result.amount_due == amount
        assert result.quartier == quartier


class TestFlexible:
    """Fallback extraction for free-form messages."""

    def test_labeled_single_line(self):
        result = parse_flexible("Livraison: 612345678 2 robes 15k Akwa")

        assert result.phone == "612345678"
        assert result.amount_due == 15000
        assert result.quartier == "akwa"
        assert result.items == "Livraison: 2 robes"

    def test_short_remainder_uses_original_text(self):
        result = parse_flexible("612345678 15k")

        assert result.items == "612345678 15k"

    def test_customer_name(self):
        result = parse_flexible("Client: Awa\n612345678 2 robes rouges 5000")

        assert result.customer_name == "Awa"
        assert result.phone == "612345678"
        assert result.amount_due == 5000
        assert result.items == "2 robes rouges"

    def test_nothing_found(self):
        result = parse_flexible("Bonjour tout le monde")

        assert result.valid
        assert not result.has_phone
        assert not result.has_amount
        assert not result.is_actionable()
        assert result.items == "Bonjour tout le monde"

    def test_short_remainder_is_truncated(self):
        text = "612345678" + " " * 300 + "15k"

        result = parse_flexible(text)

        assert result.items == text[:200]


class TestFailureFields:
    """Failures name the failing part without quoting the message."""

    @pytest.mark.parametrize(
        "text,field",
        [
            ("612345678\nSac", "lines"),
            ("712345678\nSac\n15000\nAkwa", "phone"),
            ("612345678\nS\n15000\nAkwa", "items"),
            ("612345678\nSac\nbientôt\nAkwa", "amount"),
            ("612345678\nSac\n15000\nA", "quartier"),
        ],
    )
    def test_compact_field(self, text, field):
        assert parse_compact_structured(text).field == field

    def test_neighborhood_first_field(self):
        result = parse_neighborhood_first("Akwa\nRobe\n5000\n6123456789")

        assert result.field == "phone"


class TestZeroAmount:
    def test_zero_k_amount_is_not_an_amount(self):
        result = parse_flexible("0k robe akwa")

        assert result.amount_due == 0
        assert not result.has_amount
        assert not result.is_actionable()
