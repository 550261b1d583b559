"""Golden tests for deterministic status-update parsing."""

import pytest

from delivery_intake.domain.status import StatusKind
from delivery_intake.domain.status_parsing import (
    fold,
    is_status_update,
    match_status_kind,
    parse_status_update,
)


class TestFold:
    def test_strips_accents_and_case(self):
        assert fold("  Échec Livrée ") == "echec livree"


class TestStatusKinds:
    """Keyword rules map to the expected kind."""

    @pytest.mark.parametrize(
        "text,kind",
        [
            ("Livré 612345678", StatusKind.PAYMENT),
            ("livrée", StatusKind.PAYMENT),
            ("Livré612345678", StatusKind.PAYMENT),
            ("Livré5k", StatusKind.PAYMENT),
            ("LIVRES", StatusKind.PAYMENT),
            ("Échec 612345678", StatusKind.FAILED),
            ("Le numéro ne passe pas 612345678", StatusKind.FAILED),
            ("Collecté 5000", StatusKind.PAYMENT),
            ("Payé 8k", StatusKind.PAYMENT),
            ("argent collecté", StatusKind.PAYMENT),
            ("Elle passe chercher demain 612345678", StatusKind.PICKUP),
            ("pickup 612345678", StatusKind.PICKUP),
            ("Changer numéro 612345678 699887766", StatusKind.NUMBER_CHANGE),
            ("Nouveau numéro 699887766", StatusKind.NUMBER_CHANGE),
            ("Modifier 612345678 prend 3 robes", StatusKind.MODIFY),
            ("Change 612345678 12k", StatusKind.MODIFY),
            ("En attente 612345678", StatusKind.PENDING),
            ("En cours de livraison", StatusKind.PENDING),
        ],
    )
    def test_kind(self, text, kind):
        assert match_status_kind(text) is kind

    @pytest.mark.parametrize(
        "text",
        ["Bonjour", "le livreur arrive", "livraison demain", "612345678\n2 robes\n15k\nAkwa"],
    )
    def test_not_a_status(self, text):
        assert parse_status_update(text) is None
        assert not is_status_update(text)


class TestRulePrecedence:
    """First matching rule wins when keywords overlap."""

    def test_delivered_beats_modify(self):
        assert match_status_kind("Livré, client a changé d'avis") is StatusKind.PAYMENT

    def test_failed_beats_collected(self):
        assert match_status_kind("Échec, collecte impossible") is StatusKind.FAILED

    def test_change_with_numero_is_number_change(self):
        text = "Je change le numéro 612345678 699887766"
        assert match_status_kind(text) is StatusKind.NUMBER_CHANGE


class TestIntentFields:
    """Fields extracted for each kind."""

    def test_delivered_with_phone(self):
        intent = parse_status_update("Livré 612345678")

        assert intent.kind is StatusKind.PAYMENT
        assert intent.phone == "612345678"
        assert intent.amount is None
        assert intent.details == "Livré 612345678"

    def test_payment_with_amount_and_phone(self):
        intent = parse_status_update("Payé 8k 699887766")

        assert intent.amount == 8000
        assert intent.phone == "699887766"

    def test_collected_amount_without_phone(self):
        intent = parse_status_update("Collecté 5000")

        assert intent.amount == 5000
        assert intent.phone is None

    def test_failed_keeps_phone_only(self):
        intent = parse_status_update("Échec 612345678")

        assert intent.kind is StatusKind.FAILED
        assert intent.phone == "612345678"
        assert intent.amount is None

    def test_number_change_old_and_new(self):
        intent = parse_status_update("Changer numéro 612345678 699887766")

        assert intent.phone == "612345678"
        assert intent.new_phone == "699887766"

    def test_number_change_single_phone_not_reply(self):
        intent = parse_status_update("Nouveau numéro 699887766")

        assert intent.phone == "699887766"
        assert intent.new_phone is None

    def test_number_change_single_phone_in_reply(self):
        """In a reply the quoted order is known, so the number is the new one."""
        intent = parse_status_update("Nouveau numéro 699887766", is_reply=True)

        assert intent.phone is None
        assert intent.new_phone == "699887766"

    def test_modify_items(self):
        intent = parse_status_update("Modifier 612345678 prend 3 robes")

        assert intent.kind is StatusKind.MODIFY
        assert intent.phone == "612345678"
        assert intent.items == "3 robes"
        assert intent.amount is None

    def test_modify_amount(self):
        intent = parse_status_update("Change 612345678 12k")

        assert intent.amount == 12000
        assert intent.items is None
        assert intent.phone == "612345678"

    def test_history_details(self):
        intent = parse_status_update("Collecté 5000")

        assert intent.history_details() == {
            "type": "payment",
            "details": "Collecté 5000",
            "amount": 5000,
        }


class TestDeliveredGluedToDigits:
    """Delivered keyword typed directly against a phone or an amount."""

    def test_phone_glued_to_keyword(self):
        intent = parse_status_update("Livré612345678")

        assert intent.kind is StatusKind.PAYMENT
        assert intent.phone == "612345678"
        assert intent.amount is None

    def test_amount_glued_to_keyword(self):
        intent = parse_status_update("Livré5k")

        assert intent.kind is StatusKind.PAYMENT
        assert intent.amount == 5000
