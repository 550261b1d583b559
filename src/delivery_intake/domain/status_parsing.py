"""Deterministic status-update classification.

NO LLM. Ordered keyword rules; the first rule that matches wins. The order
resolves keyword overlap between rules:

1. payment      "livré", "livre", "livrée"
2. failed       starts with "échec", or "numéro ne passe pas"
3. payment      starts with "collecté"/"payé", or contains "collecté"
4. pickup       "vient chercher", "passe chercher", "pickup", ...
5. number_change "changer numéro", "nouveau numéro", or "change" with "numéro"
6. modify       "modifier", "modif...", or "change" without "numéro"
7. pending      "en attente", "attente", "en cours"

Rule 5 must run before rule 6: "change numéro" also contains "change".
Keywords are matched on an accent-folded, lowercased copy of the text.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import Callable

from delivery_intake.domain.extractors import (
    extract_amount_from_status,
    extract_phone_from_status,
)
from delivery_intake.domain.gazetteers import DEFAULT_PARSER_CONFIG, ParserConfig
from delivery_intake.domain.status import StatusIntent, StatusKind

# Letter boundaries only: "livré612345678" still counts as delivered.
_DELIVERED = re.compile(r"(?<![a-z])livre{0,2}s?(?![a-z])")
_FAILED_START = re.compile(r"^echec")
_NUMBER_UNREACHABLE = re.compile(r"\bnum(?:ero)? ne passe pas\b")
_COLLECTED_START = re.compile(r"^(?:collecte|paye)")
_NUMBER_CHANGE = re.compile(r"\b(?:changer?|nouveau) numero\b")
_MODIFY_START = re.compile(r"^modif")

_PICKUP_PHRASES = (
    "vient chercher",
    "passe chercher",
    "pickup",
    "ramassage",
    "elle passe",
    "il passe",
)
_PENDING_PHRASES = ("en attente", "attente", "en cours")

_FULL_PHONE = re.compile(r"(?<!\d)6\d{8}(?!\d)")
_MASKED_PHONE = re.compile(r"(?<!\d)6[x\d]{7,8}(?!\d)", re.IGNORECASE)
_NEW_ITEMS = re.compile(r"prend\s+([^,\n]+)|((?<!\d)\d{1,3}\s+[a-zà-ÿ]+)", re.IGNORECASE)


def fold(text: str) -> str:
    """Lowercase and strip accents ("Échec" -> "echec")."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower().strip()


def _phone_tokens(text: str) -> list[str]:
    """Phone-shaped tokens in order of appearance, masks normalized."""
    phones = _FULL_PHONE.findall(text)
    if not phones:
        phones = _MASKED_PHONE.findall(text)
    return [p.lower().replace("x", "0") for p in phones]


def _extract_new_items(text: str) -> str | None:
    match = _NEW_ITEMS.search(text)
    if not match:
        return None
    return (match.group(1) or match.group(2)).strip() or None


@dataclass(frozen=True)
class _Rule:
    kind: StatusKind
    matches: Callable[[str], bool]


def _is_delivered(folded: str) -> bool:
    return bool(_DELIVERED.search(folded))


def _is_failed(folded: str) -> bool:
    return bool(_FAILED_START.search(folded) or _NUMBER_UNREACHABLE.search(folded))


def _is_collected(folded: str) -> bool:
    return bool(_COLLECTED_START.search(folded)) or "collecte" in folded


def _is_pickup(folded: str) -> bool:
    return any(phrase in folded for phrase in _PICKUP_PHRASES)


def _is_number_change(folded: str) -> bool:
    if _NUMBER_CHANGE.search(folded):
        return True
    return "change" in folded and "numero" in folded


def _is_modify(folded: str) -> bool:
    if _MODIFY_START.search(folded) or "modifier" in folded:
        return True
    return "change" in folded and "numero" not in folded


def _is_pending(folded: str) -> bool:
    return any(phrase in folded for phrase in _PENDING_PHRASES)


# Order is significant, see module docstring.
STATUS_RULES: tuple[_Rule, ...] = (
    _Rule(StatusKind.PAYMENT, _is_delivered),
    _Rule(StatusKind.FAILED, _is_failed),
    _Rule(StatusKind.PAYMENT, _is_collected),
    _Rule(StatusKind.PICKUP, _is_pickup),
    _Rule(StatusKind.NUMBER_CHANGE, _is_number_change),
    _Rule(StatusKind.MODIFY, _is_modify),
    _Rule(StatusKind.PENDING, _is_pending),
)


def match_status_kind(text: str) -> StatusKind | None:
    """Kind of the first rule matching text, or None."""
    folded = fold(text)
    for rule in STATUS_RULES:
        if rule.matches(folded):
            return rule.kind
    return None


def _build_intent(
    kind: StatusKind, text: str, *, is_reply: bool, config: ParserConfig
) -> StatusIntent:
    if kind is StatusKind.PAYMENT:
        return StatusIntent(
            kind=kind,
            details=text,
            phone=extract_phone_from_status(text, config=config),
            amount=extract_amount_from_status(text, config=config),
        )

    if kind is StatusKind.MODIFY:
        return StatusIntent(
            kind=kind,
            details=text,
            phone=extract_phone_from_status(text, config=config),
            amount=extract_amount_from_status(text, config=config),
            items=_extract_new_items(text),
        )

    if kind is StatusKind.NUMBER_CHANGE:
        phones = _phone_tokens(text)
        if is_reply and len(phones) == 1:
            # The quoted order already names the old number.
            return StatusIntent(kind=kind, details=text, new_phone=phones[0])
        return StatusIntent(
            kind=kind,
            details=text,
            phone=phones[0] if phones else None,
            new_phone=phones[1] if len(phones) > 1 else None,
        )

    return StatusIntent(
        kind=kind,
        details=text,
        phone=extract_phone_from_status(text, config=config),
    )


def parse_status_update(
    text: str,
    *,
    is_reply: bool = False,
    config: ParserConfig = DEFAULT_PARSER_CONFIG,
) -> StatusIntent | None:
    """Classify a message as a status update.

    Args:
        text: Message text.
        is_reply: True when the message replies to an order-creation
            message. The target order is then known without a phone, so a
            single number in a number-change message is read as the new one.
        config: Parser configuration.

    Returns:
        StatusIntent, or None when no status keyword matched.
    """
    kind = match_status_kind(text)
    if kind is None:
        return None
    return _build_intent(kind, text, is_reply=is_reply, config=config)


def is_status_update(text: str) -> bool:
    return match_status_kind(text) is not None
