"""Deterministic parsing of new-order messages.

NO LLM. Two positional schemas plus a flexible fallback:

Compact-Structured (4 lines)::

    612345678
    2 robes + 1 sac
    15k
    Bonapriso

Neighborhood-First (4+ lines)::

    Bessengue
    Chaussures
    Sac
    14000
    651 07 35 74

Failures are returned as ParseFailure values, never raised.
"""

from __future__ import annotations

import re

from delivery_intake.domain.extractors import (
    PHONE_LENGTH,
    extract_amount,
    extract_carrier,
    extract_customer_name,
    extract_phone,
    extract_quartier,
)
from delivery_intake.domain.gazetteers import DEFAULT_PARSER_CONFIG, ParserConfig
from delivery_intake.domain.orders import (
    COMPACT_FORMAT_HINT,
    NEIGHBORHOOD_FIRST_FORMAT_HINT,
    OrderParseResult,
    ParsedOrder,
    ParseFailure,
)

MIN_STRUCTURED_LINES = 4
MIN_FALLBACK_ITEMS = 5
FALLBACK_ITEMS_LIMIT = 200

# First number on an amount line, optional k suffix ("15k", "14 000", "2.5 K")
_LINE_AMOUNT = re.compile(r"(\d+(?:[.,]\d+)?)\s*(k\b)?", re.IGNORECASE)
_LINE_SEPARATORS = re.compile(r"[\s\-.]")


def split_lines(text: str) -> list[str]:
    """Non-empty, stripped lines of a message."""
    return [line.strip() for line in text.split("\n") if line.strip()]


def _looks_like_bare_number_or_phone(line: str) -> bool:
    return bool(
        re.fullmatch(r"\d+", line) or re.fullmatch(r"6\d{8,9}", re.sub(r"\s", "", line))
    )


def _looks_like_phone(line: str) -> bool:
    return bool(re.fullmatch(r"6[\dx]{7,10}", _LINE_SEPARATORS.sub("", line), re.IGNORECASE))


def looks_like_neighborhood_first(lines: list[str]) -> bool:
    """Precondition for trying the Neighborhood-First schema at all.

    The first line must not be a bare number or phone, and the last line
    must look like a phone.
    """
    if len(lines) < MIN_STRUCTURED_LINES:
        return False
    return not _looks_like_bare_number_or_phone(lines[0]) and _looks_like_phone(lines[-1])


def _parse_amount_line(line: str, config: ParserConfig) -> float | None:
    """Amount written alone on its line.

    The first number wins, multiplied by 1000 with a k suffix. Otherwise the
    largest digit run above the noise floor is used.
    """
    joined = re.sub(r"(?<=\d)[ \u00a0.,](?=\d{3}\b)", "", line)
    match = _LINE_AMOUNT.search(joined)
    if match:
        amount = float(match.group(1).replace(",", "."))
        if match.group(2):
            amount *= 1000
        if amount >= config.min_amount:
            return amount

    candidates = [int(n) for n in re.findall(r"\d+", line) if int(n) > config.min_amount]
    if candidates:
        return float(max(candidates))
    return None


def parse_compact_structured(
    text: str, *, config: ParserConfig = DEFAULT_PARSER_CONFIG
) -> OrderParseResult:
    """Parse the 4-line phone / items / amount / neighborhood schema."""
    lines = split_lines(text)

    if len(lines) < MIN_STRUCTURED_LINES:
        return ParseFailure(
            error=f"Format invalide: Besoin de 4 lignes, reçu {len(lines)}",
            expected_format=COMPACT_FORMAT_HINT,
            field="lines",
        )

    phone_line = lines[0]
    phone = re.sub(r"[^\dx]", "", phone_line, flags=re.IGNORECASE).lower()
    if not phone.startswith("6"):
        return ParseFailure(
            error=f'Numéro invalide: "{phone_line}" - Doit commencer par 6',
            expected_format=COMPACT_FORMAT_HINT,
            field="phone",
        )
    phone = phone.replace("x", "0")
    if len(phone) != PHONE_LENGTH:
        return ParseFailure(
            error=f'Numéro invalide: "{phone_line}" - Doit avoir 9 chiffres',
            expected_format=COMPACT_FORMAT_HINT,
            field="phone",
        )

    items = lines[1]
    if len(items) < 2:
        return ParseFailure(
            error=f'Produits invalides: "{items}" - Doit contenir la description des produits',
            expected_format=COMPACT_FORMAT_HINT,
            field="items",
        )

    amount_line = lines[2]
    amount = _parse_amount_line(amount_line, config)
    if amount is None:
        return ParseFailure(
            error=(
                f'Montant invalide: "{amount_line}" - '
                "Doit être un montant valide (ex: 15k, 15000)"
            ),
            expected_format=COMPACT_FORMAT_HINT,
            field="amount",
        )

    quartier = lines[3]
    if len(quartier) < 2:
        return ParseFailure(
            error=f'Quartier invalide: "{quartier}" - Doit spécifier le quartier',
            expected_format=COMPACT_FORMAT_HINT,
            field="quartier",
        )

    return ParsedOrder(
        format="compact",
        phone=phone,
        items=items,
        amount_due=amount,
        quartier=quartier,
        carrier=extract_carrier(text, config=config),
    )


def parse_neighborhood_first(
    text: str, *, config: ParserConfig = DEFAULT_PARSER_CONFIG
) -> OrderParseResult:
    """Parse the neighborhood / items... / amount / phone schema."""
    lines = split_lines(text)

    if len(lines) < MIN_STRUCTURED_LINES:
        return ParseFailure(
            error=(
                "Format alternatif invalide: Besoin d'au moins 4 lignes, "
                f"reçu {len(lines)}"
            ),
            expected_format=NEIGHBORHOOD_FIRST_FORMAT_HINT,
            field="lines",
        )

    quartier = lines[0]
    if _looks_like_bare_number_or_phone(quartier):
        return ParseFailure(
            error=(
                "Format alternatif: La première ligne devrait être un quartier, "
                f'reçu: "{quartier}"'
            ),
            expected_format=NEIGHBORHOOD_FIRST_FORMAT_HINT,
            field="quartier",
        )

    phone_line = lines[-1]
    phone = _LINE_SEPARATORS.sub("", phone_line).lower()
    if not phone.startswith("6") or len(phone) < 8:
        return ParseFailure(
            error=(
                "Format alternatif: La dernière ligne devrait être un numéro "
                f'de téléphone, reçu: "{phone_line}"'
            ),
            expected_format=NEIGHBORHOOD_FIRST_FORMAT_HINT,
            field="phone",
        )
    phone = phone.replace("x", "0")
    if len(phone) == PHONE_LENGTH - 1:
        phone = phone.ljust(PHONE_LENGTH, "0")
    if len(phone) != PHONE_LENGTH or not phone.isdigit():
        return ParseFailure(
            error=(
                f'Format alternatif: Numéro invalide: "{phone_line}" - '
                "Doit avoir 8-9 chiffres"
            ),
            expected_format=NEIGHBORHOOD_FIRST_FORMAT_HINT,
            field="phone",
        )

    amount_line = lines[-2]
    amount = _parse_amount_line(amount_line, config)
    if amount is None:
        return ParseFailure(
            error=(
                f'Format alternatif: Montant invalide: "{amount_line}" - '
                "Doit être un montant valide (ex: 15k, 15000)"
            ),
            expected_format=NEIGHBORHOOD_FIRST_FORMAT_HINT,
            field="amount",
        )

    items = ", ".join(lines[1:-2]).strip()
    if len(items) < 2:
        return ParseFailure(
            error="Format alternatif: Produits invalides - Doit contenir au moins un produit",
            expected_format=NEIGHBORHOOD_FIRST_FORMAT_HINT,
            field="items",
        )

    return ParsedOrder(
        format="neighborhood_first",
        phone=phone,
        items=items,
        amount_due=amount,
        quartier=quartier,
        carrier=extract_carrier(text, config=config),
    )


def _format_amount_token(amount: float) -> str:
    return str(int(amount)) if amount == int(amount) else str(amount)


def parse_flexible(text: str, *, config: ParserConfig = DEFAULT_PARSER_CONFIG) -> ParsedOrder:
    """Opportunistic extraction for messages outside the positional schemas.

    Always returns a ParsedOrder; ``has_phone``/``has_amount`` tell the caller
    what was found.
    """
    phone = extract_phone(text, config=config)
    amount = extract_amount(text, config=config)
    quartier = extract_quartier(text, config=config)
    carrier = extract_carrier(text, config=config)
    customer_name = extract_customer_name(text, config=config)

    items = text
    if phone:
        items = re.sub(re.escape(phone), "", items, flags=re.IGNORECASE)
    if amount:
        items = re.sub(re.escape(_format_amount_token(amount)), "", items)
        k_token = _format_amount_token(amount / 1000) + "k"
        items = re.sub(re.escape(k_token), "", items, flags=re.IGNORECASE)
    if quartier:
        items = re.sub(re.escape(quartier), "", items, flags=re.IGNORECASE)
    if carrier:
        items = re.sub(re.escape(carrier), "", items, flags=re.IGNORECASE)
    for label in config.customer_labels:
        items = re.sub(rf"\b{label}[:\s]+[^\n]+", "", items, flags=re.IGNORECASE)
    items = re.sub(r"\s+", " ", items).strip()

    if len(items) < MIN_FALLBACK_ITEMS:
        items = text[:FALLBACK_ITEMS_LIMIT]

    return ParsedOrder(
        format="flexible",
        phone=phone,
        items=items,
        amount_due=amount,
        quartier=quartier,
        carrier=carrier,
        customer_name=customer_name,
    )


def parse_order_message(
    text: str, *, config: ParserConfig = DEFAULT_PARSER_CONFIG
) -> OrderParseResult:
    """Try the order schemas in priority order.

    1. Neighborhood-First, when its precondition holds and it validates.
    2. Compact-Structured, when it validates.
    3. A 4+ line message is an attempted structured order: return the
       Compact-Structured failure instead of guessing.
    4. Otherwise the flexible fallback.
    """
    lines = split_lines(text)

    if looks_like_neighborhood_first(lines):
        result = parse_neighborhood_first(text, config=config)
        if result.valid:
            return result

    compact = parse_compact_structured(text, config=config)
    if compact.valid:
        return compact

    if len(lines) >= MIN_STRUCTURED_LINES:
        return compact

    return parse_flexible(text, config=config)
