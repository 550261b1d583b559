"""Field extractors for free-form delivery messages.

NO I/O. Regex and heuristics only; every function returns None on a miss
and never raises for unrecognized text.
"""

from __future__ import annotations

import re

from delivery_intake.domain.gazetteers import DEFAULT_PARSER_CONFIG, ParserConfig

PHONE_LENGTH = 9

# Separators operators put inside phone numbers ("651 07 35 74", "6-12-34")
_PHONE_SEPARATORS = re.compile(r"[\s\-.]")

# Bare 9-digit mobile number, not embedded in a longer digit run
_BARE_PHONE = re.compile(r"(?<!\d)6\d{8}(?!\d)")
_COMPACT_PHONE = re.compile(r"6\d{8}")
# Partially masked number ("6xx345678")
_MASKED_PHONE = re.compile(r"6[x\d]{7,8}", re.IGNORECASE)
_COUNTRY_CODE_PHONE = re.compile(r"\+237(\d{9})")

# Phone-shaped tokens removed before reading amounts in status messages
_STATUS_PHONE_TOKEN = re.compile(r"(?<!\d)(?:6\d{8}|6[x\d]{7,8})", re.IGNORECASE)

# "15k", "2,5K", "15 k"
_K_AMOUNT = re.compile(r"(?<![\d.,])(\d+(?:[.,]\d+)?)\s?k\b", re.IGNORECASE)
# "15.000", "1,250,000"
_GROUPED_AMOUNT = re.compile(r"(?<![\d.,])\d{1,3}(?:[.,]\d{3})+(?![\d])")
# "15 000" written with a space as thousands separator
_SPACE_GROUPED = re.compile(r"(?<!\d)\d{1,3}(?:[ \u00a0]\d{3})+(?!\d)")
_DIGIT_RUN = re.compile(r"\d+")


def _is_phone_like(digits: str) -> bool:
    return len(digits) == PHONE_LENGTH and digits.startswith("6")


def _to_number(raw: str) -> float:
    """Parse a decimal written with either '.' or ',' ("2,5" -> 2.5)."""
    return float(raw.replace(",", "."))


def _join_space_groups(text: str) -> str:
    """Turn "15 000" into "15000" without merging unrelated numbers."""
    return _SPACE_GROUPED.sub(lambda m: re.sub(r"\s", "", m.group(0)), text)


def _extract_labeled_phone(text: str, config: ParserConfig) -> str | None:
    for label in config.phone_labels:
        match = re.search(rf"{label}[:\s]+([6x\d]+)", text, re.IGNORECASE)
        if not match:
            continue
        phone = match.group(1).lower().replace("x", "0")
        if phone.startswith("6") and 7 <= len(phone) <= PHONE_LENGTH:
            return phone.ljust(PHONE_LENGTH, "0")
    return None


def extract_phone(text: str, *, config: ParserConfig = DEFAULT_PARSER_CONFIG) -> str | None:
    """Extract a Cameroon mobile number from text.

    Precedence (first hit wins):
        1. Number after a label ("Livraison:", "Numéro:", "Phone:",
           "Téléphone:"); x placeholders become 0, right-padded to 9 digits.
        2. Bare 9-digit run starting with 6 (separators ignored).
        3. 6 followed by 7-8 digits or x placeholders (masked numbers).
        4. +237 prefixed number, country code replaced by a leading 6.
        5. Any 9-digit run starting with 6.

    Returns:
        Normalized phone string, or None.
    """
    labeled = _extract_labeled_phone(text, config)
    if labeled:
        return labeled

    match = _BARE_PHONE.search(text)
    if match:
        return match.group(0)

    cleaned = _PHONE_SEPARATORS.sub("", text)

    match = _COMPACT_PHONE.search(cleaned)
    if match:
        return match.group(0)

    match = _MASKED_PHONE.search(cleaned)
    if match:
        return match.group(0).lower().replace("x", "0")

    match = _COUNTRY_CODE_PHONE.search(cleaned)
    if match:
        return "6" + match.group(1)[1:]

    for digits in _DIGIT_RUN.findall(cleaned):
        if _is_phone_like(digits):
            return digits

    return None


def extract_amount(text: str, *, config: ParserConfig = DEFAULT_PARSER_CONFIG) -> float | None:
    """Extract a monetary amount (FCFA) from text.

    Precedence:
        1. Number followed by k/K, multiplied by 1000.
        2. Numbers using '.' or ',' as thousands separators; largest wins.
        3. Plain digit runs, excluding phone numbers and values <= 100;
           largest wins.
    """
    match = _K_AMOUNT.search(text)
    if match:
        return _to_number(match.group(1)) * 1000

    grouped = [
        re.sub(r"[.,]", "", m.group(0)) for m in _GROUPED_AMOUNT.finditer(text)
    ]
    grouped = [g for g in grouped if not _is_phone_like(g)]
    if grouped:
        return float(max(int(g) for g in grouped))

    candidates = [
        int(digits)
        for digits in _DIGIT_RUN.findall(_join_space_groups(text))
        if not _is_phone_like(digits)
    ]
    candidates = [n for n in candidates if n > config.min_amount]
    if candidates:
        return float(max(candidates))

    return None


def extract_quartier(text: str, *, config: ParserConfig = DEFAULT_PARSER_CONFIG) -> str | None:
    """Return the first gazetteer neighborhood contained in text."""
    text_lower = text.lower()
    for quartier in config.quartiers:
        if quartier in text_lower:
            return quartier
    return None


def extract_carrier(text: str, *, config: ParserConfig = DEFAULT_PARSER_CONFIG) -> str | None:
    """Return the canonical carrier name for the first alias found in text."""
    text_lower = text.lower()
    for alias, canonical in config.carriers:
        if alias in text_lower:
            return canonical
    return None


def extract_customer_name(
    text: str, *, config: ParserConfig = DEFAULT_PARSER_CONFIG
) -> str | None:
    """Extract a name written as "Client: ...", "Nom: ..." or "Name: ..."."""
    for label in config.customer_labels:
        match = re.search(
            rf"\b{label}[:\s]+([a-zà-ÿ \t]+)", text, re.IGNORECASE
        )
        if match:
            name = match.group(1).strip()
            if name:
                return name
    return None


def extract_phone_from_status(
    text: str, *, config: ParserConfig = DEFAULT_PARSER_CONFIG
) -> str | None:
    """Phone lookup key in a status message. Same precedence as extract_phone."""
    return extract_phone(text, config=config)


def extract_amount_from_status(
    text: str, *, config: ParserConfig = DEFAULT_PARSER_CONFIG
) -> float | None:
    """Amount in a status message ("Collecté 8.000", "Livré 612345678 5k").

    Phone-shaped tokens are removed first, and digit runs of 8+ characters
    are never read as amounts.
    """
    stripped = _STATUS_PHONE_TOKEN.sub(" ", text)

    match = _K_AMOUNT.search(stripped)
    if match:
        return _to_number(match.group(1)) * 1000

    grouped = [
        re.sub(r"[.,]", "", m.group(0)) for m in _GROUPED_AMOUNT.finditer(stripped)
    ]
    grouped = [g for g in grouped if len(g) < 8]
    if grouped:
        return float(max(int(g) for g in grouped))

    candidates = [
        int(digits)
        for digits in _DIGIT_RUN.findall(_join_space_groups(stripped))
        if len(digits) < 8
    ]
    candidates = [n for n in candidates if n > config.min_amount]
    if candidates:
        return float(max(candidates))

    return None
