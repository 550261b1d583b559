"""Fixed gazetteers and keyword lists used by the message parsers.

Membership and order are significant: neighborhood and carrier matching
return the first entry that appears in the text, in list order.
"""

from __future__ import annotations

from dataclasses import dataclass

# Known neighborhoods (Douala). Order matters: first substring hit wins.
DEFAULT_QUARTIERS: tuple[str, ...] = (
    "bonapriso",
    "akwa",
    "douala",
    "makepe",
    "logpom",
    "pk8",
    "pk12",
    "wouri",
    "deido",
    "bessengue",
    "new-bell",
    "newbell",
    "bonanjo",
    "kotto",
    "ndokotti",
    "bepanda",
    "denver",
)

# (alias, canonical name). Checked in order.
DEFAULT_CARRIERS: tuple[tuple[str, str], ...] = (
    ("men travel", "Men Travel"),
    ("mentravel", "Men Travel"),
    ("general voyage", "General Voyage"),
    ("generalvoyage", "General Voyage"),
    ("expedition", "Expedition"),
    ("expédition", "Expedition"),
)

# Labels that may precede a phone number ("Livraison: 6xx...")
DEFAULT_PHONE_LABELS: tuple[str, ...] = (
    r"livraison",
    r"num[ée]ro",
    r"phone",
    r"t[ée]l[ée]phone",
)

# Labels that may precede a customer name ("Client: Awa")
DEFAULT_CUSTOMER_LABELS: tuple[str, ...] = ("client", "nom", "name")


@dataclass(frozen=True)
class ParserConfig:
    """Immutable parser configuration.

    Every parser takes an optional ``config`` so tests can swap in fixture
    gazetteers without touching module state.
    """

    quartiers: tuple[str, ...] = DEFAULT_QUARTIERS
    carriers: tuple[tuple[str, str], ...] = DEFAULT_CARRIERS
    phone_labels: tuple[str, ...] = DEFAULT_PHONE_LABELS
    customer_labels: tuple[str, ...] = DEFAULT_CUSTOMER_LABELS
    # Smallest value accepted as an amount (FCFA)
    min_amount: int = 100


DEFAULT_PARSER_CONFIG = ParserConfig()
