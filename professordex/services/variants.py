"""
Print-variant classification.

A variant is a finish or print treatment a collector tracks separately
(normal, reverse holo, a Poké Ball pattern reprint, ...). Which variants a
card has is read from catalog fields:

- Finishes come from the TCGplayer price points the catalog lists.
- Rarity variants come from the rarity name, matched exactly.
- ACE SPEC comes from the subtype tag.
- Pattern variants cannot be read from catalog fields at all; they come from
  membership lists kept in the store (see VariantMembership).

Variants are not mutually exclusive. The one interaction is that cards of a
special rarity, and ACE SPEC cards, never get the plain `holo` variant even
when a holofoil price exists, because their holofoil price is the rare
printing itself.
"""

from collections.abc import Iterable

from professordex.models.card import Card
from professordex.models.ownership import VariantMembership

NORMAL = "normal"
REVERSE_HOLO = "reverseHolo"
HOLO = "holo"
ACE_SPEC = "aceSpec"
DOUBLE_RARE = "doubleRare"
ULTRA_RARE = "ultraRare"
ILLUSTRATION_RARE = "illustrationRare"
SPECIAL_ILLUSTRATION_RARE = "specialIllustrationRare"
HYPER_RARE = "hyperRare"
SHINY_RARE = "shinyRare"
SHINY_ULTRA_RARE = "shinyUltraRare"
POKE_BALL_PATTERN = "pokeBallPattern"
MASTER_BALL_PATTERN = "masterBallPattern"

# Display order and labels
VARIANT_LABELS: dict[str, str] = {
    NORMAL: "Normal",
    REVERSE_HOLO: "Reverse Holo",
    HOLO: "Holo",
    ACE_SPEC: "ACE SPEC",
    DOUBLE_RARE: "Double Rare",
    ULTRA_RARE: "Ultra Rare",
    ILLUSTRATION_RARE: "Illustration Rare",
    SPECIAL_ILLUSTRATION_RARE: "Special Illustration Rare",
    HYPER_RARE: "Hyper Rare",
    SHINY_RARE: "Shiny Rare",
    SHINY_ULTRA_RARE: "Shiny Ultra Rare",
    POKE_BALL_PATTERN: "Poké Ball Pattern",
    MASTER_BALL_PATTERN: "Master Ball Pattern",
}

ALL_VARIANTS: tuple[str, ...] = tuple(VARIANT_LABELS)

# Catalog rarity name -> variant key
RARITY_VARIANTS: dict[str, str] = {
    "Double Rare": DOUBLE_RARE,
    "Ultra Rare": ULTRA_RARE,
    "Illustration Rare": ILLUSTRATION_RARE,
    "Special Illustration Rare": SPECIAL_ILLUSTRATION_RARE,
    "Hyper Rare": HYPER_RARE,
    "Shiny Rare": SHINY_RARE,
    "Shiny Ultra Rare": SHINY_ULTRA_RARE,
}

SPECIAL_RARITIES = frozenset(RARITY_VARIANTS)

PATTERN_VARIANTS: tuple[str, ...] = (POKE_BALL_PATTERN, MASTER_BALL_PATTERN)

ACE_SPEC_SUBTYPE = "ACE SPEC"

# TCGplayer price point -> finish variant
_PRICE_POINT_NORMAL = "normal"
_PRICE_POINT_REVERSE_HOLO = "reverseHolofoil"
_PRICE_POINT_HOLO = "holofoil"

EMPTY_MEMBERSHIP = VariantMembership()


def is_variant(key: str) -> bool:
    """True for any variant key this service knows how to classify."""
    return key in VARIANT_LABELS


def is_special_rarity(card: Card) -> bool:
    return card.rarity in SPECIAL_RARITIES


def classify(card: Card, membership: VariantMembership = EMPTY_MEMBERSHIP) -> frozenset[str]:
    """
    Variants a collector can own for this card.

    Args:
        card: Catalog card (or a stored snapshot of one)
        membership: Pattern-variant membership lists

    Returns:
        Set of variant keys. May be empty, e.g. a common with no pricing.
    """
    variants: set[str] = set()
    price_points = card.price_points
    is_ace_spec = ACE_SPEC_SUBTYPE in card.subtypes

    if _PRICE_POINT_NORMAL in price_points:
        variants.add(NORMAL)
    if _PRICE_POINT_REVERSE_HOLO in price_points:
        variants.add(REVERSE_HOLO)
    if _PRICE_POINT_HOLO in price_points and not is_special_rarity(card) and not is_ace_spec:
        variants.add(HOLO)

    if is_ace_spec:
        variants.add(ACE_SPEC)

    rarity_variant = RARITY_VARIANTS.get(card.rarity or "")
    if rarity_variant:
        variants.add(rarity_variant)

    for pattern in PATTERN_VARIANTS:
        if membership.has(pattern, card.id):
            variants.add(pattern)

    return frozenset(variants)


def ordered(variants: Iterable[str]) -> list[str]:
    """Sort variant keys into display order. Unknown keys go last."""
    present = set(variants)
    known = [v for v in ALL_VARIANTS if v in present]
    return known + sorted(present - set(ALL_VARIANTS))


def label(variant: str) -> str:
    return VARIANT_LABELS.get(variant, variant)
