"""
Appliance-type rules.

Kept apart from the transition table so the list of appliance types that
need an explicit cementation decision can change without touching the
workflow code.
"""
from typing import FrozenSet, Optional

# On-disk value of the tie-bar superstructure appliance type
TIE_BAR_SUPERSTRUCTURE = "ti-bar-superstructure"

CEMENTATION_APPLIANCE_TYPES: FrozenSet[str] = frozenset({TIE_BAR_SUPERSTRUCTURE})


def requires_cementation(
    upper_appliance_type: Optional[str],
    lower_appliance_type: Optional[str],
) -> bool:
    """True when either arch carries an appliance that needs a cementation decision."""
    return (
        upper_appliance_type in CEMENTATION_APPLIANCE_TYPES
        or lower_appliance_type in CEMENTATION_APPLIANCE_TYPES
    )


def item_requires_cementation(item) -> bool:
    """requires_cementation() applied to anything with upper/lower appliance attributes."""
    return requires_cementation(
        getattr(item, "upper_appliance_type", None),
        getattr(item, "lower_appliance_type", None),
    )


def format_appliance_type(value: Optional[str]) -> str:
    """'ti-bar-superstructure' -> 'Ti Bar Superstructure'"""
    if not value:
        return ""
    return " ".join(part.capitalize() for part in value.split("-"))
