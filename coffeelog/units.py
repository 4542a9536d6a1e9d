"""
Volume units for coffee entries.

The add form offers units per measurement system; stored entries keep the
unit they were logged in and are converted to millilitres only for display.
"""

from typing import List

# Millilitres per unit
CUPS_TO_ML = 237
FL_OZ_TO_ML = 29.5735

ML_PER_UNIT = {
    'ml': 1.0,
    'cups': float(CUPS_TO_ML),
    'fl_oz': FL_OZ_TO_ML,
    'oz': FL_OZ_TO_ML,
}

MEASUREMENT_SYSTEMS = ('metric', 'imperial')

UNIT_LABELS = {
    'ml': 'ml',
    'cups': 'Cups',
    'fl_oz': 'fl oz',
    'oz': 'oz',
}


def units_for_system(system: str) -> List[str]:
    """
    Units offered when adding an entry.
    metric -> ml only; imperial -> cups and fl oz.
    """
    if system == 'imperial':
        return ['cups', 'fl_oz']
    return ['ml']


def to_millilitres(amount: float, unit: str) -> float:
    """Convert an amount in any known unit to millilitres."""
    if unit not in ML_PER_UNIT:
        raise ValueError(f"Unknown unit: {unit}")
    return amount * ML_PER_UNIT[unit]


def format_amount(amount: float, unit: str) -> str:
    """'200 ml', '1.5 Cups'. Whole numbers drop the trailing .0"""
    if isinstance(amount, float) and amount.is_integer():
        amount = int(amount)
    return f"{amount} {UNIT_LABELS.get(unit, unit)}"


def millilitre_hint(amount: float, unit: str) -> str:
    """'≈ 474 ml' for non-metric amounts; empty for ml and unknown units."""
    if unit == 'ml' or unit not in ML_PER_UNIT:
        return ''
    return f"≈ {round(to_millilitres(amount, unit))} ml"
