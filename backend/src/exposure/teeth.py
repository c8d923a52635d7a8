"""FDI tooth numbering used for tooth selections."""

from __future__ import annotations

from typing import Iterable

from .catalog import ImagingType

# Quadrants listed in chart order: upper right, upper left, lower right, lower left.
QUADRANTS: dict[int, list[int]] = {
    1: [18, 17, 16, 15, 14, 13, 12, 11],
    2: [21, 22, 23, 24, 25, 26, 27, 28],
    4: [48, 47, 46, 45, 44, 43, 42, 41],
    3: [31, 32, 33, 34, 35, 36, 37, 38],
}

# Premolar/molar "4-7" preset per quadrant.
PREMOLAR_MOLAR_RANGES: dict[int, list[int]] = {
    quadrant: [quadrant * 10 + position for position in range(4, 8)] for quadrant in QUADRANTS
}

FDI_TEETH: frozenset[int] = frozenset(tooth for teeth in QUADRANTS.values() for tooth in teeth)

TOOTH_BASED_TYPES: frozenset[ImagingType] = frozenset(
    {ImagingType.DENTAL, ImagingType.BITEWING, ImagingType.CT}
)


def is_valid_tooth(tooth: int) -> bool:
    return tooth in FDI_TEETH


def requires_tooth_selection(types: Iterable[ImagingType | str]) -> bool:
    """True when any selected type is taken against specific teeth."""
    return any(ImagingType(value) in TOOTH_BASED_TYPES for value in types)
