"""Insurance point totals for a selection of imaging types."""

from __future__ import annotations

from typing import Iterable

from .catalog import INSURANCE_POINTS, BitewingSide, ImagingType


def calculate_points(
    types: Iterable[ImagingType | str],
    bitewing_sides: Iterable[BitewingSide | str] = (),
) -> int:
    """Sum base points over the selected types.

    Bitewing is billed per side, so it contributes base x sides (0, 1 or 2).
    """
    selected = dict.fromkeys(ImagingType(value) for value in types)
    side_count = len({BitewingSide(side) for side in bitewing_sides})

    total = 0
    for imaging_type in selected:
        points = INSURANCE_POINTS[imaging_type]
        if imaging_type is ImagingType.BITEWING:
            points *= side_count
        total += points
    return total
