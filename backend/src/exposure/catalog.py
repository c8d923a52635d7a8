"""Imaging catalogue: enums, insurance points and default exposure settings.

The exposure values are radiation dose defaults for the clinic's units and
must stay exactly as listed. Every (imaging type, age category, body type)
combination has a row; there is no fallback row.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class ImagingType(str, enum.Enum):
    DENTAL = "DENTAL"
    PANORAMA = "PANORAMA"
    CT = "CT"
    BITEWING = "BITEWING"
    CEPHALO = "CEPHALO"
    TMJ = "TMJ"
    FULL_MOUTH_10 = "FULL_MOUTH_10"


class AgeCategory(str, enum.Enum):
    CHILD = "child"
    ADULT = "adult"


class BodyType(str, enum.Enum):
    SMALL = "small"
    NORMAL = "normal"
    LARGE = "large"


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class BitewingSide(str, enum.Enum):
    RIGHT = "right"
    LEFT = "left"


@dataclass(frozen=True)
class ExposureSettings:
    kv: float
    ma: float
    sec: float

    def as_dict(self) -> dict[str, float]:
        return {"kv": self.kv, "ma": self.ma, "sec": self.sec}


IMAGING_LABELS: dict[ImagingType, str] = {
    ImagingType.DENTAL: "Dental (single film)",
    ImagingType.PANORAMA: "Panoramic",
    ImagingType.CT: "Dental CT",
    ImagingType.BITEWING: "Bitewing",
    ImagingType.CEPHALO: "Cephalometric",
    ImagingType.TMJ: "Temporomandibular joint",
    ImagingType.FULL_MOUTH_10: "Full mouth (10 films)",
}

BODY_TYPE_LABELS: dict[BodyType, str] = {
    BodyType.SMALL: "Small",
    BodyType.NORMAL: "Normal",
    BodyType.LARGE: "Large",
}

# Base insurance points per imaging type (fee schedule units).
INSURANCE_POINTS: dict[ImagingType, int] = {
    ImagingType.DENTAL: 48,
    ImagingType.PANORAMA: 402,
    ImagingType.CT: 1170,
    ImagingType.BITEWING: 48,
    ImagingType.CEPHALO: 402,
    ImagingType.TMJ: 402,
    ImagingType.FULL_MOUTH_10: 480,
}


def _row(small: tuple, normal: tuple, large: tuple) -> dict[BodyType, ExposureSettings]:
    return {
        BodyType.SMALL: ExposureSettings(*small),
        BodyType.NORMAL: ExposureSettings(*normal),
        BodyType.LARGE: ExposureSettings(*large),
    }


# (kv, ma, sec) per body type
EXPOSURE_TEMPLATES: dict[ImagingType, dict[AgeCategory, dict[BodyType, ExposureSettings]]] = {
    ImagingType.DENTAL: {
        AgeCategory.ADULT: _row((60, 7, 0.08), (60, 7, 0.10), (65, 7, 0.12)),
        AgeCategory.CHILD: _row((55, 5, 0.05), (55, 5, 0.06), (60, 5, 0.08)),
    },
    ImagingType.PANORAMA: {
        AgeCategory.ADULT: _row((68, 8, 12.0), (70, 10, 12.0), (74, 12, 14.0)),
        AgeCategory.CHILD: _row((60, 6, 10.0), (62, 8, 10.0), (65, 8, 12.0)),
    },
    ImagingType.CT: {
        AgeCategory.ADULT: _row((85, 5, 15.0), (90, 6, 15.0), (90, 8, 15.0)),
        AgeCategory.CHILD: _row((80, 4, 12.0), (80, 5, 12.0), (85, 5, 12.0)),
    },
    ImagingType.BITEWING: {
        AgeCategory.ADULT: _row((60, 7, 0.10), (60, 7, 0.12), (65, 7, 0.15)),
        AgeCategory.CHILD: _row((55, 5, 0.06), (55, 5, 0.08), (60, 5, 0.10)),
    },
    ImagingType.CEPHALO: {
        AgeCategory.ADULT: _row((80, 10, 0.5), (84, 12, 0.5), (88, 12, 0.6)),
        AgeCategory.CHILD: _row((75, 8, 0.4), (78, 10, 0.4), (80, 10, 0.5)),
    },
    ImagingType.TMJ: {
        AgeCategory.ADULT: _row((70, 10, 10.0), (75, 10, 12.0), (80, 10, 12.0)),
        AgeCategory.CHILD: _row((65, 8, 8.0), (70, 8, 8.0), (75, 8, 10.0)),
    },
    ImagingType.FULL_MOUTH_10: {
        AgeCategory.ADULT: _row((60, 7, 0.08), (60, 7, 0.10), (65, 7, 0.12)),
        AgeCategory.CHILD: _row((55, 5, 0.05), (55, 5, 0.06), (60, 5, 0.08)),
    },
}

# Rooms a patient can be sent to after the request is written.
LOCATION_OPTIONS: list[str] = [f"Chair {number}" for number in range(1, 13)] + [
    "X-ray Room",
    "Waiting Room",
    "Reception",
]
DEFAULT_LOCATION_FROM = "Exam Room"
DEFAULT_LOCATION_TO = "Waiting Room"


def lookup_exposure(
    imaging_type: ImagingType | str,
    age_category: AgeCategory | str,
    body_type: BodyType | str,
) -> ExposureSettings:
    """Return the default exposure for one imaging type and patient profile.

    Raises ``KeyError`` for values outside the catalogue enums.
    """
    try:
        key = (ImagingType(imaging_type), AgeCategory(age_category), BodyType(body_type))
    except ValueError as exc:
        raise KeyError(str(exc)) from exc
    return EXPOSURE_TEMPLATES[key[0]][key[1]][key[2]]
