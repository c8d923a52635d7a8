"""Exposure templates, insurance points and patient age rules for dental radiography."""

from .ages import CHILD_AGE_LIMIT, age_at, age_category
from .catalog import (
    AgeCategory,
    BitewingSide,
    BodyType,
    EXPOSURE_TEMPLATES,
    ExposureSettings,
    Gender,
    ImagingType,
    INSURANCE_POINTS,
    IMAGING_LABELS,
    lookup_exposure,
)
from .points import calculate_points
from .teeth import FDI_TEETH, is_valid_tooth, requires_tooth_selection

__all__ = [
    "AgeCategory",
    "BitewingSide",
    "BodyType",
    "CHILD_AGE_LIMIT",
    "EXPOSURE_TEMPLATES",
    "ExposureSettings",
    "FDI_TEETH",
    "Gender",
    "IMAGING_LABELS",
    "INSURANCE_POINTS",
    "ImagingType",
    "age_at",
    "age_category",
    "calculate_points",
    "is_valid_tooth",
    "lookup_exposure",
    "requires_tooth_selection",
]
