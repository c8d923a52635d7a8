"""Pydantic schemas for API request/response models."""

from .common import *
from .imaging import *
from .patients import *
from .operators import *
from .reference import *
from .stats import *
