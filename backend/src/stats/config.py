"""Statistics configuration via Pydantic settings."""

from __future__ import annotations

import enum
import os
from functools import lru_cache

from pydantic import BaseModel


class OperatorAttribution(str, enum.Enum):
    # Credit the whole request to the operator on its first radiation log.
    FIRST_LOG = "first_log"
    # Credit each distinct operator named on the request's logs once.
    PER_TYPE = "per_type"


class StatsSettings(BaseModel):
    operator_attribution: OperatorAttribution = OperatorAttribution.FIRST_LOG


@lru_cache
def get_stats_settings() -> StatsSettings:
    return StatsSettings(
        operator_attribution=OperatorAttribution(
            os.getenv("STATS_OPERATOR_ATTRIBUTION", OperatorAttribution.FIRST_LOG.value).lower()
        ),
    )
