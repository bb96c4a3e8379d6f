"""
Types for the blending dashboard.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd

from progress_engine.review.scheduler import BlendingStats


@dataclass(frozen=True)
class BlendingDashboardData:
    """
    Precomputed metrics for the parent view.
    """
    max_unit: Optional[int]
    overall: BlendingStats
    unit_breakdown: pd.DataFrame
    due_now: int
    struggling_words: list[str]
