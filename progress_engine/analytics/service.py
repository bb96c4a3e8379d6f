"""
Service layer to assemble the blending dashboard.
"""

from __future__ import annotations
from typing import Optional

from progress_engine.analytics.metrics import (
    compute_due_now,
    compute_struggling_words,
    compute_unit_breakdown,
)
from progress_engine.analytics.queries import load_review_records_df
from progress_engine.analytics.types import BlendingDashboardData
from progress_engine.review.scheduler import WordReviewScheduler


def build_blending_dashboard(
    scheduler: WordReviewScheduler,
    max_unit: Optional[int] = None
) -> BlendingDashboardData:
    """
    Build the KPI values and per-unit table for words up to max_unit.
    """
    reviews_df = load_review_records_df(scheduler, max_unit)

    return BlendingDashboardData(
        max_unit=max_unit,
        overall=scheduler.get_overall_blending_stats(max_unit),
        unit_breakdown=compute_unit_breakdown(reviews_df),
        due_now=compute_due_now(reviews_df, scheduler.clock()),
        struggling_words=compute_struggling_words(reviews_df),
    )
