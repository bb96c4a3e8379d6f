"""
Data-loading helpers for analytics.
"""

from __future__ import annotations
from typing import Optional

import pandas as pd

from progress_engine.review.scheduler import WordReviewScheduler


REVIEW_COLUMNS = [
    "word",
    "unit",
    "review_count",
    "success_count",
    "failure_count",
    "avg_smoothness_score",
    "blending_mastered",
    "last_reviewed_at",
    "next_due_at",
]


def load_review_records_df(
    scheduler: WordReviewScheduler,
    max_unit: Optional[int] = None
) -> pd.DataFrame:
    """
    Load the scheduler's review ledger into a dataframe, one row per word.
    """
    records = scheduler.get_all_word_reviews().values()
    rows = [
        record.model_dump(include=set(REVIEW_COLUMNS))
        for record in records
        if max_unit is None or record.unit <= max_unit
    ]
    if not rows:
        return pd.DataFrame(columns=REVIEW_COLUMNS)

    df = pd.DataFrame(rows)[REVIEW_COLUMNS]
    df["last_reviewed_at"] = pd.to_datetime(df["last_reviewed_at"], utc=True, errors="coerce")
    df["next_due_at"] = pd.to_datetime(df["next_due_at"], utc=True, errors="coerce")
    return df.sort_values(["unit", "word"]).reset_index(drop=True)
