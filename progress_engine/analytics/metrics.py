"""
Metric computations for the blending dashboard.
"""

from __future__ import annotations
from datetime import datetime

import pandas as pd


UNIT_BREAKDOWN_COLUMNS = [
    "words",
    "mastered",
    "in_progress",
    "reviews",
    "avg_smoothness",
]


def compute_unit_breakdown(reviews_df: pd.DataFrame) -> pd.DataFrame:
    """
    Per-unit word counts, review totals and review-weighted smoothness.
    """
    if reviews_df.empty:
        return pd.DataFrame(columns=UNIT_BREAKDOWN_COLUMNS, index=pd.Index([], name="unit"))

    df = reviews_df.copy()
    df["reviewed"] = df["review_count"] > 0
    df["mastered"] = df["blending_mastered"].astype(bool)
    df["in_progress"] = df["reviewed"] & ~df["mastered"]
    df["weighted_smoothness"] = df["avg_smoothness_score"] * df["review_count"]

    grouped = df.groupby("unit").agg(
        words=("word", "count"),
        mastered=("mastered", "sum"),
        in_progress=("in_progress", "sum"),
        reviews=("review_count", "sum"),
        weighted_smoothness=("weighted_smoothness", "sum"),
    )
    reviews = grouped["reviews"].where(grouped["reviews"] > 0)
    grouped["avg_smoothness"] = (grouped["weighted_smoothness"] / reviews).fillna(0.0)

    return grouped[UNIT_BREAKDOWN_COLUMNS].astype(
        {"words": "int64", "mastered": "int64", "in_progress": "int64", "reviews": "int64"}
    )


def compute_due_now(reviews_df: pd.DataFrame, now: datetime) -> int:
    """
    Count reviewed, unmastered words whose next review is due.
    """
    if reviews_df.empty:
        return 0
    due = (
        (reviews_df["review_count"] > 0)
        & ~reviews_df["blending_mastered"].astype(bool)
        & (reviews_df["next_due_at"] <= pd.Timestamp(now))
    )
    return int(due.sum())


def compute_struggling_words(reviews_df: pd.DataFrame, limit: int = 5) -> list[str]:
    """
    Unmastered words with more failures than successes, roughest first.
    """
    if reviews_df.empty:
        return []
    struggling = reviews_df[
        (reviews_df["failure_count"] > reviews_df["success_count"])
        & ~reviews_df["blending_mastered"].astype(bool)
    ]
    ordered = struggling.sort_values(["avg_smoothness_score", "word"])
    return ordered["word"].head(limit).tolist()
