"""
Adaptive-progress engine for early literacy practice.

Subpackages:
    mastery      per-item mastery, XP, stars and levels
    progress     ProgressStore (items, lessons, units, global XP and streak)
    review       WordReviewScheduler (spaced repetition for blending)
    session      auto-flow / menu session plans and SessionController
    persistence  snapshot stores (in-memory or SQLAlchemy)
    analytics    parent dashboard aggregation
"""
