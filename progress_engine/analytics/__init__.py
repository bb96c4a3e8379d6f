"""
Analytics package exports.
"""

from progress_engine.analytics.service import build_blending_dashboard
from progress_engine.analytics.types import BlendingDashboardData

__all__ = [
    "build_blending_dashboard",
    "BlendingDashboardData",
]
