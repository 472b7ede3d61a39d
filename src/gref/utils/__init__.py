"""
Numeric helpers shared by scoring and service statistics.
"""

from gref.utils.helpers import safe_mean

__all__ = [
    "safe_mean",
]
