"""
Configuration layer for gref.

Configuration in gref is:
- Explicit (passed, not global)
- Typed (frozen dataclasses)
- Interpreted in one place (the application service)
"""

from gref.config.settings import (
    MatchConfig,
    GenerationConfig,
    SearchConfig,
    ExportConfig,
    GrefConfig,
)

__all__ = [
    "MatchConfig",
    "GenerationConfig",
    "SearchConfig",
    "ExportConfig",
    "GrefConfig",
]
