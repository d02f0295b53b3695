"""
Services shared by the engine and its callers.

- Progress reporting
- Settings persistence
"""

from mediaimport.services.progress import ProgressReporter
from mediaimport.services.settings import (
    ApplicationSettings,
    ImportSettings,
    SettingsManager,
)

__all__ = [
    'ProgressReporter',
    'ApplicationSettings',
    'ImportSettings',
    'SettingsManager',
]
