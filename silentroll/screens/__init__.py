"""
TUI Screens for SilentRoll
"""
from .loading import LoadingScreen
from .console import RollConsoleScreen, render_stats

__all__ = [
    'LoadingScreen',
    'RollConsoleScreen',
    'render_stats',
]
