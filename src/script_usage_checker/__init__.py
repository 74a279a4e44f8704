"""Script usage checker for game-engine projects."""

__version__ = "0.3.0"
