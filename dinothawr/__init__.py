"""Audio mixing, bitmap fonts, game rules and progress tracking for an ice-sliding puzzle game."""

__version__ = "0.1.0"
__all__ = ["conversion", "strings", "cpu", "mixer", "font", "game", "progress"]