"""Server-side game room engine for the Great Dalmuti card game."""

__version__ = "1.0.0"
