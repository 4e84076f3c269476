"""Discord bot for Influence asteroids and wallet verification."""

__version__ = "0.1.0"
