"""Version information for the Player Panel plugin."""

__version__ = "0.4.0"
