"""commitgate - regex commit-message gate for git reference updates."""

__version__ = "0.1.0"
