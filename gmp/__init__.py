"""git-multi-push: batch commit & push or clone across many repositories."""

__version__ = "0.1.0"
