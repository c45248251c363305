"""gardenctl — run commands across a garden of trees."""

__version__ = "0.1.0"
