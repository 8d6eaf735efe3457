"""Static site generator for portable, self-contained sites."""

__version__ = "0.1.0"
