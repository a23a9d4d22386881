"""Query engine for the TACO Brazilian food composition table."""

__version__ = "1.0.0"
