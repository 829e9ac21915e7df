"""PolicyTree: a generic decision tree engine for business policies."""

__version__ = "0.1.0"
