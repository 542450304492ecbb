"""FindOrigin: finds likely original sources for a piece of text."""

__version__ = "1.0.0"
