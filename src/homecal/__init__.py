"""homecal - personal calendar with recurring events."""

__version__ = "0.1.0"
