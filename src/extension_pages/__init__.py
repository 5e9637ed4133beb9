"""Extension Pages - static documentation pages for the extensions catalog."""

__version__ = "0.1.0"
