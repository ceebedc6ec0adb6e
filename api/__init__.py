"""Local HTTP API over the tagged content catalog."""

__version__ = "0.1.0"
