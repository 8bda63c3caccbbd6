"""Personal cookbook: recipe ingestion, normalization, transfer and scaling."""

__version__ = "0.3.0"
