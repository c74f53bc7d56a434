"""Natural-language to catalog-operation routing engine."""

__version__ = "0.1.0"
