"""good-base: layered configuration for the good-base record store."""

__version__ = "0.1.0"
