"""Versions, catalogues, metadata, options and wizard logic for a Talos image factory."""

__version__ = "0.1.0"