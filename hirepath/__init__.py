"""HirePath - candidate assessment, ranking and interview lifecycle."""

__version__ = "0.3.0"
