"""Nova: request bootstrap layer for FastAPI applications."""

__version__ = "5.0.1"
