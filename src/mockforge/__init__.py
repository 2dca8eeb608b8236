"""Template-driven mock REST endpoints backed by synthetic data."""

__version__ = "0.1.0"
