"""Securities quote client: market data model, simulated and JSON feeds, quote table, charts and a terminal view."""

__version__ = "1.0.0"
__all__ = ["__version__"]