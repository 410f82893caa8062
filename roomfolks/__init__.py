"""roomfolks - a plugin-driven Matrix bot host."""

__version__ = "0.1.0"
__logo__ = "🏠"
