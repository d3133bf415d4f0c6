"""Cambodia Lending Intelligence - wealth advisory and private lending analysis."""

__version__ = "1.0.0"
