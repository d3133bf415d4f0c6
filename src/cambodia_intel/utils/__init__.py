"""Utility functions for Cambodia Lending Intelligence."""

from .helpers import load_config, setup_logging, freeze, thaw

__all__ = ["load_config", "setup_logging", "freeze", "thaw"]
