"""Static reference tables (sectors, frameworks, yield bands).

Tables live as YAML under config/data/ and are loaded once per process,
then deep-frozen so callers cannot mutate them.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

from ..utils.helpers import freeze, load_yaml

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"

REFERENCE_TABLES = (
    "business",
    "due_diligence",
    "investment",
    "loan_servicing",
    "market_research",
    "real_estate",
    "resources",
)


@lru_cache(maxsize=None)
def get_reference_table(name: str) -> Mapping[str, Any]:
    """
    Load a reference table by name.

    Args:
        name: Table name, one of REFERENCE_TABLES

    Returns:
        Read-only mapping
    """
    if name not in REFERENCE_TABLES:
        raise KeyError(f"Unknown reference table: {name}")

    table = freeze(load_yaml(DATA_DIR / f"{name}.yaml"))
    logger.debug(f"Loaded reference table '{name}' ({len(table)} sections)")
    return table


def preload_reference_tables() -> None:
    """Load every table up front (called at application start)."""
    for name in REFERENCE_TABLES:
        get_reference_table(name)
