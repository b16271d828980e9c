"""
Reusable item detection for the clean queue.

Category and unit are authoritative. The name heuristic only papers over
supplies whose metadata predates category/unit normalisation and can be
switched off with CLEAN_QUEUE_NAME_HEURISTIC_ENABLED=false.
"""

import re

from growledger.core.entities.supply import Supply
from growledger.core.services.units import is_count_unit

_REUSABLE_NAME = re.compile(r"(jar|dish|plate|tray|tub|bottle|flask)", re.IGNORECASE)


def looks_reusable_by_name(name: str | None) -> bool:
    return bool(_REUSABLE_NAME.search(name or ""))


def is_reusable(supply: Supply, use_name_heuristic: bool = True) -> bool:
    """Container or tool, or named like one."""
    if supply.is_reusable:
        return True
    return use_name_heuristic and looks_reusable_by_name(supply.name)


def is_countish(supply: Supply, use_name_heuristic: bool = True) -> bool:
    """Stocked in whole units, or named like something that is."""
    if is_count_unit(supply.unit):
        return True
    return use_name_heuristic and looks_reusable_by_name(supply.name)
