# ============================================================================
# src/medicine_scan/extractors/composition_splitter.py
# ============================================================================
"""
Splits a composition block into active and inactive ingredient lines.
"""

from typing import List, Optional, Sequence

from ..records import CompositionBreakdown

# Lines mentioning these go to the inactive (excipients) block
INACTIVE_MARKERS = ("excipient", "colour")


def is_inactive_line(line: str, markers: Sequence[str] = INACTIVE_MARKERS) -> bool:
    lowered = line.lower()
    return any(marker in lowered for marker in markers)


def split_composition(block: Optional[str]) -> CompositionBreakdown:
    """
    Partition a composition block line by line.

    Every non-blank line lands in exactly one of the two blocks, in its
    original order.
    """
    if not isinstance(block, str):
        return CompositionBreakdown()

    active: List[str] = []
    inactive: List[str] = []

    for line in block.splitlines():
        line = line.strip()
        if not line:
            continue
        if is_inactive_line(line):
            inactive.append(line)
        else:
            active.append(line)

    return CompositionBreakdown(
        active_ingredients="\n".join(active) or None,
        inactive_ingredients_excipients="\n".join(inactive) or None,
    )
