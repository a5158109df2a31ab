# ============================================================================
# FILE: tests/unit/test_composition_splitter.py
# ============================================================================
"""
Unit tests for active / inactive ingredient splitting
"""

import pytest

from medicine_scan.extractors.composition_splitter import is_inactive_line, split_composition
from medicine_scan.records import CompositionBreakdown


def test_split_active_and_inactive():
    result = split_composition("Paracetamol 500mg\nExcipients: Starch\nColour: Red")

    assert result.active_ingredients == "Paracetamol 500mg"
    assert result.inactive_ingredients_excipients == "Excipients: Starch\nColour: Red"


def test_split_preserves_order_and_partitions_every_line():
    block = (
        "Excipients: Lactose\n"
        "Amoxicillin 250 mg\n"
        "Colour: Erythrosine\n"
        "Clavulanic Acid 62.5 mg"
    )
    result = split_composition(block)

    active = result.active_ingredients.split("\n")
    inactive = result.inactive_ingredients_excipients.split("\n")

    assert active == ["Amoxicillin 250 mg", "Clavulanic Acid 62.5 mg"]
    assert inactive == ["Excipients: Lactose", "Colour: Erythrosine"]
    assert sorted(active + inactive) == sorted(block.split("\n"))


def test_split_trims_and_drops_blank_lines():
    result = split_composition("  Ibuprofen 200 mg  \n\n   \n excipient q.s. ")

    assert result.active_ingredients == "Ibuprofen 200 mg"
    assert result.inactive_ingredients_excipients == "excipient q.s."


def test_split_markers_are_case_insensitive():
    assert is_inactive_line("EXCIPIENTS Q.S.")
    assert is_inactive_line("Approved colour used")
    assert not is_inactive_line("Cetirizine 10 mg")


def test_split_only_active():
    result = split_composition("Cetirizine 10 mg")

    assert result.active_ingredients == "Cetirizine 10 mg"
    assert result.inactive_ingredients_excipients is None


@pytest.mark.parametrize("block", [None, "", "  \n \n"])
def test_split_empty_block(block):
    assert split_composition(block) == CompositionBreakdown()
