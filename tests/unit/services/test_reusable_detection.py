"""Tests for reusable item detection."""

import pytest

from growledger.core.entities.supply import Supply
from growledger.core.services.reusable_detection import (
    is_countish,
    is_reusable,
    looks_reusable_by_name,
)


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Quart JAR", True),
        ("Petri dish", True),
        ("Culture bottles", True),
        ("Erlenmeyer flask", True),
        ("Rye grain", False),
        ("", False),
        (None, False),
    ],
)
def test_name_heuristic(name, expected):
    assert looks_reusable_by_name(name) is expected


class TestIsReusable:
    def test_container_category(self):
        assert is_reusable(Supply(name="Tub", category="container", unit="count"))

    def test_tool_category(self):
        assert is_reusable(Supply(name="Scalpel", category="tools"))

    def test_substrate_not_reusable(self):
        assert not is_reusable(Supply(name="Coir", category="substrate"))

    def test_name_fallback(self):
        supply = Supply(name="Mason jar", category=None)
        assert is_reusable(supply)
        assert not is_reusable(supply, use_name_heuristic=False)


class TestIsCountish:
    def test_count_unit(self):
        assert is_countish(Supply(name="Scalpel", unit="pcs"))

    def test_mass_unit(self):
        assert not is_countish(Supply(name="Scalpel", unit="g"))

    def test_name_fallback(self):
        supply = Supply(name="Spawn bag tray", unit="")
        assert is_countish(supply)
        assert not is_countish(supply, use_name_heuristic=False)
