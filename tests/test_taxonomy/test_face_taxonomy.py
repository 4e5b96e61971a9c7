"""Tests for face taxonomy integrity: enums, wire values, ordering."""

from __future__ import annotations

import pytest

from look_compat.taxonomy.face_taxonomy import (
    IMPACT_AREA_ORDER,
    Confidence,
    Difficulty,
    GateOutcome,
    ImpactArea,
    PreferenceMode,
    ProfileSource,
)

ALL_ENUMS = [ProfileSource, PreferenceMode, Confidence, ImpactArea, Difficulty, GateOutcome]


class TestEnumIntegrity:
    @pytest.mark.parametrize("enum_cls", ALL_ENUMS)
    def test_no_duplicate_values(self, enum_cls):
        values = [m.value for m in enum_cls]
        assert len(values) == len(set(values)), f"{enum_cls.__name__} has duplicate values"

    @pytest.mark.parametrize("enum_cls", ALL_ENUMS)
    def test_slug_format(self, enum_cls):
        for member in enum_cls:
            assert " " not in member.value, f"{enum_cls.__name__}.{member.name} contains spaces"
            assert member.value == member.value.lower()

    def test_str_is_wire_value(self):
        assert str(ImpactArea.LIP) == "lip"
        assert f"{GateOutcome.SOFT_DEGRADE}" == "soft_degrade"


class TestPreferenceMode:
    def test_three_modes(self):
        assert {m.value for m in PreferenceMode} == {"structure", "vibe", "ease"}


class TestImpactAreaOrder:
    def test_order(self):
        assert IMPACT_AREA_ORDER == (ImpactArea.BASE, ImpactArea.EYE, ImpactArea.LIP)

    def test_covers_every_area(self):
        assert set(IMPACT_AREA_ORDER) == set(ImpactArea)


class TestGateOutcome:
    def test_values(self):
        assert {g.value for g in GateOutcome} == {"hard_reject", "soft_degrade", "ok"}
