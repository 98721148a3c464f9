"""Tests for the static unit catalog."""

from __future__ import annotations

import dataclasses

import pytest

from warplan.game.units import (
    TRAINING_TIME_REDUCTION_BARRACKS,
    TRAINING_TIME_REDUCTION_COMMON,
    TRIBES,
    TROOP_DATA,
    find_unit,
    find_unit_any_tribe,
    resolve_unit,
    training_time_for_level,
    units_for_tribe,
)


def test_every_tribe_has_ten_units():
    assert len(TROOP_DATA) == 70
    for tribe in TRIBES:
        assert len(units_for_tribe(tribe)) == 10


def test_catalog_rows_are_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        TROOP_DATA[0].speed = 99


def test_all_units_can_move():
    assert all(u.speed > 0 for u in TROOP_DATA)


def test_find_unit_exact():
    u = find_unit("Romans", "Legionnaire")
    assert (u.speed, u.wood, u.clay, u.iron, u.crop) == (6, 120, 100, 150, 30)
    assert u.total_cost == 400
    assert find_unit("Gauls", "Legionnaire") is None


def test_find_unit_any_tribe():
    assert find_unit_any_tribe("Phalanx").tribe == "Gauls"
    assert find_unit_any_tribe("Ram").tribe == "Gauls"
    assert find_unit_any_tribe("") is None
    assert find_unit_any_tribe("Dragon") is None


def test_resolve_unit_falls_back_within_tribe():
    assert resolve_unit("Vikings", "Thrall").unit == "Thrall"
    assert resolve_unit("Vikings", "Nope").unit == "Thrall"
    assert resolve_unit("Atlanteans", "Nope") is None


def test_training_time_tables_cover_twenty_levels():
    assert len(TRAINING_TIME_REDUCTION_COMMON) == 20
    assert len(TRAINING_TIME_REDUCTION_BARRACKS) == 20


@pytest.mark.parametrize(
    "level, expected",
    [(0, 1600), (1, 1600), (2, 1440), (10, round(1600 * 0.3874)), (20, round(1600 * 0.1351)), (25, round(1600 * 0.1351))],
)
def test_training_time_for_level(level, expected):
    assert training_time_for_level(find_unit("Romans", "Legionnaire"), level) == expected
