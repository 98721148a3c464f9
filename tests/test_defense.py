"""Tests for the reinforcement (defense) planner."""

from __future__ import annotations

from warplan.game.defense import DefenderVillage, plan_reinforcements
from warplan.game.travel import Coordinate, format_utc

NOW = "2024-01-01T11:00:00Z"
ARRIVAL = "2024-01-01T12:00:00Z"


def _villages():
    far = DefenderVillage(id="far", name="Far", position=Coordinate(150, 0))
    near = DefenderVillage(id="near", name="Near", position=Coordinate(0, 0))
    return [far, near]


def test_only_fast_units_make_it_in_time():
    """10 tiles in under an hour needs a speed above 10."""
    results = plan_reinforcements(_villages(), Coordinate(10, 0), ARRIVAL, now=NOW)

    assert [r.village.id for r in results] == ["near", "far"]
    near = results[0]
    assert near.distance == 10
    on_time = sorted(u.unit_name for u in near.units if u.on_time)
    assert on_time == ["Equites Imperatoris", "Equites Legati"]
    assert near.possible_count == 2
    assert results[1].possible_count == 0


def test_unit_leaving_exactly_now_is_late():
    results = plan_reinforcements(_villages(), Coordinate(10, 0), ARRIVAL, now=NOW)
    caesaris = next(u for u in results[0].units if u.unit_name == "Equites Caesaris")
    assert format_utc(caesaris.launch) == NOW
    assert caesaris.on_time is False


def test_war_standard_speeds_everyone_up():
    results = plan_reinforcements(
        _villages(), Coordinate(10, 0), ARRIVAL, now=NOW, standard_bonus_pct=100
    )
    # doubled speed: anything faster than 5 tiles/h arrives
    assert results[0].possible_count == 5


def test_boots_only_matter_past_the_threshold():
    plain = plan_reinforcements(_villages(), Coordinate(10, 0), ARRIVAL, now=NOW)
    booted = plan_reinforcements(_villages(), Coordinate(10, 0), ARRIVAL, now=NOW, boots_bonus_pct=50)
    assert [u.travel_seconds for u in plain[0].units] == [u.travel_seconds for u in booted[0].units]
    assert booted[1].units[0].travel_seconds < plain[1].units[0].travel_seconds


def test_each_village_uses_its_own_tribe_and_ts():
    villages = [
        DefenderVillage(id="g", name="G", position=Coordinate(0, 0), tribe="Gauls", ts_level=10),
    ]
    results = plan_reinforcements(villages, Coordinate(100, 0), ARRIVAL, now=NOW)
    assert [u.unit_name for u in results[0].units][0] == "Phalanx"
    # Phalanx speed 7, TS 10 -> x3 after 20 tiles
    assert results[0].units[0].travel_seconds == round((20 / 7 + 80 / 21) * 3600)


def test_invalid_arrival_gives_no_plan():
    assert plan_reinforcements(_villages(), Coordinate(0, 0), "soon", now=NOW) == []


def test_unparseable_now_falls_back_to_the_clock():
    results = plan_reinforcements(_villages(), Coordinate(10, 0), "2999-01-01T00:00:00Z", now="around noon")
    assert results[0].possible_count == 10


def test_village_with_non_numeric_coordinates_is_skipped():
    villages = _villages() + [DefenderVillage(id="lost", name="Lost", position=Coordinate(float("nan"), 0))]
    results = plan_reinforcements(villages, Coordinate(10, 0), ARRIVAL, now=NOW)
    assert [r.village.id for r in results] == ["near", "far"]
