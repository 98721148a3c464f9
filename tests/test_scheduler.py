"""Tests for the attack scheduler: recompute, grouping, mission edits and plan sharing."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from warplan.game.scheduler import (
    GroupMode,
    Mission,
    decode_plan,
    encode_plan,
    group,
    mission_from_village,
    new_mission,
    plan_from_dict,
    plan_to_dict,
    recompute,
    remove_mission,
    update_mission,
)
from warplan.game.travel import Coordinate, format_utc, parse_arrival
from warplan.store import VillageRecord

ARRIVAL = "2024-01-01T12:00:00Z"


def _mission(mid: str, src, dst, unit: str = "Legionnaire", tribe: str = "Romans", ts: int = 0) -> Mission:
    return Mission(
        id=mid,
        label=mid,
        tribe=tribe,
        unit_name=unit,
        ts_level=ts,
        source=Coordinate(*src),
        target=Coordinate(*dst),
    )


# ---------------------------------------------------------------------------
# recompute
# ---------------------------------------------------------------------------

def test_longer_march_launches_first():
    """Legionnaires walk 6 tiles/h: 6 tiles is 1h, 12 tiles is 2h."""
    m1 = _mission("one-hour", (0, 0), (6, 0))
    m2 = _mission("two-hours", (0, 0), (12, 0))

    scheduled = recompute([m1, m2], ARRIVAL)

    assert [s.mission.id for s in scheduled] == ["two-hours", "one-hour"]
    assert format_utc(scheduled[0].launch) == "2024-01-01T10:00:00Z"
    assert format_utc(scheduled[1].launch) == "2024-01-01T11:00:00Z"


def test_scheduled_fields():
    s = recompute([_mission("a", (0, 0), (100, 0))], ARRIVAL)[0]
    assert s.distance == 100
    assert s.travel_seconds == 60000
    assert format_utc(s.launch) == "2023-12-31T19:20:00Z"
    assert format_utc(s.arrival) == "2024-01-01T12:00:00Z"


def test_ties_keep_input_order():
    missions = [_mission(f"m{i}", (0, 0), (6, 0)) for i in range(5)]
    scheduled = recompute(missions, ARRIVAL)
    assert [s.mission.id for s in scheduled] == ["m0", "m1", "m2", "m3", "m4"]


def test_unknown_unit_falls_back_to_first_unit_of_tribe():
    s = recompute([_mission("x", (0, 0), (6, 0), unit="War Elephant", tribe="Gauls")], ARRIVAL)[0]
    assert s.unit.unit == "Phalanx"
    assert s.unit.tribe == "Gauls"


def test_unit_from_another_tribe_is_not_borrowed():
    # Phalanx is Gaulish; a Roman mission asking for it gets Legionnaires
    s = recompute([_mission("x", (0, 0), (6, 0), unit="Phalanx", tribe="Romans")], ARRIVAL)[0]
    assert s.unit.unit == "Legionnaire"


def test_unknown_tribe_is_skipped():
    missions = [
        _mission("ok", (0, 0), (6, 0)),
        _mission("nope", (0, 0), (6, 0), tribe="Atlanteans"),
    ]
    assert [s.mission.id for s in recompute(missions, ARRIVAL)] == ["ok"]


def test_mission_with_non_numeric_coordinates_is_skipped():
    missions = [
        _mission("ok", (0, 0), (6, 0)),
        _mission("broken", (float("nan"), 0), (6, 0)),
    ]
    assert [s.mission.id for s in recompute(missions, ARRIVAL)] == ["ok"]


@pytest.mark.parametrize("arrival", ["", "not a date", None, "2024-02-30T10:00"])
def test_invalid_arrival_means_no_plan(arrival):
    assert recompute([_mission("a", (0, 0), (6, 0))], arrival) == []


def test_recompute_is_deterministic():
    missions = [
        _mission("a", (10, -40), (-190, 170), ts=7),
        _mission("b", (0, 0), (33, 21), unit="Fire Catapult"),
    ]
    first = recompute(missions, ARRIVAL)
    second = recompute(missions, ARRIVAL)
    assert first == second


def test_tournament_square_level_shortens_long_marches():
    slow = recompute([_mission("a", (0, 0), (100, 0), ts=0)], ARRIVAL)[0]
    fast = recompute([_mission("a", (0, 0), (100, 0), ts=20)], ARRIVAL)[0]
    assert fast.travel_seconds == 21600
    assert fast.launch > slow.launch


def test_bonus_per_level_is_configurable():
    s = recompute([_mission("a", (0, 0), (100, 0), ts=20)], ARRIVAL, bonus_per_level=0.1)[0]
    assert s.travel_seconds == round((20 / 6 + 80 / 18) * 3600)


# ---------------------------------------------------------------------------
# group
# ---------------------------------------------------------------------------

@pytest.fixture
def schedule():
    missions = [
        _mission("m1", (0, 0), (6, 0)),     # 1h   -> 11:00
        _mission("m2", (0, 0), (0, 12)),    # 2h   -> 10:00
        _mission("m3", (3, 0), (6, 0)),     # 0.5h -> 11:30
    ]
    return recompute(missions, ARRIVAL)


def test_group_none_is_single_group(schedule):
    groups = group(schedule, GroupMode.NONE)
    assert len(groups) == 1
    assert groups[0][0] == "All"
    assert [s.mission.id for s in groups[0][1]] == ["m2", "m1", "m3"]


def test_group_by_target(schedule):
    groups = group(schedule, "by_target")
    assert [label for label, _ in groups] == ["0|12", "6|0"]
    assert [s.mission.id for s in groups[1][1]] == ["m1", "m3"]


def test_group_by_hour(schedule):
    groups = group(schedule, GroupMode.BY_HOUR)
    assert [label for label, _ in groups] == ["2024-01-01 10:00 UTC", "2024-01-01 11:00 UTC"]
    assert [s.mission.id for s in groups[1][1]] == ["m1", "m3"]


@pytest.mark.parametrize("mode", list(GroupMode))
def test_grouping_keeps_every_mission_once(schedule, mode):
    members = [s for _, ms in group(schedule, mode) for s in ms]
    assert len(members) == len(schedule)
    assert sorted(s.mission.id for s in members) == sorted(s.mission.id for s in schedule)


def test_group_of_empty_schedule():
    assert group([], GroupMode.BY_TARGET) == []
    assert group([], GroupMode.NONE) == [("All", [])]


def test_unknown_group_mode_raises():
    with pytest.raises(ValueError):
        group([], "by_colour")


# ---------------------------------------------------------------------------
# mission editing
# ---------------------------------------------------------------------------

def test_new_mission_copies_last_row():
    first = _mission("a", (1, 2), (3, 4), unit="Imperian", ts=5)
    m = new_mission([first])
    assert m.id != first.id
    assert m.label == "Mission 2"
    assert (m.tribe, m.unit_name, m.ts_level) == ("Romans", "Imperian", 5)
    assert m.source == Coordinate(1, 2)
    assert m.target == Coordinate(3, 4)


def test_new_mission_on_empty_plan():
    m = new_mission([])
    assert m.label == "Mission 1"
    assert m.tribe == "Romans"
    assert m.source == Coordinate(0, 0)


def test_mission_ids_are_unique():
    plan: list[Mission] = []
    for _ in range(20):
        plan.append(new_mission(plan))
    assert len({m.id for m in plan}) == 20


def test_remove_mission_keeps_last_row():
    plan = [_mission("a", (0, 0), (1, 1))]
    assert remove_mission(plan, "a") is False
    assert len(plan) == 1

    plan.append(_mission("b", (0, 0), (1, 1)))
    assert remove_mission(plan, "a") is True
    assert [m.id for m in plan] == ["b"]
    assert remove_mission(plan + [_mission("c", (0, 0), (0, 0))], "zzz") is False


def test_update_mission_parses_coordinates():
    plan = [_mission("a", (5, 5), (9, 9))]
    m = update_mission(plan, "a", source_x="-", source_y="-42", target_x="", ts_level=25, unit_name="Senator")
    assert m is plan[0]
    assert m.source == Coordinate(0, -42)
    assert m.target == Coordinate(0, 9)
    assert m.ts_level == 20
    assert m.unit_name == "Senator"
    assert update_mission(plan, "missing", label="x") is None


def test_mission_from_village_uses_village_defaults():
    village = VillageRecord(id=7, name="15c Capital", x=-12, y=88, ts_level=14)
    m = mission_from_village(village, Coordinate(40, 40), tribe="Teutons", unit_name="Clubswinger")
    assert m.label == "15c Capital"
    assert m.source == Coordinate(-12, 88)
    assert m.ts_level == 14
    assert m.target == Coordinate(40, 40)


# ---------------------------------------------------------------------------
# plan save / share
# ---------------------------------------------------------------------------

def test_plan_link_round_trip():
    missions = [
        _mission("a", (-200, 200), (17, -3), unit="Fire Catapult", ts=12),
        _mission("b", (0, 0), (1, 1), unit="Heimdall’s Eye", tribe="Vikings"),
    ]
    text = encode_plan(missions, "2024-07-14T21:15:30")

    decoded, arrival = decode_plan(text)

    assert decoded == missions
    assert arrival == "2024-07-14T21:15:30"


def test_plan_link_keeps_sub_second_arrival():
    arrival = datetime(2024, 1, 1, 12, 0, 0, 500000, tzinfo=timezone.utc)
    _, text = decode_plan(encode_plan([_mission("a", (1, 2), (3, 4))], arrival))
    assert text == "2024-01-01T12:00:00.500000Z"
    assert parse_arrival(text) == arrival


def test_plan_link_survives_fragment_and_lost_padding():
    missions = [_mission("a", (1, 2), (3, 4))]
    text = encode_plan(missions, ARRIVAL).rstrip("=")
    decoded, arrival = decode_plan("#" + text)
    assert decoded == missions
    assert arrival == ARRIVAL


@pytest.mark.parametrize("text", ["", "!!!not base64!!!", "bm90IGpzb24", "WzEsMiwzXQ"])
def test_bad_plan_link_raises(text):
    with pytest.raises(ValueError):
        decode_plan(text)


def test_plan_dict_accepts_text_coordinates():
    missions, arrival = plan_from_dict(
        {"missions": [{"id": "q", "label": "L", "tribe": "Huns", "unit_name": "Mercenary",
                       "ts_level": 3, "start_x": "-", "start_y": "12", "end_x": "", "end_y": -4}],
         "arrival": ARRIVAL}
    )
    assert missions[0].source == Coordinate(0, 12)
    assert missions[0].target == Coordinate(0, -4)
    assert plan_to_dict(missions, arrival)["missions"][0]["start_y"] == 12
