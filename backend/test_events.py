"""
Tests for the random event roller, event resolution and the event channel.
"""

import random

import pytest

from conftest import build_state, make_employee
from entities import GameEvent
from events import (
    CYBERATTACK_EVENT_ID,
    EVENT_CATALOGUE,
    EventBus,
    EventLog,
    resolve_event,
    roll_random_event,
    system_event,
)


def _event(event_id, probability, type="info", impact=0.0, **kwargs):
    return GameEvent(event_id, f"Event {event_id}", "Something happened.", probability, type, impact, **kwargs)


class TestRoller:

    def test_certain_event_is_always_returned_as_a_copy(self):
        """The catalogue entry never changes even when every copy is edited"""
        catalogue = [_event(1, 0.0), _event(2, 1.0), _event(3, 0.0)]
        original = catalogue[1].description
        rng = random.Random(3)

        for _ in range(100):
            rolled = roll_random_event(catalogue, rng)
            assert rolled.id == 2
            assert rolled is not catalogue[1]
            rolled.description += " (edited)"

        assert catalogue[1].description == original

    def test_nothing_triggers(self):
        catalogue = [_event(1, 0.0), _event(2, 0.0)]
        assert roll_random_event(catalogue, random.Random(1)) is None
        assert roll_random_event([], random.Random(1)) is None

    def test_pick_is_spread_over_triggered_events(self):
        """Several successes: one is drawn uniformly"""
        catalogue = [_event(1, 1.0), _event(2, 1.0), _event(3, 0.0)]
        rng = random.Random(11)

        seen = {roll_random_event(catalogue, rng).id for _ in range(200)}

        assert seen == {1, 2}

    def test_catalogue_is_well_formed(self):
        ids = [e.id for e in EVENT_CATALOGUE]
        assert len(ids) == len(set(ids))
        assert all(0.0 <= e.probability <= 1.0 for e in EVENT_CATALOGUE)


class TestResolution:

    def test_gain_and_loss(self, rng):
        state = build_state([make_employee(1)])

        assert resolve_event(_event(1, 1.0, "gain", 5000.0), state, rng) == 5000.0
        assert resolve_event(_event(8, 1.0, "loss", 3000.0), state, rng) == -3000.0

    def test_cyberattack_is_mitigated_by_tech_staff(self, rng):
        state = build_state([make_employee(i, specialty="tech") for i in range(1, 4)])
        attack = _event(CYBERATTACK_EVENT_ID, 1.0, "loss", 10000.0)

        # tech bonus 0.24
        assert resolve_event(attack, state, rng) == pytest.approx(-7600.0)

    def test_departure_names_the_leaver(self, rng):
        state = build_state([make_employee(1, name="Fatou")])
        event = _event(3, 1.0, "employee_departure")

        assert resolve_event(event, state, rng) == 0.0
        assert state.employees == []
        assert event.description.endswith("(Fatou left the company)")

    def test_departure_with_nobody_left(self, rng):
        state = build_state([])
        event = _event(3, 1.0, "employee_departure")

        resolve_event(event, state, rng)

        assert event.description == "Something happened."

    def test_boost_caps_skill(self, rng):
        state = build_state([make_employee(1, skill_level=5), make_employee(2, skill_level=2)])

        resolve_event(_event(4, 1.0, "boost", 1.0), state, rng)

        assert [e.skill_level for e in state.employees] == [5, 3]

    def test_fixed_cost_increase_is_permanent(self, rng):
        state = build_state()
        before = state.company.fixed_costs

        assert resolve_event(_event(5, 1.0, "fixed_cost_increase", 1000.0), state, rng) == 0.0
        assert state.company.fixed_costs == before + 1000.0

    def test_sabotage_hits_morale_and_cash(self, rng):
        state = build_state([make_employee(1, motivation=5.0), make_employee(2, motivation=60.0)])
        sabotage = _event(6, 1.0, "sabotage", 5000.0, motivation_penalty=10.0)

        assert resolve_event(sabotage, state, rng) == -5000.0
        assert [e.motivation for e in state.employees] == [0.0, 50.0]

    def test_no_event_changes_nothing(self, rng):
        state = build_state([make_employee(1)])
        before = state.to_dict()

        assert resolve_event(None, state, rng) == 0.0
        assert resolve_event(_event(99, 1.0, "mystery", 500.0), state, rng) == 0.0
        assert state.to_dict() == before


class TestEventChannel:

    def test_bus_feeds_the_log(self):
        bus = EventBus()
        log = EventLog()
        bus.subscribe(log.record)

        first = system_event(200, "One", "first")
        second = system_event(201, "Two", "second")
        bus.publish(first)
        bus.publish(second)

        assert log.current_event is second
        assert log.history == [first, second]

        log.dismiss()
        assert log.current_event is None
        assert len(log.history) == 2

    def test_unsubscribe(self):
        bus = EventBus()
        received = []
        bus.subscribe(received.append)
        bus.unsubscribe(received.append)

        bus.publish(system_event(200, "One", "first"))

        assert received == []

    def test_log_round_trip(self):
        log = EventLog()
        log.record(system_event(300, "Objective failed", "expired", type="loss", impact_value=15000.0))

        copy = EventLog.from_dict(log.to_dict())

        assert copy.to_dict() == log.to_dict()
