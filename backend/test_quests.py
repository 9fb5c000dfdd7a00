"""
Tests for the quest book and its wiring into the simulation.
"""

import random

import pytest

from conftest import build_sim, build_state, fixed_random, make_employee
from economy import Simulation
from events import ACHIEVEMENT_ID, QUEST_COMPLETED_ID, QUEST_FAILED_ID
from quests import ProgressSnapshot, Quest, QuestBook


def progress(**overrides):
    fields = dict(
        month=1,
        day=0.0,
        cash=100000.0,
        employee_count=3,
        tech_count=1,
        customer_base=500,
        satisfaction=50.0,
        office_id="garage",
        level=1,
        completed_projects=0,
    )
    fields.update(overrides)
    return ProgressSnapshot(**fields)


def quest(quest_id, condition, reward_type, reward_value, deadline=10.0, penalty=1000.0):
    return Quest(quest_id, quest_id.title(), "", condition, reward_type, reward_value, deadline, penalty)


class TestQuestBook:

    def test_generate_sets_a_deadline(self):
        book = QuestBook(fixed_random(0.0))

        generated = book.generate_quest(current_day=12.0)

        assert generated.id == "satisfaction_90"
        assert generated.deadline == 17.0
        assert book.active_quests == [generated]

    def test_no_duplicate_quests(self):
        book = QuestBook(fixed_random(0.0))
        book.generate_quest(0.0)

        assert book.generate_quest(1.0) is None
        assert len(book.active_quests) == 1

    def test_cash_reward(self):
        book = QuestBook(random.Random(1))
        book.active_quests = [quest("service", "satisfaction_90", "cash", 50000.0)]

        outcomes = book.check_quests(progress(satisfaction=95.0))

        assert len(outcomes) == 1
        assert outcomes[0].cash_delta == 50000.0
        assert outcomes[0].mark_action
        assert outcomes[0].event.id == QUEST_COMPLETED_ID
        assert book.active_quests == []
        assert book.completed_count == 1

    def test_motivation_and_perk_rewards(self):
        book = QuestBook(random.Random(1))
        book.active_quests = [
            quest("hunt", "recruit_tech_3", "motivation", 20.0),
            quest("fund", "cash_500k", "perk", "chef"),
        ]

        outcomes = book.check_quests(progress(tech_count=3, cash=600000.0))

        assert outcomes[0].motivation_delta == 20.0
        assert outcomes[1].unlock_perk == "chef"

    def test_expired_quest_costs_its_penalty(self):
        book = QuestBook(random.Random(1))
        book.active_quests = [quest("service", "satisfaction_90", "cash", 50000.0, deadline=5.0, penalty=15000.0)]

        outcomes = book.check_quests(progress(day=5.0))

        assert outcomes[0].cash_delta == -15000.0
        assert outcomes[0].event.id == QUEST_FAILED_ID
        assert book.active_quests == []
        assert book.completed_count == 0

    def test_pending_quest_stays(self):
        book = QuestBook(random.Random(1))
        book.active_quests = [quest("service", "satisfaction_90", "cash", 50000.0, deadline=5.0)]

        assert book.check_quests(progress(day=4.0)) == []
        assert len(book.active_quests) == 1

    def test_achievements_unlock_once(self):
        book = QuestBook(random.Random(1))
        snapshot = progress(employee_count=5, customer_base=1200)

        first = book.check_achievements(snapshot)
        second = book.check_achievements(snapshot)

        assert [o.event.id for o in first] == [ACHIEVEMENT_ID, ACHIEVEMENT_ID]
        assert second == []
        assert book.achievements == ["team_of_five", "thousand_customers"]

    def test_turn_based_deadline_outlasts_the_next_close(self):
        book = QuestBook(fixed_random(0.0))

        book.on_month(progress(day=30.0, realtime=False))

        assert book.active_quests[0].deadline == 90.0

    def test_realtime_deadline_counts_days(self):
        book = QuestBook(fixed_random(0.0))

        book.on_month(progress(day=30.0))

        assert book.active_quests[0].deadline == 35.0

    def test_month_hook_generates_when_idle(self):
        book = QuestBook(random.Random(3))

        book.on_month(progress())

        assert len(book.active_quests) == 1

    def test_round_trip(self):
        book = QuestBook(random.Random(3))
        book.generate_quest(4.0)
        book.achievements.append("moved_out")
        book.completed_count = 2

        copy = QuestBook(random.Random(0))
        copy.load_dict(book.to_dict())

        assert copy.to_dict() == book.to_dict()


class TestQuestWiring:

    def test_tick_applies_quest_rewards(self):
        book = QuestBook(random.Random(1))
        book.active_quests = [quest("service", "satisfaction_90", "cash", 50000.0, deadline=100.0)]
        state = build_state([make_employee(1)], customers=0)
        sim = build_sim(state, rng=fixed_random(0.9), tracker=book)

        report = sim.apply_tick(0.1)

        assert report.cash_delta > 40000.0
        assert "Objective reached" in [e.name for e in report.events]
        assert book.completed_count == 1

    def test_perk_reward_unlocks_perk(self):
        book = QuestBook(random.Random(1))
        book.active_quests = [quest("fund", "cash_500k", "perk", "chef", deadline=100.0)]
        state = build_state([make_employee(1)], cash=600000.0)
        sim = build_sim(state, rng=fixed_random(0.9), tracker=book)

        sim.apply_tick(0.1)

        assert "chef" in state.company.active_perks

    def test_failed_quest_is_charged(self):
        book = QuestBook(random.Random(1))
        book.active_quests = [quest("service", "satisfaction_90", "cash", 50000.0, deadline=1.0, penalty=15000.0)]
        state = build_state([make_employee(1)], customers=100000)
        sim = build_sim(state, rng=fixed_random(0.9), tracker=book)
        quiet = build_sim(build_state([make_employee(1)], customers=100000), rng=fixed_random(0.9))

        with_quest = sim.apply_tick(0.1).cash_delta
        without = quiet.apply_tick(0.1).cash_delta

        assert with_quest - without == pytest.approx(-15000.0)

    def test_turn_based_quest_survives_a_month(self):
        book = QuestBook(random.Random(3))
        sim = Simulation(rng=random.Random(3), catalogue=[], tracker=book)

        sim.simulate_month()
        assert [q.deadline for q in book.active_quests] == [60.0]
        sim.simulate_month()

        assert QUEST_FAILED_ID not in [e.id for e in sim.event_log.history]
