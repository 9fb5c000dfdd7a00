"""
Tests for board voting, equity operations, the share price and levels.
"""

import random

import pytest

import governance
from conftest import build_sim, build_state, fixed_random, make_employee
from entities import BoardMember
from events import BOARD_GIFT_ID, COST_CUTTING_ID, LEVEL_UP_ID, SELL_INTENT_ID
from governance import BoardDecision


def member(member_id, share, influence=0.2, satisfaction=70.0, personality="balanced"):
    return BoardMember(
        member_id,
        f"Member {member_id}",
        influence=influence,
        satisfaction=satisfaction,
        personality=personality,
        share_percent=share,
    )


def funded_state(**kwargs):
    """A state that passes every raise_funds gate."""
    board = kwargs.pop("board", None) or [member(1, 20.0, satisfaction=75.0), member(2, 10.0)]
    state = build_state([make_employee(1)], board=board, **kwargs)
    state.company.active_perks.update({"coffee", "gym"})
    return state


class TestTally:

    def test_share_majority_passes(self):
        members = [member(1, 60.0), member(2, 40.0)]

        tally = governance.tally_votes(members, {1: "yes", 2: "no"})

        assert tally.approved
        assert tally.support == pytest.approx(60.0)

    def test_share_minority_fails(self):
        members = [member(1, 60.0), member(2, 40.0)]

        tally = governance.tally_votes(members, {1: "no", 2: "yes"})

        assert not tally.approved
        assert tally.support == pytest.approx(40.0)

    def test_exact_half_is_not_enough(self):
        members = [member(1, 50.0), member(2, 50.0)]

        assert not governance.tally_votes(members, {1: "yes", 2: "no"}).approved

    def test_influence_mode_weighs_differently(self):
        members = [member(1, 60.0, influence=0.2), member(2, 40.0, influence=0.8)]
        votes = {1: "yes", 2: "no"}

        assert governance.tally_votes(members, votes, mode="share").approved
        tally = governance.tally_votes(members, votes, mode="influence")
        assert not tally.approved
        assert tally.support == pytest.approx(20.0)

    def test_abstentions_count_against(self):
        members = [member(1, 40.0), member(2, 30.0), member(3, 30.0)]

        assert not governance.tally_votes(members, {1: "yes", 2: "abstain", 3: "no"}).approved

    def test_empty_board_approves(self):
        tally = governance.tally_votes([], {})

        assert tally.approved
        assert tally.support == 100.0

    def test_unknown_mode_approves_nothing(self):
        tally = governance.tally_votes([member(1, 10.0)], {1: "yes"}, mode="seniority")

        assert not tally.approved
        assert tally.support == 0.0


class TestVoting:

    def test_personality_shifts_yes_probability(self):
        conservative = member(1, 10.0, satisfaction=80.0, personality="conservative")
        aggressive = member(2, 10.0, satisfaction=80.0, personality="aggressive")
        balanced = member(3, 10.0, satisfaction=80.0)

        assert governance.yes_probability(conservative, 0.5) == pytest.approx(0.5)
        assert governance.yes_probability(aggressive, 0.5) == pytest.approx(1.0)
        assert governance.yes_probability(balanced, 0.5) == pytest.approx(0.8)

    def test_abstain_band(self):
        """A roll just above p abstains, a roll far above votes no"""
        unhappy = member(1, 10.0, satisfaction=0.0)
        lukewarm = member(2, 10.0, satisfaction=50.0)
        decision = BoardDecision("Open a branch")

        assert governance.cast_votes([unhappy], decision, fixed_random(0.0)) == {1: "abstain"}
        assert governance.cast_votes([lukewarm], decision, fixed_random(0.99)) == {2: "no"}
        assert lukewarm.last_vote == "no"

    def test_approval_applies_effects(self):
        board = [member(1, 30.0, satisfaction=80.0), member(2, 20.0, satisfaction=80.0)]
        state = build_state([make_employee(1, motivation=98.0)], customers=1000, cash=50000.0, board=board)
        decision = BoardDecision("Expand", cash_impact=-10000.0, motivation_impact=5.0, market_share_impact=10.0)
        board[0].last_vote = "yes"
        board[1].last_vote = "no"

        governance.apply_vote_outcome(state, decision, approved=True)

        assert state.company.cash == 40000.0
        assert state.employees[0].motivation == 100.0
        assert state.market.customer_base == 1100
        assert [m.satisfaction for m in board] == [83.0, 81.0]

    def test_rejection_penalties(self):
        board = [member(1, 10.0), member(2, 10.0), member(3, 10.0, satisfaction=3.0)]
        for m, vote in zip(board, ("yes", "abstain", "no")):
            m.last_vote = vote
        state = build_state(board=board)

        governance.apply_vote_outcome(state, BoardDecision("Pivot", cash_impact=5000.0), approved=False)

        assert [m.satisfaction for m in board] == [64.0, 66.0, 1.0]
        assert state.company.cash == 100000.0

    def test_vote_through_the_simulation(self):
        state = build_state(board=[member(1, 30.0, satisfaction=90.0)])
        sim = build_sim(state, rng=fixed_random(0.0))

        outcome = sim.vote(BoardDecision("Bonus budget", cash_impact=-1000.0))

        assert outcome.approved
        assert outcome.votes == {1: "yes"}
        assert state.company.cash == 99000.0
        assert sim.event_log.current_event.name == "Board decision approved"

    def test_unknown_mode_is_rejected_before_voting(self):
        board = [member(1, 30.0, satisfaction=90.0), member(2, 20.0, satisfaction=40.0)]
        state = build_state(board=board)
        sim = build_sim(state, rng=fixed_random(0.0))

        outcome = sim.vote(BoardDecision("Expand", cash_impact=1000.0, mode="unanimous"))

        assert not outcome.approved
        assert outcome.reason == "unknown tally mode 'unanimous'"
        assert outcome.votes == {}
        assert [m.last_vote for m in board] == ["none", "none"]
        assert [m.satisfaction for m in board] == [90.0, 40.0]
        assert state.company.cash == 100000.0
        assert sim.event_log.current_event is None


class TestEquity:

    def test_raise_funds_adds_an_investor(self):
        state = funded_state()

        result = governance.raise_funds(state, random.Random(2))

        assert result.ok
        new_member = state.get_member(result.value)
        assert new_member.share_percent == 5.0
        assert state.company.cash == 200000.0
        assert state.ceo_share == pytest.approx(65.0)
        assert state.company.investor_share == pytest.approx(0.35)

    def test_raise_funds_from_existing_member(self):
        state = funded_state()

        result = governance.raise_funds(state, random.Random(2), member_id=2)

        assert result.ok
        assert state.get_member(2).share_percent == 15.0
        assert len(state.board) == 2

    def test_raise_funds_gates(self):
        risky = funded_state()
        risky.company.active_perks.clear()
        assert governance.raise_funds(risky, random.Random(1)).reason == "strike risk too high to raise funds"

        unhappy = funded_state(board=[member(1, 20.0, satisfaction=30.0)])
        assert governance.raise_funds(unhappy, random.Random(1)).reason == "board satisfaction too low to raise funds"

        diluted = funded_state(board=[member(1, 78.0, satisfaction=80.0)])
        result = governance.raise_funds(diluted, random.Random(1))
        assert result.reason == "CEO ownership would drop below the minimum"
        assert diluted.company.cash == 100000.0

    def test_buy_shares_from_member(self):
        state = funded_state()
        state.company.share_price = 1000.0
        state.company.ceo.personal_balance = 100000.0

        result = governance.buy_shares_from_member(state, 1, 5.0, fixed_random(0.9))

        assert result.ok
        assert result.value == pytest.approx(5500.0)
        assert state.company.ceo.personal_balance == pytest.approx(94500.0)
        assert state.get_member(1).share_percent == 15.0
        assert state.company.investor_share == pytest.approx(0.25)

    def test_member_sold_out_leaves_the_board(self):
        state = funded_state()
        state.company.share_price = 1000.0
        state.company.ceo.personal_balance = 100000.0

        assert governance.buy_shares_from_member(state, 2, 10.0, fixed_random(0.9)).ok
        assert state.get_member(2) is None

    def test_buy_needs_personal_funds(self):
        state = funded_state()
        state.company.share_price = 1000.0

        assert governance.buy_shares_from_member(state, 1, 5.0, fixed_random(0.9)).reason == "insufficient personal funds"

    def test_aggressive_member_may_refuse(self):
        state = funded_state(board=[member(1, 20.0, satisfaction=80.0, personality="aggressive")])
        state.company.share_price = 1000.0
        state.company.ceo.personal_balance = 100000.0

        result = governance.buy_shares_from_member(state, 1, 5.0, fixed_random(0.0))

        assert not result.ok
        assert result.reason.endswith("refused to sell")
        assert state.get_member(1).share_percent == 20.0
        assert state.company.ceo.personal_balance == 100000.0

    def test_sell_shares_to_member(self):
        state = funded_state()
        state.company.share_price = 1000.0

        result = governance.sell_shares_to_member(state, 1, 10.0, fixed_random(0.9))

        assert result.ok
        assert state.company.ceo.personal_balance == pytest.approx(8500.0)
        assert state.ceo_share == pytest.approx(60.0)

    def test_sell_respects_ceo_floor(self):
        state = funded_state()

        result = governance.sell_shares_to_member(state, 1, 55.0, fixed_random(0.9))

        assert result.reason == "CEO ownership would drop below the minimum"

    def test_sell_to_market_pools_buyers(self):
        state = funded_state()
        state.company.share_price = 1000.0

        assert governance.sell_shares_to_market(state, 10.0).value == pytest.approx(8000.0)
        assert governance.sell_shares_to_market(state, 5.0).ok

        public = [m for m in state.board if m.name == governance.PUBLIC_FLOAT_NAME]
        assert len(public) == 1
        assert public[0].share_percent == 15.0
        assert state.ceo_share == pytest.approx(55.0)

    def test_buyback_uses_company_cash(self):
        state = funded_state()
        state.company.share_price = 1000.0

        result = governance.buyback_shares(state, 1, 5.0, fixed_random(0.9))

        assert result.ok
        assert state.company.cash == pytest.approx(94000.0)
        assert state.get_member(1).share_percent == 15.0

    def test_ownership_always_sums_to_one_hundred(self, new_state):
        rng = random.Random(8)
        new_state.company.active_perks.update({"coffee", "gym"})
        new_state.company.ceo.personal_balance = 1000000.0

        governance.raise_funds(new_state, rng)
        governance.sell_shares_to_market(new_state, 5.0)
        governance.buy_shares_from_member(new_state, 1, 5.0, rng)

        total = new_state.ceo_share + sum(m.share_percent for m in new_state.board)
        assert total == pytest.approx(100.0)
        assert new_state.ceo_share >= 20.0


class TestSharePrice:

    def test_price_formula(self):
        state = build_state([], cash=0.0)

        # score 30 (equipment) + 150 (board) = 180
        expected = 10000.0 * 1.0 * 0.68 * 1.2 * 0.7
        assert governance.compute_share_price(state) == pytest.approx(expected)

    def test_jitter_stays_within_two_percent(self, rng):
        state = build_state([make_employee(1)], customers=500)
        base = governance.compute_share_price(state)

        for _ in range(50):
            price = governance.update_share_price(state, rng)
            assert base * 0.98 <= price <= base * 1.02

    def test_history_is_bounded(self, rng):
        state = build_state([make_employee(1)])

        for _ in range(30):
            governance.update_share_price(state, rng)

        history = state.company.share_price_history
        assert len(history) == 24
        assert history[-1] == round(state.company.share_price, 2)

    def test_unrecorded_update(self, rng):
        state = build_state([make_employee(1)])

        governance.update_share_price(state, rng, record=False)

        assert state.company.share_price_history == []

    def test_price_has_a_floor(self):
        state = build_state([], cash=-10000000.0)
        state.market.satisfaction = 0.0

        assert governance.compute_share_price(state, jitter=0.0) == 1.0


class TestAutonomousBoard:

    def test_unhappy_major_holder_cuts_costs(self):
        state = build_state(board=[member(1, 20.0, satisfaction=20.0)])

        events = governance.autonomous_actions(state, 1.0, fixed_random(0.0))

        ids = [e.id for e in events]
        assert COST_CUTTING_ID in ids
        assert SELL_INTENT_ID in ids
        assert state.company.cash == 90000.0

    def test_delighted_member_sends_a_gift(self):
        state = build_state(board=[member(1, 5.0, satisfaction=95.0)])

        events = governance.autonomous_actions(state, 1.0, fixed_random(0.0))

        assert BOARD_GIFT_ID in [e.id for e in events]
        assert COST_CUTTING_ID not in [e.id for e in events]
        assert state.company.cash == 105000.0

    def test_quiet_board(self):
        state = build_state(board=[member(1, 20.0, satisfaction=20.0), member(2, 5.0, satisfaction=95.0)])

        assert governance.autonomous_actions(state, 1.0, fixed_random(0.99)) == []
        assert state.company.cash == 100000.0


class TestLevels:

    @pytest.mark.parametrize("completed,level", [(0, 1), (2, 1), (3, 2), (6, 3), (10, 4)])
    def test_business_level(self, completed, level):
        assert governance.business_level(completed) == level

    def test_level_up_announces_offices(self):
        state = build_state()
        state.company.completed_projects = 3
        received = []

        class Bus:
            def publish(self, event):
                received.append(event)

        assert governance.check_level_up(state, Bus())
        assert state.company.level == 2
        assert received[0].id == LEVEL_UP_ID
        assert "Open Space" in received[0].description

    def test_level_never_drops(self):
        state = build_state()
        state.company.level = 3

        assert not governance.check_level_up(state)
        assert state.company.level == 3
