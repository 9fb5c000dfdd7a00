"""
Governance & Capital

Board voting, equity transactions between the CEO and board members,
the share price model, autonomous board behaviour and business level-ups.

Every function here works on a ``CompanyState`` passed in by the caller
and draws randomness from the caller's rng.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from catalogue import INVESTOR_NAMES, offices_unlocked_at
from config import CONFIG, SimulationConfig
from entities import PERSONALITIES, ActionResult, BoardMember, GameEvent, clamp
from events import (
    BOARD_DECISION_ID,
    BOARD_GIFT_ID,
    BUY_OFFER_ID,
    COST_CUTTING_ID,
    FUNDS_RAISED_ID,
    LEVEL_UP_ID,
    SELL_INTENT_ID,
    system_event,
)

logger = logging.getLogger(__name__)

PUBLIC_FLOAT_NAME = "Public Float"
TALLY_MODES = ("share", "influence")


@dataclass(slots=True)
class BoardDecision:
    """A strategic proposal put to the board."""

    title: str
    cash_impact: float = 0.0
    motivation_impact: float = 0.0
    market_share_impact: float = 0.0  # Percent change of the customer base
    risk: float = 0.0  # 0 (safe) to 1 (reckless)
    required_support: Optional[float] = None  # Percent; defaults to the approval threshold
    mode: str = "share"  # share | influence


@dataclass(slots=True)
class VoteTally:
    approved: bool
    support: float  # Percent of the weight that voted yes


@dataclass(slots=True)
class VoteOutcome:
    decision: BoardDecision
    approved: bool
    support: float
    votes: Dict[int, str] = field(default_factory=dict)
    reason: str = ""  # Set when the decision never reached a vote


def _publish(bus, event: GameEvent) -> None:
    if bus is not None:
        bus.publish(event)


# ---------------------------------------------------------------------------
# Voting
# ---------------------------------------------------------------------------

def yes_probability(member: BoardMember, risk: float, config: SimulationConfig = CONFIG) -> float:
    governance = config.governance
    probability = member.satisfaction / 100.0
    if member.personality == "conservative":
        probability -= risk * governance.conservative_risk_penalty
    elif member.personality == "aggressive":
        probability += risk * governance.aggressive_risk_bonus
    return clamp(probability, 0.0, 1.0)


def cast_votes(
    members: List[BoardMember],
    decision: BoardDecision,
    rng,
    config: SimulationConfig = CONFIG,
) -> Dict[int, str]:
    """Each member rolls once; below p is yes, the next band abstains."""
    votes: Dict[int, str] = {}
    band = config.governance.abstain_band
    for member in members:
        probability = yes_probability(member, decision.risk, config)
        roll = rng.random()
        if roll < probability:
            vote = "yes"
        elif roll < probability + band:
            vote = "abstain"
        else:
            vote = "no"
        member.last_vote = vote
        votes[member.id] = vote
    return votes


def tally_votes(
    members: List[BoardMember],
    votes: Dict[int, str],
    mode: str = "share",
    threshold: float = 50.0,
) -> VoteTally:
    """
    Weigh the yes votes by share percentage or by influence.

    The decision passes when yes support strictly exceeds ``threshold``
    percent of the total weight. A board without weight approves anything
    and an unknown mode approves nothing.
    """
    if mode not in TALLY_MODES:
        return VoteTally(approved=False, support=0.0)

    def weight(member: BoardMember) -> float:
        return member.share_percent if mode == "share" else member.influence

    total = sum(weight(m) for m in members)
    if total <= 0:
        return VoteTally(approved=True, support=100.0)

    yes = sum(weight(m) for m in members if votes.get(m.id) == "yes")
    support = yes / total * 100.0
    return VoteTally(approved=support > threshold, support=support)


def apply_vote_outcome(state, decision: BoardDecision, approved: bool, config: SimulationConfig = CONFIG) -> None:
    governance = config.governance
    if approved:
        state.update_cash(decision.cash_impact)
        if decision.motivation_impact:
            for e in state.employees:
                e.motivation = clamp(e.motivation + decision.motivation_impact, 0.0, 100.0)
        if decision.market_share_impact:
            delta = round(state.market.customer_base * decision.market_share_impact / 100.0)
            state.update_customer_base(int(delta))
        for member in state.board:
            bonus = governance.approval_yes_bonus if member.last_vote == "yes" else governance.approval_other_bonus
            member.satisfaction = clamp(member.satisfaction + bonus, 0.0, 100.0)
    else:
        penalties = {
            "yes": governance.rejection_yes_penalty,
            "abstain": governance.rejection_abstain_penalty,
            "no": governance.rejection_no_penalty,
        }
        for member in state.board:
            penalty = penalties.get(member.last_vote, governance.rejection_no_penalty)
            member.satisfaction = clamp(member.satisfaction - penalty, 0.0, 100.0)
    state.refresh_governance()


def submit_decision(state, decision: BoardDecision, rng, bus=None, config: SimulationConfig = CONFIG) -> VoteOutcome:
    """Put ``decision`` to a vote and apply the result."""
    if decision.mode not in TALLY_MODES:
        logger.debug("Decision '%s' rejected: unknown tally mode %r", decision.title, decision.mode)
        return VoteOutcome(decision=decision, approved=False, support=0.0, reason=f"unknown tally mode {decision.mode!r}")
    votes = cast_votes(state.board, decision, rng, config)
    threshold = decision.required_support
    if threshold is None:
        threshold = config.governance.approval_threshold
    tally = tally_votes(state.board, votes, mode=decision.mode, threshold=threshold)
    apply_vote_outcome(state, decision, tally.approved, config)

    verdict = "approved" if tally.approved else "rejected"
    logger.info("Board %s '%s' with %.1f%% support", verdict, decision.title, tally.support)
    _publish(bus, system_event(
        BOARD_DECISION_ID,
        f"Board decision {verdict}",
        f"'{decision.title}' was {verdict} with {tally.support:.0f}% support.",
        type="info",
        icon="gavel",
    ))
    return VoteOutcome(decision=decision, approved=tally.approved, support=tally.support, votes=votes)


# ---------------------------------------------------------------------------
# Equity operations
# ---------------------------------------------------------------------------

def _reject(reason: str) -> ActionResult:
    logger.debug("Equity operation rejected: %s", reason)
    return ActionResult.rejected(reason)


def _refuses(member: BoardMember, rng, config: SimulationConfig) -> bool:
    governance = config.governance
    if member.satisfaction < governance.refusal_satisfaction_threshold:
        return rng.random() < governance.refusal_chance_dissatisfied
    if member.personality == "aggressive":
        return rng.random() < governance.refusal_chance_aggressive
    return False


def _new_member(state, name: str, personality: str, share_percent: float, config: SimulationConfig) -> BoardMember:
    member = BoardMember(
        id=state.next_member_id,
        name=name,
        influence=config.governance.new_member_influence,
        satisfaction=config.governance.new_member_satisfaction,
        personality=personality,
        share_percent=share_percent,
    )
    state.next_member_id += 1
    state.board.append(member)
    return member


def _drop_empty_members(state) -> None:
    state.board = [m for m in state.board if m.share_percent > 1e-9]


def raise_funds(state, rng, member_id: Optional[int] = None, bus=None, config: SimulationConfig = CONFIG) -> ActionResult:
    """Issue one fixed tranche of equity for cash to a new or existing member."""
    governance = config.governance
    if state.strike_risk() > governance.raise_funds_max_strike_risk:
        return _reject("strike risk too high to raise funds")
    if state.company.board_satisfaction < governance.raise_funds_min_board_satisfaction:
        return _reject("board satisfaction too low to raise funds")
    if state.ceo_share - governance.raise_funds_equity < governance.ceo_min_share:
        return _reject("CEO ownership would drop below the minimum")

    if member_id is not None:
        member = state.get_member(member_id)
        if member is None:
            return _reject(f"board member {member_id} not found")
        member.share_percent += governance.raise_funds_equity
    else:
        taken = {m.name for m in state.board}
        names = [n for n in INVESTOR_NAMES if n not in taken] or INVESTOR_NAMES
        member = _new_member(
            state,
            rng.choice(names),
            rng.choice(PERSONALITIES),
            governance.raise_funds_equity,
            config,
        )

    state.update_cash(governance.raise_funds_amount)
    state.refresh_governance()
    _publish(bus, system_event(
        FUNDS_RAISED_ID,
        "Funds raised",
        f"{member.name} invested {governance.raise_funds_amount:,.0f} for {governance.raise_funds_equity:.0f}% equity.",
        type="gain",
        impact_value=governance.raise_funds_amount,
        icon="bank",
    ))
    return ActionResult.accepted(member.id)


def buy_shares_from_member(state, member_id: int, percent: float, rng, config: SimulationConfig = CONFIG) -> ActionResult:
    """The CEO buys equity from a member with personal money, plus a fee."""
    member = state.get_member(member_id)
    if member is None:
        return _reject(f"board member {member_id} not found")
    if percent <= 0 or percent > member.share_percent:
        return _reject("invalid share amount")
    price = state.company.share_price * percent * (1 + config.governance.buy_fee)
    if state.company.ceo.personal_balance < price:
        return _reject("insufficient personal funds")
    if _refuses(member, rng, config):
        return _reject(f"{member.name} refused to sell")

    state.company.ceo.personal_balance -= price
    member.share_percent -= percent
    _drop_empty_members(state)
    state.refresh_governance()
    return ActionResult.accepted(price)


def sell_shares_to_member(state, member_id: int, percent: float, rng, config: SimulationConfig = CONFIG) -> ActionResult:
    """The CEO sells equity to a member, minus a transaction haircut."""
    member = state.get_member(member_id)
    if member is None:
        return _reject(f"board member {member_id} not found")
    if percent <= 0:
        return _reject("invalid share amount")
    if state.ceo_share - percent < config.governance.ceo_min_share:
        return _reject("CEO ownership would drop below the minimum")
    if _refuses(member, rng, config):
        return _reject(f"{member.name} refused to buy")

    proceeds = state.company.share_price * percent * (1 - config.governance.sell_to_member_haircut)
    state.company.ceo.personal_balance += proceeds
    member.share_percent += percent
    state.refresh_governance()
    return ActionResult.accepted(proceeds)


def sell_shares_to_market(state, percent: float, config: SimulationConfig = CONFIG) -> ActionResult:
    """The CEO floats equity on the market; the buyers sit as one member."""
    if percent <= 0:
        return _reject("invalid share amount")
    if state.ceo_share - percent < config.governance.ceo_min_share:
        return _reject("CEO ownership would drop below the minimum")

    proceeds = state.company.share_price * percent * (1 - config.governance.sell_to_market_haircut)
    state.company.ceo.personal_balance += proceeds
    public = next((m for m in state.board if m.name == PUBLIC_FLOAT_NAME), None)
    if public is None:
        _new_member(state, PUBLIC_FLOAT_NAME, "balanced", percent, config)
    else:
        public.share_percent += percent
    state.refresh_governance()
    return ActionResult.accepted(proceeds)


def buyback_shares(state, member_id: int, percent: float, rng, config: SimulationConfig = CONFIG) -> ActionResult:
    """The company buys a member's equity back at a premium, out of company cash."""
    member = state.get_member(member_id)
    if member is None:
        return _reject(f"board member {member_id} not found")
    if percent <= 0 or percent > member.share_percent:
        return _reject("invalid share amount")
    cost = state.company.share_price * percent * (1 + config.governance.buyback_premium)
    if state.company.cash < cost:
        return _reject("insufficient funds")
    if _refuses(member, rng, config):
        return _reject(f"{member.name} refused the buyback")

    state.update_cash(-cost)
    member.share_percent -= percent
    _drop_empty_members(state)
    state.refresh_governance()
    return ActionResult.accepted(cost)


# ---------------------------------------------------------------------------
# Share price
# ---------------------------------------------------------------------------

def compute_share_price(state, jitter: float = 1.0, config: SimulationConfig = CONFIG) -> float:
    governance = config.governance
    cash_health = clamp(1.0 + state.company.cash / governance.share_price_cash_reference, 0.5, 2.0)
    score_factor = 0.5 + state.general_score / 1000.0
    satisfaction_factor = 0.8 + state.market.satisfaction / 250.0
    productivity_factor = 0.7 + min(state.productivity, 5.0) / 5.0 * 0.6
    price = (
        governance.share_price_base
        * cash_health
        * score_factor
        * satisfaction_factor
        * productivity_factor
        * jitter
    )
    return max(governance.share_price_floor, price)


def update_share_price(state, rng, record: bool = True, config: SimulationConfig = CONFIG) -> float:
    """Reprice the share; ``record`` appends the sample to the bounded history."""
    spread = config.governance.share_price_jitter
    price = compute_share_price(state, rng.uniform(1 - spread, 1 + spread), config)
    state.company.share_price = price
    if record:
        history = state.company.share_price_history
        history.append(round(price, 2))
        del history[:-config.governance.share_history_length]
    return price


# ---------------------------------------------------------------------------
# Autonomous behaviour and levels
# ---------------------------------------------------------------------------

def autonomous_actions(state, day_fraction: float, rng, bus=None, config: SimulationConfig = CONFIG) -> List[GameEvent]:
    """
    Let board members act on their own for ``day_fraction`` of a month.

    Cost cutting and gifts move cash; buy and sell offers are only
    announced.
    """
    governance = config.governance
    days = day_fraction * config.time.days_per_month
    emitted: List[GameEvent] = []

    for member in list(state.board):
        if (
            member.satisfaction < governance.cost_cutting_satisfaction
            and member.share_percent > governance.cost_cutting_min_share
            and rng.random() < governance.cost_cutting_chance_per_day * days
        ):
            state.update_cash(-governance.cost_cutting_penalty)
            emitted.append(system_event(
                COST_CUTTING_ID,
                "Forced cost cutting",
                f"{member.name} imposed an emergency savings plan.",
                type="loss",
                impact_value=governance.cost_cutting_penalty,
                icon="scissors",
            ))

        if member.satisfaction > governance.gift_satisfaction and rng.random() < governance.gift_chance_per_day * days:
            state.update_cash(governance.gift_amount)
            emitted.append(system_event(
                BOARD_GIFT_ID,
                "Shareholder gift",
                f"{member.name} is delighted and injected some cash.",
                type="gain",
                impact_value=governance.gift_amount,
                icon="gift",
            ))

        if rng.random() < governance.offer_chance_per_day * days:
            if member.personality == "aggressive" or member.satisfaction >= governance.refusal_satisfaction_threshold:
                price = state.company.share_price * (1 + governance.offer_premium)
                emitted.append(system_event(
                    BUY_OFFER_ID,
                    "Share purchase offer",
                    f"{member.name} offers {price:,.0f} per share for more equity.",
                    icon="chart-up",
                ))
            else:
                price = state.company.share_price * (1 - governance.offer_premium)
                emitted.append(system_event(
                    SELL_INTENT_ID,
                    "Shareholder wants out",
                    f"{member.name} is ready to sell at {price:,.0f} per share.",
                    icon="chart-down",
                ))

    for event in emitted:
        _publish(bus, event)
    return emitted


def business_level(completed_projects: int, config: SimulationConfig = CONFIG) -> int:
    return completed_projects // config.governance.projects_per_level + 1


def check_level_up(state, bus=None, config: SimulationConfig = CONFIG) -> bool:
    """Raise the company level when enough projects are done; never lowers it."""
    level = business_level(state.company.completed_projects, config)
    if level <= state.company.level:
        return False

    previous = state.company.level
    state.company.level = level
    unlocked = [o.name for lvl in range(previous + 1, level + 1) for o in offices_unlocked_at(lvl)]
    description = f"The company reached level {level}."
    if unlocked:
        description += " New offices available: " + ", ".join(unlocked) + "."
    logger.info("Company level %d -> %d", previous, level)
    _publish(bus, system_event(LEVEL_UP_ID, "Level up", description, icon="trophy"))
    return True
