"""
Economy Simulation Engine

This module implements the simulation coordinator for one company: the
ordered monthly pipeline, the continuous tick engine, and the dispatch of
player actions onto the state store and its subsystems.

All state lives in one ``CompanyState`` and one ``GameState``; all
randomness comes from the single rng handed to the ``Simulation``, so a
seeded run is reproducible.
"""

import inspect
import logging
import math
import random
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

import governance
import projects
from company import CompanyState
from config import CONFIG, SimulationConfig
from entities import ActionResult, GameEvent, MonthlyReport, clamp
from events import (
    BANKRUPTCY_ID,
    EVENT_CATALOGUE,
    STRIKE_RESIGNATION_ID,
    STRIKE_STARTED_ID,
    EventBus,
    EventLog,
    resolve_event,
    roll_random_event,
    system_event,
)
from quests import ProgressSnapshot, ProgressTracker, QuestBook, QuestOutcome

logger = logging.getLogger(__name__)

_EPSILON = 1e-9


@dataclass(slots=True)
class GameState:
    """Game clock and run flags."""

    current_month: int = 1
    current_day: float = 0.0  # Total game days elapsed
    elapsed_seconds: float = 0.0  # Game-clock seconds
    reports: List[MonthlyReport] = field(default_factory=list)
    is_simulating: bool = False
    game_over: bool = False
    game_speed: float = 1.0
    is_paused: bool = True

    def to_dict(self) -> Dict[str, object]:
        return {
            "current_month": self.current_month,
            "current_day": self.current_day,
            "elapsed_seconds": self.elapsed_seconds,
            "reports": [r.to_dict() for r in self.reports],
            "game_over": self.game_over,
            "game_speed": self.game_speed,
            "is_paused": self.is_paused,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameState":
        names = {f.name for f in fields(cls)} - {"reports", "is_simulating"}
        kwargs = {k: v for k, v in data.items() if k in names}
        return cls(reports=[MonthlyReport.from_dict(r) for r in data.get("reports") or []], **kwargs)


@dataclass(slots=True)
class OperatingResult:
    """Operating P&L for a share of a month."""

    revenue: float
    salaries: float
    fixed_costs: float
    variable_costs: float
    marketing: float
    rent: float
    perks: float
    infrastructure: float
    loan_payments: float
    expenses: float
    profit: float
    taxes: float
    net_profit: float


@dataclass(slots=True)
class MonthAccumulator:
    """What the ticks of the current month have booked so far."""

    revenue: float = 0.0
    salaries: float = 0.0
    fixed_costs: float = 0.0
    expenses: float = 0.0
    profit: float = 0.0
    taxes: float = 0.0
    net_profit: float = 0.0
    new_customers: int = 0
    churned_customers: int = 0

    def add(self, result: OperatingResult) -> None:
        self.revenue += result.revenue
        self.salaries += result.salaries
        self.fixed_costs += result.fixed_costs
        self.expenses += result.expenses
        self.profit += result.profit
        self.taxes += result.taxes
        self.net_profit += result.net_profit

    def to_dict(self) -> Dict[str, object]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MonthAccumulator":
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})


@dataclass(slots=True)
class TickReport:
    day_fraction: float
    cash_delta: float = 0.0
    revenue: float = 0.0
    expenses: float = 0.0
    new_customers: int = 0
    churned_customers: int = 0
    strikes_started: List[int] = field(default_factory=list)
    resignations: List[int] = field(default_factory=list)
    completed_projects: List[int] = field(default_factory=list)
    failed_projects: List[int] = field(default_factory=list)
    events: List[GameEvent] = field(default_factory=list)
    month_report: Optional[MonthlyReport] = None


def probabilistic_round(value: float, rng) -> int:
    """Round down, then round up with probability equal to the remainder."""
    whole = math.floor(value)
    return int(whole + (1 if rng.random() < value - whole else 0))


class Simulation:
    """
    One game: company state, clock, rng, event channel and collaborators.

    The host advances it with ``apply_tick`` (real-time play) or
    ``simulate_month`` (turn-based play) and never both at once.
    """

    def __init__(
        self,
        state: Optional[CompanyState] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        config: Optional[SimulationConfig] = None,
        catalogue: Optional[Sequence[GameEvent]] = None,
        tracker: Optional[ProgressTracker] = None,
        save_store=None,
        bus: Optional[EventBus] = None,
    ):
        """
        Args:
            state: Company state; a new game when omitted
            rng: Random source shared by every pipeline step
            seed: Seed for a fresh rng when ``rng`` is omitted
            config: Tunables; the global CONFIG when omitted
            catalogue: Random event table; EVENT_CATALOGUE when omitted
            tracker: Quest/achievement collaborator, optional
            save_store: Autosave collaborator, optional
            bus: Domain event channel; a private one when omitted
        """
        self.config = config or CONFIG
        self.rng = rng if rng is not None else random.Random(seed)
        self.state = state or CompanyState.new_game(self.config)
        self.game = GameState(game_speed=self.config.time.default_game_speed)
        self.catalogue = list(EVENT_CATALOGUE if catalogue is None else catalogue)
        self.tracker = tracker
        self.save_store = save_store
        self.bus = bus or EventBus()
        self.event_log = EventLog()
        self.bus.subscribe(self.event_log.record)
        self.accumulator = MonthAccumulator()
        self.last_price_day = 0
        self._events_seen: List[GameEvent] = []
        self.bus.subscribe(self._events_seen.append)

    @classmethod
    def new_game(cls, seed: Optional[int] = None, config: Optional[SimulationConfig] = None, save_store=None) -> "Simulation":
        """A fresh game with the default event table and quest book."""
        rng = random.Random(seed)
        tracker = QuestBook(rng, (config or CONFIG).time.days_per_month)
        return cls(rng=rng, config=config, tracker=tracker, save_store=save_store)

    # ------------------------------------------------------------------
    # Shared formulas
    # ------------------------------------------------------------------

    @property
    def days_per_month(self) -> int:
        return self.config.time.days_per_month

    @property
    def month_end_day(self) -> float:
        return float(self.game.current_month * self.days_per_month)

    def operating_result(self, day_fraction: float = 1.0, prorated: bool = False) -> OperatingResult:
        """
        Revenue and expenses for ``day_fraction`` of a month.

        ``prorated`` applies the real-time adjustments: equipment
        obsolescence, infrastructure malus and bonus, the investor skim on
        revenue, and loan installments spread over the month.
        """
        state = self.state
        revenue = (
            state.market.customer_base
            * state.company.revenue_per_customer
            * state.productivity
            * state.cycle_multiplier
            * day_fraction
        )
        loan_payments = 0.0
        if prorated:
            revenue *= state.obsolescence_malus(self.game.current_month)
            revenue *= state.infrastructure_malus * state.infrastructure_bonus
            revenue *= 1.0 - state.company.investor_share
            loan_payments = state.total_loan_payments * day_fraction

        costs = {k: v * day_fraction for k, v in state.monthly_expenses().items()}
        expenses = sum(costs.values()) + loan_payments
        profit = revenue - expenses
        taxes = profit * state.company.tax_rate if profit > 0 else 0.0
        return OperatingResult(
            revenue=revenue,
            salaries=costs["salaries"],
            fixed_costs=costs["fixed_costs"],
            variable_costs=costs["variable_costs"],
            marketing=costs["marketing"],
            rent=costs["rent"],
            perks=costs["perks"],
            infrastructure=costs["infrastructure"],
            loan_payments=loan_payments,
            expenses=expenses,
            profit=profit,
            taxes=taxes,
            net_profit=profit - taxes,
        )

    def churn_multiplier(self) -> float:
        market = self.config.market
        satisfaction = self.state.market.satisfaction
        if satisfaction < market.low_satisfaction:
            return market.churn_multiplier_low
        if satisfaction < market.mid_satisfaction:
            return market.churn_multiplier_mid
        return 1.0

    def _grow_competitors(self) -> None:
        competitors = self.state.competitors
        if not competitors:
            return
        cap = self.config.market.competitor_share_cap
        shares = np.array([c.market_share * (1 + c.growth_rate) for c in competitors])
        self._store_competitor_shares(np.minimum(shares, cap))

    def _store_competitor_shares(self, shares: np.ndarray) -> None:
        cap = self.config.market.competitor_share_cap
        total_cap = self.config.market.competitors_total_cap
        shares = np.clip(shares, 0.0, cap)
        total = float(shares.sum())
        if total > total_cap:
            shares = shares * (total_cap / total)
        for competitor, share in zip(self.state.competitors, shares):
            competitor.market_share = float(share)

    def _reroll_cycle(self) -> None:
        market_config = self.config.market
        market = self.state.market
        roll = self.rng.random()
        if roll < market_config.stable_probability:
            market.economic_cycle = "stable"
        elif roll < market_config.stable_probability + market_config.growth_probability:
            market.economic_cycle = "growth"
        else:
            market.economic_cycle = "recession"
        market.cycle_months_remaining = self.rng.randint(market_config.cycle_min_months, market_config.cycle_max_months)
        for specialty in market.demands:
            market.demands[specialty] = self.rng.uniform(0.0, 100.0)
        logger.info("Economic cycle is now %s for %d months", market.economic_cycle, market.cycle_months_remaining)

    def _count_down_boosts(self, days: float) -> None:
        for boost in self.state.boosts:
            boost.remaining_days -= days
        self.state.boosts = [b for b in self.state.boosts if b.remaining_days > 0]

    def _decay_infrastructure(self, day_fraction: float) -> None:
        decay = self.config.infrastructure.decay_per_month * day_fraction
        owned = self.state.company.owned_infrastructure
        for item_id, condition in owned.items():
            owned[item_id] = max(0.0, condition - decay)

    def _advance_training(self, employee, days: float) -> bool:
        if employee.training_days_remaining <= 0:
            return False
        employee.training_days_remaining -= days
        if employee.training_days_remaining > 0:
            return False
        workforce = self.config.workforce
        employee.training_days_remaining = 0.0
        employee.skill_level = min(workforce.max_skill_level, employee.skill_level + 1)
        employee.motivation = min(100.0, employee.motivation + workforce.training_motivation_boost)
        employee.add_opinion("Training done, I feel sharper.", workforce.max_opinions)
        return True

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    def progress_snapshot(self, realtime: bool = True) -> ProgressSnapshot:
        state = self.state
        last_report = self.game.reports[-1].to_dict() if self.game.reports else None
        return ProgressSnapshot(
            month=self.game.current_month,
            day=self.game.current_day,
            cash=state.company.cash,
            employee_count=state.employee_count,
            tech_count=state.specialty_count("tech"),
            customer_base=state.market.customer_base,
            satisfaction=state.market.satisfaction,
            office_id=state.company.current_office_id,
            level=state.company.level,
            completed_projects=state.company.completed_projects,
            fatigue_levels=tuple(e.fatigue for e in state.employees),
            last_report=last_report,
            realtime=realtime,
        )

    def _apply_outcomes(self, outcomes: List[QuestOutcome]) -> None:
        for outcome in outcomes:
            if outcome.cash_delta:
                self.state.update_cash(outcome.cash_delta)
            if outcome.motivation_delta:
                for e in self.state.employees:
                    e.motivation = clamp(e.motivation + outcome.motivation_delta, 0.0, 100.0)
            if outcome.unlock_perk:
                self.state.company.active_perks.add(outcome.unlock_perk)
            if outcome.mark_action:
                self.state.mark_major_action()
            if outcome.event is not None:
                self.bus.publish(outcome.event)

    def _autosave(self) -> None:
        if self.save_store is None or not self.config.persistence.autosave:
            return
        # Deferred: persistence reads the simulation, not the other way round
        from persistence import save_game
        save_game(self, self.save_store)

    def dismiss_event(self) -> None:
        self.event_log.dismiss()

    # ------------------------------------------------------------------
    # Monthly pipeline
    # ------------------------------------------------------------------

    def simulate_month(self, realtime: bool = False) -> Optional[MonthlyReport]:
        """
        Run the monthly pipeline once.

        With ``realtime`` the month is being closed by the tick engine, so
        the steps the ticks already accrued (cash P&L, fatigue and
        motivation drift, customers, depreciation, board moves) are not
        applied a second time and the report is built from the tick totals.

        Returns:
            The month's report, or None when the game is over or a step is
            already running
        """
        if self.game.game_over:
            logger.warning("simulate_month refused: game over")
            return None
        if self.game.is_simulating and not realtime:
            logger.warning("simulate_month refused: a simulation step is already running")
            return None

        owns_flag = not self.game.is_simulating
        self.game.is_simulating = True
        try:
            return self._run_month(realtime)
        finally:
            if owns_flag:
                self.game.is_simulating = False

    def _run_month(self, realtime: bool) -> MonthlyReport:
        state = self.state
        workforce = self.config.workforce
        rng = self.rng

        # 1. Experience
        for e in state.employees:
            e.months_employed += 1
            if e.months_employed % workforce.skill_gain_every_months == 0:
                e.skill_level = min(workforce.max_skill_level, e.skill_level + 1)
            if not realtime:
                self._advance_training(e, float(self.days_per_month))

        if not realtime:
            # 2. Fatigue
            reduction = state.perk_fatigue_reduction
            for e in state.employees:
                gain = rng.uniform(workforce.monthly_fatigue_gain_min, workforce.monthly_fatigue_gain_max)
                e.fatigue = clamp(e.fatigue + gain - reduction, 0.0, 100.0)
                if e.fatigue > workforce.exhaustion_threshold:
                    e.motivation = clamp(e.motivation - workforce.exhaustion_motivation_penalty, 0.0, 100.0)

            # 3. Perk motivation
            boost = state.perk_motivation_boost
            if boost:
                for e in state.employees:
                    e.motivation = clamp(e.motivation + boost, 0.0, 100.0)

        # 4. Productivity
        productivity = state.productivity

        # 5-7. Customers, churn, satisfaction
        if realtime:
            new_customers = self.accumulator.new_customers
            churned = self.accumulator.churned_customers
        else:
            new_customers = state.estimated_new_customers
            state.update_customer_base(new_customers)
            state.apply_market_growth()
            churned = int(round(state.market.customer_base * state.market.churn_rate * self.churn_multiplier()))
            state.update_customer_base(-churned)
        state.market.satisfaction = state.satisfaction_score

        # 8. Economic cycle
        state.market.cycle_months_remaining -= 1
        if state.market.cycle_months_remaining <= 0:
            self._reroll_cycle()

        # 9-11. Revenue, expenses, profit
        if realtime:
            state.process_loan_payments(charge=False)
            acc = self.accumulator
            revenue, salaries, fixed_costs = acc.revenue, acc.salaries, acc.fixed_costs
            expenses, profit, taxes, net_profit = acc.expenses, acc.profit, acc.taxes, acc.net_profit
        else:
            result = self.operating_result(1.0)
            loan_payments = state.process_loan_payments(charge=False)
            revenue, salaries, fixed_costs = result.revenue, result.salaries, result.fixed_costs
            expenses = result.expenses + loan_payments
            profit = revenue - expenses
            taxes = profit * state.company.tax_rate if profit > 0 else 0.0
            net_profit = profit - taxes

        # 12. Event and the month's single cash movement
        event = roll_random_event(self.catalogue, rng)
        event_impact = resolve_event(event, state, rng)
        if event is not None:
            self.bus.publish(event)
        state.update_cash(event_impact + (0.0 if realtime else net_profit))

        # 13. Motivation wear
        if not realtime:
            state.degrade_motivation(rng)

        # 14. Competitors
        self._grow_competitors()

        # 15. Share price, depreciation, board
        governance.update_share_price(state, rng, config=self.config)
        if not realtime:
            self._decay_infrastructure(1.0)
            self._count_down_boosts(float(self.days_per_month))
            governance.autonomous_actions(state, 1.0, rng, self.bus, self.config)
        state.clamp_all()

        # 16. Report
        report = MonthlyReport(
            month=self.game.current_month,
            revenue=int(round(revenue)),
            total_salaries=int(round(salaries)),
            fixed_costs=int(round(fixed_costs)),
            total_expenses=int(round(expenses)),
            profit=int(round(profit)),
            taxes=int(round(taxes)),
            net_profit=int(round(net_profit)),
            cash_after=int(round(state.company.cash)),
            customer_base=state.market.customer_base,
            employee_count=state.employee_count,
            productivity=round(productivity, 2),
            new_customers=int(new_customers),
            marketing_budget=int(round(state.total_marketing_budget)),
            churned_customers=int(churned),
            economic_cycle=state.market.economic_cycle,
            share_price=round(state.company.share_price, 2),
            event=event,
        )
        self.game.reports.append(report)

        # 17. Quests and achievements
        if self.tracker is not None:
            self._apply_outcomes(self.tracker.on_month(self.progress_snapshot(realtime)))
            state.clamp_all()

        # 18. Next month
        self.game.current_month += 1
        self.game.current_day = max(self.game.current_day, float((self.game.current_month - 1) * self.days_per_month))
        self.accumulator = MonthAccumulator()

        # 19. Bankruptcy
        if state.company.cash <= 0:
            self.game.game_over = True
            self.game.is_paused = True
            logger.warning("Company bankrupt at month %d (cash %.0f)", report.month, state.company.cash)
            self.bus.publish(system_event(
                BANKRUPTCY_ID, "Bankruptcy", "The company ran out of cash.", type="loss", icon="skull",
            ))

        logger.info(
            "Month %d closed: revenue=%d net=%d cash=%d customers=%d",
            report.month, report.revenue, report.net_profit, report.cash_after, report.customer_base,
        )

        # 20. Autosave
        self._autosave()
        return report

    # ------------------------------------------------------------------
    # Tick engine
    # ------------------------------------------------------------------

    def apply_tick(self, day_fraction: float) -> Optional[TickReport]:
        """
        Advance the game by ``day_fraction`` of a month.

        Every accrual scales linearly with ``day_fraction``. Crossing the
        end of the month closes it with the real-time monthly pipeline.

        Returns:
            What the tick did, or None when the game is over, a step is
            already running, or ``day_fraction`` is not positive
        """
        if self.game.game_over:
            logger.warning("apply_tick refused: game over")
            return None
        if self.game.is_simulating:
            logger.warning("apply_tick refused: a simulation step is already running")
            return None
        if day_fraction <= 0:
            logger.debug("apply_tick ignored non-positive day fraction %s", day_fraction)
            return None

        self.game.is_simulating = True
        self._events_seen.clear()
        try:
            report = self._run_tick(day_fraction)
            if self.game.current_day >= self.month_end_day - _EPSILON:
                report.month_report = self.simulate_month(realtime=True)
            report.events = list(self._events_seen)
            return report
        finally:
            self.game.is_simulating = False

    def _run_tick(self, day_fraction: float) -> TickReport:
        state = self.state
        rng = self.rng
        days = day_fraction * self.days_per_month
        seconds = days * self.config.time.seconds_per_game_day
        report = TickReport(day_fraction=day_fraction)
        cash_before = state.company.cash

        self.game.current_day += days
        self.game.elapsed_seconds += seconds
        state.now = self.game.elapsed_seconds

        # 1. Tenders
        projects.housekeep_tenders(state, self.game.current_day, day_fraction, rng, self.config)

        # 2. Infrastructure wear
        self._decay_infrastructure(day_fraction)

        # 3. Projects
        completed, failed = projects.advance_projects(state, day_fraction, self.game.current_day, self.bus, self.config)
        report.completed_projects = [p.id for p in completed]
        report.failed_projects = [p.id for p in failed]

        # 4. Prorated P&L
        result = self.operating_result(day_fraction, prorated=True)
        state.update_cash(result.net_profit)
        self.accumulator.add(result)
        report.revenue = result.revenue
        report.expenses = result.expenses
        if state.company.cash < 0:
            penalty = self.config.finance.negative_cash_board_penalty_per_month * day_fraction
            for member in state.board:
                member.satisfaction = clamp(member.satisfaction - penalty, 0.0, 100.0)
            state.refresh_governance()

        # 5. Workforce
        self._tick_workforce(day_fraction, days, seconds, report)

        # 6. Market
        self._tick_market(day_fraction, days, report)

        # 7. Share price and boosts
        sample_day = int(self.game.current_day)
        governance.update_share_price(state, rng, record=sample_day > self.last_price_day, config=self.config)
        self.last_price_day = max(self.last_price_day, sample_day)
        self._count_down_boosts(days)

        # 8. Board
        governance.autonomous_actions(state, day_fraction, rng, self.bus, self.config)

        if self.tracker is not None:
            self._apply_outcomes(self.tracker.on_tick(self.progress_snapshot()))

        state.clamp_all()
        report.cash_delta = state.company.cash - cash_before
        return report

    def _tick_workforce(self, day_fraction: float, days: float, seconds: float, report: TickReport) -> None:
        state = self.state
        rng = self.rng
        workforce = self.config.workforce
        critical = state.critical_employee_ids
        fatigue_relief = state.perk_fatigue_reduction
        motivation_lift = state.perk_motivation_boost

        for e in list(state.employees):
            self._advance_training(e, days)

            if e.is_on_strike:
                e.strike_duration += seconds
                e.motivation = clamp(e.motivation - workforce.strike_motivation_decay_per_month * day_fraction, 0.0, 100.0)
                if e.strike_duration > workforce.strike_resignation_seconds and e.id not in critical:
                    state.remove_employee(e.id)
                    report.resignations.append(e.id)
                    logger.info("Employee %d (%s) resigned after a strike", e.id, e.name)
                    self.bus.publish(system_event(
                        STRIKE_RESIGNATION_ID,
                        "Resignation",
                        f"{e.name} quit after a strike that nobody resolved.",
                        type="employee_departure",
                        icon="door",
                    ))
                continue

            base = workforce.project_fatigue_per_month if e.id in critical else workforce.idle_fatigue_per_month
            jitter = rng.uniform(-workforce.drift_jitter, workforce.drift_jitter) * days
            e.fatigue = clamp(e.fatigue + (base - fatigue_relief) * day_fraction + jitter, 0.0, 100.0)

            decay = (
                workforce.exhausted_motivation_decay_per_month
                if e.fatigue > workforce.exhaustion_threshold
                else workforce.motivation_decay_per_month
            )
            e.motivation = clamp(e.motivation + (motivation_lift - decay) * day_fraction, 0.0, 100.0)

            if (
                e.fatigue > workforce.strike_fatigue_threshold
                and e.id not in critical
                and rng.random() < workforce.strike_chance_per_day * days
            ):
                e.is_on_strike = True
                e.strike_duration = 0.0
                e.add_opinion("I can't go on like this. I'm on strike.", workforce.max_opinions)
                report.strikes_started.append(e.id)
                logger.info("Employee %d (%s) went on strike", e.id, e.name)
                self.bus.publish(system_event(
                    STRIKE_STARTED_ID,
                    "Strike",
                    f"{e.name} stopped working out of exhaustion.",
                    type="info",
                    icon="megaphone",
                ))

        strikers = sum(1 for e in state.employees if e.is_on_strike)
        if strikers:
            penalty = workforce.domino_penalty_per_striker * strikers * day_fraction
            for e in state.employees:
                if not e.is_on_strike:
                    e.motivation = clamp(e.motivation - penalty, 0.0, 100.0)

    def _tick_market(self, day_fraction: float, days: float, report: TickReport) -> None:
        state = self.state
        rng = self.rng
        market_config = self.config.market
        market = state.market

        idle = state.now - market.last_action_time
        rate = (
            -market_config.organic_decline_per_month
            if idle > market_config.inactivity_threshold_seconds
            else market_config.organic_growth_per_month
        )
        market.organic_growth += market.customer_base * rate * day_fraction
        booked = int(market.organic_growth)
        if booked:
            state.update_customer_base(booked)
            market.organic_growth -= booked

        churned = probabilistic_round(
            market.customer_base * market.churn_rate * self.churn_multiplier() * day_fraction, rng,
        )
        churned = min(churned, market.customer_base)
        state.update_customer_base(-churned)

        acquired = probabilistic_round(state.estimated_new_customers * day_fraction, rng)
        state.update_customer_base(acquired)

        report.churned_customers = churned
        report.new_customers = acquired
        self.accumulator.churned_customers += churned
        self.accumulator.new_customers += acquired
        market.satisfaction = state.satisfaction_score

        if state.competitors:
            jitter = market_config.competitor_jitter * days
            shares = np.array([c.market_share + rng.uniform(-jitter, jitter) for c in state.competitors])
            self._store_competitor_shares(shares)

        step = market_config.demand_walk_step
        for specialty, value in market.demands.items():
            market.demands[specialty] = clamp(value + rng.uniform(-step, step), 0.0, 100.0)

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------

    def _action_table(self) -> Dict[str, Callable[..., ActionResult]]:
        state, rng, bus, config = self.state, self.rng, self.bus, self.config
        return {
            "configure_company": state.configure_company,
            "hire_employee": state.hire_employee,
            "fire_employee": state.fire_employee,
            "raise_salary": state.raise_salary,
            "train_employee": state.train_employee,
            "resolve_strike": state.resolve_strike,
            "set_channel_budget": state.set_channel_budget,
            "take_loan": state.take_loan,
            "repay_loan": state.repay_loan,
            "move_office": state.move_office,
            "toggle_perk": state.toggle_perk,
            "upgrade_equipment": lambda: state.upgrade_equipment(self.game.current_month),
            "buy_infrastructure": state.buy_infrastructure,
            "repair_infrastructure": state.repair_infrastructure,
            "buy_boost": state.buy_boost,
            "raise_funds": lambda member_id=None: governance.raise_funds(state, rng, member_id, bus, config),
            "buy_shares_from_member": lambda member_id, percent: governance.buy_shares_from_member(
                state, member_id, percent, rng, config),
            "sell_shares_to_member": lambda member_id, percent: governance.sell_shares_to_member(
                state, member_id, percent, rng, config),
            "sell_shares_to_market": lambda percent: governance.sell_shares_to_market(state, percent, config),
            "buyback_shares": lambda member_id, percent: governance.buyback_shares(
                state, member_id, percent, rng, config),
            "assign_employee": lambda project_id, employee_id: projects.assign_employee(state, project_id, employee_id),
            "unassign_employee": lambda project_id, employee_id: projects.unassign_employee(
                state, project_id, employee_id),
            "start_project": lambda project_id: projects.start_project(state, project_id, self.game.current_day),
        }

    def perform(self, action: str, **params) -> ActionResult:
        """Dispatch a named player action with keyword parameters."""
        if self.game.game_over:
            return ActionResult.rejected("game over")
        handler = self._action_table().get(action)
        if handler is None:
            return ActionResult.rejected(f"unknown action {action!r}")
        try:
            inspect.signature(handler).bind(**params)
        except TypeError as exc:
            logger.debug("Bad parameters for %s: %s", action, exc)
            return ActionResult.rejected(f"bad parameters for {action}")
        result = handler(**params)
        if result.ok:
            self.state.clamp_all()
        return result

    def vote(self, decision: governance.BoardDecision) -> governance.VoteOutcome:
        """Put a strategic decision to the board."""
        outcome = governance.submit_decision(self.state, decision, self.rng, self.bus, self.config)
        if outcome.reason:
            return outcome
        self.state.mark_major_action()
        self.state.clamp_all()
        return outcome

    def summary(self) -> Dict[str, object]:
        """Compact view of the game for hosts and logs."""
        state = self.state
        return {
            "month": self.game.current_month,
            "day": round(self.game.current_day, 2),
            "cash": round(state.company.cash, 2),
            "customers": state.market.customer_base,
            "employees": state.employee_count,
            "productivity": round(state.productivity, 3),
            "satisfaction": state.market.satisfaction,
            "strike_risk": round(state.strike_risk(), 1),
            "share_price": round(state.company.share_price, 2),
            "board_satisfaction": round(state.company.board_satisfaction, 1),
            "level": state.company.level,
            "economic_cycle": state.market.economic_cycle,
            "game_over": self.game.game_over,
        }
