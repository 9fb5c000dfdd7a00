"""
Simulation Configuration

Centralizes all tunable parameters for the business simulation.
Balance numbers live here instead of being scattered through the pipelines.

A handful of host-level settings can be overridden from the environment
(or a ``.env`` file) so the server and CLI can be tuned without edits.
"""

import os
from dataclasses import dataclass, field
from typing import Dict

from dotenv import load_dotenv

load_dotenv()


@dataclass
class TimeConfig:
    """Game clock constants."""
    days_per_month: int = 30
    seconds_per_game_day: float = 1.0  # Game-clock seconds per simulated day
    tick_interval_seconds: float = 1.0  # Wall-clock cadence of the tick driver
    default_game_speed: float = 1.0
    max_game_speed: float = 10.0


@dataclass
class WorkforceConfig:
    """Employee behaviour parameters."""

    # Monthly pipeline
    skill_gain_every_months: int = 6
    max_skill_level: int = 5
    monthly_fatigue_gain_min: float = 5.0
    monthly_fatigue_gain_max: float = 15.0
    exhaustion_threshold: float = 80.0
    exhaustion_motivation_penalty: float = 5.0
    motivation_wear_min: int = 1
    motivation_wear_max: int = 5
    motivation_floor: float = 10.0

    # Tick drift (per month, prorated by day fraction)
    idle_fatigue_per_month: float = 6.0
    project_fatigue_per_month: float = 15.0
    motivation_decay_per_month: float = 3.0
    exhausted_motivation_decay_per_month: float = 10.0
    drift_jitter: float = 0.5

    # Strikes
    strike_fatigue_threshold: float = 70.0
    strike_chance_per_day: float = 0.05
    strike_motivation_decay_per_month: float = 20.0
    strike_resignation_seconds: float = 120.0
    domino_penalty_per_striker: float = 2.0  # Motivation per striker per month
    strike_resolution_salary_factor: float = 0.5  # One-off bonus, fraction of salary
    strike_resolution_fatigue_relief: float = 30.0
    strike_resolution_motivation_boost: float = 15.0

    # Training
    training_days: float = 14.0
    training_cost_per_level: float = 2000.0
    training_motivation_boost: float = 10.0

    # Raises
    default_raise_amount: float = 500.0
    raise_motivation_boost: float = 10.0

    max_opinions: int = 5


@dataclass
class MarketConfig:
    """Customer market parameters."""
    satisfaction_ratio_scale: float = 2000.0
    churn_multiplier_low: float = 2.0  # satisfaction < 50
    churn_multiplier_mid: float = 1.5  # satisfaction < 70
    low_satisfaction: float = 50.0
    mid_satisfaction: float = 70.0

    # Economic cycle
    stable_probability: float = 0.4
    growth_probability: float = 0.3  # Remainder is recession
    cycle_min_months: int = 6
    cycle_max_months: int = 12
    cycle_multipliers: Dict[str, float] = field(default_factory=lambda: {
        "growth": 1.2,
        "stable": 1.0,
        "recession": 0.7,
    })

    # Competitors
    competitor_share_cap: float = 40.0
    competitors_total_cap: float = 95.0
    competitor_jitter: float = 0.1

    # Real-time drift
    inactivity_threshold_seconds: float = 600.0
    organic_growth_per_month: float = 0.01
    organic_decline_per_month: float = 0.03
    demand_walk_step: float = 1.0


@dataclass
class FinanceConfig:
    """Loans, equipment and cash-related parameters."""
    loan_interest_rate: float = 0.03  # Simple monthly rate
    max_active_loans: int = 3
    equipment_upgrade_cost: float = 15000.0  # Multiplied by the current level
    obsolescence_per_month: float = 0.1
    obsolescence_floor: float = 0.5
    negative_cash_board_penalty_per_month: float = 15.0


@dataclass
class GovernanceConfig:
    """Board, equity and share price parameters."""
    ceo_min_share: float = 20.0
    raise_funds_amount: float = 100000.0
    raise_funds_equity: float = 5.0
    raise_funds_max_strike_risk: float = 40.0
    raise_funds_min_board_satisfaction: float = 50.0
    new_member_satisfaction: float = 70.0
    new_member_influence: float = 0.1

    # Voting
    conservative_risk_penalty: float = 0.6
    aggressive_risk_bonus: float = 0.4
    abstain_band: float = 0.15
    approval_threshold: float = 50.0
    approval_yes_bonus: float = 3.0
    approval_other_bonus: float = 1.0
    rejection_yes_penalty: float = 6.0
    rejection_abstain_penalty: float = 4.0
    rejection_no_penalty: float = 2.0

    # Share transactions (haircuts)
    buy_fee: float = 0.10
    sell_to_member_haircut: float = 0.15
    sell_to_market_haircut: float = 0.20
    buyback_premium: float = 0.20
    refusal_satisfaction_threshold: float = 40.0
    refusal_chance_dissatisfied: float = 0.5
    refusal_chance_aggressive: float = 0.3

    # Share price
    share_price_base: float = 10000.0
    share_price_cash_reference: float = 500000.0
    share_price_jitter: float = 0.02
    share_price_floor: float = 1.0
    share_history_length: int = 24

    # Autonomous behaviour (probabilities per simulated day)
    cost_cutting_chance_per_day: float = 0.02
    cost_cutting_satisfaction: float = 30.0
    cost_cutting_min_share: float = 15.0
    cost_cutting_penalty: float = 10000.0
    gift_chance_per_day: float = 0.01
    gift_satisfaction: float = 90.0
    gift_amount: float = 5000.0
    offer_chance_per_day: float = 0.002
    offer_premium: float = 0.1

    projects_per_level: int = 3


@dataclass
class ProjectConfig:
    """Tender and project scheduling parameters."""
    progress_scale: float = 3000.0
    tender_backlog_threshold: int = 3
    tender_spawn_chance_per_day: float = 0.2
    tender_lifetime_days: float = 10.0
    overrun_factor: float = 2.0
    level_reward_scaling: float = 0.25  # +25% reward/cost per level above 1


@dataclass
class InfrastructureConfig:
    """Owned infrastructure parameters."""
    missing_dependency_malus: float = 0.85
    decay_per_month: float = 6.0
    repair_cost_rate: float = 0.005  # Fraction of item cost per missing point


@dataclass
class PersistenceConfig:
    """Save store settings."""
    db_path: str = field(default_factory=lambda: os.getenv("BIZDOM_DB_PATH", "bizdom_saves.db"))
    save_slot: str = field(default_factory=lambda: os.getenv("BIZDOM_SAVE_SLOT", "autosave"))
    snapshot_version: int = 3
    autosave: bool = True


@dataclass
class SimulationConfig:
    """Master configuration for the entire simulation."""

    time: TimeConfig = field(default_factory=TimeConfig)
    workforce: WorkforceConfig = field(default_factory=WorkforceConfig)
    market: MarketConfig = field(default_factory=MarketConfig)
    finance: FinanceConfig = field(default_factory=FinanceConfig)
    governance: GovernanceConfig = field(default_factory=GovernanceConfig)
    projects: ProjectConfig = field(default_factory=ProjectConfig)
    infrastructure: InfrastructureConfig = field(default_factory=InfrastructureConfig)
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)

    def __post_init__(self):
        """Validation and environment overrides."""
        tick_override = os.getenv("BIZDOM_TICK_SECONDS")
        if tick_override:
            self.time.tick_interval_seconds = float(tick_override)

        if self.time.days_per_month <= 0:
            raise ValueError("days_per_month must be positive")
        if self.time.tick_interval_seconds <= 0:
            raise ValueError("tick_interval_seconds must be positive")
        if not (0.0 < self.time.default_game_speed <= self.time.max_game_speed):
            raise ValueError("default_game_speed must be in (0, max_game_speed]")

        if not (1 <= self.workforce.max_skill_level):
            raise ValueError("max_skill_level must be at least 1")
        if self.workforce.monthly_fatigue_gain_min > self.workforce.monthly_fatigue_gain_max:
            raise ValueError("monthly_fatigue_gain_min cannot exceed monthly_fatigue_gain_max")

        if self.market.stable_probability + self.market.growth_probability > 1.0:
            raise ValueError("cycle probabilities must sum to at most 1")
        if self.market.cycle_min_months > self.market.cycle_max_months:
            raise ValueError("cycle_min_months cannot exceed cycle_max_months")

        if not (0.0 <= self.governance.ceo_min_share <= 100.0):
            raise ValueError("ceo_min_share must be in [0, 100]")
        if self.governance.share_history_length <= 0:
            raise ValueError("share_history_length must be positive")
        if self.projects.tender_backlog_threshold < 0:
            raise ValueError("tender_backlog_threshold cannot be negative")


# Global configuration instance
CONFIG = SimulationConfig()
