"""
Bizdom Entity Model

Plain data records for everything the simulation mutates: the company,
its workforce, the customer market, loans, the board, infrastructure,
projects and temporary boosts, plus the report/event records the
pipelines produce.

Every record serializes to basic Python types with ``to_dict`` and is
rebuilt with ``from_dict``; fields missing from older snapshots fall back
to the dataclass defaults.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Set

SPECIALTIES = ("tech", "sales", "creative", "hr", "management")
PERSONALITIES = ("conservative", "aggressive", "balanced")


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _known_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only keys that map onto dataclass fields of ``cls``."""
    names = {f.name for f in fields(cls)}
    return {key: value for key, value in data.items() if key in names}


@dataclass(frozen=True)
class ActionResult:
    """
    Outcome of a player or pipeline action.

    Invalid actions never raise: they come back rejected with a reason and
    leave the state untouched.
    """

    ok: bool
    reason: str = ""
    value: Any = None

    @classmethod
    def accepted(cls, value: Any = None) -> "ActionResult":
        return cls(ok=True, value=value)

    @classmethod
    def rejected(cls, reason: str) -> "ActionResult":
        return cls(ok=False, reason=reason)

    def __bool__(self) -> bool:
        return self.ok


@dataclass(slots=True)
class CEO:
    name: str = "CEO"
    appearance: Dict[str, str] = field(default_factory=dict)
    personal_balance: float = 0.0

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "appearance": dict(self.appearance),
            "personal_balance": self.personal_balance,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CEO":
        kwargs = _known_fields(cls, data)
        kwargs["appearance"] = dict(kwargs.get("appearance") or {})
        return cls(**kwargs)


@dataclass(slots=True)
class Company:
    """
    The player's company.

    Cash is signed: it may go negative between month closes, and a close
    with cash <= 0 ends the game.
    """

    name: str = "Bizdom"
    cash: float = 100000.0
    revenue_per_customer: float = 25.0
    tax_rate: float = 0.25
    fixed_costs: float = 8000.0
    variable_cost_per_employee: float = 300.0
    current_office_id: str = "garage"
    active_perks: Set[str] = field(default_factory=set)
    investor_share: float = 0.0  # [0,1], derived from board shares
    equipment_level: int = 1
    last_upgrade_month: int = 1
    is_configured: bool = False
    ceo: CEO = field(default_factory=CEO)
    board_satisfaction: float = 75.0  # [0,100], derived from the board
    owned_infrastructure: Dict[str, float] = field(default_factory=dict)  # id -> condition
    level: int = 1
    completed_projects: int = 0
    share_price: float = 10000.0
    share_price_history: List[float] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "cash": self.cash,
            "revenue_per_customer": self.revenue_per_customer,
            "tax_rate": self.tax_rate,
            "fixed_costs": self.fixed_costs,
            "variable_cost_per_employee": self.variable_cost_per_employee,
            "current_office_id": self.current_office_id,
            "active_perks": sorted(self.active_perks),
            "investor_share": self.investor_share,
            "equipment_level": self.equipment_level,
            "last_upgrade_month": self.last_upgrade_month,
            "is_configured": self.is_configured,
            "ceo": self.ceo.to_dict(),
            "board_satisfaction": self.board_satisfaction,
            "owned_infrastructure": dict(self.owned_infrastructure),
            "level": self.level,
            "completed_projects": self.completed_projects,
            "share_price": self.share_price,
            "share_price_history": list(self.share_price_history),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Company":
        kwargs = _known_fields(cls, data)
        kwargs["active_perks"] = set(kwargs.get("active_perks") or [])
        kwargs["ceo"] = CEO.from_dict(kwargs.get("ceo") or {})
        kwargs["owned_infrastructure"] = {
            str(key): float(value)
            for key, value in (kwargs.get("owned_infrastructure") or {}).items()
        }
        kwargs["share_price_history"] = list(kwargs.get("share_price_history") or [])
        return cls(**kwargs)

@dataclass(slots=True)
class Employee:
    """A member of staff. Training employees contribute no productivity."""

    id: int
    name: str
    role: str
    specialty: str = "tech"
    skill_level: int = 1  # 1 to 5
    salary: float = 3000.0
    motivation: float = 70.0  # 0 to 100
    fatigue: float = 0.0  # 0 to 100
    months_employed: int = 0
    training_days_remaining: float = 0.0
    is_on_strike: bool = False
    strike_duration: float = 0.0  # Seconds on strike, reset when the strike ends
    opinions: List[str] = field(default_factory=list)  # Most recent first

    def __post_init__(self):
        """Validate invariants after initialization."""
        if self.specialty not in SPECIALTIES:
            raise ValueError(f"unknown specialty {self.specialty!r}")
        if not (1 <= self.skill_level <= 5):
            raise ValueError(f"skill_level must be in [1,5], got {self.skill_level}")
        if self.salary <= 0:
            raise ValueError(f"salary must be positive, got {self.salary}")
        self.motivation = clamp(self.motivation, 0.0, 100.0)
        self.fatigue = clamp(self.fatigue, 0.0, 100.0)

    @property
    def is_training(self) -> bool:
        return self.training_days_remaining > 0

    def add_opinion(self, text: str, limit: int = 5) -> None:
        self.opinions.insert(0, text)
        del self.opinions[limit:]

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "specialty": self.specialty,
            "skill_level": self.skill_level,
            "salary": self.salary,
            "motivation": self.motivation,
            "fatigue": self.fatigue,
            "months_employed": self.months_employed,
            "training_days_remaining": self.training_days_remaining,
            "is_on_strike": self.is_on_strike,
            "strike_duration": self.strike_duration,
            "opinions": list(self.opinions),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Employee":
        kwargs = _known_fields(cls, data)
        kwargs["opinions"] = list(kwargs.get("opinions") or [])
        return cls(**kwargs)

@dataclass(slots=True)
class RecruitCandidate:
    """Prototype for a future employee, removed from the pool on hire."""

    id: int
    name: str
    role: str
    specialty: str = "tech"
    skill_level: int = 1
    salary: float = 3000.0
    motivation: float = 70.0

    def to_employee(self) -> Employee:
        return Employee(
            id=self.id,
            name=self.name,
            role=self.role,
            specialty=self.specialty,
            skill_level=self.skill_level,
            salary=self.salary,
            motivation=self.motivation,
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "specialty": self.specialty,
            "skill_level": self.skill_level,
            "salary": self.salary,
            "motivation": self.motivation,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecruitCandidate":
        return cls(**_known_fields(cls, data))


@dataclass(slots=True)
class MarketData:
    customer_base: int = 500
    acquisition_coefficient: float = 0.05
    market_growth: float = 0.02
    churn_rate: float = 0.05
    satisfaction: float = 100.0
    inflation: float = 0.0
    economic_cycle: str = "stable"
    cycle_months_remaining: int = 8
    demands: Dict[str, float] = field(default_factory=lambda: {s: 50.0 for s in SPECIALTIES})
    organic_growth: float = 0.0  # Fractional customer drift not yet booked
    last_action_time: float = 0.0  # Game-clock seconds of the last major action

    def to_dict(self) -> Dict[str, object]:
        return {
            "customer_base": self.customer_base,
            "acquisition_coefficient": self.acquisition_coefficient,
            "market_growth": self.market_growth,
            "churn_rate": self.churn_rate,
            "satisfaction": self.satisfaction,
            "inflation": self.inflation,
            "economic_cycle": self.economic_cycle,
            "cycle_months_remaining": self.cycle_months_remaining,
            "demands": dict(self.demands),
            "organic_growth": self.organic_growth,
            "last_action_time": self.last_action_time,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MarketData":
        kwargs = _known_fields(cls, data)
        if "demands" in kwargs:
            demands = {s: 50.0 for s in SPECIALTIES}
            demands.update(kwargs["demands"] or {})
            kwargs["demands"] = demands
        return cls(**kwargs)

@dataclass(slots=True)
class MarketingChannel:
    id: str
    name: str
    budget: float = 0.0
    efficiency: float = 0.05  # Customers per unit of budget

    def to_dict(self) -> Dict[str, object]:
        return {"id": self.id, "name": self.name, "budget": self.budget, "efficiency": self.efficiency}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MarketingChannel":
        return cls(**_known_fields(cls, data))


@dataclass(slots=True, frozen=True)
class Office:
    id: str
    name: str
    rent: float
    max_employees: int
    required_level: int = 1


@dataclass(slots=True, frozen=True)
class Perk:
    id: str
    name: str
    monthly_cost: float
    fatigue_reduction: float = 0.0
    motivation_boost: float = 0.0


@dataclass(slots=True)
class Loan:
    id: int
    amount: float
    interest_rate: float
    remaining_months: int
    monthly_payment: float
    total_paid: float = 0.0

    @classmethod
    def amortized(cls, loan_id: int, amount: float, months: int, interest_rate: float) -> "Loan":
        """Simple amortization: principal plus flat interest spread over the term."""
        payment = round(amount * (1 + interest_rate * months) / months)
        return cls(
            id=loan_id,
            amount=amount,
            interest_rate=interest_rate,
            remaining_months=months,
            monthly_payment=payment,
        )

    @property
    def outstanding(self) -> float:
        return self.monthly_payment * self.remaining_months

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "amount": self.amount,
            "interest_rate": self.interest_rate,
            "remaining_months": self.remaining_months,
            "monthly_payment": self.monthly_payment,
            "total_paid": self.total_paid,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Loan":
        return cls(**_known_fields(cls, data))


@dataclass(slots=True)
class Competitor:
    id: str
    name: str
    market_share: float = 10.0  # Percent, capped at 40
    growth_rate: float = 0.02  # Monthly relative growth

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "market_share": self.market_share,
            "growth_rate": self.growth_rate,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Competitor":
        return cls(**_known_fields(cls, data))


@dataclass(slots=True)
class BoardMember:
    id: int
    name: str
    influence: float = 0.2  # Voting weight [0,1]
    satisfaction: float = 70.0  # [0,100]
    personality: str = "balanced"
    share_percent: float = 0.0
    last_vote: str = "none"  # yes / no / abstain / none

    def __post_init__(self):
        """Validate invariants after initialization."""
        if self.personality not in PERSONALITIES:
            raise ValueError(f"unknown personality {self.personality!r}")
        if not (0.0 <= self.influence <= 1.0):
            raise ValueError(f"influence must be in [0,1], got {self.influence}")
        self.satisfaction = clamp(self.satisfaction, 0.0, 100.0)

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "influence": self.influence,
            "satisfaction": self.satisfaction,
            "personality": self.personality,
            "share_percent": self.share_percent,
            "last_vote": self.last_vote,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoardMember":
        return cls(**_known_fields(cls, data))


@dataclass(slots=True, frozen=True)
class InfrastructureItem:
    """Catalogue entry. Each missing dependency compounds a 0.85 malus."""

    id: str
    name: str
    cost: float
    monthly_cost: float
    dependencies: tuple = ()
    revenue_bonus: float = 0.0


@dataclass(slots=True)
class Project:
    id: int
    title: str
    duration: float  # Nominal days
    cost: float  # One-time activation fee
    budget: float  # Operating allowance, one thirtieth burned per active month
    team_size: int
    reward: float
    required_specialties: Dict[str, int] = field(default_factory=dict)
    shareholder_opinion: float = 0.0
    progress: float = 0.0
    status: str = "pending"  # pending / active / completed / failed
    assigned_employees: List[int] = field(default_factory=list)
    expires_at: float = 0.0  # Game day after which an unassigned tender is dropped
    started_day: Optional[float] = None

    @property
    def is_open(self) -> bool:
        return self.status in ("pending", "active")

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "duration": self.duration,
            "cost": self.cost,
            "budget": self.budget,
            "team_size": self.team_size,
            "reward": self.reward,
            "required_specialties": dict(self.required_specialties),
            "shareholder_opinion": self.shareholder_opinion,
            "progress": self.progress,
            "status": self.status,
            "assigned_employees": list(self.assigned_employees),
            "expires_at": self.expires_at,
            "started_day": self.started_day,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        kwargs = _known_fields(cls, data)
        kwargs["required_specialties"] = dict(kwargs.get("required_specialties") or {})
        kwargs["assigned_employees"] = list(kwargs.get("assigned_employees") or [])
        return cls(**kwargs)


@dataclass(slots=True)
class TemporaryBoost:
    id: int
    type: str  # motivation | fatigue
    value: float
    remaining_days: float
    cost: float = 0.0

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "type": self.type,
            "value": self.value,
            "remaining_days": self.remaining_days,
            "cost": self.cost,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TemporaryBoost":
        return cls(**_known_fields(cls, data))


@dataclass(slots=True)
class GameEvent:
    id: int
    name: str
    description: str
    probability: float  # 0 to 1
    type: str
    impact_value: float = 0.0
    motivation_penalty: float = 0.0  # Sabotage only
    icon: str = ""

    def copy(self) -> "GameEvent":
        return GameEvent(
            id=self.id,
            name=self.name,
            description=self.description,
            probability=self.probability,
            type=self.type,
            impact_value=self.impact_value,
            motivation_penalty=self.motivation_penalty,
            icon=self.icon,
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "probability": self.probability,
            "type": self.type,
            "impact_value": self.impact_value,
            "motivation_penalty": self.motivation_penalty,
            "icon": self.icon,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameEvent":
        return cls(**_known_fields(cls, data))


@dataclass(slots=True)
class MonthlyReport:
    """Snapshot of one month. Monetary fields are whole numbers."""

    month: int
    revenue: int
    total_salaries: int
    fixed_costs: int
    total_expenses: int
    profit: int
    taxes: int
    net_profit: int
    cash_after: int
    customer_base: int
    employee_count: int
    productivity: float
    new_customers: int
    marketing_budget: int
    churned_customers: int = 0
    economic_cycle: str = "stable"
    share_price: float = 0.0
    event: Optional[GameEvent] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "month": self.month,
            "revenue": self.revenue,
            "total_salaries": self.total_salaries,
            "fixed_costs": self.fixed_costs,
            "total_expenses": self.total_expenses,
            "profit": self.profit,
            "taxes": self.taxes,
            "net_profit": self.net_profit,
            "cash_after": self.cash_after,
            "customer_base": self.customer_base,
            "employee_count": self.employee_count,
            "productivity": self.productivity,
            "new_customers": self.new_customers,
            "marketing_budget": self.marketing_budget,
            "churned_customers": self.churned_customers,
            "economic_cycle": self.economic_cycle,
            "share_price": self.share_price,
            "event": self.event.to_dict() if self.event else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MonthlyReport":
        kwargs = _known_fields(cls, data)
        event = kwargs.get("event")
        kwargs["event"] = GameEvent.from_dict(event) if event else None
        return cls(**kwargs)
