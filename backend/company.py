"""
Company State Store

Owns every mutable entity of a game (company, roster, market, marketing,
loans, competitors, board, infrastructure, projects, boosts, recruit pool)
and exposes the derived quantities the pipelines read.

Player actions never raise on invalid input. They return an
``ActionResult`` and leave the state untouched when rejected.
"""

import logging
from typing import Any, Dict, List, Optional

import numpy as np

from catalogue import (
    BOOSTS,
    INFRASTRUCTURE,
    OFFICES,
    PERKS,
    RECRUIT_POOL,
    STARTING_BOARD,
    STARTING_CHANNELS,
    STARTING_COMPETITORS,
    STARTING_EMPLOYEES,
)
from config import CONFIG, SimulationConfig
from entities import (
    ActionResult,
    BoardMember,
    Company,
    Competitor,
    Employee,
    Loan,
    MarketData,
    MarketingChannel,
    Office,
    Project,
    RecruitCandidate,
    TemporaryBoost,
    clamp,
)

logger = logging.getLogger(__name__)


def _reject(reason: str) -> ActionResult:
    logger.debug("Action rejected: %s", reason)
    return ActionResult.rejected(reason)


class CompanyState:
    """
    Single owner of the game's entities.

    Subsystems mutate these records in place; nothing copies state out and
    writes it back later.
    """

    def __init__(
        self,
        company: Company,
        employees: List[Employee],
        market: MarketData,
        channels: Optional[List[MarketingChannel]] = None,
        loans: Optional[List[Loan]] = None,
        competitors: Optional[List[Competitor]] = None,
        board: Optional[List[BoardMember]] = None,
        projects: Optional[List[Project]] = None,
        boosts: Optional[List[TemporaryBoost]] = None,
        recruit_pool: Optional[List[RecruitCandidate]] = None,
        config: Optional[SimulationConfig] = None,
    ):
        self.config = config or CONFIG
        self.company = company
        self.employees = employees
        self.market = market
        self.channels: List[MarketingChannel] = channels or []
        self.loans: List[Loan] = loans or []
        self.competitors: List[Competitor] = competitors or []
        self.board: List[BoardMember] = board or []
        self.projects: List[Project] = projects or []
        self.boosts: List[TemporaryBoost] = boosts or []
        self.recruit_pool: List[RecruitCandidate] = recruit_pool or []

        self.next_loan_id = max((loan.id for loan in self.loans), default=0) + 1
        self.next_boost_id = max((boost.id for boost in self.boosts), default=0) + 1
        self.next_project_id = max((project.id for project in self.projects), default=0) + 1
        self.next_member_id = max((member.id for member in self.board), default=0) + 1

        # Game-clock seconds, kept in sync by the simulation
        self.now: float = 0.0

        self.refresh_governance()

    @classmethod
    def new_game(cls, config: Optional[SimulationConfig] = None) -> "CompanyState":
        """Build a fresh state from the static catalogue."""
        return cls(
            company=Company(),
            employees=[Employee.from_dict(e.to_dict()) for e in STARTING_EMPLOYEES],
            market=MarketData(),
            channels=[MarketingChannel.from_dict(c.to_dict()) for c in STARTING_CHANNELS],
            competitors=[Competitor.from_dict(c.to_dict()) for c in STARTING_COMPETITORS],
            board=[BoardMember.from_dict(m.to_dict()) for m in STARTING_BOARD],
            recruit_pool=[RecruitCandidate.from_dict(c.to_dict()) for c in RECRUIT_POOL],
            config=config,
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        for employee in self.employees:
            if employee.id == employee_id:
                return employee
        return None

    def get_member(self, member_id: int) -> Optional[BoardMember]:
        for member in self.board:
            if member.id == member_id:
                return member
        return None

    def get_project(self, project_id: int) -> Optional[Project]:
        for project in self.projects:
            if project.id == project_id:
                return project
        return None

    @property
    def office(self) -> Office:
        return OFFICES.get(self.company.current_office_id, OFFICES["garage"])

    @property
    def assigned_employee_ids(self) -> set:
        """Employees attached to any pending or active project."""
        return {eid for p in self.projects if p.is_open for eid in p.assigned_employees}

    @property
    def critical_employee_ids(self) -> set:
        """Employees on the team of an active project."""
        return {eid for p in self.projects if p.status == "active" for eid in p.assigned_employees}

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def employee_count(self) -> int:
        return len(self.employees)

    @property
    def total_salaries(self) -> float:
        return sum(e.salary for e in self.employees)

    def specialty_count(self, specialty: str) -> int:
        return sum(1 for e in self.employees if e.specialty == specialty)

    @property
    def fatigue_boost_total(self) -> float:
        return sum(b.value for b in self.boosts if b.type == "fatigue" and b.remaining_days > 0)

    @property
    def motivation_boost_total(self) -> float:
        return sum(b.value for b in self.boosts if b.type == "motivation" and b.remaining_days > 0)

    @property
    def productivity(self) -> float:
        """
        Mean per-employee output, scaled by management and motivation boosts.

        Employees in training are excluded; striking employees count in the
        mean but contribute nothing.
        """
        active = [e for e in self.employees if e.training_days_remaining <= 0]
        if not active:
            return 0.0

        skills = np.array([e.skill_level for e in active], dtype=np.float64)
        motivation = np.array([e.motivation for e in active], dtype=np.float64)
        fatigue = np.array([e.fatigue for e in active], dtype=np.float64)
        working = np.array([not e.is_on_strike for e in active], dtype=bool)

        effective_fatigue = np.maximum(0.0, fatigue - self.fatigue_boost_total)
        fatigue_penalty = 1.0 - effective_fatigue / 200.0
        output = skills * (motivation / 100.0) * fatigue_penalty
        output = np.where(working, output, 0.0)

        mean_output = float(output.mean())
        management_bonus = 1.0 + 0.05 * self.specialty_count("management")
        boost_bonus = 1.0 + self.motivation_boost_total / 100.0
        return mean_output * management_bonus * boost_bonus

    @property
    def sales_bonus(self) -> float:
        return 1.0 + 0.1 * self.specialty_count("sales")

    @property
    def tech_bonus(self) -> float:
        return min(0.5, 0.08 * self.specialty_count("tech"))

    @property
    def hr_bonus(self) -> float:
        return 2.0 * self.specialty_count("hr")

    @property
    def total_marketing_budget(self) -> float:
        return sum(c.budget for c in self.channels)

    @property
    def estimated_new_customers(self) -> int:
        reach = round(sum(c.budget * c.efficiency for c in self.channels))
        return int(round(reach * self.sales_bonus))

    @property
    def total_variable_costs(self) -> float:
        return self.employee_count * self.company.variable_cost_per_employee

    @property
    def office_rent(self) -> float:
        return self.office.rent

    @property
    def active_perks(self) -> list:
        return [PERKS[pid] for pid in sorted(self.company.active_perks) if pid in PERKS]

    @property
    def total_perk_costs(self) -> float:
        return sum(p.monthly_cost for p in self.active_perks)

    @property
    def perk_fatigue_reduction(self) -> float:
        return sum(p.fatigue_reduction for p in self.active_perks)

    @property
    def perk_motivation_boost(self) -> float:
        return sum(p.motivation_boost for p in self.active_perks)

    @property
    def infrastructure_costs(self) -> float:
        return sum(
            INFRASTRUCTURE[item_id].monthly_cost
            for item_id in self.company.owned_infrastructure
            if item_id in INFRASTRUCTURE
        )

    @property
    def infrastructure_malus(self) -> float:
        """Compounding 0.85 penalty per missing dependency of each owned item."""
        malus = 1.0
        owned = self.company.owned_infrastructure
        for item_id in owned:
            item = INFRASTRUCTURE.get(item_id)
            if item is None:
                continue
            missing = sum(1 for dep in item.dependencies if dep not in owned)
            malus *= self.config.infrastructure.missing_dependency_malus ** missing
        return malus

    @property
    def infrastructure_bonus(self) -> float:
        bonus = 0.0
        for item_id, condition in self.company.owned_infrastructure.items():
            item = INFRASTRUCTURE.get(item_id)
            if item is not None:
                bonus += item.revenue_bonus * condition / 100.0
        return 1.0 + bonus

    @property
    def total_loan_payments(self) -> float:
        return sum(loan.monthly_payment for loan in self.loans)

    @property
    def average_motivation(self) -> float:
        if not self.employees:
            return 0.0
        return float(np.mean([e.motivation for e in self.employees]))

    @property
    def average_fatigue(self) -> float:
        if not self.employees:
            return 0.0
        return float(np.mean([e.fatigue for e in self.employees]))

    @property
    def satisfaction_score(self) -> float:
        if self.market.customer_base == 0:
            return 100.0
        ratio = self.employee_count / self.market.customer_base
        return float(round(clamp(ratio * self.config.market.satisfaction_ratio_scale, 0.0, 100.0)))

    def strike_risk(self, rng=None) -> float:
        """Strike risk in [0,100]; pass an rng for the jittered display value."""
        fatigue_term = max(0.0, self.average_fatigue - 50.0) * 2.0
        perk_term = max(0.0, 50.0 - 15.0 * len(self.company.active_perks))
        risk = fatigue_term + perk_term
        if rng is not None:
            risk += rng.uniform(-1.0, 1.0)
        return clamp(risk, 0.0, 100.0)

    @property
    def general_score(self) -> float:
        score = (
            min(250.0, self.company.cash / 2000.0)
            + 10.0 * self.employee_count
            + 2.0 * self.average_motivation
            + 30.0 * self.company.equipment_level
            + 2.0 * self.company.board_satisfaction
        )
        return clamp(score, 0.0, 1000.0)

    @property
    def ceo_share(self) -> float:
        return 100.0 - sum(m.share_percent for m in self.board)

    @property
    def cycle_multiplier(self) -> float:
        return self.config.market.cycle_multipliers.get(self.market.economic_cycle, 1.0)

    def months_since_upgrade(self, current_month: int) -> int:
        return max(0, current_month - self.company.last_upgrade_month)

    def obsolescence_malus(self, current_month: int) -> float:
        finance = self.config.finance
        return max(
            finance.obsolescence_floor,
            1.0 - finance.obsolescence_per_month * self.months_since_upgrade(current_month),
        )

    def monthly_expenses(self) -> Dict[str, float]:
        """Full-month operating expenses, before loan payments."""
        return {
            "salaries": self.total_salaries,
            "fixed_costs": self.company.fixed_costs,
            "variable_costs": self.total_variable_costs,
            "marketing": self.total_marketing_budget,
            "rent": self.office_rent,
            "perks": self.total_perk_costs,
            "infrastructure": self.infrastructure_costs,
        }

    # ------------------------------------------------------------------
    # Bookkeeping primitives used by the pipelines
    # ------------------------------------------------------------------

    def refresh_governance(self) -> None:
        """Re-derive investor share and board satisfaction from the members."""
        total_share = sum(m.share_percent for m in self.board)
        self.company.investor_share = clamp(total_share / 100.0, 0.0, 1.0)
        if not self.board:
            return
        if total_share > 0:
            weighted = sum(m.satisfaction * m.share_percent for m in self.board) / total_share
        else:
            weighted = sum(m.satisfaction for m in self.board) / len(self.board)
        self.company.board_satisfaction = clamp(weighted, 0.0, 100.0)

    def clamp_all(self) -> None:
        for e in self.employees:
            e.motivation = clamp(e.motivation, 0.0, 100.0)
            e.fatigue = clamp(e.fatigue, 0.0, 100.0)
            e.skill_level = int(clamp(e.skill_level, 1, self.config.workforce.max_skill_level))
            e.training_days_remaining = max(0.0, e.training_days_remaining)
        for m in self.board:
            m.satisfaction = clamp(m.satisfaction, 0.0, 100.0)
        self.market.customer_base = max(0, int(self.market.customer_base))
        self.market.satisfaction = clamp(self.market.satisfaction, 0.0, 100.0)
        for key, value in self.market.demands.items():
            self.market.demands[key] = clamp(value, 0.0, 100.0)
        for c in self.competitors:
            c.market_share = clamp(c.market_share, 0.0, self.config.market.competitor_share_cap)
        for item_id, condition in self.company.owned_infrastructure.items():
            self.company.owned_infrastructure[item_id] = clamp(condition, 0.0, 100.0)
        self.refresh_governance()

    def mark_major_action(self) -> None:
        self.market.last_action_time = self.now

    def update_cash(self, amount: float) -> None:
        self.company.cash += amount

    def update_customer_base(self, delta: int) -> None:
        self.market.customer_base = max(0, int(self.market.customer_base + delta))

    def apply_market_growth(self) -> None:
        self.market.customer_base = int(round(self.market.customer_base * (1 + self.market.market_growth)))

    def degrade_motivation(self, rng) -> None:
        """Monthly wear, softened by HR staff, floored at the configured minimum."""
        workforce = self.config.workforce
        protection = self.hr_bonus
        for e in self.employees:
            wear = rng.randint(workforce.motivation_wear_min, workforce.motivation_wear_max)
            loss = max(0.0, wear - protection)
            e.motivation = max(workforce.motivation_floor, e.motivation - loss)

    def remove_random_employee(self, rng) -> Optional[Employee]:
        if not self.employees:
            return None
        idx = rng.randrange(len(self.employees))
        employee = self.employees.pop(idx)
        self._release_from_projects(employee.id)
        return employee

    def boost_all_skills(self, amount: int = 1) -> None:
        cap = self.config.workforce.max_skill_level
        for e in self.employees:
            e.skill_level = min(cap, e.skill_level + int(amount))

    def increase_fixed_costs(self, amount: float) -> None:
        self.company.fixed_costs = max(0.0, self.company.fixed_costs + amount)

    def apply_sabotage(self, motivation_penalty: float) -> None:
        for e in self.employees:
            e.motivation = clamp(e.motivation - motivation_penalty, 0.0, 100.0)

    def process_loan_payments(self, charge: bool = True) -> float:
        """
        Pay one installment on every loan and drop the exhausted ones.

        With ``charge=False`` the installments are only booked; the caller
        folds them into its own cash delta.
        """
        paid = 0.0
        remaining: List[Loan] = []
        for loan in self.loans:
            loan.total_paid += loan.monthly_payment
            loan.remaining_months -= 1
            paid += loan.monthly_payment
            if loan.remaining_months > 0:
                remaining.append(loan)
        self.loans = remaining
        if charge:
            self.company.cash -= paid
        return paid

    def _release_from_projects(self, employee_id: int) -> None:
        for project in self.projects:
            if project.is_open and employee_id in project.assigned_employees:
                project.assigned_employees.remove(employee_id)

    def remove_employee(self, employee_id: int) -> Optional[Employee]:
        employee = self.get_employee(employee_id)
        if employee is None:
            return None
        self.employees.remove(employee)
        self._release_from_projects(employee_id)
        return employee

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------

    def configure_company(self, name: str, ceo_name: str, appearance: Optional[Dict[str, str]] = None) -> ActionResult:
        if self.company.is_configured:
            return _reject("company already configured")
        if not name.strip() or not ceo_name.strip():
            return _reject("company and CEO names are required")
        self.company.name = name.strip()
        self.company.ceo.name = ceo_name.strip()
        self.company.ceo.appearance = dict(appearance or {})
        self.company.is_configured = True
        return ActionResult.accepted()

    def hire_employee(self, candidate_id: int) -> ActionResult:
        candidate = next((c for c in self.recruit_pool if c.id == candidate_id), None)
        if candidate is None:
            return _reject(f"candidate {candidate_id} not found")
        if self.employee_count >= self.office.max_employees:
            return _reject("office at full capacity")
        if self.get_employee(candidate_id) is not None:
            return _reject(f"employee {candidate_id} already on the roster")

        self.recruit_pool.remove(candidate)
        employee = candidate.to_employee()
        self.employees.append(employee)
        self.mark_major_action()
        return ActionResult.accepted(employee.id)

    def fire_employee(self, employee_id: int) -> ActionResult:
        employee = self.remove_employee(employee_id)
        if employee is None:
            return _reject(f"employee {employee_id} not found")
        self.mark_major_action()
        return ActionResult.accepted(employee.id)

    def raise_salary(self, employee_id: int, amount: Optional[float] = None) -> ActionResult:
        workforce = self.config.workforce
        amount = workforce.default_raise_amount if amount is None else amount
        employee = self.get_employee(employee_id)
        if employee is None:
            return _reject(f"employee {employee_id} not found")
        if amount <= 0:
            return _reject("raise must be positive")
        employee.salary += amount
        employee.motivation = min(100.0, employee.motivation + workforce.raise_motivation_boost)
        employee.add_opinion("Finally, a raise!", workforce.max_opinions)
        self.mark_major_action()
        return ActionResult.accepted(employee.salary)

    def train_employee(self, employee_id: int) -> ActionResult:
        workforce = self.config.workforce
        employee = self.get_employee(employee_id)
        if employee is None:
            return _reject(f"employee {employee_id} not found")
        if employee.is_training:
            return _reject("employee already training")
        if employee.skill_level >= workforce.max_skill_level:
            return _reject("employee already at max skill")
        if employee.is_on_strike:
            return _reject("employee is on strike")
        cost = workforce.training_cost_per_level * employee.skill_level
        if self.company.cash < cost:
            return _reject("insufficient funds")

        self.company.cash -= cost
        employee.training_days_remaining = workforce.training_days
        self.mark_major_action()
        return ActionResult.accepted(cost)

    def resolve_strike(self, employee_id: int) -> ActionResult:
        """Negotiate an employee back to work with a one-off bonus."""
        workforce = self.config.workforce
        employee = self.get_employee(employee_id)
        if employee is None:
            return _reject(f"employee {employee_id} not found")
        if not employee.is_on_strike:
            return _reject("employee is not on strike")
        cost = employee.salary * workforce.strike_resolution_salary_factor
        if self.company.cash < cost:
            return _reject("insufficient funds")

        self.company.cash -= cost
        employee.is_on_strike = False
        employee.strike_duration = 0.0
        employee.fatigue = clamp(employee.fatigue - workforce.strike_resolution_fatigue_relief, 0.0, 100.0)
        employee.motivation = clamp(employee.motivation + workforce.strike_resolution_motivation_boost, 0.0, 100.0)
        employee.add_opinion("We were heard. Back to work.", workforce.max_opinions)
        self.mark_major_action()
        return ActionResult.accepted(cost)

    def set_channel_budget(self, channel_id: str, budget: float) -> ActionResult:
        channel = next((c for c in self.channels if c.id == channel_id), None)
        if channel is None:
            return _reject(f"channel {channel_id} not found")
        if budget < 0:
            return _reject("budget cannot be negative")
        channel.budget = float(budget)
        self.mark_major_action()
        return ActionResult.accepted(channel.budget)

    def take_loan(self, amount: float, months: int) -> ActionResult:
        finance = self.config.finance
        if amount <= 0 or months <= 0:
            return _reject("loan amount and term must be positive")
        if len(self.loans) >= finance.max_active_loans:
            return _reject("too many active loans")

        loan = Loan.amortized(self.next_loan_id, amount, int(months), finance.loan_interest_rate)
        self.next_loan_id += 1
        self.loans.append(loan)
        self.company.cash += amount
        return ActionResult.accepted(loan.id)

    def repay_loan(self, loan_id: int) -> ActionResult:
        loan = next((l for l in self.loans if l.id == loan_id), None)
        if loan is None:
            return _reject(f"loan {loan_id} not found")
        outstanding = loan.outstanding
        if self.company.cash < outstanding:
            return _reject("insufficient funds")
        self.company.cash -= outstanding
        loan.total_paid += outstanding
        loan.remaining_months = 0
        self.loans.remove(loan)
        return ActionResult.accepted(outstanding)

    def move_office(self, office_id: str) -> ActionResult:
        office = OFFICES.get(office_id)
        if office is None:
            return _reject(f"office {office_id} not found")
        if office.id == self.company.current_office_id:
            return _reject("already in this office")
        if office.required_level > self.company.level:
            return _reject("business level too low")
        if self.employee_count > office.max_employees:
            return _reject("office too small for the current team")
        if self.company.cash < office.rent:
            return _reject("insufficient funds for the deposit")

        self.company.cash -= office.rent
        self.company.current_office_id = office.id
        self.mark_major_action()
        return ActionResult.accepted(office.id)

    def toggle_perk(self, perk_id: str) -> ActionResult:
        if perk_id not in PERKS:
            return _reject(f"perk {perk_id} not found")
        if perk_id in self.company.active_perks:
            self.company.active_perks.discard(perk_id)
            active = False
        else:
            self.company.active_perks.add(perk_id)
            active = True
        self.mark_major_action()
        return ActionResult.accepted(active)

    def upgrade_equipment(self, current_month: int) -> ActionResult:
        cost = self.config.finance.equipment_upgrade_cost * self.company.equipment_level
        if self.company.cash < cost:
            return _reject("insufficient funds")
        self.company.cash -= cost
        self.company.equipment_level += 1
        self.company.last_upgrade_month = current_month
        self.mark_major_action()
        return ActionResult.accepted(self.company.equipment_level)

    def buy_infrastructure(self, item_id: str) -> ActionResult:
        item = INFRASTRUCTURE.get(item_id)
        if item is None:
            return _reject(f"infrastructure {item_id} not found")
        if item_id in self.company.owned_infrastructure:
            return _reject("infrastructure already owned")
        if self.company.cash < item.cost:
            return _reject("insufficient funds")
        self.company.cash -= item.cost
        self.company.owned_infrastructure[item_id] = 100.0
        self.mark_major_action()
        return ActionResult.accepted(item.cost)

    def repair_cost(self, item_id: str) -> float:
        item = INFRASTRUCTURE.get(item_id)
        condition = self.company.owned_infrastructure.get(item_id)
        if item is None or condition is None:
            return 0.0
        return item.cost * self.config.infrastructure.repair_cost_rate * (100.0 - condition)

    def repair_infrastructure(self, item_id: str) -> ActionResult:
        if item_id not in self.company.owned_infrastructure:
            return _reject(f"infrastructure {item_id} not owned")
        if self.company.owned_infrastructure[item_id] >= 100.0:
            return _reject("infrastructure already in full condition")
        cost = self.repair_cost(item_id)
        if self.company.cash < cost:
            return _reject("insufficient funds")
        self.company.cash -= cost
        self.company.owned_infrastructure[item_id] = 100.0
        return ActionResult.accepted(cost)

    def buy_boost(self, boost_key: str) -> ActionResult:
        offer = BOOSTS.get(boost_key)
        if offer is None:
            return _reject(f"boost {boost_key} not found")
        cost = float(offer["cost"])
        if self.company.cash < cost:
            return _reject("insufficient funds")
        self.company.cash -= cost
        boost = TemporaryBoost(
            id=self.next_boost_id,
            type=str(offer["type"]),
            value=float(offer["value"]),
            remaining_days=float(offer["days"]),
            cost=cost,
        )
        self.next_boost_id += 1
        self.boosts.append(boost)
        return ActionResult.accepted(boost.id)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, object]:
        return {
            "company": self.company.to_dict(),
            "employees": [e.to_dict() for e in self.employees],
            "market": self.market.to_dict(),
            "channels": [c.to_dict() for c in self.channels],
            "loans": [l.to_dict() for l in self.loans],
            "competitors": [c.to_dict() for c in self.competitors],
            "board": [m.to_dict() for m in self.board],
            "projects": [p.to_dict() for p in self.projects],
            "boosts": [b.to_dict() for b in self.boosts],
            "recruit_pool": [c.to_dict() for c in self.recruit_pool],
            "next_loan_id": self.next_loan_id,
            "next_boost_id": self.next_boost_id,
            "next_project_id": self.next_project_id,
            "next_member_id": self.next_member_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], config: Optional[SimulationConfig] = None) -> "CompanyState":
        """Rebuild a state; sections absent from older snapshots get defaults."""
        state = cls(
            company=Company.from_dict(data.get("company") or {}),
            employees=[Employee.from_dict(e) for e in data.get("employees") or []],
            market=MarketData.from_dict(data.get("market") or {}),
            channels=[MarketingChannel.from_dict(c) for c in data.get("channels") or []],
            loans=[Loan.from_dict(l) for l in data.get("loans") or []],
            competitors=[Competitor.from_dict(c) for c in data.get("competitors") or []],
            board=[BoardMember.from_dict(m) for m in data.get("board") or []],
            projects=[Project.from_dict(p) for p in data.get("projects") or []],
            boosts=[TemporaryBoost.from_dict(b) for b in data.get("boosts") or []],
            recruit_pool=[RecruitCandidate.from_dict(c) for c in data.get("recruit_pool") or []],
            config=config,
        )
        state.next_loan_id = max(state.next_loan_id, int(data.get("next_loan_id", 1)))
        state.next_boost_id = max(state.next_boost_id, int(data.get("next_boost_id", 1)))
        state.next_project_id = max(state.next_project_id, int(data.get("next_project_id", 1)))
        state.next_member_id = max(state.next_member_id, int(data.get("next_member_id", 1)))
        return state
