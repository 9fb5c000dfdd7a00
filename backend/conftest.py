"""
Shared fixtures for the Bizdom test suite.
"""

import random
from typing import List, Optional

import pytest

from company import CompanyState
from config import SimulationConfig
from economy import Simulation
from entities import BoardMember, Company, Employee, MarketData, MarketingChannel


class FixedRandom(random.Random):
    """random() always returns ``value``; uniform/randint/choice follow from it."""

    value = 0.0

    def random(self):
        return self.value


def fixed_random(value: float = 0.0) -> FixedRandom:
    rng = FixedRandom(0)
    rng.value = value
    return rng


def make_employee(employee_id: int = 1, **overrides) -> Employee:
    fields = {
        "id": employee_id,
        "name": f"Employee {employee_id}",
        "role": "Developer",
        "specialty": "tech",
        "skill_level": 3,
        "salary": 5000.0,
        "motivation": 80.0,
        "fatigue": 0.0,
    }
    fields.update(overrides)
    return Employee(**fields)


def build_state(
    employees: Optional[List[Employee]] = None,
    customers: int = 0,
    cash: float = 100000.0,
    board: Optional[List[BoardMember]] = None,
    channels: Optional[List[MarketingChannel]] = None,
    config: Optional[SimulationConfig] = None,
) -> CompanyState:
    """A small, predictable company: no board, no marketing unless given."""
    return CompanyState(
        company=Company(cash=cash),
        employees=list(employees or []),
        market=MarketData(customer_base=customers),
        channels=list(channels or []),
        board=list(board or []),
        config=config,
    )


def build_sim(state: CompanyState, rng=None, config: Optional[SimulationConfig] = None, **kwargs) -> Simulation:
    """Simulation without random events or quests unless asked for."""
    kwargs.setdefault("catalogue", [])
    return Simulation(state=state, rng=rng or random.Random(7), config=config, **kwargs)


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def new_state():
    return CompanyState.new_game()


@pytest.fixture
def sim():
    return Simulation.new_game(seed=1234)
