"""
Quests and achievements.

The simulation hands a read-only ``ProgressSnapshot`` to its progress
tracker after every month and every tick and applies the
``QuestOutcome`` records it gets back. The tracker never touches the
company state itself.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from entities import GameEvent
from events import ACHIEVEMENT_ID, QUEST_COMPLETED_ID, QUEST_FAILED_ID, system_event

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ProgressSnapshot:
    month: int
    day: float
    cash: float
    employee_count: int
    tech_count: int
    customer_base: int
    satisfaction: float
    office_id: str
    level: int
    completed_projects: int
    fatigue_levels: Tuple[float, ...] = ()
    last_report: Optional[Dict[str, object]] = None
    realtime: bool = True  # False when only month closes check quests


@dataclass(slots=True)
class QuestOutcome:
    """Changes the simulation applies on behalf of the tracker."""

    cash_delta: float = 0.0
    motivation_delta: float = 0.0
    unlock_perk: Optional[str] = None
    event: Optional[GameEvent] = None
    mark_action: bool = False


class ProgressTracker(Protocol):
    def on_month(self, snapshot: ProgressSnapshot) -> List[QuestOutcome]:
        ...

    def on_tick(self, snapshot: ProgressSnapshot) -> List[QuestOutcome]:
        ...


@dataclass(slots=True)
class Quest:
    id: str
    title: str
    description: str
    condition: str
    reward_type: str  # cash | motivation | perk
    reward_value: object
    deadline: float  # Game day
    failure_penalty: float = 0.0
    completed: bool = False

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "condition": self.condition,
            "reward_type": self.reward_type,
            "reward_value": self.reward_value,
            "deadline": self.deadline,
            "failure_penalty": self.failure_penalty,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "Quest":
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


# (id, title, description, condition, reward type, reward value, days to deadline, failure penalty)
QUEST_POOL = [
    ("satisfaction_90", "Gold Customer Service", "Reach 90% customer satisfaction.",
     "satisfaction_90", "cash", 50000.0, 5.0, 15000.0),
    ("recruit_tech", "Talent Hunt", "Employ at least 3 tech specialists.",
     "recruit_tech_3", "motivation", 20.0, 10.0, 5000.0),
    ("cash_reserve", "Rainy Day Fund", "Hold 500k in cash.",
     "cash_500k", "perk", "chef", 15.0, 25000.0),
]

CONDITIONS: Dict[str, Callable[[ProgressSnapshot], bool]] = {
    "satisfaction_90": lambda s: s.satisfaction >= 90,
    "recruit_tech_3": lambda s: s.tech_count >= 3,
    "cash_500k": lambda s: s.cash >= 500000,
}

# (id, title, predicate)
ACHIEVEMENTS = [
    ("team_of_five", "Team of Five", lambda s: s.employee_count >= 5),
    ("thousand_customers", "A Thousand Customers", lambda s: s.customer_base >= 1000),
    ("quarter_million", "Quarter Million", lambda s: s.cash >= 250000),
    ("moved_out", "Out of the Garage", lambda s: s.office_id != "garage"),
    ("first_delivery", "First Delivery", lambda s: s.completed_projects >= 1),
    ("level_three", "Established Business", lambda s: s.level >= 3),
    ("one_year", "First Anniversary", lambda s: s.month > 12),
]


class QuestBook:
    """Time-boxed objectives plus one-shot achievements."""

    def __init__(self, rng, days_per_month: int = 30):
        self.rng = rng
        self.days_per_month = days_per_month
        self.active_quests: List[Quest] = []
        self.completed_count = 0
        self.achievements: List[str] = []

    def generate_quest(self, current_day: float, min_days: float = 0.0) -> Optional[Quest]:
        quest_id, title, description, condition, reward_type, reward_value, days, penalty = self.rng.choice(QUEST_POOL)
        if any(q.id == quest_id for q in self.active_quests):
            return None
        quest = Quest(
            id=quest_id,
            title=title,
            description=description,
            condition=condition,
            reward_type=reward_type,
            reward_value=reward_value,
            deadline=current_day + max(days, min_days),
            failure_penalty=penalty,
        )
        self.active_quests.append(quest)
        return quest

    def _reward(self, quest: Quest) -> QuestOutcome:
        outcome = QuestOutcome(mark_action=True)
        if quest.reward_type == "cash":
            outcome.cash_delta = float(quest.reward_value)
        elif quest.reward_type == "motivation":
            outcome.motivation_delta = float(quest.reward_value)
        elif quest.reward_type == "perk":
            outcome.unlock_perk = str(quest.reward_value)
        outcome.event = system_event(
            QUEST_COMPLETED_ID,
            "Objective reached",
            f"'{quest.title}' completed.",
            type="gain",
            impact_value=outcome.cash_delta,
            icon="flag",
        )
        return outcome

    def check_quests(self, snapshot: ProgressSnapshot) -> List[QuestOutcome]:
        outcomes: List[QuestOutcome] = []
        remaining: List[Quest] = []
        for quest in self.active_quests:
            check = CONDITIONS.get(quest.condition)
            if check is not None and check(snapshot):
                quest.completed = True
                self.completed_count += 1
                outcomes.append(self._reward(quest))
                continue
            if snapshot.day >= quest.deadline:
                logger.info("Quest %s expired", quest.id)
                if quest.failure_penalty > 0:
                    outcomes.append(QuestOutcome(
                        cash_delta=-quest.failure_penalty,
                        event=system_event(
                            QUEST_FAILED_ID,
                            "Objective failed",
                            f"'{quest.title}' expired. A cash penalty was applied.",
                            type="loss",
                            impact_value=quest.failure_penalty,
                            icon="chart-down",
                        ),
                    ))
                continue
            remaining.append(quest)
        self.active_quests = remaining
        return outcomes

    def check_achievements(self, snapshot: ProgressSnapshot) -> List[QuestOutcome]:
        outcomes: List[QuestOutcome] = []
        for achievement_id, title, predicate in ACHIEVEMENTS:
            if achievement_id in self.achievements or not predicate(snapshot):
                continue
            self.achievements.append(achievement_id)
            outcomes.append(QuestOutcome(event=system_event(
                ACHIEVEMENT_ID, "Achievement unlocked", title, icon="medal",
            )))
        return outcomes

    def on_month(self, snapshot: ProgressSnapshot) -> List[QuestOutcome]:
        if not self.active_quests:
            # Turn-based quests stay open through the next month close
            min_days = 0.0 if snapshot.realtime else 2.0 * self.days_per_month
            self.generate_quest(snapshot.day, min_days)
        return self.check_quests(snapshot) + self.check_achievements(snapshot)

    def on_tick(self, snapshot: ProgressSnapshot) -> List[QuestOutcome]:
        return self.check_quests(snapshot)

    def to_dict(self) -> Dict[str, object]:
        return {
            "active_quests": [q.to_dict() for q in self.active_quests],
            "completed_count": self.completed_count,
            "achievements": list(self.achievements),
        }

    def load_dict(self, data: Dict[str, object]) -> None:
        self.active_quests = [Quest.from_dict(q) for q in data.get("active_quests") or []]
        self.completed_count = int(data.get("completed_count", 0))
        self.achievements = list(data.get("achievements") or [])
