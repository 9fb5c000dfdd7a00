"""
Random events and the domain-event channel.

The roller draws at most one event per call from a static catalogue and
always hands back a copy, so callers may decorate the description freely.
Events raised by the simulation itself (project outcomes, board moves,
strikes, quests) travel over the ``EventBus`` to whoever subscribed,
typically the ``EventLog`` shown to the player.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from entities import GameEvent

logger = logging.getLogger(__name__)

CYBERATTACK_EVENT_ID = 2

EVENT_CATALOGUE: List[GameEvent] = [
    GameEvent(1, "Major Client Contract", "A large client signed a yearly contract.", 0.05, "gain", 20000.0, icon="handshake"),
    GameEvent(CYBERATTACK_EVENT_ID, "Cyberattack", "Ransomware hit the file servers.", 0.04, "loss", 15000.0, icon="shield"),
    GameEvent(3, "Resignation", "An employee accepted an offer elsewhere.", 0.03, "employee_departure", icon="door"),
    GameEvent(4, "Industry Conference", "The team came back from a conference full of ideas.", 0.03, "boost", 1.0, icon="spark"),
    GameEvent(5, "Rent Indexation", "The landlord raised the service charges.", 0.03, "fixed_cost_increase", 1000.0, icon="building"),
    GameEvent(
        6, "Competitor Sabotage", "A rival spread rumours about the company.", 0.02, "sabotage", 5000.0,
        motivation_penalty=10.0, icon="skull",
    ),
    GameEvent(7, "Viral Post", "A customer's post about the product went viral.", 0.05, "gain", 10000.0, icon="rocket"),
    GameEvent(8, "Tax Audit", "The tax office found irregularities.", 0.03, "loss", 8000.0, icon="receipt"),
    GameEvent(9, "Equipment Failure", "Several laptops died the same week.", 0.04, "loss", 5000.0, icon="wrench"),
    GameEvent(10, "Press Feature", "A local newspaper profiled the company.", 0.05, "info", icon="newspaper"),
]

# Ids for events emitted by the simulation itself
PROJECT_COMPLETED_ID = 200
PROJECT_FAILED_ID = 201
LEVEL_UP_ID = 202
COST_CUTTING_ID = 203
BOARD_GIFT_ID = 204
BUY_OFFER_ID = 205
SELL_INTENT_ID = 206
STRIKE_STARTED_ID = 207
STRIKE_RESIGNATION_ID = 208
BANKRUPTCY_ID = 209
FUNDS_RAISED_ID = 210
BOARD_DECISION_ID = 211
QUEST_FAILED_ID = 300
QUEST_COMPLETED_ID = 301
ACHIEVEMENT_ID = 302


def system_event(
    event_id: int,
    name: str,
    description: str,
    type: str = "info",
    impact_value: float = 0.0,
    icon: str = "",
) -> GameEvent:
    """Build a one-off event that never goes through the roller."""
    return GameEvent(
        id=event_id,
        name=name,
        description=description,
        probability=1.0,
        type=type,
        impact_value=impact_value,
        icon=icon,
    )


def roll_random_event(catalogue: Sequence[GameEvent], rng) -> Optional[GameEvent]:
    """
    Run one Bernoulli trial per catalogue entry and pick one winner.

    Returns a copy of the winning entry, or None when nothing triggered.
    """
    triggered = [event for event in catalogue if rng.random() < event.probability]
    if not triggered:
        return None
    return rng.choice(triggered).copy()


def resolve_event(event: Optional[GameEvent], state, rng) -> float:
    """
    Apply the non-cash effects of ``event`` to ``state`` and return its
    cash impact, which the caller books together with the month's result.
    """
    if event is None:
        return 0.0

    if event.type == "gain":
        return event.impact_value

    if event.type == "loss":
        loss = event.impact_value
        if event.id == CYBERATTACK_EVENT_ID:
            loss *= 1.0 - state.tech_bonus
        return -loss

    if event.type == "employee_departure":
        departed = state.remove_random_employee(rng)
        if departed is not None:
            event.description += f" ({departed.name} left the company)"
        return 0.0

    if event.type == "boost":
        state.boost_all_skills(int(event.impact_value))
        return 0.0

    if event.type == "fixed_cost_increase":
        state.increase_fixed_costs(event.impact_value)
        return 0.0

    if event.type == "sabotage":
        state.apply_sabotage(event.motivation_penalty)
        return -event.impact_value

    if event.type != "info":
        logger.warning("Ignoring event %s with unknown type %r", event.id, event.type)
    return 0.0


class EventBus:
    """One-way publish/subscribe channel for domain events."""

    def __init__(self):
        self._subscribers: List[Callable[[GameEvent], None]] = []

    def subscribe(self, handler: Callable[[GameEvent], None]) -> None:
        self._subscribers.append(handler)

    def unsubscribe(self, handler: Callable[[GameEvent], None]) -> None:
        if handler in self._subscribers:
            self._subscribers.remove(handler)

    def publish(self, event: GameEvent) -> None:
        logger.debug("Event %s: %s", event.id, event.name)
        for handler in list(self._subscribers):
            handler(event)


class EventLog:
    """The single event currently on display plus the full history."""

    def __init__(self, history: Optional[List[GameEvent]] = None, current_event: Optional[GameEvent] = None):
        self.history: List[GameEvent] = history or []
        self.current_event = current_event

    def record(self, event: GameEvent) -> None:
        self.current_event = event
        self.history.append(event)

    def dismiss(self) -> None:
        self.current_event = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "current_event": self.current_event.to_dict() if self.current_event else None,
            "history": [event.to_dict() for event in self.history],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "EventLog":
        current = data.get("current_event")
        return cls(
            history=[GameEvent.from_dict(e) for e in data.get("history") or []],
            current_event=GameEvent.from_dict(current) if current else None,
        )
