import json
import logging
import os
import sys

# Add current directory to path so we can import backend modules
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from typing import Any, Dict, Optional
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ValidationError

from config import CONFIG
from economy import Simulation, TickReport
from governance import BoardDecision
from persistence import SqliteSaveStore, load_game, save_game
from scheduler import AsyncTickRunner, TickDriver

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class SetupCommand(BaseModel):
    company_name: str = Field(min_length=1)
    ceo_name: str = Field(min_length=1)
    appearance: Dict[str, str] = Field(default_factory=dict)
    seed: Optional[int] = None


class SpeedCommand(BaseModel):
    speed: float = Field(gt=0)


class ActionCommand(BaseModel):
    action: str
    params: Dict[str, Any] = Field(default_factory=dict)


class VoteCommand(BaseModel):
    title: str
    cash_impact: float = 0.0
    motivation_impact: float = 0.0
    market_share_impact: float = 0.0
    risk: float = Field(default=0.0, ge=0.0, le=1.0)
    required_support: Optional[float] = Field(default=None, ge=0.0, le=100.0)
    mode: str = Field(default="share", pattern="^(share|influence)$")


class SessionManager:
    def __init__(self, save_store=None):
        self.save_store = save_store or SqliteSaveStore()
        self.sim: Optional[Simulation] = None
        self.driver: Optional[TickDriver] = None
        self.runner: Optional[AsyncTickRunner] = None
        self.active_websocket: Optional[WebSocket] = None

    def initialize(self, setup: SetupCommand) -> Dict[str, Any]:
        self.sim = Simulation.new_game(seed=setup.seed, config=CONFIG, save_store=self.save_store)
        self.driver = TickDriver(self.sim)
        self.runner = AsyncTickRunner(self.driver, on_tick=self.push_tick)
        result = self.sim.perform(
            "configure_company",
            name=setup.company_name,
            ceo_name=setup.ceo_name,
            appearance=setup.appearance,
        )
        logger.info(f"New game for {setup.company_name} (seed={setup.seed})")
        return {"ok": result.ok, "reason": result.reason}

    def ensure_game(self) -> Simulation:
        if self.sim is None:
            self.sim = Simulation.new_game(config=CONFIG, save_store=self.save_store)
            self.driver = TickDriver(self.sim)
            self.runner = AsyncTickRunner(self.driver, on_tick=self.push_tick)
        return self.sim

    def state_payload(self) -> Dict[str, Any]:
        if self.sim is None:
            return {"type": "STATE", "ready": False}
        sim = self.sim
        current = sim.event_log.current_event
        return {
            "type": "STATE",
            "ready": True,
            "summary": sim.summary(),
            "company": sim.state.to_dict(),
            "game": {
                "current_month": sim.game.current_month,
                "current_day": sim.game.current_day,
                "game_speed": sim.game.game_speed,
                "is_paused": sim.game.is_paused,
                "game_over": sim.game.game_over,
            },
            "reports": [r.to_dict() for r in sim.game.reports[-12:]],
            "current_event": current.to_dict() if current else None,
        }

    async def push_tick(self, report: TickReport) -> None:
        if self.active_websocket is None:
            return
        payload = self.state_payload()
        payload["type"] = "TICK"
        if report.month_report is not None:
            payload["month_report"] = report.month_report.to_dict()
        await self.active_websocket.send_json(payload)

    async def handle(self, data: Dict[str, Any]) -> Dict[str, Any]:
        command = data.get("command")

        if command == "SETUP":
            if self.runner is not None:
                await self.runner.stop()
            result = self.initialize(SetupCommand.model_validate(data.get("config") or {}))
            return {"type": "SETUP_COMPLETE", **result}

        sim = self.ensure_game()

        if command == "START":
            self.runner.start()
            return {"type": "STARTED", "speed": sim.game.game_speed}
        if command == "STOP":
            await self.runner.stop()
            return {"type": "STOPPED"}
        if command == "SPEED":
            speed = await self.runner.set_speed(SpeedCommand.model_validate(data).speed)
            return {"type": "SPEED", "speed": speed}
        if command == "SIMULATE_MONTH":
            report = sim.simulate_month()
            return {"type": "MONTH", "report": report.to_dict() if report else None, "game_over": sim.game.game_over}
        if command == "ACTION":
            action = ActionCommand.model_validate(data)
            result = sim.perform(action.action, **action.params)
            return {"type": "ACTION_RESULT", "action": action.action, "ok": result.ok,
                    "reason": result.reason, "value": result.value}
        if command == "VOTE":
            vote = VoteCommand.model_validate(data.get("decision") or {})
            outcome = sim.vote(BoardDecision(**vote.model_dump()))
            return {"type": "VOTE_RESULT", "approved": outcome.approved,
                    "support": outcome.support, "votes": outcome.votes, "reason": outcome.reason}
        if command == "DISMISS_EVENT":
            sim.dismiss_event()
            return {"type": "EVENT_DISMISSED"}
        if command == "SAVE":
            return {"type": "SAVED", "ok": save_game(sim, self.save_store)}
        if command == "LOAD":
            if self.runner is not None:
                await self.runner.stop()
            return {"type": "LOADED", "ok": load_game(sim, self.save_store)}
        if command == "STATE":
            return self.state_payload()

        return {"type": "ERROR", "error": f"unknown command {command!r}"}


manager = SessionManager()


@app.get("/state")
async def get_state():
    return manager.state_payload()


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await websocket.accept()
    manager.active_websocket = websocket
    logger.info("WebSocket connected")

    try:
        while True:
            data = await websocket.receive_json()
            try:
                response = await manager.handle(data)
            except ValidationError as e:
                response = {"type": "ERROR", "error": json.loads(e.json(include_url=False))}
            await websocket.send_json(response)

    except WebSocketDisconnect:
        if manager.runner is not None:
            await manager.runner.stop()
        manager.active_websocket = None
        logger.info("Client disconnected")
