"""
Tick scheduling.

``TickDriver`` turns elapsed wall-clock time into ``apply_tick`` calls,
applying the game speed and honouring pause. It has no timer of its own,
so tests feed it synthetic time. ``AsyncTickRunner`` is the production
timer: one asyncio task that calls the driver at a fixed cadence.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from config import CONFIG, SimulationConfig
from economy import Simulation, TickReport
from entities import clamp

logger = logging.getLogger(__name__)


class TickDriver:
    def __init__(self, sim: Simulation, config: Optional[SimulationConfig] = None):
        self.sim = sim
        self.config = config or sim.config or CONFIG

    @property
    def is_paused(self) -> bool:
        return self.sim.game.is_paused

    @property
    def speed(self) -> float:
        return self.sim.game.game_speed

    def pause(self) -> None:
        self.sim.game.is_paused = True

    def resume(self) -> None:
        if not self.sim.game.game_over:
            self.sim.game.is_paused = False

    def set_speed(self, speed: float) -> float:
        """Clamp and store the speed multiplier; returns the value kept."""
        speed = clamp(float(speed), 0.1, self.config.time.max_game_speed)
        self.sim.game.game_speed = speed
        return speed

    def day_fraction_for(self, elapsed_seconds: float) -> float:
        time = self.config.time
        game_seconds = elapsed_seconds * self.speed
        return game_seconds / time.seconds_per_game_day / time.days_per_month

    def advance(self, elapsed_seconds: float) -> Optional[TickReport]:
        """Advance the game by ``elapsed_seconds`` of wall-clock time."""
        if self.is_paused or self.sim.game.game_over or elapsed_seconds <= 0:
            return None
        report = self.sim.apply_tick(self.day_fraction_for(elapsed_seconds))
        if self.sim.game.game_over:
            self.pause()
        return report


class AsyncTickRunner:
    """
    Drives a ``TickDriver`` from a single asyncio task.

    Changing speed restarts the task, so at most one loop is ever live.
    """

    def __init__(
        self,
        driver: TickDriver,
        on_tick: Optional[Callable[[TickReport], Awaitable[None]]] = None,
        interval: Optional[float] = None,
    ):
        self.driver = driver
        self.on_tick = on_tick
        self.interval = interval or driver.config.time.tick_interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _loop(self) -> None:
        loop = asyncio.get_running_loop()
        last = loop.time()
        while True:
            await asyncio.sleep(self.interval)
            now = loop.time()
            elapsed, last = now - last, now
            try:
                report = self.driver.advance(elapsed)
                if report is not None and self.on_tick is not None:
                    await self.on_tick(report)
            except Exception:
                logger.exception("Tick loop stopping: tick failed")
                self.driver.pause()
                return
            if self.driver.sim.game.game_over:
                logger.info("Tick loop stopping: game over")
                return

    def start(self) -> None:
        if self.is_running:
            return
        self.driver.resume()
        self._task = asyncio.create_task(self._loop())
        logger.info("Tick loop started at speed %.1fx", self.driver.speed)

    async def stop(self) -> None:
        self.driver.pause()
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Tick loop stopped")

    async def set_speed(self, speed: float) -> float:
        was_running = self.is_running
        await self.stop()
        kept = self.driver.set_speed(speed)
        if was_running:
            self.start()
        return kept
