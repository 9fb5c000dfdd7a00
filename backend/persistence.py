"""
Save and load.

``snapshot`` turns a running simulation into plain JSON-ready data and
``restore`` overwrites a simulation from such data. Sections missing from
older snapshots fall back to defaults.

Save stores never raise into the simulation: I/O and decoding failures are
logged and reported as "nothing saved" / "no save available".
"""

import json
import logging
import sqlite3
from typing import Dict, Optional, Protocol

from company import CompanyState
from config import CONFIG

logger = logging.getLogger(__name__)


class SaveStore(Protocol):
    def save(self, snapshot: Dict[str, object]) -> bool:
        ...

    def load(self) -> Optional[Dict[str, object]]:
        ...


def _rng_state_to_json(state) -> list:
    version, internal, gauss = state
    return [version, list(internal), gauss]


def _rng_state_from_json(data) -> tuple:
    version, internal, gauss = data
    return (version, tuple(internal), gauss)


def snapshot(sim) -> Dict[str, object]:
    """Full serializable state of a simulation."""
    data = {
        "version": sim.config.persistence.snapshot_version,
        "state": sim.state.to_dict(),
        "game": sim.game.to_dict(),
        "accumulator": sim.accumulator.to_dict(),
        "events": sim.event_log.to_dict(),
        "last_price_day": sim.last_price_day,
        "rng": _rng_state_to_json(sim.rng.getstate()),
    }
    if sim.tracker is not None and hasattr(sim.tracker, "to_dict"):
        data["tracker"] = sim.tracker.to_dict()
    return data


def restore(sim, data: Dict[str, object]) -> None:
    """Overwrite ``sim`` with a snapshot."""
    # Imported here to keep economy -> persistence the only module-level edge
    from economy import GameState, MonthAccumulator
    from events import EventLog

    version = data.get("version", 1)
    if version != sim.config.persistence.snapshot_version:
        logger.info("Restoring snapshot version %s into version %s", version, sim.config.persistence.snapshot_version)

    sim.state = CompanyState.from_dict(data.get("state") or {}, sim.config)
    sim.game = GameState.from_dict(data.get("game") or {})
    sim.game.is_simulating = False
    sim.accumulator = MonthAccumulator.from_dict(data.get("accumulator") or {})
    sim.last_price_day = int(data.get("last_price_day", int(sim.game.current_day)))
    sim.state.now = sim.game.elapsed_seconds

    log = EventLog.from_dict(data.get("events") or {})
    sim.event_log.history = log.history
    sim.event_log.current_event = log.current_event

    rng_state = data.get("rng")
    if rng_state:
        try:
            sim.rng.setstate(_rng_state_from_json(rng_state))
        except (TypeError, ValueError) as exc:
            logger.warning("Ignoring unusable rng state in snapshot: %s", exc)

    tracker_data = data.get("tracker")
    if tracker_data and sim.tracker is not None and hasattr(sim.tracker, "load_dict"):
        sim.tracker.load_dict(tracker_data)


def save_game(sim, store: SaveStore) -> bool:
    return store.save(snapshot(sim))


def load_game(sim, store: SaveStore) -> bool:
    """Restore ``sim`` from ``store``; False when no usable save exists."""
    data = store.load()
    if data is None:
        return False
    try:
        restore(sim, data)
    except (KeyError, TypeError, ValueError) as exc:
        logger.error("Save data is corrupt, ignoring it: %s", exc)
        return False
    return True


class MemorySaveStore:
    """Keeps the last snapshot in memory, as JSON text."""

    def __init__(self):
        self.payload: Optional[str] = None

    def save(self, snapshot: Dict[str, object]) -> bool:
        self.payload = json.dumps(snapshot)
        return True

    def load(self) -> Optional[Dict[str, object]]:
        if self.payload is None:
            return None
        return json.loads(self.payload)


class SqliteSaveStore:
    """One JSON snapshot per save slot in a SQLite database."""

    def __init__(self, db_path: Optional[str] = None, slot: Optional[str] = None):
        self.db_path = db_path or CONFIG.persistence.db_path
        self.slot = slot or CONFIG.persistence.save_slot

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS saves (
                slot TEXT PRIMARY KEY,
                version INTEGER,
                payload TEXT NOT NULL,
                saved_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        return conn

    def save(self, snapshot: Dict[str, object]) -> bool:
        try:
            conn = self._connect()
            try:
                conn.execute(
                    "INSERT OR REPLACE INTO saves (slot, version, payload) VALUES (?, ?, ?)",
                    (self.slot, snapshot.get("version"), json.dumps(snapshot)),
                )
                conn.commit()
            finally:
                conn.close()
        except (sqlite3.Error, OSError, TypeError, ValueError) as exc:
            logger.error("Autosave to %s failed: %s", self.db_path, exc)
            return False
        logger.debug("Saved slot %s to %s", self.slot, self.db_path)
        return True

    def load(self) -> Optional[Dict[str, object]]:
        try:
            conn = self._connect()
            try:
                row = conn.execute("SELECT payload FROM saves WHERE slot = ?", (self.slot,)).fetchone()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as exc:
            logger.error("Loading slot %s from %s failed: %s", self.slot, self.db_path, exc)
            return None
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except ValueError as exc:
            logger.error("Slot %s holds unreadable data: %s", self.slot, exc)
            return None

    def delete(self) -> None:
        try:
            conn = self._connect()
            try:
                conn.execute("DELETE FROM saves WHERE slot = ?", (self.slot,))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            logger.error("Deleting slot %s failed: %s", self.slot, exc)
