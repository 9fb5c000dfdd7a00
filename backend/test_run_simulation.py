"""
Tests for the headless runner and its SQLite export.
"""

import sqlite3

from economy import Simulation
from persistence import SqliteSaveStore
from run_simulation import main, play


def test_turn_based_play():
    sim = Simulation.new_game(seed=4)

    reports = play(sim, 3)

    assert [r.month for r in reports] == [1, 2, 3]


def test_realtime_play_closes_months_from_ticks():
    sim = Simulation.new_game(seed=4)

    reports = play(sim, 2, realtime=True)

    assert [r.month for r in reports] == [1, 2]
    assert sim.game.current_day >= 60.0 - 1e-6


def test_export_to_sqlite(tmp_path):
    db_path = str(tmp_path / "reports.db")

    reports = main(months=4, seed=21, db_path=db_path)

    conn = sqlite3.connect(db_path)
    try:
        rows = conn.execute("SELECT month, revenue, cash_after FROM monthly_reports ORDER BY month").fetchall()
    finally:
        conn.close()
    assert [row[0] for row in rows] == [r.month for r in reports]
    assert rows[0][1] == reports[0].revenue


def test_save_slot_receives_autosaves(tmp_path):
    db_path = str(tmp_path / "game.db")

    main(months=2, seed=3, db_path=db_path, save_slot="cli")

    saved = SqliteSaveStore(db_path, "cli").load()
    assert saved["game"]["current_month"] == 3
