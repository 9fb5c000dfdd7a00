"""
Run a headless Bizdom game.

Plays a new company for a number of months, either turn by turn with the
monthly pipeline or in real-time mode with one tick per game day, prints a
per-month table and optionally exports the monthly reports to SQLite.
"""

import argparse
import logging
import sqlite3
import time
from pathlib import Path
from typing import List, Optional

from config import CONFIG
from economy import Simulation
from entities import MonthlyReport
from persistence import SqliteSaveStore

logger = logging.getLogger(__name__)


def init_database(db_path: str):
    """Initialize SQLite database with the report schema."""
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS monthly_reports (
            month INTEGER PRIMARY KEY,
            revenue INTEGER,
            total_salaries INTEGER,
            fixed_costs INTEGER,
            total_expenses INTEGER,
            profit INTEGER,
            taxes INTEGER,
            net_profit INTEGER,
            cash_after INTEGER,
            customer_base INTEGER,
            churned_customers INTEGER,
            employee_count INTEGER,
            productivity REAL,
            new_customers INTEGER,
            marketing_budget INTEGER,
            economic_cycle TEXT,
            share_price REAL,
            event_name TEXT
        )
    """)

    conn.commit()
    conn.close()


def export_reports(conn: sqlite3.Connection, reports: List[MonthlyReport]) -> None:
    conn.executemany(
        """
        INSERT OR REPLACE INTO monthly_reports VALUES
        (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            (
                r.month, r.revenue, r.total_salaries, r.fixed_costs, r.total_expenses,
                r.profit, r.taxes, r.net_profit, r.cash_after, r.customer_base,
                r.churned_customers, r.employee_count, r.productivity, r.new_customers,
                r.marketing_budget, r.economic_cycle, r.share_price,
                r.event.name if r.event else None,
            )
            for r in reports
        ],
    )
    conn.commit()


def play(sim: Simulation, months: int, realtime: bool = False) -> List[MonthlyReport]:
    """Advance ``sim`` until ``months`` reports exist or the company goes bankrupt."""
    day_fraction = 1.0 / CONFIG.time.days_per_month
    reports: List[MonthlyReport] = []
    while len(reports) < months and not sim.game.game_over:
        if realtime:
            tick = sim.apply_tick(day_fraction)
            report = tick.month_report if tick else None
        else:
            report = sim.simulate_month()
        if report is not None:
            reports.append(report)
            print(f"{report.month:5d} | {report.revenue:9d} | {report.total_expenses:9d} | "
                  f"{report.net_profit:9d} | {report.cash_after:10d} | {report.customer_base:9d} | "
                  f"{report.employee_count:5d} | {report.economic_cycle:9s} | "
                  f"{report.event.name if report.event else ''}")
    return reports


def main(
    months: int = 24,
    seed: Optional[int] = None,
    realtime: bool = False,
    db_path: Optional[str] = None,
    save_slot: Optional[str] = None,
):
    """Run one game and print the monthly table."""
    print("=" * 100)
    print(f"BIZDOM SIMULATION ({months} months, seed={seed}, {'real-time' if realtime else 'turn-based'})")
    print("=" * 100)

    save_store = SqliteSaveStore(db_path, save_slot) if save_slot else None
    sim = Simulation.new_game(seed=seed, save_store=save_store)
    sim.perform("configure_company", name="Headless Ltd", ceo_name="Autopilot")

    print("Month |   Revenue |  Expenses |       Net |       Cash | Customers | Staff | Cycle     | Event")
    print("-" * 100)
    start_time = time.time()
    reports = play(sim, months, realtime)
    total_time = time.time() - start_time

    print()
    if sim.game.game_over:
        print(f"Company went bankrupt after {len(reports)} months.")
    print(f"Simulated {len(reports)} months in {total_time:.2f} seconds")

    if db_path:
        init_database(db_path)
        conn = sqlite3.connect(db_path)
        try:
            export_reports(conn, reports)
        finally:
            conn.close()
        print(f"Reports saved to: {Path(db_path).resolve()}")
    return reports


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Run a headless Bizdom game.")
    parser.add_argument("--months", type=int, default=24, help="Number of months to simulate")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the random source")
    parser.add_argument("--realtime", action="store_true", help="Advance with daily ticks instead of whole months")
    parser.add_argument("--db", type=str, default=None, help="SQLite file for the monthly report export")
    parser.add_argument("--save-slot", type=str, default=None, help="Autosave into this slot of the --db file")
    args = parser.parse_args()

    main(
        months=args.months,
        seed=args.seed,
        realtime=args.realtime,
        db_path=args.db,
        save_slot=args.save_slot,
    )
