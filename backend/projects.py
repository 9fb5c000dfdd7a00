"""
Projects and Tenders

Tenders are pending project offers that expire when nobody is assigned to
them. Once staffed and started, a project advances with its team's
efficiency every tick, burns its operating budget, and ends completed
(reward, board goodwill, maybe a level-up) or failed.
"""

import logging
from typing import List, Tuple

import numpy as np

from catalogue import TENDER_TEMPLATES
from config import CONFIG, SimulationConfig
from entities import ActionResult, Employee, Project, clamp
from events import PROJECT_COMPLETED_ID, PROJECT_FAILED_ID, system_event
from governance import check_level_up

logger = logging.getLogger(__name__)


def _reject(reason: str) -> ActionResult:
    logger.debug("Project action rejected: %s", reason)
    return ActionResult.rejected(reason)


def generate_tender(state, rng, current_day: float, config: SimulationConfig = CONFIG) -> Project:
    """Draw a template and scale its money figures with the company level."""
    template = rng.choice(TENDER_TEMPLATES)
    scale = 1.0 + config.projects.level_reward_scaling * (state.company.level - 1)
    project = Project(
        id=state.next_project_id,
        title=str(template["title"]),
        duration=float(template["duration"]),
        cost=round(float(template["cost"]) * scale),
        budget=round(float(template["budget"]) * scale),
        team_size=int(template["team_size"]),
        reward=round(float(template["reward"]) * scale),
        required_specialties=dict(template["required_specialties"]),
        shareholder_opinion=float(template["shareholder_opinion"]),
        expires_at=current_day + config.projects.tender_lifetime_days,
    )
    state.next_project_id += 1
    state.projects.append(project)
    return project


def housekeep_tenders(
    state,
    current_day: float,
    day_fraction: float,
    rng,
    config: SimulationConfig = CONFIG,
) -> Tuple[List[Project], List[Project]]:
    """Drop expired unstaffed tenders, then maybe spawn one. Returns (dropped, spawned)."""
    dropped = [
        p for p in state.projects
        if p.status == "pending" and not p.assigned_employees and p.expires_at < current_day
    ]
    if dropped:
        state.projects = [p for p in state.projects if p not in dropped]

    spawned: List[Project] = []
    backlog = sum(1 for p in state.projects if p.status == "pending")
    days = day_fraction * config.time.days_per_month
    if backlog < config.projects.tender_backlog_threshold and rng.random() < config.projects.tender_spawn_chance_per_day * days:
        spawned.append(generate_tender(state, rng, current_day, config))
    return dropped, spawned


def assign_employee(state, project_id: int, employee_id: int) -> ActionResult:
    project = state.get_project(project_id)
    if project is None or not project.is_open:
        return _reject(f"project {project_id} not open")
    employee = state.get_employee(employee_id)
    if employee is None:
        return _reject(f"employee {employee_id} not found")
    if employee.is_on_strike:
        return _reject("employee is on strike")
    if employee_id in state.assigned_employee_ids:
        return _reject("employee already assigned to a project")
    if len(project.assigned_employees) >= project.team_size:
        return _reject("project team is full")
    project.assigned_employees.append(employee_id)
    return ActionResult.accepted(len(project.assigned_employees))


def unassign_employee(state, project_id: int, employee_id: int) -> ActionResult:
    project = state.get_project(project_id)
    if project is None or not project.is_open:
        return _reject(f"project {project_id} not open")
    if employee_id not in project.assigned_employees:
        return _reject("employee not on this project")
    project.assigned_employees.remove(employee_id)
    return ActionResult.accepted(len(project.assigned_employees))


def _team(state, project: Project) -> List[Employee]:
    return [e for e in state.employees if e.id in project.assigned_employees]


def start_project(state, project_id: int, current_day: float) -> ActionResult:
    """Activate a staffed tender and pay its activation fee."""
    project = state.get_project(project_id)
    if project is None:
        return _reject(f"project {project_id} not found")
    if project.status != "pending":
        return _reject("project already started")
    team = _team(state, project)
    if len(team) < project.team_size:
        return _reject("team incomplete")
    for specialty, needed in project.required_specialties.items():
        if sum(1 for e in team if e.specialty == specialty) < needed:
            return _reject(f"needs {needed} {specialty} specialist(s)")
    if state.company.cash < project.cost:
        return _reject("insufficient funds")

    state.update_cash(-project.cost)
    project.status = "active"
    project.started_day = current_day
    state.mark_major_action()
    return ActionResult.accepted(project.id)


def team_efficiency(team: List[Employee]) -> float:
    if not team:
        return 0.0
    motivation = float(np.mean([e.motivation for e in team]))
    fatigue = float(np.mean([e.fatigue for e in team]))
    skill = float(np.mean([e.skill_level for e in team]))
    return (0.5 + motivation / 100.0) * (1.0 - fatigue / 200.0) * (skill / 2.5)


def complete_project(state, project: Project, bus=None, config: SimulationConfig = CONFIG) -> None:
    project.status = "completed"
    project.progress = 100.0
    state.update_cash(project.reward)
    for member in state.board:
        member.satisfaction = clamp(member.satisfaction + project.shareholder_opinion, 0.0, 100.0)
    state.company.completed_projects += 1
    state.refresh_governance()
    logger.info("Project %d '%s' completed", project.id, project.title)
    if bus is not None:
        bus.publish(system_event(
            PROJECT_COMPLETED_ID,
            "Project delivered",
            f"'{project.title}' was delivered. Reward: {project.reward:,.0f}.",
            type="gain",
            impact_value=project.reward,
            icon="check",
        ))
    check_level_up(state, bus, config)


def fail_project(state, project: Project, reason: str, bus=None) -> None:
    project.status = "failed"
    for member in state.board:
        member.satisfaction = clamp(member.satisfaction - project.shareholder_opinion, 0.0, 100.0)
    state.refresh_governance()
    logger.info("Project %d '%s' failed: %s", project.id, project.title, reason)
    if bus is not None:
        bus.publish(system_event(
            PROJECT_FAILED_ID,
            "Project failed",
            f"'{project.title}' failed: {reason}.",
            type="loss",
            icon="cross",
        ))


def advance_projects(
    state,
    day_fraction: float,
    current_day: float,
    bus=None,
    config: SimulationConfig = CONFIG,
) -> Tuple[List[Project], List[Project]]:
    """Progress every active project by ``day_fraction``. Returns (completed, failed)."""
    completed: List[Project] = []
    failed: List[Project] = []

    for project in [p for p in state.projects if p.status == "active"]:
        team = _team(state, project)
        if not team:
            fail_project(state, project, "no team left", bus)
            failed.append(project)
            continue

        state.update_cash(-project.budget / config.time.days_per_month * day_fraction)
        efficiency = team_efficiency(team)
        project.progress += config.projects.progress_scale / project.duration * day_fraction * efficiency

        if project.progress >= 100.0:
            complete_project(state, project, bus, config)
            completed.append(project)
            continue

        elapsed = current_day - (project.started_day or 0.0)
        if elapsed > project.duration * config.projects.overrun_factor:
            fail_project(state, project, "deadline overrun", bus)
            failed.append(project)

    return completed, failed
