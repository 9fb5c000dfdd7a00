"""
Tests for tenders, project staffing and project progress.
"""

import pytest

import projects
from conftest import build_sim, build_state, fixed_random, make_employee
from entities import BoardMember, Project
from events import EventBus, LEVEL_UP_ID, PROJECT_COMPLETED_ID, PROJECT_FAILED_ID


def website(project_id=1, **overrides):
    fields = dict(
        duration=20.0,
        cost=5000.0,
        budget=6000.0,
        team_size=2,
        reward=30000.0,
        required_specialties={"tech": 1, "creative": 1},
        shareholder_opinion=3.0,
        expires_at=10.0,
    )
    fields.update(overrides)
    return Project(project_id, "Website", **fields)


def staffed_state(**project_overrides):
    employees = [
        make_employee(1, specialty="tech"),
        make_employee(2, specialty="creative"),
        make_employee(3, specialty="sales"),
    ]
    state = build_state(employees, board=[BoardMember(1, "Investor", satisfaction=70.0, share_percent=20.0)])
    state.projects.append(website(**project_overrides))
    return state


class TestTenders:

    def test_generate_scales_with_level(self):
        state = build_state()
        state.company.level = 3

        tender = projects.generate_tender(state, fixed_random(0.0), current_day=12.0)

        assert tender.title == "Municipal Website Redesign"
        assert tender.reward == 45000
        assert tender.cost == 7500
        assert tender.budget == 9000
        assert tender.expires_at == 22.0
        assert tender.status == "pending"
        assert state.projects == [tender]

    def test_ids_are_unique(self):
        state = build_state()

        ids = [projects.generate_tender(state, fixed_random(0.0), 0.0).id for _ in range(3)]

        assert len(set(ids)) == 3

    def test_expired_unstaffed_tenders_are_dropped(self):
        state = build_state([make_employee(1)])
        stale = website(1, expires_at=5.0)
        staffed = website(2, expires_at=5.0, assigned_employees=[1])
        fresh = website(3, expires_at=50.0)
        state.projects.extend([stale, staffed, fresh])

        dropped, spawned = projects.housekeep_tenders(state, 6.0, 0.1, fixed_random(0.99))

        assert dropped == [stale]
        assert spawned == []
        assert state.projects == [staffed, fresh]

    def test_spawn_only_below_backlog(self):
        state = build_state()

        _, spawned = projects.housekeep_tenders(state, 0.0, 0.1, fixed_random(0.0))
        assert len(spawned) == 1

        state.projects.extend([website(10, expires_at=99.0), website(11, expires_at=99.0)])
        _, spawned = projects.housekeep_tenders(state, 0.0, 0.1, fixed_random(0.0))
        assert spawned == []
        assert len(state.projects) == 3


class TestStaffing:

    def test_assign_and_unassign(self):
        state = staffed_state()

        assert projects.assign_employee(state, 1, 1).value == 1
        assert projects.unassign_employee(state, 1, 1).ok
        assert state.projects[0].assigned_employees == []

    def test_assign_rejections(self):
        state = staffed_state(team_size=1)
        state.get_employee(3).is_on_strike = True

        assert projects.assign_employee(state, 99, 1).reason == "project 99 not open"
        assert projects.assign_employee(state, 1, 42).reason == "employee 42 not found"
        assert projects.assign_employee(state, 1, 3).reason == "employee is on strike"
        assert projects.assign_employee(state, 1, 1).ok
        assert projects.assign_employee(state, 1, 1).reason == "employee already assigned to a project"
        assert projects.assign_employee(state, 1, 2).reason == "project team is full"

    def test_one_project_per_employee(self):
        state = staffed_state()
        state.projects.append(website(2))

        assert projects.assign_employee(state, 1, 1).ok
        assert not projects.assign_employee(state, 2, 1).ok

    def test_closed_project_takes_nobody(self):
        state = staffed_state(status="completed")

        assert projects.assign_employee(state, 1, 1).reason == "project 1 not open"

    def test_fired_employee_leaves_the_team(self):
        state = staffed_state()
        projects.assign_employee(state, 1, 1)

        assert state.fire_employee(1).ok
        assert state.projects[0].assigned_employees == []


class TestStart:

    def test_start_requires_a_full_team(self):
        state = staffed_state()
        projects.assign_employee(state, 1, 1)

        assert projects.start_project(state, 1, 0.0).reason == "team incomplete"

    def test_start_requires_specialties(self):
        state = staffed_state()
        projects.assign_employee(state, 1, 1)
        projects.assign_employee(state, 1, 3)

        assert projects.start_project(state, 1, 0.0).reason == "needs 1 creative specialist(s)"

    def test_start_requires_cash(self):
        state = staffed_state()
        state.company.cash = 100.0
        projects.assign_employee(state, 1, 1)
        projects.assign_employee(state, 1, 2)

        assert projects.start_project(state, 1, 0.0).reason == "insufficient funds"
        assert state.projects[0].status == "pending"

    def test_start_pays_and_activates(self):
        state = staffed_state()
        state.now = 50.0
        projects.assign_employee(state, 1, 1)
        projects.assign_employee(state, 1, 2)

        result = projects.start_project(state, 1, 7.0)

        project = state.projects[0]
        assert result.ok
        assert project.status == "active"
        assert project.started_day == 7.0
        assert state.company.cash == 95000.0
        assert state.market.last_action_time == 50.0
        assert state.critical_employee_ids == {1, 2}
        assert projects.start_project(state, 1, 8.0).reason == "project already started"


class TestProgress:

    def active_state(self, **overrides):
        state = staffed_state(status="active", assigned_employees=[1, 2], started_day=0.0, **overrides)
        return state, state.projects[0]

    def test_efficiency(self):
        team = [make_employee(1, motivation=80.0, fatigue=0.0, skill_level=3)]

        assert projects.team_efficiency(team) == pytest.approx(1.56)
        assert projects.team_efficiency([]) == 0.0

    def test_progress_and_budget_burn(self):
        state, project = self.active_state()

        completed, failed = projects.advance_projects(state, 0.1, 3.0)

        assert completed == [] and failed == []
        # 3000 / 20 days * 0.1 * efficiency 1.56
        assert project.progress == pytest.approx(23.4)
        assert state.company.cash == pytest.approx(100000.0 - 20.0)

    def test_completion_rewards(self):
        state, project = self.active_state(progress=99.0)
        bus = EventBus()
        received = []
        bus.subscribe(received.append)

        completed, _ = projects.advance_projects(state, 0.1, 3.0, bus)

        assert completed == [project]
        assert project.status == "completed"
        assert project.progress == 100.0
        assert state.company.cash == pytest.approx(100000.0 - 20.0 + 30000.0)
        assert state.company.completed_projects == 1
        assert state.board[0].satisfaction == 73.0
        assert received[0].id == PROJECT_COMPLETED_ID
        assert state.critical_employee_ids == set()

    def test_third_delivery_levels_up(self):
        state, project = self.active_state(progress=99.0)
        state.company.completed_projects = 2
        bus = EventBus()
        received = []
        bus.subscribe(received.append)

        projects.advance_projects(state, 0.1, 3.0, bus)

        assert state.company.level == 2
        assert [e.id for e in received] == [PROJECT_COMPLETED_ID, LEVEL_UP_ID]

    def test_team_gone_fails_the_project(self):
        state, project = self.active_state()
        state.remove_employee(1)
        state.remove_employee(2)
        bus = EventBus()
        received = []
        bus.subscribe(received.append)

        _, failed = projects.advance_projects(state, 0.1, 3.0, bus)

        assert failed == [project]
        assert project.status == "failed"
        assert state.board[0].satisfaction == 67.0
        assert received[0].id == PROJECT_FAILED_ID
        assert "no team left" in received[0].description

    def test_deadline_overrun(self):
        state, project = self.active_state()
        for e in state.employees:
            e.motivation = 0.0
            e.fatigue = 100.0
            e.skill_level = 1

        _, failed = projects.advance_projects(state, 0.1, 41.0)

        assert failed == [project]
        assert project.progress < 100.0

    def test_project_delivered_through_ticks(self):
        state = staffed_state()
        sim = build_sim(state, rng=fixed_random(0.9))
        assert sim.perform("assign_employee", project_id=1, employee_id=1).ok
        assert sim.perform("assign_employee", project_id=1, employee_id=2).ok
        assert sim.perform("start_project", project_id=1).ok

        delivered = []
        for _ in range(30):
            report = sim.apply_tick(1.0 / 30)
            delivered.extend(report.completed_projects)
            if delivered:
                break

        assert delivered == [1]
        assert state.company.completed_projects == 1
