"""Tests for renoflow.rules.recommend: next actions."""

from renoflow import (
    TaskStatus,
    Task,
    WorkflowConfig,
    build_task_seed,
    evaluate,
    mark_complete,
    recommend,
)
from renoflow.rules import ALL_COMPLETE_BANNER, POWER_HINT, MAX_ACTIONS


def complete(key, name=None, requires_power=False):
    return Task(key=key, name=name or key, requires_power=requires_power, status=TaskStatus.COMPLETE)


class TestScenarios:
    """Next actions for the reference properties."""

    def test_base_tasks_no_hint(self):
        """Scenario 1: both base tasks listed, no power hint."""
        tasks = evaluate(build_task_seed({}), "not_checked")
        assert recommend(tasks, "not_checked") == [
            "• Paperwork & POs",
            "• Check if property is on BGAS",
        ]

    def test_heating_gives_power_hint(self):
        """Scenario 2: non-power tasks listed plus the power hint."""
        tasks = evaluate(build_task_seed({"heating_referral": True}), "not_checked")
        assert recommend(tasks, "not_checked") == [
            "• Paperwork & POs",
            "• Check if property is on BGAS",
            POWER_HINT,
        ]


class TestOrdering:
    """Open tasks are ordered by workflow position."""

    def test_workflow_order_over_seed_order(self):
        tasks = build_task_seed({"asbestos_survey": True, "glazier": True, "isolator_required": True})
        # seed order: paperwork, bgas, asbestos_survey, glazier, isolator
        tasks = evaluate(mark_complete(tasks, "paperwork_pos"), "power_ready")
        assert recommend(tasks, "power_ready") == [
            "• Check if property is on BGAS",
            "• Asbestos Survey",
            "• Isolator Required",
            "• Glazier",
        ]

    def test_unknown_keys_last_in_seed_order(self):
        tasks = [
            Task(key="zeta", name="Zeta"),
            Task(key="alpha", name="Alpha"),
            Task(key="bgas_check", name="BGAS"),
            Task(key="paperwork_pos", name="Paperwork"),
        ]
        assert recommend(tasks, "power_ready") == ["• Paperwork", "• BGAS", "• Zeta", "• Alpha"]

    def test_blocked_and_complete_excluded(self):
        tasks = [
            complete("paperwork_pos", "Paperwork"),
            Task(key="heating", name="Heating", status=TaskStatus.BLOCKED, blocked_reason="Power not ready"),
            Task(key="glazier", name="Glazier"),
        ]
        assert recommend(tasks, "power_ready") == ["• Glazier"]

    def test_custom_config(self):
        config = WorkflowConfig(order=("b", "a"))
        tasks = [Task(key="a", name="A"), Task(key="b", name="B")]
        assert recommend(tasks, "power_ready", config) == ["• B", "• A"]

    def test_stable_across_runs(self):
        tasks = evaluate(build_task_seed({"asbestos_survey": True, "rot_works": True}), "e10")
        assert recommend(tasks, "e10") == recommend(tasks, "e10")


class TestLimit:
    """At most MAX_ACTIONS task lines."""

    def test_capped_at_ten(self):
        tasks = [Task(key=f"t{i:02d}", name=f"Task {i}") for i in range(15)]
        actions = recommend(tasks, "power_ready")
        assert MAX_ACTIONS == 10
        assert len(actions) == 10
        assert actions[0] == "• Task 0"
        assert actions[-1] == "• Task 9"

    def test_hint_after_cap(self):
        tasks = [Task(key=f"t{i:02d}", name=f"Task {i}", requires_power=(i == 14)) for i in range(15)]
        tasks[14] = tasks[14].model_copy(update={"status": TaskStatus.BLOCKED, "blocked_reason": "Power not ready"})
        actions = recommend(tasks, "not_checked")
        assert len(actions) == 11
        assert actions[-1] == POWER_HINT

    def test_custom_limit(self):
        tasks = [Task(key=f"t{i}", name=f"Task {i}") for i in range(5)]
        assert len(recommend(tasks, "power_ready", limit=3)) == 3


class TestBannerAndHint:
    """Completion banner and power hint."""

    def test_all_complete_banner(self):
        tasks = [complete("paperwork_pos"), complete("heating", requires_power=True)]
        assert recommend(tasks, "not_checked") == [ALL_COMPLETE_BANNER]

    def test_no_banner_for_empty_list(self):
        assert recommend([], "power_ready") == []
        assert recommend([], "not_checked") == []

    def test_no_banner_while_work_remains(self):
        tasks = [complete("paperwork_pos"), Task(key="bgas_check", name="BGAS")]
        assert ALL_COMPLETE_BANNER not in recommend(tasks, "power_ready")

    def test_single_hint_for_many_power_tasks(self):
        flags = {"heating_referral": True, "bathroom_renewal": True, "altro_flooring": True, "epc": True}
        tasks = evaluate(build_task_seed(flags), "appointment_fault_exchange")
        actions = recommend(tasks, "appointment_fault_exchange")
        assert actions.count(POWER_HINT) == 1
        assert actions[-1] == POWER_HINT

    def test_no_hint_when_power_ready(self):
        tasks = evaluate(build_task_seed({"heating_referral": True}), "power_ready")
        assert POWER_HINT not in recommend(tasks, "power_ready")

    def test_no_hint_when_power_work_done(self):
        tasks = [Task(key="paperwork_pos", name="Paperwork"), complete("heating", requires_power=True)]
        assert recommend(tasks, "not_checked") == ["• Paperwork"]

    def test_unknown_power_status_gives_hint(self):
        tasks = evaluate(build_task_seed({"heating_referral": True}), "E10 supply taken over")
        assert recommend(tasks, "E10 supply taken over")[-1] == POWER_HINT
