"""
RENOFLOW - Property Renovation Task Workflow
===========================================

Decides which renovation/inspection tasks apply to a property, which are
blocked (and why), and what should be worked on next.

Usage:
    from renoflow import build_task_seed, evaluate, recommend, mark_complete

    tasks = build_task_seed({"heating_referral": True, "epc": True})
    tasks = evaluate(tasks, "not_checked")
    print(recommend(tasks, "not_checked"))

    # Power arrives, paperwork done
    tasks = evaluate(mark_complete(tasks, "paperwork_pos"), "power_ready")

    # Or let the manager keep the task list
    manager = WorkflowManager()
    manager.create_property("PROP-1", {"heating_referral": True})
    manager.set_power_status("PROP-1", "power_ready")
    manager.complete_task("PROP-1", "paperwork_pos")
    print(manager.get_status_report("PROP-1"))
"""

from .schema import (
    PowerStatus,
    TaskStatus,
    Task,
    PropertyRecord,
    PropertyTaskList,
    TaskTemplate,
    BASE_TASKS,
    OPTIONAL_TASKS,
    FINAL_STAGE_TASK,
    build_task_seed
)

from .workflow import (
    WorkflowConfig,
    DEFAULT_WORKFLOW,
    SingleRequirement,
    AnyOfRequirement,
    Requirement,
    load_workflow_config,
    requirements_for
)

from .rules import evaluate, mark_complete, recommend, is_power_ready

from .manager import WorkflowManager, PropertyStore, InMemoryStore

__version__ = "1.0.0"
__all__ = [
    "PowerStatus",
    "TaskStatus",
    "Task",
    "PropertyRecord",
    "PropertyTaskList",
    "TaskTemplate",
    "BASE_TASKS",
    "OPTIONAL_TASKS",
    "FINAL_STAGE_TASK",
    "build_task_seed",
    "WorkflowConfig",
    "DEFAULT_WORKFLOW",
    "SingleRequirement",
    "AnyOfRequirement",
    "Requirement",
    "load_workflow_config",
    "requirements_for",
    "evaluate",
    "mark_complete",
    "recommend",
    "is_power_ready",
    "WorkflowManager",
    "PropertyStore",
    "InMemoryStore"
]
