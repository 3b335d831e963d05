"""
RENOFLOW - Task Rules & Next Actions
====================================
Applies power, final-stage and dependency gates to a property's tasks,
and turns the open tasks into a short "what to do next" list.

All functions here are pure: they return new task lists and never
modify the tasks they are given.
"""

import logging
from typing import Optional, List, Sequence, Union

from .schema import Task, TaskStatus, PowerStatus
from .workflow import WorkflowConfig, DEFAULT_WORKFLOW, requirements_for

logger = logging.getLogger("renoflow.rules")

POWER_NOT_READY = "Power not ready"
OTHER_TASKS_FIRST = "Complete other required tasks first"
EARLIER_STAGE_FIRST = "Complete earlier workflow stage first"

ALL_COMPLETE_BANNER = "All tasks complete ✅"
POWER_HINT = "Tip: power-dependent work is outstanding; do surveys/drawings that don't require power first."
MAX_ACTIONS = 10


def is_power_ready(power_status: Union[PowerStatus, str, None]) -> bool:
    """Only POWER READY passes the power gate; anything else is not ready"""
    return power_status == PowerStatus.POWER_READY


# ============================================================
# RULE EVALUATION
# ============================================================

def evaluate(
    tasks: Sequence[Task],
    power_status: Union[PowerStatus, str, None],
    config: WorkflowConfig = DEFAULT_WORKFLOW
) -> List[Task]:
    """
    Re-derive status and blocked reason for every task.

    Gates, first match wins:
      1. complete tasks stay complete
      2. power-dependent tasks wait for POWER READY
      3. the final-stage task waits for power and every other task
      4. tasks wait for their earlier workflow stages
    Anything left is open (not_started).
    """
    power_ready = is_power_ready(power_status)
    present = [t.key for t in tasks]
    completed = {t.key for t in tasks if t.status == TaskStatus.COMPLETE}
    final_key = config.final_stage_key
    all_other_complete = all(
        t.status == TaskStatus.COMPLETE for t in tasks if t.key != final_key
    )

    evaluated = []
    for task in tasks:
        if task.status == TaskStatus.COMPLETE:
            evaluated.append(task.model_copy(update={"blocked_reason": None}))
            continue

        reason: Optional[str] = None

        if task.requires_power and not power_ready:
            reason = POWER_NOT_READY
        elif final_key is not None and task.key == final_key and (
            not power_ready or not all_other_complete
        ):
            reason = POWER_NOT_READY if not power_ready else OTHER_TASKS_FIRST
        else:
            unmet = [
                req for req in requirements_for(task.key, present, config)
                if not req.is_satisfied(completed)
            ]
            if unmet:
                reason = EARLIER_STAGE_FIRST

        if reason:
            if task.status != TaskStatus.BLOCKED:
                logger.debug(f"⛔ Blocked {task.key}: {reason}")
            evaluated.append(task.model_copy(
                update={"status": TaskStatus.BLOCKED, "blocked_reason": reason}
            ))
        else:
            if task.status == TaskStatus.BLOCKED:
                logger.debug(f"🔓 Unblocked {task.key}")
            evaluated.append(task.model_copy(
                update={"status": TaskStatus.NOT_STARTED, "blocked_reason": None}
            ))

    return evaluated


def mark_complete(tasks: Sequence[Task], key: str) -> List[Task]:
    """Return a copy of tasks with the given task marked complete"""
    return [
        t.model_copy(update={"status": TaskStatus.COMPLETE, "blocked_reason": None})
        if t.key == key else t
        for t in tasks
    ]


# ============================================================
# NEXT ACTIONS
# ============================================================

def recommend(
    tasks: Sequence[Task],
    power_status: Union[PowerStatus, str, None],
    config: WorkflowConfig = DEFAULT_WORKFLOW,
    limit: int = MAX_ACTIONS
) -> List[str]:
    """
    Prioritized display lines for the open tasks.

    Open tasks are ordered by workflow position (ad-hoc tasks last, in
    their original order), capped at `limit`. A completion banner leads
    when every task is done; one power hint trails when power work is
    still waiting on POWER READY.
    """
    open_tasks = [
        t for t in tasks
        if t.status not in (TaskStatus.COMPLETE, TaskStatus.BLOCKED)
    ]
    # sorted() is stable, so equal ranks keep seed order
    open_tasks = sorted(open_tasks, key=lambda t: config.rank(t.key))

    actions = [f"• {t.name}" for t in open_tasks[:limit]]

    incomplete = [t for t in tasks if t.status != TaskStatus.COMPLETE]
    if tasks and not incomplete:
        actions.insert(0, ALL_COMPLETE_BANNER)

    if not is_power_ready(power_status) and any(t.requires_power for t in incomplete):
        actions.append(POWER_HINT)

    return actions
