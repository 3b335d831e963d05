"""
RENOFLOW - Property Workflow Manager
====================================
Coordinates seeding, rule evaluation and next actions for stored
properties. Storage is pluggable: anything with load/save/keys works,
and an in-memory key/value store is provided.
"""

import json
import threading
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Union, Mapping, Protocol
import logging

from .schema import (
    PropertyTaskList, PropertyRecord, Task, TaskStatus, PowerStatus,
    build_task_seed
)
from .workflow import WorkflowConfig, DEFAULT_WORKFLOW
from .rules import evaluate, mark_complete, recommend

logger = logging.getLogger("renoflow")


class PropertyStore(Protocol):
    """Persistence collaborator for property task lists"""

    def load(self, property_id: str) -> Optional[Dict[str, Any]]: ...

    def save(self, property_id: str, data: Dict[str, Any]) -> None: ...

    def keys(self) -> List[str]: ...


class InMemoryStore:
    """Key/value store holding one JSON document per property"""

    def __init__(self, prefix: str = "renoflow_property_v1"):
        self.prefix = prefix
        self._items: Dict[str, str] = {}

    def _key(self, property_id: str) -> str:
        return f"{self.prefix}:{property_id}"

    def load(self, property_id: str) -> Optional[Dict[str, Any]]:
        raw = self._items.get(self._key(property_id))
        if raw is None:
            return None
        return json.loads(raw)

    def save(self, property_id: str, data: Dict[str, Any]) -> None:
        self._items[self._key(property_id)] = json.dumps(data, default=str)

    def keys(self) -> List[str]:
        cut = len(self.prefix) + 1
        return [k[cut:] for k in self._items]


class WorkflowManager:
    """
    Property task workflow manager

    Every change (new property, power status update, task completion)
    re-runs rule evaluation and saves the result. Changes to one property
    are serialized with a per-property lock; different properties never
    wait on each other.
    """

    def __init__(
        self,
        store: Optional[PropertyStore] = None,
        config: WorkflowConfig = DEFAULT_WORKFLOW
    ):
        self.store = store if store is not None else InMemoryStore()
        self.config = config
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, property_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(property_id)
            if lock is None:
                lock = self._locks[property_id] = threading.Lock()
            return lock

    # ========================================
    # PERSISTENCE OPERATIONS
    # ========================================

    def save(self, task_list: PropertyTaskList) -> None:
        """Save task list through the store"""
        task_list.updated_at = datetime.now(timezone.utc)
        self.store.save(task_list.property_id, task_list.model_dump(mode='json'))
        logger.info(f"✅ Saved property: {task_list.property_id} ({task_list.progress_pct}% complete)")

    def load(self, property_id: str) -> Optional[PropertyTaskList]:
        """Load task list from the store"""
        data = self.store.load(property_id)
        if data is None:
            logger.warning(f"Property not found: {property_id}")
            return None

        task_list = PropertyTaskList.model_validate(data)
        logger.debug(f"📂 Loaded property: {property_id} ({task_list.progress_pct}% complete)")
        return task_list

    def list_properties(self) -> List[Dict[str, Any]]:
        """Summaries of all stored properties, most recently updated first"""
        properties = []
        for property_id in self.store.keys():
            task_list = self.load(property_id)
            if task_list is None:
                continue
            properties.append({
                "id": task_list.property_id,
                "address": task_list.record.address,
                "power_status": task_list.power_status.value,
                "progress": f"{task_list.progress_pct}%",
                "updated_at": task_list.updated_at.isoformat(),
            })
        return sorted(properties, key=lambda x: x["updated_at"], reverse=True)

    # ========================================
    # WORKFLOW OPERATIONS
    # ========================================

    def create_property(
        self,
        property_id: str,
        record: Union[PropertyRecord, Mapping[str, Any]]
    ) -> PropertyTaskList:
        """Seed, evaluate and save the task list for a property"""
        if not isinstance(record, PropertyRecord):
            record = PropertyRecord.model_validate(record)

        with self._lock_for(property_id):
            tasks = evaluate(build_task_seed(record), record.power_status, self.config)
            task_list = PropertyTaskList(property_id=property_id, record=record, tasks=tasks)
            self.save(task_list)

        logger.info(f"🚀 Created property: {property_id} ({len(tasks)} tasks)")
        return task_list

    def set_power_status(
        self,
        property_id: str,
        power_status: Union[PowerStatus, str]
    ) -> Optional[PropertyTaskList]:
        """Record a new power status and re-evaluate every task"""
        with self._lock_for(property_id):
            task_list = self.load(property_id)
            if not task_list:
                return None

            record = task_list.record.model_copy(
                update={"power_status": PropertyRecord(power_status=power_status).power_status}
            )
            task_list.record = record
            task_list.tasks = evaluate(task_list.tasks, record.power_status, self.config)
            self.save(task_list)

        logger.info(f"⚡ Power status for {property_id}: {record.power_status.label}")
        return task_list

    def complete_task(self, property_id: str, task_key: str) -> Optional[Task]:
        """Mark a task complete and re-evaluate the rest of the list"""
        with self._lock_for(property_id):
            task_list = self.load(property_id)
            if not task_list:
                return None

            if task_list.get_task(task_key) is None:
                logger.warning(f"Task not found: {task_key} on {property_id}")
                return None

            tasks = mark_complete(task_list.tasks, task_key)
            task_list.tasks = evaluate(tasks, task_list.power_status, self.config)
            self.save(task_list)

        task = task_list.get_task(task_key)
        logger.info(f"✅ Completed task: {task.name} ({property_id})")
        return task

    def next_actions(self, property_id: str) -> List[str]:
        """Prioritized next actions for a property"""
        task_list = self.load(property_id)
        if not task_list:
            return []
        return recommend(task_list.tasks, task_list.power_status, self.config)

    # ========================================
    # REPORTING
    # ========================================

    def get_status_report(self, property_id: str) -> str:
        """Human-readable checklist for a property"""
        task_list = self.load(property_id)
        if not task_list:
            return f"Property not found: {property_id}"
        return format_status_report(task_list, self.config)


STATUS_ICONS = {
    TaskStatus.NOT_STARTED: "⬜",
    TaskStatus.BLOCKED: "🟡",
    TaskStatus.COMPLETE: "✅",
}


def format_status_report(
    task_list: PropertyTaskList,
    config: WorkflowConfig = DEFAULT_WORKFLOW
) -> str:
    """Checklist text with progress bar and next actions"""
    tl = task_list
    title = tl.record.address or tl.property_id

    lines = [
        f"🏠 {title}",
        f"Power: {tl.power_status.label}",
        f"Progress: {'█' * (tl.progress_pct // 10)}{'░' * (10 - tl.progress_pct // 10)} {tl.progress_pct}%",
        "",
        "Tasks:"
    ]

    for task in tl.tasks:
        icon = STATUS_ICONS.get(task.status, "❓")
        reason = f" ({task.blocked_reason})" if task.status == TaskStatus.BLOCKED else ""
        power = " ⚡" if task.requires_power else ""
        lines.append(f"  {icon} [{task.key}] {task.name}{power}{reason}")

    actions = recommend(tl.tasks, tl.power_status, config)
    if actions:
        lines.extend(["", "Next actions:"])
        lines.extend(f"  {a}" for a in actions)

    return "\n".join(lines)
