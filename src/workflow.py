"""
RENOFLOW - Workflow Configuration & Dependency Resolution
=========================================================
Task ordering, parallel groups, and the predecessor requirements
derived from them for the tasks actually present on a property.
"""

import json
from pathlib import Path
from typing import Optional, List, Tuple, FrozenSet, Iterable, Union, Collection
from pydantic import BaseModel, ConfigDict, model_validator


class WorkflowConfig(BaseModel):
    """
    Immutable workflow description.

    order: strict precedence among known task keys. Keys missing from it
        are ad-hoc tasks and are never gated by dependencies.
    parallel_groups: sets of keys that never gate each other.
    final_stage_key: task that must be completed last.
    """
    model_config = ConfigDict(frozen=True)

    order: Tuple[str, ...]
    parallel_groups: Tuple[FrozenSet[str], ...] = ()
    final_stage_key: Optional[str] = None

    @model_validator(mode="after")
    def _check_consistency(self) -> "WorkflowConfig":
        if len(set(self.order)) != len(self.order):
            raise ValueError("workflow order repeats a task key")
        seen = set()
        for group in self.parallel_groups:
            unknown = group.difference(self.order)
            if unknown:
                raise ValueError(f"parallel group names keys not in order: {sorted(unknown)}")
            overlap = group & seen
            if overlap:
                raise ValueError(f"keys in more than one parallel group: {sorted(overlap)}")
            seen |= group
        return self

    def index_of(self, key: str) -> Optional[int]:
        """Position of key in the order, None for unordered keys"""
        try:
            return self.order.index(key)
        except ValueError:
            return None

    def rank(self, key: str) -> int:
        """Sort key for ordering tasks; unordered keys sort last"""
        idx = self.index_of(key)
        return len(self.order) if idx is None else idx

    def group_of(self, key: str) -> Optional[FrozenSet[str]]:
        for group in self.parallel_groups:
            if key in group:
                return group
        return None


# ============================================================
# DEFAULT RENOVATION WORKFLOW
# ============================================================

DEFAULT_WORKFLOW = WorkflowConfig(
    order=(
        "paperwork_pos",
        "bgas_check",
        "asbestos_survey",
        "rot_survey_request",
        "kitchen_drawing_request",
        "isolator",
        "asbestos_removal",
        "heating",
        "kitchen_works",
        "bathroom",
        "glazier",
        "altro",
        "paint_lines",
        "epc_eicr",
    ),
    parallel_groups=(
        # Intake & surveys
        frozenset({
            "paperwork_pos", "bgas_check", "asbestos_survey",
            "rot_survey_request", "kitchen_drawing_request", "isolator",
        }),
        # Main works
        frozenset({"heating", "kitchen_works", "bathroom", "glazier"}),
        # Finishing
        frozenset({"altro", "paint_lines"}),
    ),
    final_stage_key="epc_eicr",
)


def load_workflow_config(path: Union[str, Path]) -> WorkflowConfig:
    """Load a workflow config from a JSON file"""
    with open(path, 'r') as f:
        data = json.load(f)
    return WorkflowConfig.model_validate(data)


# ============================================================
# REQUIREMENTS
# ============================================================

class SingleRequirement(BaseModel):
    """The named task must be complete"""
    model_config = ConfigDict(frozen=True)

    key: str

    @property
    def keys(self) -> Tuple[str, ...]:
        return (self.key,)

    def is_satisfied(self, completed: Collection[str]) -> bool:
        return self.key in completed


class AnyOfRequirement(BaseModel):
    """At least one of the named tasks must be complete"""
    model_config = ConfigDict(frozen=True)

    keys: Tuple[str, ...]

    def is_satisfied(self, completed: Collection[str]) -> bool:
        return any(k in completed for k in self.keys)


Requirement = Union[SingleRequirement, AnyOfRequirement]


def requirements_for(
    task_key: str,
    present_keys: Iterable[str],
    config: WorkflowConfig = DEFAULT_WORKFLOW
) -> List[Requirement]:
    """
    Predecessor requirements for one task.

    Absent predecessors are skipped, siblings in the task's own parallel
    group never gate it, and predecessors from another group collapse into a
    single AnyOf over that group's present, earlier members.
    """
    idx = config.index_of(task_key)
    if idx is None:
        return []

    present = set(present_keys)
    own_group = config.group_of(task_key) or frozenset()

    requirements: List[Requirement] = []
    seen_groups = set()

    for pred in config.order[:idx]:
        if pred not in present or pred in own_group:
            continue

        group = config.group_of(pred)
        if group is None:
            requirements.append(SingleRequirement(key=pred))
            continue

        members = tuple(
            k for k in config.order[:idx]
            if k in group and k in present and k not in own_group
        )
        member_set = frozenset(members)
        if member_set in seen_groups:
            continue
        seen_groups.add(member_set)
        requirements.append(AnyOfRequirement(keys=members))

    return requirements
