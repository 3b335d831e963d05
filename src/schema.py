"""
RENOFLOW - Property & Task Schema Definition
============================================
Renovation / inspection task tracking for a single property.
Defines the property record, the task record, and the static table
that turns property attributes into the applicable task list.
"""

from enum import Enum
from typing import Optional, List, Dict, Any, Mapping, Union
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
import logging

logger = logging.getLogger("renoflow.schema")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PowerStatus(str, Enum):
    """Power readiness states for a property"""
    NOT_CHECKED = "not_checked"
    BGAS_AWAITING_METER_TYPE = "bgas_awaiting_meter_type"
    BGAS_METER_EXCHANGE_APPOINTMENT = "bgas_meter_exchange_appointment"
    E10 = "e10"
    APPOINTMENT_FAULT_EXCHANGE = "appointment_fault_exchange"
    POWER_READY = "power_ready"       # Only state that unlocks power work

    @property
    def label(self) -> str:
        return POWER_STATUS_LABELS[self]


POWER_STATUS_LABELS = {
    PowerStatus.NOT_CHECKED: "NOT CHECKED",
    PowerStatus.BGAS_AWAITING_METER_TYPE: "BGAS - AWAITING METER TYPE",
    PowerStatus.BGAS_METER_EXCHANGE_APPOINTMENT: "BGAS - METER EXCHANGE APPOINTMENT",
    PowerStatus.E10: "E10",
    PowerStatus.APPOINTMENT_FAULT_EXCHANGE: "APPOINTMENT FOR FAULT/EXCHANGE",
    PowerStatus.POWER_READY: "POWER READY",
}


class TaskStatus(str, Enum):
    """Task lifecycle states"""
    NOT_STARTED = "not_started"   # Open, can be worked on
    BLOCKED = "blocked"           # Held by a power, final-stage or dependency gate
    COMPLETE = "complete"         # Terminal, never reverted


class Task(BaseModel):
    """Individual task on a property checklist"""
    model_config = ConfigDict(frozen=True)

    key: str                        # Stable identifier, unique per property
    name: str                       # Display label
    requires_power: bool = False
    status: TaskStatus = TaskStatus.NOT_STARTED
    blocked_reason: Optional[str] = None


class PropertyRecord(BaseModel):
    """Property attributes that decide which tasks apply"""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[str] = None
    address: Optional[str] = None
    power_status: PowerStatus = PowerStatus.NOT_CHECKED

    # Optional work flags
    asbestos_survey: bool = False
    rot_works: bool = False
    kitchen_renewal: bool = False
    asbestos_removal: bool = False
    heating_referral: bool = False
    epc: bool = False
    glazier: bool = False
    altro_flooring: bool = False
    bathroom_renewal: bool = False
    paint_lines: bool = False
    isolator_required: bool = False

    @model_validator(mode="before")
    @classmethod
    def _drop_missing(cls, data: Any) -> Any:
        # Undefined flags fall back to their defaults
        if isinstance(data, Mapping):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @field_validator("power_status", mode="before")
    @classmethod
    def _coerce_power_status(cls, value: Any) -> Any:
        if isinstance(value, PowerStatus):
            return value
        try:
            return PowerStatus(value)
        except ValueError:
            logger.warning(f"⚠️ Unknown power status {value!r}, treating as not ready")
            return PowerStatus.NOT_CHECKED


class PropertyTaskList(BaseModel):
    """Task list for one property - what gets saved and rendered"""
    property_id: str
    record: PropertyRecord
    tasks: List[Task] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def power_status(self) -> PowerStatus:
        return self.record.power_status

    @property
    def progress_pct(self) -> int:
        if not self.tasks:
            return 0
        completed = sum(1 for t in self.tasks if t.status == TaskStatus.COMPLETE)
        return int((completed / len(self.tasks)) * 100)

    @property
    def status_summary(self) -> Dict[str, int]:
        summary = {status.value: 0 for status in TaskStatus}
        for task in self.tasks:
            summary[task.status.value] += 1
        return summary

    def get_task(self, key: str) -> Optional[Task]:
        for task in self.tasks:
            if task.key == key:
                return task
        return None


# ============================================================
# PROPERTY ATTRIBUTE -> TASK TABLE
# ============================================================

class TaskTemplate(BaseModel):
    """One row of the seed table"""
    model_config = ConfigDict(frozen=True)

    attribute: Optional[str]        # None = always seeded
    key: str
    name: str
    requires_power: bool = False

    def build(self) -> Task:
        return Task(key=self.key, name=self.name, requires_power=self.requires_power)


BASE_TASKS = (
    TaskTemplate(attribute=None, key="paperwork_pos", name="Paperwork & POs"),
    TaskTemplate(attribute=None, key="bgas_check", name="Check if property is on BGAS"),
)

OPTIONAL_TASKS = (
    # No power required
    TaskTemplate(attribute="asbestos_survey", key="asbestos_survey", name="Asbestos Survey"),
    TaskTemplate(attribute="rot_works", key="rot_survey_request", name="Rot Works Survey Request"),
    TaskTemplate(attribute="kitchen_renewal", key="kitchen_drawing_request",
                 name="Kitchen Renewal Drawing Request"),

    # Power required
    TaskTemplate(attribute="asbestos_removal", key="asbestos_removal", name="Asbestos Removal",
                 requires_power=True),
    TaskTemplate(attribute="heating_referral", key="heating", name="Heating Referral / Works",
                 requires_power=True),
    TaskTemplate(attribute="kitchen_renewal", key="kitchen_works", name="Kitchen Renewal Works",
                 requires_power=True),

    # Checklist add-ons
    TaskTemplate(attribute="glazier", key="glazier", name="Glazier"),
    TaskTemplate(attribute="altro_flooring", key="altro", name="Altro Flooring", requires_power=True),
    TaskTemplate(attribute="bathroom_renewal", key="bathroom", name="Bathroom Renewal",
                 requires_power=True),
    TaskTemplate(attribute="paint_lines", key="paint_lines", name="Paint Lines"),
    TaskTemplate(attribute="isolator_required", key="isolator", name="Isolator Required",
                 requires_power=True),
)

FINAL_STAGE_TASK = TaskTemplate(
    attribute="epc", key="epc_eicr", name="EPC / EICR Final Stage", requires_power=True
)


def build_task_seed(property_record: Union[PropertyRecord, Mapping[str, Any]]) -> List[Task]:
    """
    Build the ordered task list for a property.

    Base tasks always come first, then one task per set attribute in table
    order, then the final-stage task if its attribute is set. Every task
    starts not_started with no blocked reason.
    """
    if not isinstance(property_record, PropertyRecord):
        property_record = PropertyRecord.model_validate(property_record)

    tasks = [template.build() for template in BASE_TASKS]

    for template in OPTIONAL_TASKS:
        if getattr(property_record, template.attribute):
            tasks.append(template.build())

    if getattr(property_record, FINAL_STAGE_TASK.attribute):
        tasks.append(FINAL_STAGE_TASK.build())

    return tasks
