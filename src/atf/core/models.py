"""ATF data models — Pydantic v2.

This module is a leaf: no internal project imports.
All Enum and Model definitions live here.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# ============================================================
# Enums
# ============================================================


class StepStatus(StrEnum):
    """Individual step execution status."""

    PASSED = "passed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    ERROR = "error"


class ErrorKind(StrEnum):
    """Typed failure kind recorded in StepResult."""

    MALFORMED_STEP = "malformed_step"
    UNKNOWN_STEP_TYPE = "unknown_step_type"
    UNKNOWN_VARIABLE = "unknown_variable"
    TARGET_NOT_FOUND = "target_not_found"
    TIMEOUT_EXCEEDED = "timeout_exceeded"
    AMBIGUOUS_TARGET = "ambiguous_target"
    SCROLLABLE_NOT_FOUND = "scrollable_not_found"
    SCROLL_TIMEOUT_EXCEEDED = "scroll_timeout_exceeded"
    ASSERTION_FAILED = "assertion_failed"
    UNSUPPORTED_CAPABILITY = "unsupported_capability"
    CANCELLED = "cancelled"
    DRIVER = "driver"
    INTERNAL = "internal"


class VariableScope(StrEnum):
    """Variable layer. Local is cleared per run, global persists."""

    GLOBAL = "global"
    LOCAL = "local"


class AxisDirection(StrEnum):
    """Direction in which a scroll container's content offset grows."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class ValueType(StrEnum):
    """Declared type of a literal value set on a target or variable."""

    BOOL = "bool"
    INT = "int"
    DOUBLE = "double"
    STRING = "String"


# ============================================================
# Config Models
# ============================================================


class DriverConfig(BaseModel):
    """Host driver configuration."""

    type: str = Field(default="web", description="Driver type: web")
    browser: str = Field(
        default="chromium",
        description="Browser: chromium | firefox | webkit",
    )
    headless: bool = Field(default=True)
    viewport_width: int = Field(default=1280, ge=320, le=3840)
    viewport_height: int = Field(default=720, ge=240, le=2160)
    timeout_ms: int = Field(default=30000, ge=1000, le=120000)
    test_id_attribute: str = Field(default="data-testid", min_length=1)


class DelaysConfig(BaseModel):
    """Runner delays, in seconds."""

    default_timeout: float = Field(default=10.0, gt=0.0, le=600.0)
    poll_interval: float = Field(default=0.1, gt=0.0, le=5.0)
    post_found_target: float = Field(default=0.25, ge=0.0, le=10.0)
    pre_step: float = Field(default=0.0, ge=0.0, le=10.0)
    post_step: float = Field(default=0.5, ge=0.0, le=10.0)
    scroll_settle: float = Field(default=0.3, ge=0.0, le=10.0)


class RunnerConfig(BaseModel):
    """Test run policy."""

    stop_on_first_failure: bool = Field(default=True)
    strict_variables: bool = Field(default=False)
    variables: dict[str, str] = Field(
        default_factory=dict,
        description="Seeded into the global variable scope",
    )
    delays: DelaysConfig = Field(default_factory=DelaysConfig)


class Config(BaseSettings):
    """Project configuration. Merged from YAML + env var + CLI flag."""

    model_config = SettingsConfigDict(
        env_prefix="ATF_",
        env_nested_delimiter="__",
    )

    project_name: str = Field(default="atf-project")
    url: str = Field(default="")
    tests_dir: str = Field(default="tests")
    log_level: str = Field(default="WARNING")
    driver: DriverConfig = Field(default_factory=DriverConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)


# ============================================================
# Host Element Models
# ============================================================


class Offset(BaseModel):
    """Drag vector in logical pixels."""

    model_config = ConfigDict(frozen=True)

    dx: float = Field(default=0.0)
    dy: float = Field(default=0.0)


class Rect(BaseModel):
    """Element bounds in logical pixels."""

    model_config = ConfigDict(frozen=True)

    x: float = Field(default=0.0)
    y: float = Field(default=0.0)
    width: float = Field(default=0.0, ge=0.0)
    height: float = Field(default=0.0, ge=0.0)

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)


class Element(BaseModel):
    """A located host element. `handle` is opaque to the engine."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    testable_id: str
    rect: Rect = Field(default_factory=Rect)
    axis_direction: AxisDirection | None = Field(
        default=None,
        description="Set only when the element is a scroll container",
    )
    handle: Any = Field(default=None, exclude=True, repr=False)


# ============================================================
# Test Definition Models
# ============================================================


class StepRecord(BaseModel):
    """JSON step record: {id, image?, values}."""

    id: str = Field(..., min_length=1, description="Step type id")
    image: str | None = Field(default=None, description="Base64 snapshot, never interpreted")
    values: dict[str, Any] = Field(default_factory=dict)


class Test(BaseModel):
    """Ordered step sequence plus metadata."""

    __test__ = False

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    suite_name: str | None = Field(default=None, alias="suiteName")
    version: int = Field(default=0, ge=0)
    steps: list[StepRecord] = Field(default_factory=list)

    def append_step(self, record: StepRecord) -> None:
        self.steps.append(record)

    def insert_step(self, index: int, record: StepRecord) -> None:
        self.steps.insert(index, record)

    def remove_step(self, index: int) -> StepRecord:
        return self.steps.pop(index)

    def move_step(self, old_index: int, new_index: int) -> None:
        """Move a step, shifting the ones in between."""
        record = self.steps.pop(old_index)
        self.steps.insert(new_index, record)


# ============================================================
# Progress / Result Models
# ============================================================


class ProgressValue(BaseModel):
    """Snapshot of an in-flight wait."""

    model_config = ConfigDict(frozen=True)

    value: int = Field(default=0, ge=0)
    max: int = Field(..., ge=1)
    error: bool = Field(default=False)


class StepResult(BaseModel):
    """Individual step execution result."""

    index: int = Field(..., ge=0)
    step_id: str
    description: str
    status: StepStatus
    error_kind: ErrorKind | None = None
    error_message: str | None = None
    image: str | None = None
    elapsed_ms: float = Field(default=0.0, ge=0.0)
    timestamp: datetime = Field(default_factory=datetime.now)


class TestReport(BaseModel):
    """Append-only record of one run."""

    __test__ = False

    name: str
    suite_name: str | None = None
    version: int = Field(default=0, ge=0)
    steps: list[StepResult] = Field(default_factory=list)
    log: list[str] = Field(default_factory=list)
    cancelled: bool = Field(default=False)
    success: bool | None = Field(default=None, description="Set by finish()")
    started_at: datetime = Field(default_factory=datetime.now)
    ended_at: datetime | None = None

    @property
    def passed_steps(self) -> int:
        return sum(1 for s in self.steps if s.status == StepStatus.PASSED)

    @property
    def failed_steps(self) -> int:
        return len(self.steps) - self.passed_steps

    def append(self, result: StepResult) -> None:
        if self.ended_at is not None:
            msg = "Report already finished"
            raise ValueError(msg)
        self.steps.append(result)

    def append_log(self, message: str) -> None:
        self.log.append(message)

    def finish(self) -> TestReport:
        """Finalize: success means every attempted step passed."""
        self.ended_at = datetime.now()
        self.success = not self.cancelled and all(
            s.status == StepStatus.PASSED for s in self.steps
        )
        return self

    @property
    def duration_ms(self) -> float:
        end = self.ended_at or datetime.now()
        return (end - self.started_at).total_seconds() * 1000


class TestSuiteReport(BaseModel):
    """Reports for several tests run back to back."""

    __test__ = False

    reports: list[TestReport] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(r.success for r in self.reports)
