"""Type definitions for the audit system."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class GatherMode(str, Enum):
    """Temporal discipline used to capture artifacts."""

    NAVIGATION = "navigation"
    TIMESPAN = "timespan"
    SNAPSHOT = "snapshot"


class ScoreDisplayMode(str, Enum):
    """How an audit score should be presented."""

    NUMERIC = "numeric"
    BINARY = "binary"
    MANUAL = "manual"
    INFORMATIVE = "informative"
    NOT_APPLICABLE = "notApplicable"
    ERROR = "error"


# Configuration models


class ScreenEmulation(BaseModel):
    """Viewport emulation applied to the page."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    width: int = Field(default=412, description="Viewport width in CSS pixels")
    height: int = Field(default=823, description="Viewport height in CSS pixels")
    device_scale_factor: float = Field(default=1.75, description="Device pixel ratio")
    mobile: bool = Field(default=True, description="Emulate a mobile device")
    disabled: bool = Field(default=False, description="Leave the viewport untouched")


class ThrottlingSettings(BaseModel):
    """Network and CPU throttling parameters."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    rtt_ms: float = Field(default=150, description="Round trip time in milliseconds")
    throughput_kbps: float = Field(default=1638.4, description="Download throughput")
    cpu_slowdown_multiplier: float = Field(default=4, description="CPU slowdown factor")


class ConfigSettings(BaseModel):
    """Run settings resolved from defaults, the config document and flags."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    output: Literal["json", "html", "csv"] = Field(default="json", description="Report format")
    locale: str = Field(default="en-US", description="Locale for the audited page")
    max_wait_for_load: int = Field(
        default=45000, gt=0, description="Upper bound on waiting for page load, in ms"
    )
    network_quiet_threshold: int = Field(
        default=0,
        ge=0,
        description="Time with no requests in flight before the load is judged complete, in ms",
    )
    pause_after_load: int = Field(
        default=0, ge=0, description="Extra wait after the page is judged loaded, in ms"
    )
    blank_page: str | None = Field(
        default="about:blank", description="Page loaded before navigating to the target"
    )
    form_factor: Literal["mobile", "desktop"] = Field(default="mobile")
    screen_emulation: ScreenEmulation = Field(default_factory=ScreenEmulation)
    emulated_user_agent: str | None = Field(default=None, description="User agent override")
    throttling_method: Literal["simulate", "devtools", "provided"] = Field(default="simulate")
    throttling: ThrottlingSettings = Field(default_factory=ThrottlingSettings)
    only_audits: tuple[str, ...] | None = Field(default=None)
    skip_audits: tuple[str, ...] | None = Field(default=None)
    only_categories: tuple[str, ...] | None = Field(default=None)
    gather_mode: GatherMode = Field(default=GatherMode.NAVIGATION)


# Result models


class RuntimeErrorInfo(BaseModel):
    """A non-fatal gather failure surfaced in the result."""

    code: str
    message: str


class AuditResult(BaseModel):
    """Outcome of a single audit."""

    id: str = Field(description="Audit id, unique within a result")
    title: str = Field(description="Audit title")
    description: str = Field(default="", description="What the audit checks")
    score: float | None = Field(default=None, ge=0, le=1, description="Score in 0..1")
    score_display_mode: ScoreDisplayMode = Field(default=ScoreDisplayMode.BINARY)
    numeric_value: float | None = Field(default=None)
    numeric_unit: str | None = Field(default=None)
    display_value: str | None = Field(default=None)
    explanation: str | None = Field(default=None)
    error_message: str | None = Field(default=None)
    warnings: list[str] = Field(default_factory=list)
    details: dict[str, Any] | None = Field(default=None)


class AuditRef(BaseModel):
    """Membership of an audit in a category."""

    id: str
    weight: float = Field(default=1, ge=0)
    group: str | None = None


class CategoryResult(BaseModel):
    """Aggregated score of a category."""

    id: str
    title: str
    description: str = ""
    score: float | None = Field(default=None, description="None when not applicable")
    not_applicable: bool = Field(default=False)
    audit_refs: list[AuditRef] = Field(default_factory=list)


class TimingEntry(BaseModel):
    """A named duration measured during a run."""

    name: str
    start_time: float = Field(description="Milliseconds since the run started")
    duration: float = Field(description="Duration in milliseconds")


class RunTiming(BaseModel):
    """Wall-clock timing of a run."""

    entries: list[TimingEntry] = Field(default_factory=list)
    total: float = Field(default=0, description="Total duration in milliseconds")


class ResultRecord(BaseModel):
    """Scored output of one audit run."""

    requested_url: str | None = Field(default=None)
    main_document_url: str | None = Field(default=None)
    final_url: str | None = Field(default=None, description="URL displayed when gather ended")
    fetch_time: str = Field(description="ISO timestamp of the gather")
    gather_mode: GatherMode
    user_agent: str | None = Field(default=None)
    runtime_error: RuntimeErrorInfo | None = Field(default=None)
    run_warnings: list[str] = Field(default_factory=list)
    audits: dict[str, AuditResult] = Field(default_factory=dict)
    categories: dict[str, CategoryResult] = Field(default_factory=dict)
    config_settings: ConfigSettings
    timing: RunTiming = Field(default_factory=RunTiming)


class FlowStepResult(BaseModel):
    """One audited step of a flow."""

    name: str
    lhr: ResultRecord
    gather_step: Any = Field(default=None, exclude=True, description="The GatherStep audited")


class FlowResult(BaseModel):
    """Ordered, audited steps of a flow."""

    name: str
    steps: list[FlowStepResult] = Field(default_factory=list)
