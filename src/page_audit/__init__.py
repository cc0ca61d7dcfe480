"""Page quality auditing over a Playwright page."""

from .audits.base import Audit, AuditContext, AuditMeta, AuditProduct
from .computed import NetworkRecords
from .core.computed import ComputedArtifact, ComputedArtifactCache
from .core.config import PRESETS
from .core.errors import (
    ArtifactUnavailableError,
    ConfigurationError,
    GatherRuntimeError,
    PageAuditError,
    RuntimeErrorCode,
    UsageError,
)
from .entrypoints import (
    Timespan,
    audit_flow_artifacts,
    generate_config,
    generate_report,
    get_audit_list,
    navigation,
    snapshot,
    start_flow,
    start_timespan,
)
from .gather.base import Gatherer, GathererMeta
from .runner import RunnerResult
from .user_flow import FlowArtifacts, UserFlow

__version__ = "0.1.0"

__all__ = [
    "PRESETS",
    "ArtifactUnavailableError",
    "Audit",
    "AuditContext",
    "AuditMeta",
    "AuditProduct",
    "ComputedArtifact",
    "ComputedArtifactCache",
    "ConfigurationError",
    "FlowArtifacts",
    "GatherRuntimeError",
    "Gatherer",
    "GathererMeta",
    "NetworkRecords",
    "PageAuditError",
    "RunnerResult",
    "RuntimeErrorCode",
    "Timespan",
    "UsageError",
    "UserFlow",
    "audit_flow_artifacts",
    "generate_config",
    "generate_report",
    "get_audit_list",
    "navigation",
    "snapshot",
    "start_flow",
    "start_timespan",
]
