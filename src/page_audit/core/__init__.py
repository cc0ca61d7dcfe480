"""Core configuration, artifacts and type definitions."""

from .types import (
    AuditRef,
    AuditResult,
    CategoryResult,
    ConfigSettings,
    FlowResult,
    FlowStepResult,
    GatherMode,
    ResultRecord,
    ScoreDisplayMode,
)

__all__ = [
    "AuditRef",
    "AuditResult",
    "CategoryResult",
    "ConfigSettings",
    "FlowResult",
    "FlowStepResult",
    "GatherMode",
    "ResultRecord",
    "ScoreDisplayMode",
]
