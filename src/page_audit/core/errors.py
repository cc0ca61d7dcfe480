"""Error taxonomy for page audits."""

from enum import Enum


class RuntimeErrorCode(str, Enum):
    """Codes for non-fatal failures recorded during a gather."""

    LOAD_TIMEOUT = "LOAD_TIMEOUT"
    FAILED_DOCUMENT_REQUEST = "FAILED_DOCUMENT_REQUEST"
    ERRORED_DOCUMENT_REQUEST = "ERRORED_DOCUMENT_REQUEST"
    PROTOCOL_TIMEOUT = "PROTOCOL_TIMEOUT"
    NO_DOCUMENT_REQUEST = "NO_DOCUMENT_REQUEST"
    NO_FCP = "NO_FCP"
    NO_LCP = "NO_LCP"
    GATHERER_FAILED = "GATHERER_FAILED"


RUNTIME_ERROR_MESSAGES: dict[RuntimeErrorCode, str] = {
    RuntimeErrorCode.LOAD_TIMEOUT: "The page did not finish loading within the time limit.",
    RuntimeErrorCode.FAILED_DOCUMENT_REQUEST: "The page could not be loaded.",
    RuntimeErrorCode.ERRORED_DOCUMENT_REQUEST: "The page returned an error status code.",
    RuntimeErrorCode.PROTOCOL_TIMEOUT: "The browser did not respond in time.",
    RuntimeErrorCode.NO_DOCUMENT_REQUEST: "No document request was observed for the page.",
    RuntimeErrorCode.NO_FCP: "The page did not paint any content.",
    RuntimeErrorCode.NO_LCP: "The page has no largest contentful paint.",
    RuntimeErrorCode.GATHERER_FAILED: "An artifact could not be collected.",
}


class PageAuditError(Exception):
    """Base class for all page audit errors."""


class ConfigurationError(PageAuditError):
    """Raised when a configuration is invalid or self-contradictory."""


class UsageError(PageAuditError):
    """Raised when the API is called out of order or with invalid arguments."""


class GatherRuntimeError(PageAuditError):
    """A page or navigation failure recorded into artifacts instead of raised."""

    def __init__(self, code: RuntimeErrorCode, message: str | None = None):
        self.code = code
        self.friendly_message = message or RUNTIME_ERROR_MESSAGES[code]
        super().__init__(f"{code.value}: {self.friendly_message}")


class ArtifactUnavailableError(PageAuditError):
    """Raised when an audit needs an artifact that is missing or errored."""

    def __init__(self, artifact_name: str, reason: str | None = None):
        self.artifact_name = artifact_name
        if reason:
            message = f"Required {artifact_name} gatherer encountered an error: {reason}"
        else:
            message = f"Required {artifact_name} gatherer did not run."
        super().__init__(message)
