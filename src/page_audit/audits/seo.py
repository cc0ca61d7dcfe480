"""Audits over document metadata."""

from ..core.artifacts import Artifacts
from ..core.types import GatherMode
from .base import Audit, AuditContext, AuditMeta, AuditProduct

DOCUMENT_MODES = frozenset({GatherMode.NAVIGATION, GatherMode.SNAPSHOT})


def _find_meta(elements: list[dict], name: str) -> dict | None:
    for element in elements:
        if element.get("name") == name:
            return element
    return None


class DocumentTitle(Audit):
    meta = AuditMeta(
        id="document-title",
        title="Document has a `<title>` element",
        failure_title="Document doesn't have a `<title>` element",
        description="The title gives screen reader users an overview of the page.",
        required_artifacts=("Accessibility",),
        supported_modes=DOCUMENT_MODES,
    )

    @classmethod
    def audit(cls, artifacts: Artifacts, context: AuditContext) -> AuditProduct:
        title = artifacts.require("Accessibility").get("document_title", "").strip()
        return AuditProduct(score=1 if title else 0, details={"title": title})


class MetaDescription(Audit):
    meta = AuditMeta(
        id="meta-description",
        title="Document has a meta description",
        failure_title="Document does not have a meta description",
        description="Meta descriptions may be included in search results.",
        required_artifacts=("MetaElements",),
        supported_modes=DOCUMENT_MODES,
    )

    @classmethod
    def audit(cls, artifacts: Artifacts, context: AuditContext) -> AuditProduct:
        element = _find_meta(artifacts.require("MetaElements"), "description")
        if element is None:
            return AuditProduct(score=0)

        content = (element.get("content") or "").strip()
        if not content:
            return AuditProduct(score=0, explanation="Description text is empty.")
        return AuditProduct(score=1, details={"content": content})


class Viewport(Audit):
    meta = AuditMeta(
        id="viewport",
        title="Has a `<meta name=\"viewport\">` tag with `width` or `initial-scale`",
        failure_title="Does not have a `<meta name=\"viewport\">` tag with `width` or `initial-scale`",
        description="A viewport meta tag optimizes the page for mobile screen sizes.",
        required_artifacts=("MetaElements",),
        supported_modes=DOCUMENT_MODES,
    )

    @classmethod
    def audit(cls, artifacts: Artifacts, context: AuditContext) -> AuditProduct:
        element = _find_meta(artifacts.require("MetaElements"), "viewport")
        if element is None:
            return AuditProduct(score=0, explanation="No `<meta name=\"viewport\">` tag found")

        content = (element.get("content") or "").lower()
        keys = {part.split("=")[0].strip() for part in content.replace(";", ",").split(",")}
        if "width" not in keys and "initial-scale" not in keys:
            return AuditProduct(
                score=0, explanation="No `width` or `initial-scale` property found"
            )
        return AuditProduct(score=1, details={"content": content})
