"""Accessibility audits."""

from ..core.artifacts import Artifacts
from ..core.types import GatherMode
from .base import Audit, AuditContext, AuditMeta, AuditProduct

DOCUMENT_MODES = frozenset({GatherMode.NAVIGATION, GatherMode.SNAPSHOT})


class HtmlHasLang(Audit):
    meta = AuditMeta(
        id="html-has-lang",
        title="`<html>` element has a `[lang]` attribute",
        failure_title="`<html>` element does not have a `[lang]` attribute",
        description="Screen readers use the page language to pronounce text correctly.",
        required_artifacts=("Accessibility",),
        supported_modes=DOCUMENT_MODES,
    )

    @classmethod
    def audit(cls, artifacts: Artifacts, context: AuditContext) -> AuditProduct:
        lang = (artifacts.require("Accessibility").get("html_lang") or "").strip()
        return AuditProduct(score=1 if lang else 0, details={"lang": lang or None})


class ImageAlt(Audit):
    meta = AuditMeta(
        id="image-alt",
        title="Image elements have `[alt]` attributes",
        failure_title="Image elements do not have `[alt]` attributes",
        description="Informative images need short, descriptive alternate text.",
        required_artifacts=("Accessibility",),
        supported_modes=DOCUMENT_MODES,
    )

    @classmethod
    def audit(cls, artifacts: Artifacts, context: AuditContext) -> AuditProduct:
        images = [
            image
            for image in artifacts.require("Accessibility").get("images", [])
            if not image.get("aria_hidden") and image.get("role") not in ("presentation", "none")
        ]
        if not images:
            return AuditProduct(not_applicable=True)

        failing = [image.get("src", "") for image in images if image.get("alt") is None]
        return AuditProduct(
            score=0 if failing else 1,
            details={"items": [{"src": src} for src in failing]},
        )
