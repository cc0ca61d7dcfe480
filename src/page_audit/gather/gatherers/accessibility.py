"""Accessibility-relevant facts about the current document."""

from typing import Any

from ...core.types import GatherMode
from ..base import GatherContext, Gatherer, GathererMeta

ACCESSIBILITY_SCRIPT = """() => ({
  document_title: document.title || '',
  html_lang: document.documentElement.getAttribute('lang'),
  images: Array.from(document.images).map((img) => ({
    src: img.currentSrc || img.src || '',
    alt: img.getAttribute('alt'),
    role: img.getAttribute('role'),
    aria_hidden: img.getAttribute('aria-hidden') === 'true',
  })),
})"""


class Accessibility(Gatherer):
    """Document title, language and image text alternatives."""

    meta = GathererMeta(supported_modes=frozenset({GatherMode.NAVIGATION, GatherMode.SNAPSHOT}))

    async def get_artifact(self, context: GatherContext) -> dict[str, Any]:
        result = await context.page.evaluate(ACCESSIBILITY_SCRIPT) or {}
        return {
            "document_title": result.get("document_title", ""),
            "html_lang": result.get("html_lang"),
            "images": list(result.get("images", [])),
        }
