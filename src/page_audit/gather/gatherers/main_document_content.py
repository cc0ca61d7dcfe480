"""Serialized HTML of the main document."""

from ...core.types import GatherMode
from ..base import GatherContext, Gatherer, GathererMeta

DOCUMENT_CONTENT_SCRIPT = "() => document.documentElement.outerHTML"


class MainDocumentContent(Gatherer):
    meta = GathererMeta(supported_modes=frozenset({GatherMode.NAVIGATION, GatherMode.SNAPSHOT}))

    async def get_artifact(self, context: GatherContext) -> str:
        content = await context.page.evaluate(DOCUMENT_CONTENT_SCRIPT)
        return content or ""
