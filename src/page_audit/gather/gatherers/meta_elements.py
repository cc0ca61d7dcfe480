"""The document's ``<meta>`` elements."""

from typing import Any

from ...core.types import GatherMode
from ..base import GatherContext, Gatherer, GathererMeta

META_ELEMENTS_SCRIPT = """() => Array.from(document.head ? document.head.querySelectorAll('meta') : [])
  .map((el) => ({
    name: (el.getAttribute('name') || '').toLowerCase(),
    property: el.getAttribute('property') || '',
    http_equiv: (el.getAttribute('http-equiv') || '').toLowerCase(),
    content: el.getAttribute('content'),
    charset: el.getAttribute('charset'),
  }))"""


class MetaElements(Gatherer):
    meta = GathererMeta(supported_modes=frozenset({GatherMode.NAVIGATION, GatherMode.SNAPSHOT}))

    async def get_artifact(self, context: GatherContext) -> list[dict[str, Any]]:
        return list(await context.page.evaluate(META_ELEMENTS_SCRIPT) or [])
