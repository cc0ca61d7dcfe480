"""Size and shape of the DOM tree."""

from typing import Any

from ...core.types import GatherMode
from ..base import GatherContext, Gatherer, GathererMeta

DOM_STATS_SCRIPT = """() => {
  let maxDepth = 0;
  let maxChildren = 0;
  let total = 0;
  const walk = (node, depth) => {
    total += 1;
    maxDepth = Math.max(maxDepth, depth);
    maxChildren = Math.max(maxChildren, node.children.length);
    for (const child of node.children) walk(child, depth + 1);
  };
  if (document.body) walk(document.body, 1);
  return {total_elements: total, max_depth: maxDepth, max_children: maxChildren};
}"""


class DOMStats(Gatherer):
    meta = GathererMeta(supported_modes=frozenset({GatherMode.NAVIGATION, GatherMode.SNAPSHOT}))

    async def get_artifact(self, context: GatherContext) -> dict[str, Any]:
        stats = await context.page.evaluate(DOM_STATS_SCRIPT) or {}
        return {
            "total_elements": int(stats.get("total_elements", 0)),
            "max_depth": int(stats.get("max_depth", 0)),
            "max_children": int(stats.get("max_children", 0)),
        }
