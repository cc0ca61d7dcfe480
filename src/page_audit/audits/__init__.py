"""Built-in audits, registered by id."""

from .accessibility import HtmlHasLang, ImageAlt
from .base import Audit, AuditContext, AuditMeta, AuditProduct, compute_log_normal_score
from .best_practices import ErrorsInConsole
from .dom_size import DomSize
from .metrics import FirstContentfulPaint, LargestContentfulPaint
from .network import NetworkRequests, ServerResponseTime, TotalByteWeight
from .seo import DocumentTitle, MetaDescription, Viewport

AUDITS: dict[str, type[Audit]] = {
    cls.meta.id: cls
    for cls in (
        FirstContentfulPaint,
        LargestContentfulPaint,
        ServerResponseTime,
        TotalByteWeight,
        NetworkRequests,
        DomSize,
        ErrorsInConsole,
        HtmlHasLang,
        ImageAlt,
        DocumentTitle,
        MetaDescription,
        Viewport,
    )
}

__all__ = [
    "AUDITS",
    "Audit",
    "AuditContext",
    "AuditMeta",
    "AuditProduct",
    "compute_log_normal_score",
]
