"""The network request that loaded the main document."""

from typing import Any
from urllib.parse import urldefrag

from ..core.computed import ComputedArtifact, ComputedArtifactCache
from ..core.errors import GatherRuntimeError, RuntimeErrorCode
from .network_records import NetworkRecords, NetworkRequest


class MainResource(ComputedArtifact):
    name = "MainResource"

    @classmethod
    def compute(cls, source: Any, cache: ComputedArtifactCache) -> NetworkRequest:
        url = source.require("URL").get("main_document_url")
        records = NetworkRecords.request(source, cache)
        documents = [r for r in records if r.resource_type == "document"]

        if url:
            target = urldefrag(url).url
            for record in documents:
                if urldefrag(record.url).url == target:
                    return record

        navigations = [r for r in documents if r.is_navigation_request]
        if navigations:
            return navigations[-1]
        raise GatherRuntimeError(RuntimeErrorCode.NO_DOCUMENT_REQUEST)
