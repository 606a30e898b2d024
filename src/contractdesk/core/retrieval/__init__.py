"""Document retrieval stage"""

from contractdesk.core.retrieval.transport import AbstractFileTransport, FetchedPayload
from contractdesk.core.retrieval.retriever import DocumentRetriever, sniff_rejection

__all__ = ["AbstractFileTransport", "FetchedPayload", "DocumentRetriever", "sniff_rejection"]
