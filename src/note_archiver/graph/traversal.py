"""Breadth-first closure over the note link graph."""
import logging
from collections import deque
from typing import Deque, List, Set, Tuple, Union

from note_archiver.archive.errors import DocumentNotFoundError
from note_archiver.graph.links import LinkResolver
from note_archiver.models.schema import Document, FrontierEntry
from note_archiver.storage.base import DocumentStore

logger = logging.getLogger(__name__)

UNBOUNDED = -1

class LinkGraphTraversal:
    """Collect the notes reachable from a start note within a depth bound.

    Links, embeds and frontmatter links are all edges. A ``max_depth`` of
    -1 removes the depth bound; the visited set alone keeps the walk finite.
    """

    def __init__(self, store: DocumentStore, resolver: LinkResolver):
        self.store = store
        self.resolver = resolver

    def walk(self, start: Union[Document, str], max_depth: int) -> List[FrontierEntry]:
        """Visit documents breadth first and return them in visit order.

        Each document appears once, at its first (minimum) depth.
        """
        if max_depth < UNBOUNDED:
            raise ValueError(f"max_depth must be -1 or greater, got {max_depth}")

        start_doc = self._load(start)
        queue: Deque[Tuple[Document, int]] = deque([(start_doc, 0)])
        visited: Set[str] = set()
        visited_order: List[FrontierEntry] = []

        while queue:
            document, depth = queue.popleft()
            if document.path in visited:
                continue
            visited.add(document.path)
            visited_order.append(FrontierEntry(path=document.path, depth=depth))

            if max_depth != UNBOUNDED and depth >= max_depth:
                continue

            for link in self.resolver.outgoing_links(document):
                target = self.resolver.resolve(link.target, document.path)
                if target is None:
                    logger.debug(f"Unresolved {link.kind.value} '{link.target}' in {document.path}")
                    continue
                if target.path not in visited:
                    queue.append((target, depth + 1))

        logger.info(
            f"Collected {len(visited_order)} documents from {start_doc.path} "
            f"(max depth {max_depth})"
        )
        return visited_order

    def closure(self, start: Union[Document, str], max_depth: int) -> Set[str]:
        """Paths reachable from ``start`` within ``max_depth`` hops, start included."""
        return {entry.path for entry in self.walk(start, max_depth)}

    def _load(self, start: Union[Document, str]) -> Document:
        path = start.path if isinstance(start, Document) else start
        document = self.store.get(path)
        if document is None:
            raise DocumentNotFoundError(path)
        return document
