"""Link extraction and resolution for markdown notes."""
import logging
import posixpath
import re
from abc import ABC, abstractmethod
from typing import Any, Iterator, List, Optional
from urllib.parse import unquote

import frontmatter

from note_archiver.models.schema import Document, Link, LinkKind
from note_archiver.storage.base import DocumentStore

logger = logging.getLogger(__name__)

FENCED_CODE_RE = re.compile(r"^(```|~~~).*?^\1[^\n]*$", re.MULTILINE | re.DOTALL)
INLINE_CODE_RE = re.compile(r"`[^`\n]*`")
WIKILINK_RE = re.compile(r"(!?)\[\[([^\[\]\n]+?)\]\]")
MARKDOWN_LINK_RE = re.compile(
    r"(!?)\[[^\]\n]*\]\(\s*(<[^>\n]+>|[^)\s]+)(?:\s+\"[^\"\n]*\")?\s*\)"
)
URL_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")
SUBPATH_RE = re.compile(r"[#^]")

class LinkResolver(ABC):
    """Finds a document's outgoing links and resolves link targets."""

    @abstractmethod
    def outgoing_links(self, document: Document) -> List[Link]:
        """Links and embeds found in the document."""

    @abstractmethod
    def resolve(self, target: str, source_path: str) -> Optional[Document]:
        """The document a link target points to, or None if unresolved."""

class MarkdownLinkResolver(LinkResolver):
    """Resolves wikilinks, embeds and markdown links against a store.

    Resolution follows the vault convention: a target is tried relative to
    the linking note's folder, then from the vault root (each with and
    without an implied ``.md``), and finally matched by file name anywhere
    in the vault, preferring the linking note's folder and then the
    shortest path.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    def outgoing_links(self, document: Document) -> List[Link]:
        if document.is_binary:
            return []
        try:
            text = document.content.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning(f"Cannot decode {document.path} as UTF-8, ignoring its links")
            return []

        links = []
        try:
            post = frontmatter.loads(text)
            body = post.content
            for value in self._iter_strings(post.metadata):
                for match in WIKILINK_RE.finditer(value):
                    target = self._wikilink_target(match.group(2))
                    if target:
                        links.append(Link(source_path=document.path, target=target,
                                          kind=LinkKind.FRONTMATTER))
        except Exception as e:
            logger.warning(f"Invalid frontmatter in {document.path}: {e}")
            body = text

        body = FENCED_CODE_RE.sub("", body)
        body = INLINE_CODE_RE.sub("", body)

        for match in WIKILINK_RE.finditer(body):
            target = self._wikilink_target(match.group(2))
            if target:
                kind = LinkKind.EMBED if match.group(1) else LinkKind.LINK
                links.append(Link(source_path=document.path, target=target, kind=kind))

        for match in MARKDOWN_LINK_RE.finditer(body):
            target = self._markdown_target(match.group(2))
            if target:
                kind = LinkKind.EMBED if match.group(1) else LinkKind.LINK
                links.append(Link(source_path=document.path, target=target, kind=kind))

        return links

    def resolve(self, target: str, source_path: str) -> Optional[Document]:
        linkpath = SUBPATH_RE.split(target, 1)[0].strip()
        if not linkpath:
            return None

        source_dir = posixpath.dirname(source_path)
        for base in (source_dir, ""):
            joined = posixpath.normpath(posixpath.join(base, linkpath))
            if joined == "." or joined.startswith(".."):
                continue
            for candidate in (joined, f"{joined}.md"):
                if self.store.is_file(candidate):
                    return self.store.get(candidate)

        name = posixpath.basename(linkpath)
        suffix = posixpath.normpath(linkpath).lstrip("./")
        matches = []
        for path in self.store.list_files():
            if posixpath.basename(path) not in (name, f"{name}.md"):
                continue
            if "/" in suffix and not (
                path.endswith(f"/{suffix}") or path.endswith(f"/{suffix}.md")
            ):
                continue
            matches.append(path)

        if not matches:
            return None
        best = min(matches, key=lambda p: (posixpath.dirname(p) != source_dir, len(p), p))
        return self.store.get(best)

    def _wikilink_target(self, inner: str) -> str:
        # Obsidian escapes the alias pipe inside tables as "\|"
        return inner.split("|", 1)[0].rstrip("\\").strip()

    def _markdown_target(self, raw: str) -> Optional[str]:
        if raw.startswith("<") and raw.endswith(">"):
            raw = raw[1:-1]
        if URL_SCHEME_RE.match(raw) or raw.startswith("#"):
            return None
        return unquote(raw).strip() or None

    def _iter_strings(self, value: Any) -> Iterator[str]:
        if isinstance(value, str):
            yield value
        elif isinstance(value, dict):
            for item in value.values():
                yield from self._iter_strings(item)
        elif isinstance(value, (list, tuple)):
            for item in value:
                yield from self._iter_strings(item)
