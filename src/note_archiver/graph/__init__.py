"""Link graph of the note vault."""
from .links import LinkResolver, MarkdownLinkResolver
from .traversal import LinkGraphTraversal

__all__ = ["LinkResolver", "MarkdownLinkResolver", "LinkGraphTraversal"]
