"""Tests for markdown link extraction and resolution."""
import pytest

from note_archiver.graph.links import MarkdownLinkResolver
from note_archiver.models.schema import Document, LinkKind

def note(path, text):
    return Document(path=path, content=text.encode("utf-8"))

@pytest.fixture
def resolver(vault):
    return MarkdownLinkResolver(vault)

class TestLinkExtraction:
    """Test outgoing link parsing."""

    def test_wikilinks_and_embeds(self, resolver):
        """Wikilinks are links, bang-prefixed wikilinks are embeds."""
        links = resolver.outgoing_links(note("a.md", "See [[Other]] and ![[image.png]]."))

        assert [(l.target, l.kind) for l in links] == [
            ("Other", LinkKind.LINK),
            ("image.png", LinkKind.EMBED),
        ]
        assert all(l.source_path == "a.md" for l in links)

    def test_alias_and_heading(self, resolver):
        """Aliases are dropped, headings are kept for resolution to strip."""
        links = resolver.outgoing_links(note("a.md", "[[Other|shown]] [[Third#Section]]"))

        assert [l.target for l in links] == ["Other", "Third#Section"]

    def test_escaped_alias_in_table(self, resolver):
        """Table cells escape the alias pipe."""
        links = resolver.outgoing_links(note("a.md", "| [[Other\\|shown]] |"))

        assert [l.target for l in links] == ["Other"]

    def test_markdown_links(self, resolver):
        """Markdown links and images are decoded; URLs and anchors are skipped."""
        text = (
            "[doc](My%20Note.md) ![pic](<assets/a b.png>) "
            "[web](https://example.com) [mail](mailto:x@example.com) [top](#top) "
            '[titled](Other.md "Title")'
        )
        links = resolver.outgoing_links(note("a.md", text))

        assert [(l.target, l.kind) for l in links] == [
            ("My Note.md", LinkKind.LINK),
            ("assets/a b.png", LinkKind.EMBED),
            ("Other.md", LinkKind.LINK),
        ]

    def test_code_is_ignored(self, resolver):
        """Links inside fenced and inline code are not edges."""
        text = "```\n[[Hidden]]\n```\nInline `[[AlsoHidden]]` and [[Visible]]\n~~~\n[[Tilde]]\n~~~\n"
        links = resolver.outgoing_links(note("a.md", text))

        assert [l.target for l in links] == ["Visible"]

    def test_frontmatter_links(self, resolver):
        """Wikilinks in frontmatter values are edges; the YAML is not parsed as body."""
        text = '---\nup: "[[Parent]]"\nrelated:\n  - "[[Sibling]]"\ntitle: plain\n---\n\nBody [[Child]]\n'
        links = resolver.outgoing_links(note("a.md", text))

        assert {(l.target, l.kind) for l in links} == {
            ("Parent", LinkKind.FRONTMATTER),
            ("Sibling", LinkKind.FRONTMATTER),
            ("Child", LinkKind.LINK),
        }

    def test_binary_documents_have_no_links(self, resolver):
        """Binary documents are leaves."""
        assert resolver.outgoing_links(Document(path="a.pdf", content=b"[[Other]]")) == []

    def test_undecodable_text(self, resolver):
        """A markdown file that is not UTF-8 yields no links."""
        assert resolver.outgoing_links(Document(path="a.md", content=b"\xff\xfe[[x]]")) == []

class TestLinkResolution:
    """Test resolving link targets to documents."""

    def test_resolve_relative_to_source_folder(self, vault, add_file, resolver):
        """A bare name resolves next to the linking note first."""
        add_file(vault, "Topic.md", "root")
        add_file(vault, "Notes/Topic.md", "nested")

        resolved = resolver.resolve("Topic", "Notes/Index.md")

        assert resolved.path == "Notes/Topic.md"

    def test_resolve_from_root(self, vault, add_file, resolver):
        """A path-like target resolves from the vault root."""
        add_file(vault, "Projects/Plan.md", "plan")

        assert resolver.resolve("Projects/Plan", "Notes/Index.md").path == "Projects/Plan.md"

    def test_resolve_by_name_shortest_path(self, vault, add_file, resolver):
        """Name matches elsewhere prefer the shortest path."""
        add_file(vault, "a/b/c/Deep.md", "deep")
        add_file(vault, "x/Deep.md", "shallow")

        assert resolver.resolve("Deep", "Index.md").path == "x/Deep.md"

    def test_resolve_strips_subpath(self, vault, add_file, resolver):
        """Heading and block references resolve to the note."""
        add_file(vault, "Target.md", "# H")

        assert resolver.resolve("Target#H", "Index.md").path == "Target.md"
        assert resolver.resolve("Target^block", "Index.md").path == "Target.md"

    def test_resolve_attachment_with_extension(self, vault, add_file, resolver):
        """Attachments keep their own extension."""
        add_file(vault, "files/report.pdf", b"%PDF")

        assert resolver.resolve("report.pdf", "Index.md").path == "files/report.pdf"

    def test_resolve_parent_relative(self, vault, add_file, resolver):
        """Markdown links may climb to the parent folder."""
        add_file(vault, "Shared.md", "shared")

        assert resolver.resolve("../Shared.md", "Notes/Index.md").path == "Shared.md"

    def test_unresolved(self, resolver):
        """Unknown targets resolve to None."""
        assert resolver.resolve("Missing", "Index.md") is None
        assert resolver.resolve("#only-heading", "Index.md") is None

    def test_folders_do_not_resolve(self, vault, add_file, resolver):
        """A folder with the target's name is not a document."""
        add_file(vault, "Topic/inside.md", "x")

        assert resolver.resolve("Topic", "Index.md") is None
