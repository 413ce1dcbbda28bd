"""
Tests for the resources module.

This test module validates:
- is_contained separator-anchored prefix matching
- file:// URI handling
- ResourceScanner listing (non-recursive, rescanned on every call)
- ResourceScanner reads and their error classes
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from mcp_demo.errors import (
    BoundaryViolationError,
    InvalidArgumentError,
    ResourceReadError,
)
from mcp_demo.resources import (
    FILE_URI_PREFIX,
    ResourceScanner,
    is_contained,
    resolve_file_uri,
)

# =============================================================================
# Tests for is_contained
# =============================================================================


class TestIsContained:
    """Tests for the root boundary guard."""

    def test_child_path_is_contained(self) -> None:
        """Test a path under the root is accepted."""
        assert is_contained("/a/b/c", ["/a/b"]) is True

    def test_sibling_prefix_is_rejected(self) -> None:
        """Test a sibling sharing the root's prefix is rejected."""
        assert is_contained("/a/bx", ["/a/b"]) is False

    def test_root_itself_is_not_contained(self) -> None:
        """Test the root directory path is not a file inside it."""
        assert is_contained("/a/b", ["/a/b"]) is False

    def test_any_root_matches(self) -> None:
        """Test that matching one of several roots is enough."""
        assert is_contained("/srv/two/file.txt", ["/srv/one", "/srv/two"]) is True

    def test_no_roots(self) -> None:
        """Test that nothing is contained without roots."""
        assert is_contained("/a/b/c", []) is False

    def test_accepts_path_objects_as_roots(self) -> None:
        """Test roots may be Path objects."""
        assert is_contained("/a/b/c", [Path("/a/b")]) is True

    def test_dot_dot_segments_are_not_normalised(self) -> None:
        """Test the guard compares strings and does not resolve traversal."""
        assert is_contained("/a/b/../secret", ["/a/b"]) is True


# =============================================================================
# Tests for resolve_file_uri
# =============================================================================


class TestResolveFileUri:
    """Tests for resolve_file_uri."""

    def test_strips_scheme(self) -> None:
        """Test the file:// prefix is removed."""
        assert resolve_file_uri("file:///srv/demo/a.txt") == "/srv/demo/a.txt"

    @pytest.mark.parametrize("uri", [None, "", "http://example.com/a", 42, "/srv/a"])
    def test_rejects_other_uris(self, uri: object) -> None:
        """Test missing or non-file URIs raise InvalidArgumentError."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            resolve_file_uri(uri)

        assert "expected" in exc_info.value.details


# =============================================================================
# Tests for ResourceScanner
# =============================================================================


class TestResourceScannerList:
    """Tests for ResourceScanner.list."""

    def test_lists_direct_files_only(self, demo_root: Path) -> None:
        """Test files are listed and subdirectories are not descended into."""
        resources = ResourceScanner([demo_root]).list()

        assert [r.name for r in resources] == ["hello.txt", "notes.md"]

    def test_descriptor_fields(self, demo_root: Path) -> None:
        """Test the URI, MIME type and description of a listed file."""
        hello = ResourceScanner([demo_root], description="Demo file").list()[0]

        assert hello.to_dict() == {
            "uri": FILE_URI_PREFIX + str(demo_root / "hello.txt"),
            "mimeType": "text/plain",
            "name": "hello.txt",
            "description": "Demo file",
        }

    def test_unknown_extension_uses_default_mime_type(self, demo_root: Path) -> None:
        """Test the default MIME type applies when none can be guessed."""
        (demo_root / "data.unknownext").write_text("x", encoding="utf-8")

        scanner = ResourceScanner([demo_root], default_mime_type="application/x-demo")
        by_name = {r.name: r for r in scanner.list()}

        assert by_name["data.unknownext"].mime_type == "application/x-demo"

    def test_missing_root_is_skipped(self, tmp_path: Path, demo_root: Path) -> None:
        """Test a root that does not exist is ignored."""
        scanner = ResourceScanner([tmp_path / "absent", demo_root])

        assert len(scanner.list()) == 2

    def test_rescans_on_every_call(self, demo_root: Path) -> None:
        """Test new files show up without restarting."""
        scanner = ResourceScanner([demo_root])
        assert len(scanner.list()) == 2

        (demo_root / "later.txt").write_text("new", encoding="utf-8")

        assert "later.txt" in [r.name for r in scanner.list()]

    @pytest.mark.skipif(
        hasattr(os, "geteuid") and os.geteuid() == 0,
        reason="root can read files regardless of permissions",
    )
    def test_unreadable_file_is_skipped(self, demo_root: Path) -> None:
        """Test files without read permission are not listed."""
        secret = demo_root / "secret.txt"
        secret.write_text("hidden", encoding="utf-8")
        secret.chmod(0)
        try:
            names = [r.name for r in ResourceScanner([demo_root]).list()]
        finally:
            secret.chmod(0o600)

        assert "secret.txt" not in names

    def test_roots_are_made_absolute(self, demo_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test relative roots are resolved against the working directory."""
        monkeypatch.chdir(demo_root.parent)

        scanner = ResourceScanner(["demo-root"])

        assert os.path.isabs(scanner.roots[0])
        assert [r.name for r in scanner.list()] == ["hello.txt", "notes.md"]


class TestResourceScannerRead:
    """Tests for ResourceScanner.read."""

    def test_reads_file_inside_root(self, demo_root: Path) -> None:
        """Test a file under a root is read as text."""
        uri = FILE_URI_PREFIX + str(demo_root / "hello.txt")

        content = ResourceScanner([demo_root]).read(uri)

        assert content == {
            "mimeType": "text/plain",
            "uri": uri,
            "text": "Hello from the demo root.\n",
        }

    def test_outside_roots_is_boundary_violation(
        self, demo_root: Path, tmp_path: Path
    ) -> None:
        """Test a file outside every root raises BoundaryViolationError."""
        outside = tmp_path / "outside.txt"
        outside.write_text("nope", encoding="utf-8")

        with pytest.raises(BoundaryViolationError):
            ResourceScanner([demo_root]).read(FILE_URI_PREFIX + str(outside))

    def test_sibling_directory_is_boundary_violation(self, tmp_path: Path) -> None:
        """Test a sibling directory sharing the root's prefix is rejected."""
        root = tmp_path / "data"
        sibling = tmp_path / "database"
        root.mkdir()
        sibling.mkdir()
        (sibling / "f.txt").write_text("x", encoding="utf-8")

        with pytest.raises(BoundaryViolationError):
            ResourceScanner([root]).read(FILE_URI_PREFIX + str(sibling / "f.txt"))

    def test_missing_file_is_read_failure(self, demo_root: Path) -> None:
        """Test a missing file inside a root raises ResourceReadError."""
        with pytest.raises(ResourceReadError) as exc_info:
            ResourceScanner([demo_root]).read(
                FILE_URI_PREFIX + str(demo_root / "missing.txt")
            )

        assert "missing.txt" in exc_info.value.details["message"]

    def test_directory_is_read_failure(self, demo_root: Path) -> None:
        """Test reading a directory inside a root raises ResourceReadError."""
        with pytest.raises(ResourceReadError):
            ResourceScanner([demo_root]).read(FILE_URI_PREFIX + str(demo_root / "nested"))

    def test_nested_file_can_be_read(self, demo_root: Path) -> None:
        """Test containment is not limited to direct children."""
        uri = FILE_URI_PREFIX + str(demo_root / "nested" / "deep.txt")

        assert ResourceScanner([demo_root]).read(uri)["text"] == "not listed"

    def test_embedded_null_byte_is_read_failure(self, demo_root: Path) -> None:
        """Test a path the OS rejects outright is a read failure."""
        with pytest.raises(ResourceReadError) as exc_info:
            ResourceScanner([demo_root]).read(
                FILE_URI_PREFIX + str(demo_root) + os.sep + "x\x00y"
            )

        assert "null" in exc_info.value.details["message"]

    def test_invalid_uri(self, demo_root: Path) -> None:
        """Test a non-file URI raises InvalidArgumentError."""
        with pytest.raises(InvalidArgumentError):
            ResourceScanner([demo_root]).read("https://example.com/x")
