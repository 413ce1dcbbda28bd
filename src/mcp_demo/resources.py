"""
File resources exposed from the configured root directories.

This module provides:
- ResourceScanner: lists the readable regular files directly under each root
- is_contained: the root boundary guard used before every read
- resolve_file_uri / read_resource: turn a ``file://`` URI into file contents

Roots are a coordination convention, not a security boundary. The guard is a
plain string-prefix check anchored on the path separator: it does not follow
symlinks, fold case, or remove ``..`` segments. Callers needing isolation must
use an OS-level sandbox.
"""

from __future__ import annotations

import mimetypes
import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from mcp_demo.errors import (
    BoundaryViolationError,
    InvalidArgumentError,
    ResourceReadError,
)
from mcp_demo.logging import get_logger

logger = get_logger(__name__)

FILE_URI_PREFIX = "file://"


def is_contained(path: str, roots: Iterable[str | Path]) -> bool:
    """
    Check whether ``path`` lies under one of ``roots``.

    True iff ``path`` starts with some root immediately followed by the path
    separator, so root ``/a/b`` accepts ``/a/b/c`` but not ``/a/bx`` nor
    ``/a/b`` itself. The path is compared as given, without normalisation.

    Args:
        path: Absolute path to check.
        roots: Absolute root directories.

    Returns:
        True if the path is inside a root.

    Example:
        >>> is_contained("/a/b/c", ["/a/b"])
        True
        >>> is_contained("/a/bx", ["/a/b"])
        False
    """
    return any(path.startswith(str(root) + os.sep) for root in roots)


def resolve_file_uri(uri: Any) -> str:
    """
    Strip the ``file://`` scheme from a resource URI.

    Args:
        uri: The URI from the request.

    Returns:
        The filesystem path part of the URI.

    Raises:
        InvalidArgumentError: If the URI is missing or uses another scheme.
    """
    if not isinstance(uri, str) or not uri.startswith(FILE_URI_PREFIX):
        raise InvalidArgumentError(
            message="Invalid URI. Use file://",
            details={"expected": f"{FILE_URI_PREFIX}<absolute path>", "uri": uri},
        )
    return uri[len(FILE_URI_PREFIX) :]


@dataclass(frozen=True)
class ResourceDescriptor:
    """
    A file exposed as a resource. Built on every listing, never stored.

    Attributes:
        uri: ``file://`` URI of the file.
        mime_type: Guessed MIME type.
        name: File name.
        description: Description shared by all listed files.
    """

    uri: str
    mime_type: str
    name: str
    description: str

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form used by resources/list."""
        return {
            "uri": self.uri,
            "mimeType": self.mime_type,
            "name": self.name,
            "description": self.description,
        }


class ResourceScanner:
    """
    Lists and reads files under a fixed set of root directories.

    Attributes:
        roots: Absolute root directories, as strings.
        description: Description attached to every listed file.
        default_mime_type: MIME type used when none can be guessed.
    """

    def __init__(
        self,
        roots: Sequence[str | Path],
        *,
        description: str = "Demo file",
        default_mime_type: str = "text/plain",
    ) -> None:
        self.roots: tuple[str, ...] = tuple(os.path.abspath(root) for root in roots)
        self.description = description
        self.default_mime_type = default_mime_type

    def mime_type_for(self, path: str) -> str:
        """Guess a MIME type from the file name."""
        mime_type, _ = mimetypes.guess_type(path)
        return mime_type or self.default_mime_type

    def list(self) -> list[ResourceDescriptor]:
        """
        Scan the roots now and describe every readable regular file.

        Only direct children are listed; subdirectories are not descended
        into. Roots that do not exist are skipped.

        Returns:
            Resource descriptors ordered by root, then file name.
        """
        resources: list[ResourceDescriptor] = []
        for root in self.roots:
            if not os.path.isdir(root):
                logger.debug("Skipping missing resource root", extra={"root": root})
                continue
            try:
                with os.scandir(root) as it:
                    entries = sorted(it, key=lambda entry: entry.name)
            except OSError as e:
                logger.warning(
                    "Cannot scan resource root",
                    extra={"root": root, "error": str(e)},
                )
                continue
            for entry in entries:
                if not entry.is_file() or not os.access(entry.path, os.R_OK):
                    continue
                full_path = os.path.join(root, entry.name)
                resources.append(
                    ResourceDescriptor(
                        uri=FILE_URI_PREFIX + full_path,
                        mime_type=self.mime_type_for(full_path),
                        name=entry.name,
                        description=self.description,
                    )
                )
        return resources

    def read(self, uri: Any) -> dict[str, Any]:
        """
        Read a resource by URI.

        Args:
            uri: ``file://`` URI of a file under one of the roots.

        Returns:
            Content entry ``{"mimeType", "uri", "text"}``.

        Raises:
            InvalidArgumentError: If the URI does not use the file scheme.
            BoundaryViolationError: If the path is outside every root.
            ResourceReadError: If the file cannot be read as UTF-8 text.
        """
        path = resolve_file_uri(uri)
        if not is_contained(path, self.roots):
            raise BoundaryViolationError(
                message="Outside the permitted roots",
                details={"uri": uri, "roots": list(self.roots)},
            )

        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, ValueError) as e:
            raise ResourceReadError(
                message="Failed to read resource",
                details={"message": str(e)},
            ) from e

        return {"mimeType": self.mime_type_for(path), "uri": uri, "text": text}
