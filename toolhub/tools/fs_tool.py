"""Filesystem Tools for toolhub.

This module provides the read_file and write_file tools. When a root
directory is configured, every path is resolved inside it and paths that
escape it are rejected.
"""

import asyncio
from functools import partial
from pathlib import Path
from typing import Optional

from toolhub.core.context import ToolContext
from toolhub.core.errors import ToolError
from toolhub.types import ArgumentSet, Tool, ToolParameter

DEFAULT_MAX_READ_BYTES = 1_000_000


class FileToolError(ToolError):
    """Raised when there is an error performing a filesystem operation."""
    pass


def resolve_path(path: str, root: Optional[str] = None) -> Path:
    """Resolve a user-supplied path, optionally confining it to a root.

    Relative paths are taken relative to the root when one is set.

    Raises:
        FileToolError: If the path is empty or escapes the root
    """
    if not path or not path.strip():
        raise FileToolError("Path cannot be empty")

    candidate = Path(path).expanduser()
    if root is None:
        return candidate.resolve()

    base = Path(root).expanduser().resolve()
    if not candidate.is_absolute():
        candidate = base / candidate
    resolved = candidate.resolve()
    if resolved != base and base not in resolved.parents:
        raise FileToolError(f"Access denied: {path} is outside the allowed directory")
    return resolved


def _read_text(path: Path, encoding: str, max_bytes: int) -> str:
    if not path.exists():
        raise FileToolError(f"File not found: {path}")
    if not path.is_file():
        raise FileToolError(f"Not a file: {path}")

    size = path.stat().st_size
    with open(path, "rb") as f:
        data = f.read(max_bytes)
    try:
        text = data.decode(encoding, errors="strict" if size <= max_bytes else "ignore")
    except UnicodeDecodeError:
        raise FileToolError(f"File is not valid {encoding} text: {path}")
    except LookupError:
        raise FileToolError(f"Unknown encoding: {encoding}")

    if size > max_bytes:
        text += f"\n... [truncated, {size} bytes total]"
    return text


def _write_text(path: Path, content: str, append: bool) -> int:
    if path.is_dir():
        raise FileToolError(f"Path is a directory: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)

    data = content.encode("utf-8")
    with open(path, "ab" if append else "wb") as f:
        f.write(data)
    return len(data)


async def read_file_handler(
    args: ArgumentSet,
    context: ToolContext,
    *,
    root: Optional[str] = None,
    max_bytes: int = DEFAULT_MAX_READ_BYTES,
) -> str:
    """Handle read_file tool execution.

    Args:
        args: Validated arguments containing:
            - path: File to read
            - encoding: Text encoding
        context: Call context

    Returns:
        The file contents

    Raises:
        FileToolError: If the file cannot be read
    """
    path = resolve_path(args["path"], root)
    try:
        return await context.run(asyncio.to_thread(_read_text, path, args["encoding"], max_bytes))
    except FileToolError:
        raise
    except OSError as e:
        raise FileToolError(f"Error reading {path}: {e.strerror or e}")


async def write_file_handler(
    args: ArgumentSet,
    context: ToolContext,
    *,
    root: Optional[str] = None,
) -> str:
    """Handle write_file tool execution.

    Args:
        args: Validated arguments containing:
            - path: File to write
            - content: Text to write
            - append: Append instead of overwrite
        context: Call context

    Returns:
        Confirmation message

    Raises:
        FileToolError: If the file cannot be written
    """
    path = resolve_path(args["path"], root)
    append = args["append"]
    try:
        written = await context.run(asyncio.to_thread(_write_text, path, args["content"], append))
    except FileToolError:
        raise
    except OSError as e:
        raise FileToolError(f"Error writing {path}: {e.strerror or e}")

    action = "Appended" if append else "Wrote"
    return f"{action} {written} bytes to {path}"


def create_read_file_tool(root: Optional[str] = None, max_bytes: int = DEFAULT_MAX_READ_BYTES) -> Tool:
    """Create the read_file tool definition.

    Args:
        root: Optional directory that confines all paths
        max_bytes: Maximum number of bytes returned
    """
    return Tool(
        name="read_file",
        description="Read the contents of a text file",
        parameters={
            "path": ToolParameter(
                type="string",
                description="Path to the file",
                required=True
            ),
            "encoding": ToolParameter(
                type="string",
                description="Text encoding of the file",
                default="utf-8"
            )
        },
        handler=partial(read_file_handler, root=root, max_bytes=max_bytes)
    )


def create_write_file_tool(root: Optional[str] = None) -> Tool:
    """Create the write_file tool definition.

    Args:
        root: Optional directory that confines all paths
    """
    return Tool(
        name="write_file",
        description="Write text to a file, creating parent directories as needed",
        parameters={
            "path": ToolParameter(
                type="string",
                description="Path to the file",
                required=True
            ),
            "content": ToolParameter(
                type="string",
                description="Text to write",
                required=True
            ),
            "append": ToolParameter(
                type="boolean",
                description="Append to the file instead of overwriting it",
                default=False
            )
        },
        handler=partial(write_file_handler, root=root)
    )
