"""Directory Scan Tool for toolhub.

Lists the entries of a directory, optionally recursively.
"""

import asyncio
import os
from functools import partial
from pathlib import Path
from typing import List, Optional

from toolhub.core.context import ToolContext
from toolhub.tools.fs_tool import FileToolError, resolve_path
from toolhub.types import ArgumentSet, Tool, ToolParameter

DEFAULT_MAX_ENTRIES = 200


def _describe(entry: Path, base: Path) -> str:
    relative = entry.relative_to(base).as_posix()
    if entry.is_dir():
        return f"{relative}/ (dir)"
    try:
        size = entry.stat().st_size
    except OSError:
        return f"{relative} (file)"
    return f"{relative} (file, {size} bytes)"


def scan_directory(
    path: Path,
    recursive: bool = False,
    include_hidden: bool = False,
    max_entries: int = DEFAULT_MAX_ENTRIES,
) -> List[str]:
    """Collect sorted entry descriptions below ``path``.

    Hidden entries (dot-prefixed) are skipped unless requested; when skipped,
    hidden directories are not descended into. The listing stops after
    ``max_entries`` entries and a marker line is appended.

    Raises:
        FileToolError: If the path is missing or not a directory
    """
    if not path.exists():
        raise FileToolError(f"Path not found: {path}")
    if not path.is_dir():
        raise FileToolError(f"Not a directory: {path}")

    lines: List[str] = []
    truncated = False
    for current, dirnames, filenames in os.walk(path):
        if not include_hidden:
            dirnames[:] = [d for d in dirnames if not d.startswith(".")]
            filenames = [f for f in filenames if not f.startswith(".")]
        dirnames.sort()

        current_path = Path(current)
        for name in dirnames + sorted(filenames):
            if len(lines) >= max_entries:
                truncated = True
                break
            lines.append(_describe(current_path / name, path))

        if truncated or not recursive:
            break

    if truncated:
        lines.append(f"... (stopped after {max_entries} entries)")
    return lines


async def scan_directory_handler(
    args: ArgumentSet,
    context: ToolContext,
    *,
    root: Optional[str] = None,
) -> str:
    """Handle scan_directory tool execution.

    Args:
        args: Validated arguments containing:
            - path: Directory to scan
            - recursive: Descend into subdirectories
            - include_hidden: Include dot-prefixed entries
            - max_entries: Maximum number of entries listed
        context: Call context

    Returns:
        One entry per line, or a note that the directory is empty
    """
    path = resolve_path(args["path"], root)
    max_entries = int(args["max_entries"])
    if max_entries < 1:
        raise FileToolError("max_entries must be at least 1")

    try:
        lines = await context.run(asyncio.to_thread(
            scan_directory,
            path,
            args["recursive"],
            args["include_hidden"],
            max_entries,
        ))
    except FileToolError:
        raise
    except OSError as e:
        raise FileToolError(f"Error scanning {path}: {e.strerror or e}")

    return "\n".join(lines) if lines else "Directory is empty"


def create_scan_directory_tool(root: Optional[str] = None) -> Tool:
    """Create the scan_directory tool definition.

    Args:
        root: Optional directory that confines all paths
    """
    return Tool(
        name="scan_directory",
        description="List the files and subdirectories of a directory",
        parameters={
            "path": ToolParameter(
                type="string",
                description="Directory to scan",
                required=True
            ),
            "recursive": ToolParameter(
                type="boolean",
                description="Include the contents of subdirectories",
                default=False
            ),
            "include_hidden": ToolParameter(
                type="boolean",
                description="Include entries whose names start with a dot",
                default=False
            ),
            "max_entries": ToolParameter(
                type="number",
                description="Maximum number of entries to list",
                default=DEFAULT_MAX_ENTRIES
            )
        },
        handler=partial(scan_directory_handler, root=root)
    )
