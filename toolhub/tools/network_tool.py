"""Network Tools for toolhub.

This module provides the ping and port_scan diagnostic tools. ping runs the
system ping command (without a shell); port_scan performs TCP connect
attempts with bounded concurrency.
"""

import asyncio
import logging
import platform
import re
import socket
import time
from functools import partial
from typing import Final, List

from toolhub.core.context import ToolContext
from toolhub.core.errors import ToolError
from toolhub.types import ArgumentSet, Tool, ToolParameter

logger = logging.getLogger(__name__)

# Constants
HOST_PATTERN: Final = re.compile(r"^[A-Za-z0-9_.:\-]+$")
MAX_PING_COUNT: Final = 10
DEFAULT_PING_TIMEOUT: Final = 20.0
DEFAULT_MAX_PORTS: Final = 1024
DEFAULT_CONCURRENCY: Final = 100


class NetworkError(ToolError):
    """Raised when a network diagnostic fails."""
    pass


def validate_host(host: str) -> str:
    """Check that a host is a plain hostname or IP address.

    Raises:
        NetworkError: If the host is empty or contains unexpected characters
    """
    host = host.strip()
    if not host:
        raise NetworkError("Host cannot be empty")
    if host.startswith("-") or not HOST_PATTERN.match(host) or len(host) > 253:
        raise NetworkError(f"Invalid host: {host}")
    return host


def parse_ports(spec: str, max_ports: int = DEFAULT_MAX_PORTS) -> List[int]:
    """Parse a port list such as "22,80,8000-8010".

    Args:
        spec: Comma-separated ports and inclusive ranges
        max_ports: Maximum number of ports allowed

    Returns:
        Sorted, de-duplicated port numbers

    Raises:
        NetworkError: If the port list is malformed, out of range or too large
    """
    ports = set()
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            if "-" in part:
                start_text, end_text = part.split("-", 1)
                start, end = int(start_text), int(end_text)
            else:
                start = end = int(part)
        except ValueError:
            raise NetworkError(f"Invalid port specification: {part}")
        if not 1 <= start <= end <= 65535:
            raise NetworkError(f"Port range out of bounds: {part}")
        ports.update(range(start, end + 1))

    if not ports:
        raise NetworkError("No ports specified")
    if len(ports) > max_ports:
        raise NetworkError(f"Too many ports requested (maximum {max_ports})")
    return sorted(ports)


def _ping_command(host: str, count: int) -> List[str]:
    if platform.system() == "Windows":
        return ["ping", "-n", str(count), host]
    return ["ping", "-c", str(count), host]


async def _terminate(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        process.kill()
        await process.wait()


async def ping_handler(
    args: ArgumentSet,
    context: ToolContext,
    *,
    timeout: float = DEFAULT_PING_TIMEOUT,
) -> str:
    """Handle ping tool execution.

    Args:
        args: Validated arguments containing:
            - host: Host name or IP address
            - count: Number of echo requests (clamped to 1..10)
        context: Call context

    Returns:
        The ping command's output

    Raises:
        NetworkError: If ping is unavailable, times out or the host is unreachable
    """
    host = validate_host(args["host"])
    count = max(1, min(MAX_PING_COUNT, int(args["count"])))

    try:
        process = await asyncio.create_subprocess_exec(
            *_ping_command(host, count),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except FileNotFoundError:
        raise NetworkError("The ping command is not available on this system")

    try:
        stdout, _ = await context.run(asyncio.wait_for(process.communicate(), timeout))
    except asyncio.TimeoutError:
        await _terminate(process)
        raise NetworkError(f"Ping to {host} did not finish within {timeout} seconds")
    except ToolError:
        await _terminate(process)
        raise

    output = stdout.decode(errors="replace").strip()
    if process.returncode != 0:
        raise NetworkError(f"Host {host} is unreachable:\n{output}")
    return output


async def _probe(host: str, port: int, timeout: float, semaphore: asyncio.Semaphore) -> bool:
    async with semaphore:
        try:
            _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout)
        except (OSError, asyncio.TimeoutError):
            return False
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
        return True


async def scan_ports(
    host: str,
    ports: List[int],
    timeout: float = 1.0,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> List[int]:
    """Return the subset of ``ports`` accepting TCP connections on ``host``.

    Raises:
        NetworkError: If the host cannot be resolved
    """
    loop = asyncio.get_running_loop()
    try:
        await loop.getaddrinfo(host, None, type=socket.SOCK_STREAM)
    except socket.gaierror as e:
        raise NetworkError(f"Cannot resolve host {host}: {e.strerror or e}")

    semaphore = asyncio.Semaphore(concurrency)
    results = await asyncio.gather(*(_probe(host, port, timeout, semaphore) for port in ports))
    return [port for port, is_open in zip(ports, results) if is_open]


async def port_scan_handler(
    args: ArgumentSet,
    context: ToolContext,
    *,
    max_ports: int = DEFAULT_MAX_PORTS,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> str:
    """Handle port_scan tool execution.

    Args:
        args: Validated arguments containing:
            - host: Host name or IP address
            - ports: Ports and ranges, e.g. "22,80,8000-8010"
            - timeout: Per-connection timeout in seconds
        context: Call context

    Returns:
        Summary listing the open ports

    Raises:
        NetworkError: If the arguments are invalid or the host cannot be resolved
    """
    host = validate_host(args["host"])
    ports = parse_ports(args["ports"], max_ports)
    timeout = args["timeout"]
    if timeout <= 0:
        raise NetworkError("timeout must be positive")

    started = time.monotonic()
    open_ports = await context.run(scan_ports(host, ports, timeout, concurrency))
    elapsed = time.monotonic() - started

    logger.debug(
        "Port scan finished",
        extra={"host": host, "scanned": len(ports), "open": len(open_ports)},
    )
    summary = f"Scanned {len(ports)} ports on {host} in {elapsed:.2f}s"
    if not open_ports:
        return f"{summary}\nNo open ports found"
    return f"{summary}\nOpen ports: {', '.join(str(p) for p in open_ports)}"


def create_ping_tool(timeout: float = DEFAULT_PING_TIMEOUT) -> Tool:
    """Create the ping tool definition.

    Args:
        timeout: Overall timeout for the ping command in seconds
    """
    return Tool(
        name="ping",
        description="Check whether a host responds to ICMP echo requests",
        parameters={
            "host": ToolParameter(
                type="string",
                description="Host name or IP address",
                required=True
            ),
            "count": ToolParameter(
                type="number",
                description=f"Number of echo requests (1-{MAX_PING_COUNT})",
                default=4
            )
        },
        handler=partial(ping_handler, timeout=timeout)
    )


def create_port_scan_tool(max_ports: int = DEFAULT_MAX_PORTS, concurrency: int = DEFAULT_CONCURRENCY) -> Tool:
    """Create the port_scan tool definition.

    Args:
        max_ports: Maximum number of ports per call
        concurrency: Maximum simultaneous connection attempts
    """
    return Tool(
        name="port_scan",
        description="Find open TCP ports on a host",
        parameters={
            "host": ToolParameter(
                type="string",
                description="Host name or IP address",
                required=True
            ),
            "ports": ToolParameter(
                type="string",
                description="Ports and ranges, e.g. '22,80,443' or '8000-8100'",
                required=True
            ),
            "timeout": ToolParameter(
                type="number",
                description="Connection timeout per port in seconds",
                default=1.0
            )
        },
        handler=partial(port_scan_handler, max_ports=max_ports, concurrency=concurrency)
    )
