"""Built-in tools for toolhub.

Each module exposes a ``create_*_tool()`` factory returning a Tool with its
handler attached, plus the handler function itself.
"""

from .calculator_tool import CalculatorError, calculator_handler, create_calculator_tool
from .database_tool import DatabaseError, DatabasePool, create_database_tool
from .directory_tool import create_scan_directory_tool
from .fs_tool import FileToolError, create_read_file_tool, create_write_file_tool
from .http_tool import HttpFetchError, create_http_fetch_tool
from .network_tool import NetworkError, create_ping_tool, create_port_scan_tool
from .search_tool import SearchError, create_web_search_tool
from .sql_builder import QueryBuildError

__all__ = [
    "CalculatorError",
    "DatabaseError",
    "DatabasePool",
    "FileToolError",
    "HttpFetchError",
    "NetworkError",
    "QueryBuildError",
    "SearchError",
    "calculator_handler",
    "create_calculator_tool",
    "create_database_tool",
    "create_http_fetch_tool",
    "create_ping_tool",
    "create_port_scan_tool",
    "create_read_file_tool",
    "create_scan_directory_tool",
    "create_web_search_tool",
    "create_write_file_tool",
]
