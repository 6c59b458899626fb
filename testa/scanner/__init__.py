"""testa structural scanner.

Finds testable surface (API endpoints, UI components and routes, websocket
URLs) in a Node.js application using regex heuristics, then narrows the
candidates to a single selection for test generation.

Usage::

    from testa.scanner import StructuralScanner, select_target

    result = await StructuralScanner().scan("./my-app", "api")
    selection = select_target(result, "api", prompter)
"""

from testa.scanner.analyzer import StructuralScanner, detect_framework, find_files
from testa.scanner.models import (
    Category,
    Component,
    Endpoint,
    HTTPMethod,
    Route,
    ScanResult,
    Selection,
    SocketImplementation,
)
from testa.scanner.selection import select_target

__all__ = [
    "StructuralScanner",
    "detect_framework",
    "find_files",
    "select_target",
    "Category",
    "Component",
    "Endpoint",
    "HTTPMethod",
    "Route",
    "ScanResult",
    "Selection",
    "SocketImplementation",
]
