"""Regex extraction rules for the structural scanner.

Each rule is a pure function from file text to candidate records so it can be
exercised without touching the file system.  Matching is heuristic: these are
best-effort patterns, not parsers, and false positives are expected.
"""

from __future__ import annotations

import re
from typing import Optional

from .models import Component, Endpoint, HTTPMethod, Route, SocketImplementation


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

# Express-style registration: app.get('/users', ...)
_RE_EXPRESS_ROUTE = re.compile(
    r"""app\.(get|post|put|delete|patch)\s*\(\s*['"](/[^'"]*)['"]"""
)

# NestJS-style decorator: @Get('/users')
_RE_DECORATOR_ROUTE = re.compile(
    r"""@(Get|Post|Put|Delete|Patch)\s*\(\s*['"](/[^'"]*)['"]"""
)

# export [default] function|const|class Name  /  export [default] Name
_RE_COMPONENT = re.compile(
    r"export\s+(default\s+)?((function|const|class)\s+([A-Z][a-zA-Z0-9]*)|([A-Z][a-zA-Z0-9]*))"
)

# React Router element: <Route path="/users"
_RE_JSX_ROUTE = re.compile(r"""<Route\s+path=["'](/[^"']*)["']""")

# Route-config object field:   path: '/users'
_RE_CONFIG_ROUTE = re.compile(r"""\s+path:\s*["'](/[^"']*)["']""")

_RE_PAGE_EXTENSION = re.compile(r"\.(js|jsx|ts|tsx)$")
_RE_PAGE_INDEX = re.compile(r"/index$")
_RE_PAGE_PARAM = re.compile(r"\[([^\]]+)\]")

_RE_SOCKET_IDENTIFIER = re.compile(
    r"\b(WebSocket|ws|socket\.io|socketio|sock)\b", re.IGNORECASE
)

_SOCKET_URL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"""new\s+WebSocket\s*\(\s*["']([^"']*)["']"""),
    re.compile(r"""io\s*\(\s*["']([^"']*)["']"""),
    re.compile(r"""socket\.connect\s*\(\s*["']([^"']*)["']"""),
)

AUTH_MARKERS: tuple[str, ...] = ("login", "signin", "authenticate", "auth")
FORM_MARKERS: tuple[str, ...] = ("<form", "<Form", "onSubmit", "handleSubmit")


# ---------------------------------------------------------------------------
# API rules
# ---------------------------------------------------------------------------

def extract_endpoints(content: str, source_file: Optional[str] = None) -> list[Endpoint]:
    """Return every route registration in *content*.

    Express-style matches come first, then decorator-style matches, each in
    source order.  Duplicates are kept.
    """
    endpoints: list[Endpoint] = []
    for pattern in (_RE_EXPRESS_ROUTE, _RE_DECORATOR_ROUTE):
        for match in pattern.finditer(content):
            endpoints.append(
                Endpoint(
                    method=HTTPMethod(match.group(1).upper()),
                    path=match.group(2),
                    source_file=source_file,
                )
            )
    return endpoints


def mentions_auth(content: str) -> bool:
    """True if the text contains any authentication keyword."""
    return any(marker in content for marker in AUTH_MARKERS)


# ---------------------------------------------------------------------------
# UI rules
# ---------------------------------------------------------------------------

def extract_components(content: str, source_file: str) -> list[Component]:
    """Return exported identifiers that start with a capital letter."""
    components: list[Component] = []
    for match in _RE_COMPONENT.finditer(content):
        name = match.group(4) or match.group(5)
        if name:
            components.append(Component(name=name, source_file=source_file))
    return components


def extract_jsx_routes(content: str, source_file: str) -> list[Route]:
    """Return ``<Route path="...">`` paths."""
    return [
        Route(path=match.group(1), source_file=source_file)
        for match in _RE_JSX_ROUTE.finditer(content)
    ]


def extract_config_routes(content: str, source_file: str) -> list[Route]:
    """Return ``path: '...'`` fields from route-config objects."""
    return [
        Route(path=match.group(1), source_file=source_file)
        for match in _RE_CONFIG_ROUTE.finditer(content)
    ]


def page_route(relative_path: str) -> Optional[str]:
    """Derive a route from a file path relative to a ``pages`` directory.

    Examples::

        page_route("users/[id].tsx")   -> "/users/:id"
        page_route("blog/index.jsx")   -> "/blog"
        page_route("index.tsx")        -> None   (root is excluded)
    """
    route = "/" + relative_path.replace("\\", "/")
    route = _RE_PAGE_EXTENSION.sub("", route)
    route = _RE_PAGE_INDEX.sub("", route)
    route = _RE_PAGE_PARAM.sub(r":\1", route)
    if route in ("", "/"):
        return None
    return route


def mentions_forms(content: str) -> bool:
    """True if the text contains a form element or submit handler."""
    return any(marker in content for marker in FORM_MARKERS)


# ---------------------------------------------------------------------------
# WebSocket rules
# ---------------------------------------------------------------------------

def mentions_websocket(content: str) -> bool:
    """True if any websocket-related identifier appears (case-insensitive)."""
    return _RE_SOCKET_IDENTIFIER.search(content) is not None


def extract_socket_urls(content: str, source_file: str) -> list[SocketImplementation]:
    """Return one entry per captured client-construction URL.

    Empty captures (``new WebSocket('')``) are skipped.
    """
    found: list[SocketImplementation] = []
    for pattern in _SOCKET_URL_PATTERNS:
        for match in pattern.finditer(content):
            if match.group(1):
                found.append(
                    SocketImplementation(source_file=source_file, url=match.group(1))
                )
    return found
