"""Pydantic v2 models for the structural scanner.

Defines the candidates discovered in an application's source tree (the scan
result) and the single element chosen to parameterize one generated test
(the selection).
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class HTTPMethod(str, Enum):
    """HTTP methods recognised in route registrations."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


class Category(str, Enum):
    """Closed set of test categories the generator dispatches on."""
    API = "api"
    E2E = "e2e"
    WEBSOCKET = "websocket"
    PERFORMANCE = "performance"
    VISUAL = "visual"

    @classmethod
    def parse(cls, name: str) -> Optional["Category"]:
        """Resolve a user-supplied test type (including aliases).

        Returns ``None`` for names outside the closed set so callers can fall
        back to the generic template.
        """
        return _CATEGORY_ALIASES.get(name.strip().lower())


_CATEGORY_ALIASES: dict[str, Category] = {
    "api": Category.API,
    "e2e": Category.E2E,
    "ui": Category.E2E,
    "websocket": Category.WEBSOCKET,
    "ws": Category.WEBSOCKET,
    "performance": Category.PERFORMANCE,
    "perf": Category.PERFORMANCE,
    "visual": Category.VISUAL,
}


class UiTarget(str, Enum):
    """What a UI test should focus on."""
    COMPONENT = "component"
    ROUTE = "route"
    FORM = "form"
    GENERAL = "general"


# ---------------------------------------------------------------------------
# Discovered candidates
# ---------------------------------------------------------------------------

class Endpoint(BaseModel):
    """An HTTP route registration found in source code."""
    method: HTTPMethod = Field(..., description="HTTP method")
    path: str = Field(..., description="URL path, e.g. '/users'")
    source_file: Optional[str] = Field(
        default=None, description="File the endpoint was found in (None when entered manually)"
    )

    @property
    def label(self) -> str:
        return f"{self.method.value} {self.path}"


class Component(BaseModel):
    """An exported UI component."""
    name: str = Field(..., description="Component identifier, e.g. 'LoginForm'")
    source_file: str = Field(..., description="File the component was found in")


class Route(BaseModel):
    """A frontend route; may contain ``:param`` segments."""
    path: str = Field(..., description="Route path, e.g. '/users/:id'")
    source_file: str = Field(..., description="File the route was found in")


class SocketImplementation(BaseModel):
    """A file using websockets, optionally with the URL it connects to."""
    source_file: str = Field(..., description="File the usage was found in")
    url: Optional[str] = Field(default=None, description="Connection URL, when captured")


class ScanResult(BaseModel):
    """Candidates discovered by one scan of an application tree.

    Lists are filled in file order and are never deduplicated; only socket
    URLs are deduplicated, by :meth:`unique_socket_urls`, when offered as
    choices.
    """
    framework: str = Field(default="Unknown")
    endpoints: list[Endpoint] = Field(default_factory=list)
    components: list[Component] = Field(default_factory=list)
    routes: list[Route] = Field(default_factory=list)
    socket_implementations: list[SocketImplementation] = Field(default_factory=list)
    has_authentication: bool = Field(default=False)
    has_forms: bool = Field(default=False)
    has_websockets: bool = Field(default=False)

    @property
    def is_empty(self) -> bool:
        """True when nothing testable was identified."""
        return not (
            self.endpoints or self.components or self.routes or self.has_websockets
        )

    def unique_socket_urls(self) -> list[str]:
        """Return captured socket URLs, deduplicated, in first-seen order."""
        seen: dict[str, None] = {}
        for impl in self.socket_implementations:
            if impl.url:
                seen.setdefault(impl.url, None)
        return list(seen)

    def summary(self) -> dict[str, object]:
        """Flat view used for the console summary table."""
        return {
            "Framework": self.framework,
            "Endpoints": len(self.endpoints),
            "Components": len(self.components),
            "Routes": len(self.routes),
            "WebSocket usages": len(self.socket_implementations),
            "Authentication detected": self.has_authentication,
            "Forms detected": self.has_forms,
            "WebSockets detected": self.has_websockets,
        }


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

class Selection(BaseModel):
    """The element chosen to parameterize one generated test.

    Normally only one field is set.  When several are, UI templates honour
    the precedence route > component > form > url.
    """
    endpoint: Optional[Endpoint] = None
    route: Optional[Route] = None
    component: Optional[Component] = None
    form: bool = Field(default=False, description="Target a form submission")
    form_path: Optional[str] = Field(default=None, description="Page hosting the form")
    url: Optional[str] = Field(default=None, description="Raw page URL to test")
    socket_url: Optional[str] = Field(default=None, description="WebSocket URL to test")
