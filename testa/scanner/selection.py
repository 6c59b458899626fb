"""Selection of a single scan candidate.

Turns a :class:`ScanResult` into the one :class:`Selection` that
parameterizes a generated test.  When the scan found several candidates the
prompter picks one; when it found none the prompter is asked for a manual
value instead.
"""

from __future__ import annotations

from testa.prompts import Prompter
from testa.utils import print_warning

from .models import Category, Endpoint, HTTPMethod, ScanResult, Selection, UiTarget

DEFAULT_MANUAL_ENDPOINT = "/api/endpoint"
DEFAULT_PAGE_PATH = "/"
DEFAULT_SOCKET_URL = "ws://localhost:3000/ws"

_UI_TARGET_LABELS: dict[UiTarget, str] = {
    UiTarget.COMPONENT: "A specific component",
    UiTarget.ROUTE: "A route/page",
    UiTarget.FORM: "A form submission",
    UiTarget.GENERAL: "General UI test",
}


def select_target(result: ScanResult, test_type: str, prompter: Prompter) -> Selection:
    """Pick the element a new test of *test_type* should exercise."""
    category = Category.parse(test_type)
    if category is Category.API:
        return _select_endpoint(result, prompter)
    if category is Category.E2E:
        return _select_ui_target(result, prompter)
    if category is Category.WEBSOCKET:
        return _select_socket_url(result, prompter)
    return Selection()


def _select_endpoint(result: ScanResult, prompter: Prompter) -> Selection:
    if result.endpoints:
        index = prompter.select(
            "Which endpoint would you like to test?",
            [endpoint.label for endpoint in result.endpoints],
        )
        return Selection(endpoint=result.endpoints[index])

    print_warning("No API endpoints detected. Will create a generic API test.")
    path = prompter.ask(
        "Please enter an API endpoint to test (e.g., /api/users)",
        default=DEFAULT_MANUAL_ENDPOINT,
    )
    methods = [method.value for method in HTTPMethod]
    index = prompter.select("Select the HTTP method", methods, default=0)
    return Selection(
        endpoint=Endpoint(method=HTTPMethod(methods[index]), path=path, source_file=None)
    )


def _select_ui_target(result: ScanResult, prompter: Prompter) -> Selection:
    if not (result.components or result.routes):
        print_warning("No UI components or routes detected. Will create a generic UI test.")
        url = prompter.ask("Enter a URL path to test (e.g., /login)", default=DEFAULT_PAGE_PATH)
        return Selection(url=url)

    available: list[UiTarget] = []
    if result.components:
        available.append(UiTarget.COMPONENT)
    if result.routes:
        available.append(UiTarget.ROUTE)
    if result.has_forms:
        available.append(UiTarget.FORM)
    available.append(UiTarget.GENERAL)

    index = prompter.select(
        "What would you like to test?",
        [_UI_TARGET_LABELS[target] for target in available],
    )
    target = available[index]

    if target is UiTarget.COMPONENT:
        index = prompter.select(
            "Which component would you like to test?",
            [component.name for component in result.components],
        )
        return Selection(component=result.components[index])
    if target is UiTarget.ROUTE:
        index = prompter.select(
            "Which route would you like to test?",
            [route.path for route in result.routes],
        )
        return Selection(route=result.routes[index])
    if target is UiTarget.FORM:
        form_path = prompter.ask(
            "Enter the path to the page with the form", default=DEFAULT_PAGE_PATH
        )
        return Selection(form=True, form_path=form_path)
    return Selection()


def _select_socket_url(result: ScanResult, prompter: Prompter) -> Selection:
    urls = result.unique_socket_urls()
    if urls:
        index = prompter.select("Which WebSocket URL would you like to test?", urls)
        return Selection(socket_url=urls[index])

    if not result.socket_implementations:
        print_warning(
            "No WebSocket implementations detected. Will create a generic WebSocket test."
        )
    url = prompter.ask("Enter the WebSocket URL to test", default=DEFAULT_SOCKET_URL)
    return Selection(socket_url=url)
