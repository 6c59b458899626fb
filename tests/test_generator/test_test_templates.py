"""Tests for the test file templates (testa.generator.test_templates).

Covers:
- API success/error bodies per HTTP method
- Generic API template
- UI precedence (route > component > form > url > generic)
- WebSocket, performance, visual and fallback templates
- Purity: identical inputs give identical output
"""

from __future__ import annotations

import pytest

from testa.generator.test_templates import (
    DEFAULT_SOCKET_URL,
    SUCCESS_STATUS,
    api_error_call,
    api_success_body,
    render_test,
    route_pattern,
)
from testa.scanner.models import Component, Endpoint, HTTPMethod, Route, Selection

pytestmark = pytest.mark.unit

PAYLOAD_METHODS = {HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH}


def _api_selection(method: HTTPMethod, path: str = "/users") -> Selection:
    return Selection(endpoint=Endpoint(method=method, path=path, source_file="app.js"))


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------


class TestApiSuccessBody:
    @pytest.mark.parametrize("method", list(HTTPMethod))
    def test_status_and_payload(self, method: HTTPMethod):
        body = "\n".join(api_success_body(method, "/users"))
        assert f"expect(response.status).toBe({SUCCESS_STATUS[method]});" in body
        assert ("const payload = {" in body) == (method in PAYLOAD_METHODS)
        assert f"axios.{method.value.lower()}(`${{baseUrl}}/users`" in body

    def test_status_table(self):
        assert SUCCESS_STATUS[HTTPMethod.POST] == 201
        assert {SUCCESS_STATUS[m] for m in HTTPMethod if m is not HTTPMethod.POST} == {200}


class TestApiErrorCall:
    def test_get_uses_invalid_query(self):
        assert "/users?invalid=true" in api_error_call(HTTPMethod.GET, "/users")[0]

    def test_delete_uses_missing_id(self):
        assert "/users/999999" in api_error_call(HTTPMethod.DELETE, "/users")[0]

    @pytest.mark.parametrize("method", [HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH])
    def test_body_methods_send_invalid_field(self, method: HTTPMethod):
        lines = "\n".join(api_error_call(method, "/users"))
        assert f"axios.{method.value.lower()}(" in lines
        assert "invalid_field: true" in lines


class TestApiTemplate:
    def test_post_endpoint(self):
        content = render_test("api", "Create user", _api_selection(HTTPMethod.POST))
        assert "import axios from 'axios';" in content
        assert "test.describe('Create user'" in content
        assert "should successfully post to /users" in content
        assert "expect(response.status).toBe(201);" in content
        assert "name: 'Test Name'" in content
        assert "toBeGreaterThanOrEqual(400)" in content
        assert "toBeLessThan(500)" in content

    def test_generic_without_selection(self):
        content = render_test("api", "Users API")
        assert "process.env.API_URL || 'http://localhost:3000/api'" in content
        assert "`${baseUrl}/endpoint`" in content
        assert "toBe(404)" in content

    def test_selection_without_endpoint_is_generic(self):
        assert render_test("api", "x", Selection()) == render_test("api", "x")

    def test_quote_in_name_is_escaped(self):
        content = render_test("api", "user's list")
        assert "test.describe('user\\'s list'" in content


# ---------------------------------------------------------------------------
# UI
# ---------------------------------------------------------------------------


class TestUiTemplate:
    def test_route(self):
        selection = Selection(route=Route(path="/users/:id", source_file="r.ts"))
        content = render_test("ui", "User page", selection)
        assert "await page.goto('/users/:id');" in content
        assert "new RegExp('/users/[^/]+')" in content
        assert "page.locator('footer')" in content

    def test_component(self):
        selection = Selection(component=Component(name="LoginForm", source_file="c.tsx"))
        content = render_test("e2e", "Login", selection)
        assert "LoginForm Component" in content
        assert '[data-testid="loginform"]' in content

    def test_form(self):
        content = render_test("ui", "Signup", Selection(form=True, form_path="/signup"))
        assert "await page.goto('/signup');" in content
        assert ".success-message" in content
        assert ".error-message" in content

    def test_form_without_path_uses_root(self):
        content = render_test("ui", "Signup", Selection(form=True))
        assert "await page.goto('/');" in content

    def test_url(self):
        content = render_test("ui", "Login page", Selection(url="/login"))
        assert "await page.goto('/login');" in content
        assert "page.locator('main')" in content

    def test_generic(self):
        content = render_test("ui", "Home")
        assert "toHaveTitle(/Expected Title/)" in content
        assert "nav a" in content

    def test_precedence(self):
        route = Route(path="/r", source_file="r.ts")
        component = Component(name="Widget", source_file="w.tsx")
        everything = Selection(route=route, component=component, form=True, url="/u")
        assert render_test("ui", "t", everything) == render_test("ui", "t", Selection(route=route))

        no_route = Selection(component=component, form=True, url="/u")
        assert render_test("ui", "t", no_route) == render_test(
            "ui", "t", Selection(component=component)
        )

        form_and_url = Selection(form=True, form_path="/f", url="/u")
        assert render_test("ui", "t", form_and_url) == render_test(
            "ui", "t", Selection(form=True, form_path="/f")
        )

    def test_route_pattern(self):
        assert route_pattern("/shop/:category/:item") == "/shop/[^/]+/[^/]+"
        assert route_pattern("/about") == "/about"


# ---------------------------------------------------------------------------
# Other categories
# ---------------------------------------------------------------------------


class TestWebsocketTemplate:
    def test_selected_url(self):
        content = render_test("ws", "Feed", Selection(socket_url="ws://localhost:4000/feed"))
        assert "new WebSocket('ws://localhost:4000/feed')" in content
        assert "}, 5000);" in content
        assert "should establish connection" in content
        assert "should handle disconnection properly" in content

    def test_default_url(self):
        content = render_test("websocket", "Feed")
        assert f"new WebSocket('{DEFAULT_SOCKET_URL}')" in content

    def test_same_tests_with_and_without_url(self):
        with_url = render_test("ws", "Feed", Selection(socket_url=DEFAULT_SOCKET_URL))
        assert with_url == render_test("ws", "Feed")


class TestFixedTemplates:
    @pytest.mark.parametrize("test_type", ["performance", "perf"])
    def test_performance(self, test_type: str):
        content = render_test(test_type, "Speed")
        assert "expect(loadTime).toBeLessThan(3000);" in content
        assert "toBeGreaterThan(80)" in content

    def test_visual(self):
        content = render_test("visual", "Look")
        assert "toMatchSnapshot('desktop.png')" in content
        assert "toMatchSnapshot('mobile.png')" in content
        assert "width: 375, height: 667" in content

    def test_selection_ignored(self):
        selection = Selection(url="/x")
        assert render_test("visual", "Look", selection) == render_test("visual", "Look")


class TestFallback:
    @pytest.mark.parametrize("test_type", ["smoke", "unit", "", "apis"])
    def test_unknown_category_gets_basic_test(self, test_type: str):
        content = render_test(test_type, "Whatever")
        assert "test('basic test'" in content
        assert "expect(await page.title()).not.toBe('');" in content

    @pytest.mark.parametrize("test_type", ["smoke", "api", "ui", "ws", "perf", "visual"])
    def test_pure(self, test_type: str):
        assert render_test(test_type, "Same") == render_test(test_type, "Same")
