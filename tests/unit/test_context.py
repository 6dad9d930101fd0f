"""Tests for the per-request context helpers."""

from __future__ import annotations

from starlette.requests import Request

from accessguard.context import (
    ERRORS_KEY,
    abort,
    add_error,
    client_ip,
    get_errors,
    is_aborted,
    request_state,
    user_agent,
)


class TestErrors:
    def test_no_errors_by_default(self, scope_factory):
        assert get_errors(Request(scope_factory())) == []

    def test_add_error_accumulates_in_order(self, scope_factory):
        request = Request(scope_factory())
        first, second = ValueError("one"), RuntimeError("two")
        add_error(request, first)
        add_error(request, second)
        assert get_errors(request) == [first, second]

    def test_errors_shared_through_scope_state(self, scope_factory):
        scope = scope_factory()
        add_error(Request(scope), ValueError("handler"))
        assert [str(e) for e in get_errors(Request(scope))] == ["handler"]
        assert len(scope["state"][ERRORS_KEY]) == 1

    def test_visible_on_request_state(self, scope_factory):
        request = Request(scope_factory())
        add_error(request, ValueError("x"))
        assert len(getattr(request.state, ERRORS_KEY)) == 1

    def test_get_errors_returns_copy(self, scope_factory):
        request = Request(scope_factory())
        add_error(request, ValueError("x"))
        get_errors(request).clear()
        assert len(get_errors(request)) == 1

    def test_state_created_when_missing(self, scope_factory):
        scope = scope_factory()
        del scope["state"]
        request = Request(scope)
        assert request_state(request) == {}
        assert "state" in scope


class TestAbort:
    def test_not_aborted_by_default(self, scope_factory):
        assert is_aborted(Request(scope_factory())) is False

    def test_abort_sets_flag(self, scope_factory):
        request = Request(scope_factory())
        abort(request)
        assert is_aborted(request) is True


class TestClientIP:
    def test_forwarded_for_first_hop(self, scope_factory):
        scope = scope_factory(
            headers=[
                (b"x-forwarded-for", b"203.0.113.7, 10.0.0.2"),
                (b"x-real-ip", b"10.9.9.9"),
            ]
        )
        assert client_ip(Request(scope)) == "203.0.113.7"

    def test_real_ip_when_no_forwarded_for(self, scope_factory):
        scope = scope_factory(headers=[(b"x-real-ip", b"198.51.100.4")])
        assert client_ip(Request(scope)) == "198.51.100.4"

    def test_peer_address_fallback(self, scope_factory):
        assert client_ip(Request(scope_factory())) == "10.0.0.1"

    def test_no_client(self, scope_factory):
        assert client_ip(Request(scope_factory(client=None))) == ""

    def test_blank_forwarded_for_ignored(self, scope_factory):
        scope = scope_factory(headers=[(b"x-forwarded-for", b" , 10.0.0.2")])
        assert client_ip(Request(scope)) == "10.0.0.1"


class TestUserAgent:
    def test_user_agent(self, scope_factory):
        assert user_agent(Request(scope_factory())) == "pytest-agent"

    def test_missing_user_agent(self, scope_factory):
        assert user_agent(Request(scope_factory(headers=[]))) == ""
