"""Middleware tests."""

import pytest
from roadserver_core.app.application import App
from roadserver_core.http.cookies import sign_value
from roadserver_core.middleware import (
    LoggingConfig,
    MiddlewareStack,
    access_logger,
    cookie_parser,
    request_logger,
)


class TestMiddlewareStack:
    """Test the global middleware stack."""

    def test_mount_order(self):
        """Test entries keep registration order."""
        first = lambda req, res, next: next()
        second = lambda req, res, next: next()
        stack = MiddlewareStack()
        stack.mount(first)
        stack.mount("/admin", second)

        entries = stack.entries()

        assert [entry.handler for entry in entries] == [first, second]
        assert [entry.prefix for entry in entries] == ["/", "/admin"]
        assert len(stack) == 2

    def test_entries_is_snapshot(self):
        """Test later mounts do not change an earlier snapshot."""
        stack = MiddlewareStack()
        snapshot = stack.entries()
        stack.mount(lambda req, res, next: next())
        assert snapshot == []

    def test_entry_applies_to(self):
        """Test prefix coverage is a plain string prefix."""
        stack = MiddlewareStack()
        entry = stack.mount("/cat", lambda req, res, next: next())

        assert entry.applies_to("/cat")
        assert entry.applies_to("/cat/42")
        assert entry.applies_to("/category")
        assert not entry.applies_to("/dog")

    def test_mount_rejects_non_callable(self):
        """Test mount validation."""
        with pytest.raises(TypeError):
            MiddlewareStack().mount("/cat", "nope")


class TestRequestLogger:
    """Test the request logging middleware."""

    def test_logs_request_and_response(self, run_app, caplog):
        """Test both log lines are written."""
        app = App()
        app.use(request_logger())
        app.get("/cat", lambda req, res: res.status(201).send("ok"))

        with caplog.at_level("INFO"):
            run_app(app, "GET", "/cat?x=1")

        assert "--> GET /cat" in caplog.text
        assert "query={'x': '1'}" in caplog.text
        assert "<-- 201" in caplog.text

    def test_sets_request_id(self, run_app):
        """Test the request id is exposed to later handlers."""
        seen = []
        app = App()
        app.use(request_logger())
        app.get("/", lambda req, res: (seen.append(req.context.get("request_id")), res.send()))

        run_app(app, "GET", "/")

        assert len(seen) == 1
        assert len(seen[0]) == 8

    def test_skip_paths(self, run_app, caplog):
        """Test skipped paths are not logged."""
        app = App()
        app.use(request_logger(LoggingConfig(skip_paths=["/health"])))
        app.get("/health", lambda req, res: res.send("ok"))

        with caplog.at_level("INFO"):
            run_app(app, "GET", "/health")

        assert "--> GET /health" not in caplog.text


class TestAccessLogger:
    """Test the access log middleware."""

    def test_combined_format(self, run_app, caplog):
        """Test a combined-format line is written on finish."""
        app = App()
        app.use(access_logger())
        app.get("/cat", lambda req, res: res.send("meow"))

        with caplog.at_level("INFO"):
            run_app(app, "GET", "/cat", headers={"User-Agent": "curl/8.0"})

        assert '"GET /cat HTTP/1.1" 200 4 "-" "curl/8.0"' in caplog.text

    def test_custom_format(self, run_app, caplog):
        """Test a custom format string."""
        app = App()
        app.use(access_logger("{method} {path} {status}"))

        with caplog.at_level("INFO"):
            run_app(app, "GET", "/missing")

        assert "GET /missing 404" in caplog.text


class TestCookieParser:
    """Test the cookie_parser middleware."""

    def test_enables_signed_cookies(self, run_app):
        """Test the secret reaches request and response."""
        app = App()
        app.use(cookie_parser("keyboard cat"))
        app.get("/", lambda req, res: res.send(req.signed_cookies))
        app.get("/login", lambda req, res: res.cookie("user", "tobi", signed=True).send())

        signed = sign_value("tobi", "keyboard cat")
        read = run_app(app, "GET", "/", headers={"Cookie": f"user={signed}"})
        login = run_app(app, "GET", "/login")

        assert read.body == b'{"user": "tobi"}'
        assert login.get_header("Set-Cookie").startswith("user=s%3Atobi.")

    def test_without_secret(self, run_app):
        """Test plain cookies still parse without a secret."""
        app = App()
        app.use(cookie_parser())
        app.get("/", lambda req, res: res.send(req.cookies))

        message = run_app(app, "GET", "/", headers={"Cookie": "theme=dark"})

        assert message.body == b'{"theme": "dark"}'

    def test_secret_must_be_string(self):
        """Test secret validation."""
        with pytest.raises(TypeError):
            cookie_parser(42)
