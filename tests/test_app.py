"""Application tests."""

import urllib.error
import urllib.request

import pytest
from roadserver_core import App, AppConfig, create_app
from roadserver_core.app.application import METHODS, registrar_name


class TestApp:
    """Test App class."""

    def test_create_app(self):
        """Test app creation."""
        app = create_app()
        assert app is not None
        assert app.config.port == 3000

    def test_app_with_config(self):
        """Test app with custom config."""
        config = AppConfig(host="127.0.0.1", port=9000)
        app = App(config)
        assert app.config.port == 9000

    def test_add_route(self):
        """Test adding routes."""
        app = App()
        app.get("/cat/:id", lambda req, res: res.send(req.params))
        assert len(app.routes) == 1

    def test_registrars_chain(self):
        """Test registrars return the app."""
        app = App()
        result = app.get("/a", lambda req, res: None).post("/b", lambda req, res: None)
        assert result is app
        assert len(app.routes) == 2

    def test_get_stats(self):
        """Test application statistics."""
        app = App()
        app.use(lambda req, res, next: next())
        app.get("/", lambda req, res: res.send())

        assert app.get_stats() == {"routes": 1, "middleware": 1, "running": False}

    def test_access_log_config_mounts_logger(self):
        """Test access_log installs the access logger."""
        app = App(AppConfig(access_log=True))
        assert len(app.middleware) == 1


class TestVerbRegistrars:
    """Test per-verb registration methods."""

    def test_every_method_has_registrar(self):
        """Test each verb is exposed on App."""
        app = App()
        for method in METHODS:
            assert callable(getattr(app, registrar_name(method)))

    def test_hyphenated_verb(self):
        """Test M-SEARCH registers under m_search."""
        app = App()
        app.m_search("/devices", lambda req, res: res.send())

        route = app.routes.get_routes()[0]
        assert route.method == "M-SEARCH"

    def test_route_method(self, run_app):
        """Test a PUT route only answers PUT."""
        app = App()
        app.put("/cat", lambda req, res: res.send("updated"))

        assert run_app(app, "PUT", "/cat").body == b"updated"
        assert run_app(app, "GET", "/cat").status_code == 404

    def test_decorator_form(self, run_app):
        """Test @app.get(pattern)."""
        app = App()

        @app.get("/hello/:name")
        def hello(req, res):
            res.send(f"Hello {req.params['name']}")

        assert callable(hello)
        assert run_app(app, "GET", "/hello/ada").body == b"Hello ada"

    def test_route_with_middleware(self, run_app):
        """Test (pattern, middleware, handler)."""
        app = App()

        def auth(req, res, next):
            if req.get("Authorization") != "secret":
                res.status(401).send("Unauthorized")
                return
            next()

        app.post("/cat", auth, lambda req, res: res.status(201).send(req.body))

        denied = run_app(app, "POST", "/cat")
        created = run_app(
            app,
            "POST",
            "/cat",
            headers={"Authorization": "secret", "Content-Type": "application/json"},
            body=b'{"name": "tom"}',
        )

        assert denied.status_code == 401
        assert created.status_code == 201
        assert created.body == b'{"name": "tom"}'


class TestUse:
    """Test middleware mounting."""

    def test_use_handler(self):
        """Test use(handler) mounts at /."""
        app = App()
        app.use(lambda req, res, next: next())
        assert app.middleware.entries()[0].prefix == "/"

    def test_use_prefix(self):
        """Test use(prefix, handler)."""
        app = App()
        app.use("/admin", lambda req, res, next: next())
        assert app.middleware.entries()[0].prefix == "/admin"

    def test_use_arity(self):
        """Test use() argument count."""
        app = App()
        with pytest.raises(TypeError):
            app.use()
        with pytest.raises(TypeError):
            app.use("/a", lambda req, res, next: None, lambda req, res, next: None)

    def test_use_non_callable(self):
        """Test middleware must be callable."""
        app = App()
        with pytest.raises(TypeError):
            app.use("/admin", "not callable")


class TestListen:
    """Test serving over a real socket."""

    @pytest.fixture
    def served_app(self):
        app = App()
        app.get("/cat/:id", lambda req, res: res.send({"id": req.params["id"]}))
        app.post("/echo", lambda req, res: res.send(req.raw_body))

        ready = []
        server = app.listen(0, lambda: ready.append(True), host="127.0.0.1", block=False)
        assert ready == [True]
        yield app, server.address[1]
        app.close()

    def test_get_route(self, served_app):
        """Test a GET round trip."""
        app, port = served_app
        with urllib.request.urlopen(f"http://127.0.0.1:{port}/cat/42", timeout=5) as resp:
            assert resp.status == 200
            assert resp.read() == b'{"id": "42"}'
            assert resp.headers["Content-Type"] == "application/json; charset=utf-8"

        assert app.get_stats()["running"]

    def test_post_body(self, served_app):
        """Test the request body reaches the handler."""
        _, port = served_app
        request = urllib.request.Request(
            f"http://127.0.0.1:{port}/echo",
            data=b"purr",
            method="POST",
        )
        with urllib.request.urlopen(request, timeout=5) as resp:
            assert resp.read() == b"purr"

    def test_not_found(self, served_app):
        """Test 404 over the wire."""
        _, port = served_app
        with pytest.raises(urllib.error.HTTPError) as exc_info:
            urllib.request.urlopen(f"http://127.0.0.1:{port}/dog", timeout=5)

        assert exc_info.value.code == 404
        assert exc_info.value.read() == b"Cannot GET /dog"

    def test_close(self, served_app):
        """Test close stops the server."""
        app, _ = served_app
        app.close()
        assert not app.get_stats()["running"]
