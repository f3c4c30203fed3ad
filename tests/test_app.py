"""Tests for pathway.app — App lifecycle, registration, and ASGI entry."""

from typing import Any

import pytest

from pathway.app import App
from pathway.config import AppConfig
from pathway.errors import ConfigurationError, ContextError
from pathway.routing.router import Router
from pathway.testing import TestClient, assert_header, assert_status, assert_text


class TestAppRegistration:
    def test_default_config(self) -> None:
        app = App()
        assert app.config == AppConfig()
        assert app.router.error_handler is not None
        assert not app.router.strict_slash

    def test_config_applies_to_router(self) -> None:
        app = App(AppConfig(strict_slash=True, panic_recovery=True))
        assert app.router.strict_slash
        assert app.router.panic_recovery

    def test_route_decorator_returns_function(self) -> None:
        app = App()

        @app.route("/")
        def index(ctx, request, response):
            response.write_text("hello")

        assert callable(index)
        assert len(app.router.entries) == 1

    def test_error_decorator(self) -> None:
        app = App()

        @app.error
        def on_error(ctx, request, response, error):
            pass

        assert app.router.error_handler is on_error

    def test_sub_router(self) -> None:
        app = App()
        api = app.sub_router("/api")
        assert isinstance(api, Router)
        assert api.path == "/api"

    def test_mount(self) -> None:
        app = App()
        child = Router()
        assert app.mount("/child", child) is child
        assert child.parent is app.router

    def test_use_is_chainable(self) -> None:
        app = App()
        first = lambda ctx, req, res: None  # noqa: E731
        second = lambda ctx, req, res: None  # noqa: E731
        assert app.use(first).use(second) is app
        assert len(app.router.entries) == 2

    def test_frozen_after_first_request_rejects_changes(self) -> None:
        app = App()
        app._ensure_frozen()
        assert app.frozen
        with pytest.raises(ConfigurationError):
            app.get("/late", lambda ctx, req, res: None)
        with pytest.raises(ConfigurationError):
            app.error(lambda ctx, req, res, err: None)


class TestAppRequests:
    @pytest.mark.asyncio
    async def test_route_with_params(self) -> None:
        app = App()

        @app.route("/hello/:name")
        def hello(ctx, request, response):
            response.write_text(f"Hello, {ctx.param('name')}!")

        async with TestClient(app) as client:
            response = await client.get("/hello/world")
        assert_text(response, "Hello, world!")
        assert_header(response, "Content-Type", "text/plain; charset=utf-8")

    @pytest.mark.asyncio
    async def test_default_method_is_get(self) -> None:
        app = App()

        @app.route("/items")
        def items(ctx, request, response):
            response.write_text("items")

        async with TestClient(app) as client:
            response = await client.post("/items")
        assert_text(response, "Not Found", status=404)

    @pytest.mark.asyncio
    async def test_route_methods(self) -> None:
        app = App()

        @app.route("/items", methods=["GET", "POST"])
        def items(ctx, request, response):
            response.write_text(request.method)

        async with TestClient(app) as client:
            assert (await client.post("/items")).text == "POST"
            assert (await client.get("/items")).text == "GET"
            assert (await client.delete("/items")).status == 404

    @pytest.mark.asyncio
    async def test_route_any_method(self) -> None:
        app = App()

        @app.route("/any", methods=["*"])
        def anything(ctx, request, response):
            response.write_text(request.method)

        async with TestClient(app) as client:
            response = await client.put("/any")
        assert_text(response, "PUT")

    @pytest.mark.asyncio
    async def test_param_decorator(self) -> None:
        app = App()
        dogs = {"1": "Rex"}

        @app.param("id")
        async def load_dog(ctx, request, response, dog_id):
            if dog_id not in dogs:
                ctx.set_error(LookupError(f"Dog {dog_id} not found"), 404)
                return
            ctx.set("dog", dogs[dog_id])

        @app.route("/dogs/:id")
        def show(ctx, request, response):
            response.write_json({"name": ctx.get("dog")})

        async with TestClient(app) as client:
            found = await client.get("/dogs/1")
            missing = await client.get("/dogs/2")

        assert_status(found, 200)
        assert found.json() == {"name": "Rex"}
        assert found.content_type == "application/json"
        assert_text(missing, "Dog 2 not found", status=404)

    @pytest.mark.asyncio
    async def test_custom_error_handler(self) -> None:
        app = App()
        seen: list[ContextError] = []

        @app.error
        def on_error(ctx, request, response, error):
            seen.append(error)
            response.write_json({"error": str(error)}, status=error.status)

        async with TestClient(app) as client:
            response = await client.get("/missing")

        assert response.status == 404
        assert response.json() == {"error": "Not Found"}
        assert seen[0].is_not_found

    @pytest.mark.asyncio
    async def test_nothing_written_without_error_handler(self) -> None:
        app = App()
        app.router.error_handler = None
        app.get("/quiet", lambda ctx, req, res: None)

        async with TestClient(app) as client:
            response = await client.get("/quiet")
        assert_text(response, "Not Found", status=404)

    @pytest.mark.asyncio
    async def test_sub_router_and_middleware(self) -> None:
        app = App()
        calls: list[str] = []
        app.use(lambda ctx, req, res: calls.append(req.path))
        api = app.sub_router("/api")
        api.get("/status", lambda ctx, req, res: res.write_json({"ok": True}))

        async with TestClient(app) as client:
            response = await client.get("/api/status")
        assert response.json() == {"ok": True}
        assert calls == ["/api/status"]

    @pytest.mark.asyncio
    async def test_json_body_and_query(self) -> None:
        app = App()

        async def create(ctx, request, response):
            data = await request.json()
            data["page"] = request.query_value("page")
            response.write_json(data, status=201)

        app.post("/items", create)

        async with TestClient(app) as client:
            response = await client.post("/items?page=3", json={"name": "bone"})
        assert response.status == 201
        assert response.json() == {"name": "bone", "page": "3"}

    @pytest.mark.asyncio
    async def test_head_has_no_body(self) -> None:
        app = App()
        app.router.head("/", lambda ctx, req, res: res.write(b"hello"))

        async with TestClient(app) as client:
            response = await client.request("HEAD", "/")
        assert response.status == 200
        assert response.body == b""
        assert response.header("content-length") == "5"

    @pytest.mark.asyncio
    async def test_strict_slash_config(self) -> None:
        app = App(AppConfig(strict_slash=True))
        app.get("/dog", lambda ctx, req, res: res.write(b"dog"))

        async with TestClient(app) as client:
            assert (await client.get("/dog")).status == 200
            assert (await client.get("/dog/")).status == 404


class TestAppPanics:
    @staticmethod
    def _boom(ctx, request, response):
        raise RuntimeError("secret detail")

    @pytest.mark.asyncio
    async def test_recovered_panic(self) -> None:
        app = App(AppConfig(panic_recovery=True))
        app.get("/boom", self._boom)

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert_text(response, "Internal Server Error", status=500)

    @pytest.mark.asyncio
    async def test_recovered_panic_debug(self) -> None:
        app = App(AppConfig(panic_recovery=True, debug=True))
        app.get("/boom", self._boom)

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert response.status == 500
        assert "RuntimeError: secret detail" in response.text

    @pytest.mark.asyncio
    async def test_unrecovered_exception_is_500(self) -> None:
        app = App()
        app.get("/boom", self._boom)

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert_text(response, "Internal Server Error", status=500)


class TestLifespan:
    @pytest.mark.asyncio
    async def test_startup_and_shutdown(self) -> None:
        app = App()
        events: list[str] = []

        @app.on_startup
        async def startup():
            events.append("startup")

        @app.on_shutdown
        def shutdown():
            events.append("shutdown")

        incoming = [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]
        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return incoming.pop(0)

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)

        assert app.frozen
        assert events == ["startup", "shutdown"]
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]

    @pytest.mark.asyncio
    async def test_startup_failure(self) -> None:
        app = App()

        @app.on_startup
        def startup():
            raise RuntimeError("no database")

        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return {"type": "lifespan.startup"}

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)
        assert sent == [{"type": "lifespan.startup.failed", "message": "no database"}]

    @pytest.mark.asyncio
    async def test_test_client_runs_hooks(self) -> None:
        app = App()
        events: list[str] = []
        app.on_startup(lambda: events.append("startup"))
        app.on_shutdown(lambda: events.append("shutdown"))

        async with TestClient(app):
            assert events == ["startup"]
        assert events == ["startup", "shutdown"]
