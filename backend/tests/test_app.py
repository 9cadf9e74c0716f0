import inspect

from fastapi.routing import APIRoute
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from lnacademy.api.dependencies import get_current_user, get_optional_user
from lnacademy.core.database import get_db
from lnacademy.core.exceptions import ProductNotFoundError
from lnacademy.main import create_app


class UnreachableSession:
    def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "ok"}


def test_health_reports_unreachable_database(settings):
    app = create_app(settings)
    app.dependency_overrides[get_db] = lambda: UnreachableSession()

    with TestClient(app) as client:
        response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["database"] == "unreachable"


def test_malformed_path_parameter_is_a_bad_request(client):
    response = client.get("/api/products/not-a-uuid")

    assert response.status_code == 400
    body = response.json()
    assert body["errorCode"] == "VALIDATION_ERROR"
    assert body["details"]


def test_domain_errors_keep_their_status_and_code(settings):
    app = create_app(settings)

    @app.get("/boom/missing")
    async def missing():
        raise ProductNotFoundError("Product with ID 1 not found")

    with TestClient(app) as client:
        response = client.get("/boom/missing")

    assert response.status_code == 404
    assert response.json() == {"message": "Product with ID 1 not found", "errorCode": "NOT_FOUND"}


def test_unexpected_errors_do_not_leak_details(settings):
    app = create_app(settings)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("secret stack detail")

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/boom")

    assert response.status_code == 500
    assert "secret" not in response.text
    assert response.json()["errorCode"] == "INTERNAL_ERROR"


def test_blocking_handlers_run_in_the_threadpool(settings):
    # Handlers and auth dependencies do synchronous database and bcrypt work
    app = create_app(settings)
    endpoints = [route.endpoint for route in app.routes if isinstance(route, APIRoute)]

    assert endpoints
    for endpoint in endpoints + [get_current_user, get_optional_user]:
        assert not inspect.iscoroutinefunction(endpoint), endpoint.__name__
