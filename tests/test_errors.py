from fastapi.testclient import TestClient
from botsuite.main import app
import pytest

client = TestClient(app)


def test_404_not_found():
    response = client.get("/non-existent-route")
    assert response.status_code == 404
    data = response.json()
    assert "error" in data
    assert "code" in data
    assert data["code"] == "HTTP_ERROR"


def test_validation_error_structure():
    from pydantic import BaseModel

    class Item(BaseModel):
        name: str
        price: int

    @app.post("/test-validation")
    def create_item(item: Item):
        return item

    response = client.post("/test-validation", json={"name": "foo", "price": "invalid"})
    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "VALIDATION_ERROR"
    assert "details" in data
    assert len(data["details"]) > 0


def test_custom_exception():
    from botsuite.core.exceptions import ResourceNotFoundError

    @app.get("/test-custom-error")
    def trigger_custom_error():
        raise ResourceNotFoundError(message="Item not found")

    response = client.get("/test-custom-error")
    assert response.status_code == 404
    data = response.json()
    assert data["code"] == "NOT_FOUND"
    assert data["error"] == "Item not found"


def test_upstream_error_relays_status_and_details():
    from botsuite.core.exceptions import UpstreamError

    @app.get("/test-upstream-error")
    def trigger_upstream_error():
        raise UpstreamError(status_code=429, details={"error": {"message": "quota"}})

    response = client.get("/test-upstream-error")
    assert response.status_code == 429
    data = response.json()
    assert data["error"] == "Bot request failed"
    assert data["details"] == {"error": {"message": "quota"}}


def test_unhandled_exception_becomes_500():
    @app.get("/test-unhandled-error")
    def trigger_unhandled_error():
        raise RuntimeError("kaboom")

    safe_client = TestClient(app, raise_server_exceptions=False)
    response = safe_client.get("/test-unhandled-error")
    assert response.status_code == 500
    assert response.json()["code"] == "INTERNAL_ERROR"


@pytest.mark.parametrize("status_code", [400, 401, 404, 501])
def test_domain_errors_keep_status(status_code):
    from botsuite.core.exceptions import BotSuiteError

    path = f"/test-domain-error-{status_code}"

    @app.get(path)
    def trigger_domain_error():
        raise BotSuiteError("nope", code="X", status_code=status_code)

    response = client.get(path)
    assert response.status_code == status_code
    assert response.json()["error"] == "nope"
