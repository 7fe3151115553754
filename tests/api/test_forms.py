import pytest
from fastapi.testclient import TestClient

from formkit.config import Config


def find_node(nodes, name):
    for node in nodes:
        if node.get("name") == name:
            return node
        found = find_node(node.get("schema") or [], name)
        if found is not None:
            return found
    return None


@pytest.fixture
def client(tmp_path):
    from formkit.api import create_app
    from formkit.demo import create_entities, create_registry, seed

    config = Config(database={"path": str(tmp_path / "formkit.db")})
    app = create_app(config, schemas=create_registry(), entities=create_entities())
    seed()

    with TestClient(app) as client:
        yield client


def test_list_schemas(client: TestClient):
    response = client.get("/api/v1/forms")
    assert response.status_code == 200
    assert response.json() == {"schemas": ["address", "feedback"]}


def test_render_schema_with_defaults(client: TestClient):
    response = client.get("/api/v1/forms/address")
    assert response.status_code == 200
    data = response.json()

    assert data["id"] == "address"
    assert data["renderer"] == "laravilt"
    assert data["data"]["newsletter"] is None

    country = find_node(data["schema"], "country")
    assert sorted(o["value"] for o in country["options"]) == ["de", "fr", "us"]
    assert country["searchUrl"] == "/api/v1/forms/address/search"
    assert country["native"] is False

    region = find_node(data["schema"], "region")
    assert region["hidden"] is True
    assert region["options"] == []


def test_render_schema_for_flutter(client: TestClient):
    response = client.get("/api/v1/forms/address", params={"renderer": "flutter"})
    assert response.status_code == 200

    section = response.json()["schema"][0]
    assert section["widget"] == "LaraviltSection"
    assert "props" in section


def test_render_unknown_schema(client: TestClient):
    response = client.get("/api/v1/forms/unknown")
    assert response.status_code == 404
    assert response.json() == {"error": "Schema not found: unknown"}


def test_render_unknown_renderer(client: TestClient):
    response = client.get("/api/v1/forms/address", params={"renderer": "qt"})
    assert response.status_code == 422


def test_reactive_update(client: TestClient):
    response = client.post(
        "/api/v1/forms/reactive",
        json={
            "schemaId": "address",
            "formState": {"country": "fr", "region": "5", "city": "Berlin"},
            "changedField": "country",
            "requestToken": "t-1",
        },
    )
    assert response.status_code == 200
    data = response.json()

    assert data["requestToken"] == "t-1"
    assert data["affected"] == ["region", "city"]
    assert data["data"]["country"] == "fr"
    assert data["data"]["region"] is None
    assert data["data"]["city"] is None

    region = find_node(data["schema"], "region")
    assert region["hidden"] is False
    assert [o["label"] for o in region["options"]] == ["Brittany", "Normandy", "Occitania"]

    city = find_node(data["schema"], "city")
    assert [o["value"] for o in city["options"]] == ["Paris", "Lyon", "Marseille", "Toulouse"]


def test_reactive_echoes_each_request_token(client: TestClient):
    tokens = []
    for token in ("1", "2"):
        response = client.post(
            "/api/v1/forms/reactive",
            json={"schemaId": "feedback", "formState": {}, "requestToken": token},
        )
        tokens.append(response.json()["requestToken"])

    assert tokens == ["1", "2"]


def test_reactive_malformed_state(client: TestClient):
    response = client.post(
        "/api/v1/forms/reactive",
        json={"schemaId": "feedback", "formState": "not an object", "changedField": "name"},
    )
    assert response.status_code == 200
    assert response.json()["data"] == {}


def test_reactive_unknown_schema(client: TestClient):
    response = client.post("/api/v1/forms/reactive", json={"schemaId": "missing", "formState": {}})
    assert response.status_code == 404
    assert "error" in response.json()


def test_reactive_unexpected_failure(client: TestClient):
    def broken(state):
        raise RuntimeError("database is gone")

    client.app.state.schemas.add("broken", broken)

    response = client.post("/api/v1/forms/reactive", json={"schemaId": "broken", "formState": {}})
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to build schema"}


def test_search_options(client: TestClient):
    response = client.post(
        "/api/v1/forms/address/search", json={"field": "country", "search": "ger"}
    )
    assert response.status_code == 200
    assert response.json()["options"] == [{"value": "de", "label": "Germany"}]


def test_search_computed_options_against_state(client: TestClient):
    response = client.post(
        "/api/v1/forms/address/search",
        json={"field": "city", "search": "ly", "formState": {"country": "fr"}},
    )
    assert response.status_code == 200
    assert response.json()["options"] == [{"value": "Lyon", "label": "Lyon"}]


def test_search_unknown_field(client: TestClient):
    response = client.post("/api/v1/forms/address/search", json={"field": "planet"})
    assert response.status_code == 400
    assert response.json() == {"error": "Field not found: planet"}


def test_option_labels(client: TestClient):
    response = client.post(
        "/api/v1/forms/address/labels", json={"field": "country", "values": ["us"]}
    )
    assert response.status_code == 200
    assert response.json() == {"labels": {"us": "United States"}}


def test_validate_reports_every_error(client: TestClient):
    response = client.post(
        "/api/v1/forms/feedback/validate",
        json={"data": {"rating": "9", "issues": [{"details": "slow"}]}},
    )
    assert response.status_code == 422
    errors = response.json()["errors"]

    assert set(errors) == {"name", "rating", "issues.0.title"}


def test_validate_success(client: TestClient):
    response = client.post(
        "/api/v1/forms/feedback/validate",
        json={"data": {"name": "Ada", "rating": "4", "topics": ["ui"], "issues": []}},
    )
    assert response.status_code == 200
    assert response.json() == {"valid": True, "errors": {}}


def test_demo_app_factory(tmp_path, monkeypatch):
    from formkit.demo import create_demo_app

    monkeypatch.setenv("FORMKIT_DATABASE__PATH", str(tmp_path / "demo.db"))
    monkeypatch.setenv("FORMKIT_CONFIG_FILE", str(tmp_path / "missing.toml"))

    with TestClient(create_demo_app()) as client:
        response = client.get("/api/v1/forms")

    assert response.json() == {"schemas": ["address", "feedback"]}
