"""Integration tests for the collections API with listeners."""

import json
import logging

import pytest
from fastapi.testclient import TestClient

from docforge.api import create_app
from docforge.auth import JWTService
from docforge.config import Settings
from docforge.errors import ApiError
from docforge.hooks import ListenerCatalog, ListenerRegistry
from docforge.persistence import MemoryDocumentStore, SqlDocumentStore, dispose_engines

SECRET = "integration-test-secret-key-0123456789"


@pytest.fixture
def settings():
    return Settings(secret_key=SECRET, logging_level="warning")


@pytest.fixture
def store():
    store = MemoryDocumentStore()
    store.create("people", {"_id": "1", "name": "carol", "age": 30, "draft": False})
    store.create("people", {"_id": "2", "name": "alice", "age": 25, "draft": False})
    store.create("people", {"_id": "3", "name": "bob", "age": 30, "draft": True})
    return store


@pytest.fixture
def registry():
    return ListenerRegistry()


@pytest.fixture
def client(settings, store, registry):
    app = create_app(settings=settings, store=store, registry=registry)
    with TestClient(app) as client:
        yield client


def _ids(response):
    return [doc["_id"] for doc in response.json()["data"]]


# =============================================================================
# Listing and ordering
# =============================================================================


class TestListDocuments:
    def test_list_all(self, client):
        response = client.get("/api/people")
        assert response.status_code == 200
        assert _ids(response) == ["1", "2", "3"]
        assert response.json()["total"] == 3

    def test_orderby_list(self, client):
        response = client.get("/api/people", params={"orderby": json.dumps(["name"])})
        assert _ids(response) == ["2", "3", "1"]

    def test_orderby_mapping_with_tie_break(self, client):
        orderby = json.dumps({"age": -1, "name": 1})
        response = client.get("/api/people", params={"orderby": orderby})
        assert _ids(response) == ["3", "1", "2"]

    def test_limit_and_offset(self, client):
        orderby = json.dumps([["name", 1]])
        response = client.get(
            "/api/people", params={"orderby": orderby, "limit": 1, "offset": 1}
        )
        assert _ids(response) == ["3"]
        assert response.json()["total"] == 3

    def test_invalid_orderby_shape(self, client):
        response = client.get("/api/people", params={"orderby": json.dumps("name")})
        assert response.status_code == 400
        assert response.json() == {"error": "orderby param must be array or object"}

    def test_invalid_orderby_json(self, client):
        response = client.get("/api/people", params={"orderby": "{not json"})
        assert response.status_code == 400
        assert response.json() == {"error": "orderby param must be valid JSON"}

    def test_orderby_direction_must_be_numeric(self, client):
        response = client.get(
            "/api/people", params={"orderby": json.dumps({"age": "desc"})}
        )
        assert response.status_code == 400
        assert "numeric direction" in response.json()["error"]

    def test_orderby_entry_must_be_field_pair(self, client):
        response = client.get(
            "/api/people", params={"orderby": json.dumps([["age", 1, "extra"]])}
        )
        assert response.status_code == 400

    def test_get_listener_hides_documents(self, client, registry):
        @registry.on("get", collections=["people"])
        def hide_drafts(request, collection, data, context):
            return False if data.get("draft") else None

        response = client.get("/api/people")
        assert _ids(response) == ["1", "2"]
        assert response.json()["total"] == 2

    def test_unknown_collection_is_empty(self, client):
        response = client.get("/api/nothing")
        assert response.status_code == 200
        assert response.json()["data"] == []


class TestQueryDocuments:
    def test_query_body(self, client):
        response = client.post(
            "/api/people/query",
            json={"orderby": {"age": 1, "name": -1}, "limit": 2},
        )
        assert response.status_code == 200
        assert _ids(response) == ["2", "1"]

    def test_query_invalid_orderby(self, client):
        response = client.post("/api/people/query", json={"orderby": 5})
        assert response.status_code == 400
        assert response.json()["error"] == "orderby param must be array or object"

    def test_query_direction_must_be_numeric(self, client):
        response = client.post("/api/people/query", json={"orderby": {"age": "desc"}})
        assert response.status_code == 400
        assert "numeric direction" in response.json()["error"]

    def test_query_boolean_direction_rejected(self, client):
        response = client.post("/api/people/query", json={"orderby": [["age", True]]})
        assert response.status_code == 400


# =============================================================================
# Single documents and writes
# =============================================================================


class TestGetDocument:
    def test_get(self, client):
        response = client.get("/api/people/2")
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "alice"

    def test_missing(self, client):
        assert client.get("/api/people/99").status_code == 404

    def test_denied_reads_as_missing(self, client, registry):
        registry.add("get", lambda *a: False)
        assert client.get("/api/people/2").status_code == 404


class TestWrites:
    def test_create_assigns_id(self, client, store):
        response = client.post("/api/posts", json={"title": "Hello"})
        assert response.status_code == 201
        document = response.json()["data"]
        assert document["title"] == "Hello"
        assert store.get("posts", document["_id"]) == document

    def test_create_denied(self, client, registry, store):
        registry.add("create", lambda *a: False, collections=["posts"])
        response = client.post("/api/posts", json={"_id": "p1", "title": "Hello"})
        assert response.status_code == 403
        assert store.get("posts", "p1") is None

    def test_create_listener_for_other_collection_ignored(self, client, registry):
        registry.add("create", lambda *a: False, collections=["comments"])
        response = client.post("/api/posts", json={"title": "Hello"})
        assert response.status_code == 201

    def test_create_duplicate_conflicts(self, client):
        response = client.post("/api/people", json={"_id": "1"})
        assert response.status_code == 409

    def test_changed_listener_sees_stored_document(self, client, registry):
        seen = []
        registry.add("changed", lambda request, collection, data, context: seen.append(
            (context.event, collection, data["_id"])
        ))
        client.post("/api/posts", json={"_id": "p1"})
        assert seen == [("changed", "posts", "p1")]

    def test_listener_can_raise_api_error(self, client, registry):
        def reject(request, collection, data, context):
            raise ApiError(422, "title required")

        registry.add("create", reject)
        response = client.post("/api/posts", json={})
        assert response.status_code == 422
        assert response.json() == {"error": "title required"}

    def test_listener_failure_propagates(self, client, registry, caplog):
        def broken(request, collection, data, context):
            raise RuntimeError("listener crashed")

        registry.add("create", broken)
        with caplog.at_level(logging.ERROR):
            with pytest.raises(RuntimeError, match="listener crashed"):
                client.post("/api/posts", json={})
        assert "Listener failed during 'create' on posts" in caplog.text

    def test_update(self, client, store):
        response = client.put("/api/people/2", json={"name": "alicia", "age": 26})
        assert response.status_code == 200
        assert store.get("people", "2") == {"_id": "2", "name": "alicia", "age": 26}

    def test_update_missing(self, client):
        assert client.put("/api/people/99", json={"name": "x"}).status_code == 404

    def test_update_denied(self, client, registry, store):
        registry.add("update", lambda *a: False)
        response = client.put("/api/people/2", json={"name": "alicia"})
        assert response.status_code == 403
        assert store.get("people", "2")["name"] == "alice"

    def test_delete(self, client, store):
        response = client.delete("/api/people/1")
        assert response.status_code == 200
        assert store.get("people", "1") is None

    def test_delete_denied(self, client, registry, store):
        registry.add("delete", lambda *a: False)
        assert client.delete("/api/people/1").status_code == 403
        assert store.get("people", "1") is not None


# =============================================================================
# Per-request scope and auth
# =============================================================================


class TestRequestScope:
    def test_listener_sees_authenticated_user(self, client, registry):
        def owners_only(request, collection, data, context):
            return request.user is not None and request.user.has_role("owner") or False

        registry.add("delete", owners_only)
        token = JWTService(SECRET).generate_token("U1", roles=["owner"])

        assert client.delete("/api/people/1").status_code == 403
        response = client.delete("/api/people/1", headers={"x-access-token": token})
        assert response.status_code == 200

    def test_bearer_header(self, client, registry):
        seen = []
        registry.add("get", lambda request, *a: seen.append(request.user.user_id))
        token = JWTService(SECRET).generate_token("U7")
        client.get("/api/people/1", headers={"Authorization": f"Bearer {token}"})
        assert seen == ["U7"]

    def test_invalid_token_is_anonymous(self, client, registry):
        seen = []
        registry.add("get", lambda request, *a: seen.append(request.user))
        client.get("/api/people/1", headers={"x-access-token": "garbage"})
        assert seen == [None]

    def test_request_listeners_do_not_leak(self, client, registry):
        def adds_listener(request, collection, data, context):
            request.event_listeners.add("get", lambda *a: False)
            return None

        registry.add("create", adds_listener)
        client.post("/api/posts", json={"_id": "p1"})

        assert registry.count("get") == 0
        assert client.get("/api/posts/p1").status_code == 200

    def test_request_id_header(self, client):
        response = client.get("/api/people")
        assert len(response.headers["x-request-id"]) == 48


class TestRequestLogging:
    def test_client_errors_logged(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="docforge.api.app"):
            client.get("/api/people/99")
        records = [r for r in caplog.records if r.name == "docforge.api.app"]
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING
        assert records[0].entry["res"]["statusCode"] == 404

    def test_success_not_logged_at_warning_level(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="docforge.api.app"):
            client.get("/api/people")
        assert not [r for r in caplog.records if r.name == "docforge.api.app"]


class TestListenerBindingsFromSettings:
    @pytest.fixture(autouse=True)
    def clear_listener_catalog(self):
        ListenerCatalog.clear()
        yield
        ListenerCatalog.clear()

    def test_bindings_file_loaded(self, tmp_path, store):
        ListenerCatalog.register("denyAll", lambda *a: False)
        path = tmp_path / "listeners.yaml"
        path.write_text("listeners:\n  delete:\n    - name: denyAll\n")

        app = create_app(
            settings=Settings(secret_key=SECRET, listeners_path=path), store=store
        )
        with TestClient(app) as client:
            assert client.delete("/api/people/1").status_code == 403
            assert client.get("/api/people/1").status_code == 200


class TestDatabaseBackedStore:
    @pytest.fixture(autouse=True)
    def fresh_engines(self):
        dispose_engines()
        yield
        dispose_engines()

    def test_database_url_selects_sql_store(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'docs.db'}"
        app = create_app(settings=Settings(secret_key=SECRET, database_url=url))
        assert isinstance(app.state.store, SqlDocumentStore)

        with TestClient(app) as client:
            response = client.post("/api/posts", json={"_id": "p1", "title": "Hello"})
            assert response.status_code == 201
            assert client.post("/api/posts", json={"_id": "p1"}).status_code == 409

        assert SqlDocumentStore(url).get("posts", "p1") == {"_id": "p1", "title": "Hello"}

    def test_no_database_url_uses_memory(self):
        app = create_app(settings=Settings(secret_key=SECRET))
        assert isinstance(app.state.store, MemoryDocumentStore)
