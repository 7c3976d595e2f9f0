"""End-to-end tests of the HTTP surface: gate, resource routes and error pipeline."""

import json

import pytest
from fastapi import FastAPI
from starlette.testclient import TestClient

from kilroy.application.api.rest.app import create_app
from kilroy.config import Config, Secrets, StorageConfig

PASSWORD = "integration-test-password"
KILROY = ("JS Kilroy", PASSWORD)


def _make_app(db_dir, environment: str = "development") -> FastAPI:
    config = Config(environment=environment, storage=StorageConfig(db_dir=db_dir))
    secrets = Secrets(cookie_signer="integration-cookie-signer", test_user_auth=PASSWORD)
    return create_app(config, secrets)


@pytest.fixture
def db_dir(tmp_path):
    return tmp_path / "db"


@pytest.fixture
def client(db_dir):
    with TestClient(_make_app(db_dir)) as client:
        yield client


@pytest.fixture
def anonymous(db_dir, client):
    """A second client on the same app that never holds a session cookie."""
    return TestClient(client.app)


class TestThingScenario:
    def test_unauthenticated_put_is_rejected_and_writes_nothing(self, client, db_dir):
        response = client.put("/thing/42.json", content=b'{"a":1}')

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == 'Basic realm="Users"'
        assert response.json()["message"].startswith("Unauthorized")
        assert not (db_dir / "immutable" / "thing" / "42.json").exists()

    def test_authenticated_put_then_anonymous_get(self, client, anonymous, db_dir):
        put = client.put("/thing/42.json", content=b'{"a":1}', auth=KILROY)

        assert put.status_code == 200
        assert put.json() == {"path": "/thing/42.json", "size": 7, "created": True}
        assert (db_dir / "immutable" / "thing" / "42.json").read_bytes() == b'{"a":1}'

        get = anonymous.get("/thing/42.json")

        assert get.status_code == 200
        assert get.content == b'{"a":1}'
        assert get.headers["cache-control"] == "public, max-age=31536000"
        assert get.headers["content-type"].startswith("application/json")

    def test_immutable_reads_are_identical(self, client, anonymous):
        client.put("/thing/9.json", content=b'{"b":2}', auth=KILROY)

        first = anonymous.get("/thing/9.json")
        second = anonymous.get("/thing/9.json")

        assert first.content == second.content
        assert first.headers["cache-control"] == second.headers["cache-control"]

    def test_head_answers_with_cache_headers(self, client, anonymous):
        client.put("/thing/42.json", content=b'{"a":1}', auth=KILROY)

        response = anonymous.head("/thing/42.json")

        assert response.status_code == 200
        assert response.headers["cache-control"] == "public, max-age=31536000"
        assert response.headers["content-type"].startswith("application/json")

    def test_head_on_missing_resource_is_404(self, anonymous):
        assert anonymous.head("/thing/missing.json").status_code == 404

    def test_overwriting_immutable_with_other_content_conflicts(self, client):
        client.put("/thing/9.json", content=b'{"b":2}', auth=KILROY)

        response = client.put("/thing/9.json", content=b'{"b":3}', auth=KILROY)

        assert response.status_code == 409


class TestPlaceScenario:
    def test_get_reflects_latest_put_without_long_cache(self, client, anonymous):
        client.put("/place/7.json", content=b'{"v":1}', auth=KILROY)
        client.put("/place/7.json", content=b'{"v":2}', auth=KILROY)

        response = anonymous.get("/place/7.json")

        assert response.status_code == 200
        assert response.json() == {"v": 2}
        assert response.headers["cache-control"] == "public, max-age=0"

    def test_place_requires_json(self, client):
        response = client.put("/place/7.txt", content=b"hi", auth=KILROY)

        assert response.status_code == 400

    def test_invalid_json_is_rejected(self, client):
        response = client.put("/place/7.json", content=b"{not json", auth=KILROY)

        assert response.status_code == 400


class TestCredentials:
    def test_wrong_password_is_rejected(self, client):
        response = client.put("/thing/1.json", content=b"{}", auth=("JS Kilroy", "nope"))

        assert response.status_code == 401
        assert response.json()["message"] == 'Unauthorized: Basic realm="Users"'
        assert "connect.sid" not in response.cookies

    def test_other_user_is_rejected(self, client):
        response = client.put("/thing/1.json", content=b"{}", auth=("Somebody", PASSWORD))

        assert response.status_code == 401

    def test_session_resumes_without_credentials(self, client):
        first = client.put("/place/1.json", content=b"{}", auth=KILROY)
        assert first.status_code == 200
        assert "connect.sid" in client.cookies

        # No Authorization header: the session cookie alone authenticates.
        second = client.put("/place/1.json", content=b'{"x":1}')

        assert second.status_code == 200

    def test_session_cookie_is_not_shared(self, client, anonymous):
        client.put("/place/1.json", content=b"{}", auth=KILROY)

        response = anonymous.put("/place/1.json", content=b"{}")

        assert response.status_code == 401

    def test_forged_session_cookie_is_ignored(self, client, anonymous):
        anonymous.cookies.set("connect.sid", "eyJ1c2VyIjoiZm9yZ2VkIn0=.forged.signature")

        response = anonymous.put("/place/1.json", content=b"{}")

        assert response.status_code == 401


class TestMedia:
    def test_media_read_requires_auth(self, client, anonymous):
        client.put("/media/clip.mp3", content=b"\x00\x01", auth=KILROY)

        assert anonymous.get("/media/clip.mp3").status_code == 401
        assert anonymous.head("/media/clip.mp3").status_code == 401

        response = client.get("/media/clip.mp3", auth=KILROY)
        assert response.status_code == 200
        assert response.content == b"\x00\x01"
        assert response.headers["cache-control"] == "public, max-age=31536000"

    def test_multipart_upload_stores_file_part(self, client, db_dir):
        response = client.put(
            "/media/photo.jpg",
            files={"file": ("photo.jpg", b"\xff\xd8\xff", "image/jpeg")},
            auth=KILROY,
        )

        assert response.status_code == 200
        assert (db_dir / "immutable" / "media" / "photo.jpg").read_bytes() == b"\xff\xd8\xff"

    def test_thumb_accepts_png_only(self, client):
        assert client.put("/thumb/1.png", content=b"\x89PNG", auth=KILROY).status_code == 200
        assert client.put("/thumb/1.gif", content=b"GIF8", auth=KILROY).status_code == 400


class TestDelete:
    def test_delete_existing(self, client, anonymous):
        client.put("/place/3.json", content=b"{}", auth=KILROY)

        response = client.delete("/place/3.json", auth=KILROY)

        assert response.status_code == 200
        assert response.json() == {"path": "/place/3.json", "existed": True}
        assert anonymous.get("/place/3.json").status_code == 404

    def test_delete_missing_is_idempotent(self, client):
        response = client.delete("/thing/nothing.json", auth=KILROY)

        assert response.status_code == 200
        assert response.json()["existed"] is False

    def test_delete_requires_auth(self, client):
        assert client.delete("/thing/nothing.json").status_code == 401

    def test_delete_unknown_collection(self, client):
        assert client.delete("/secrets/x.json", auth=KILROY).status_code == 404


class TestTraversal:
    def test_dotted_identifier_is_rejected_before_storage(self, client, db_dir):
        response = client.delete("/thing/.hidden.json", auth=KILROY)

        assert response.status_code == 400
        assert not (db_dir / "immutable" / "thing").exists()

    def test_parent_directory_id_is_rejected_on_write(self, client, db_dir):
        response = client.put("/thing/..json", content=b"{}", auth=KILROY)

        assert response.status_code == 400
        assert not (db_dir / "immutable").exists()

    def test_parent_directory_identifier_is_rejected(self, client, tmp_path):
        secret = tmp_path / "secret.json"
        secret.write_text("{}")

        response = client.get("/thing/..%2F..%2F..%2Fsecret.json")

        assert response.status_code in (400, 404)
        assert secret.exists()
        assert response.content != b"{}"


class TestDelegatedHandlers:
    def test_fbusr_post_stores_user_record(self, client, db_dir):
        response = client.post("/fbusr/1000.json", json={"name": "Kilroy"}, auth=KILROY)

        assert response.status_code == 200
        stored = db_dir / "mutable" / "fbusr" / "1000.json"
        assert json.loads(stored.read_text()) == {"name": "Kilroy"}

    def test_prefs_post_stores_refs(self, client, db_dir):
        response = client.post("/pRefs/42.json", json=["7", "8"], auth=KILROY)

        assert response.status_code == 200
        assert json.loads((db_dir / "mutable" / "refs" / "42.json").read_text()) == ["7", "8"]

    def test_delegated_writes_require_auth(self, client):
        assert client.post("/fbusr/1000.json", json={}).status_code == 401
        assert client.post("/pRefs/42.json", json=[]).status_code == 401

    def test_delegated_writes_require_json(self, client):
        response = client.post("/pRefs/42.json", content=b"{oops", auth=KILROY)

        assert response.status_code == 400


class TestErrorPipeline:
    def test_missing_resource_is_404_not_500(self, client):
        response = client.get("/thing/missing.json")

        assert response.status_code == 404
        assert response.json()["message"] == "Not Found"

    def test_unmatched_route_is_404(self, client):
        response = client.get("/nowhere")

        assert response.status_code == 404
        assert set(response.json()) == {"message", "error"}

    @pytest.mark.parametrize("path", ["/other/x.json", "/fbusr/1.json", "/pRefs/1.json"])
    def test_get_on_delete_only_path_is_404(self, client, path):
        response = client.get(path)

        assert response.status_code == 404
        assert response.json()["message"] == "Not Found"
        assert "allow" not in response.headers

    def test_development_exposes_detail(self, db_dir):
        app = _make_app(db_dir, environment="development")

        @app.get("/boom")
        async def boom():
            raise RuntimeError("kaboom")

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/boom")

        assert response.status_code == 500
        assert response.json()["error"]["type"] == "RuntimeError"

    def test_production_hides_detail(self, db_dir):
        app = _make_app(db_dir, environment="production")

        @app.get("/boom")
        async def boom():
            raise RuntimeError("secret internals")

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/boom")

        assert response.status_code == 500
        assert response.json() == {"message": "Internal Server Error", "error": {}}

    def test_html_error_view(self, client):
        response = client.get("/thing/missing.json", headers={"Accept": "text/html"})

        assert response.status_code == 404
        assert response.headers["content-type"].startswith("text/html")
        assert "Not Found" in response.text


class TestMisc:
    def test_channel_is_cached_for_a_year(self, client):
        response = client.get("/channel.html")

        assert response.status_code == 200
        assert "connect.facebook.net" in response.text
        assert response.headers["pragma"] == "public"
        assert response.headers["cache-control"] == "public, max-age=31536000"
        assert "expires" in response.headers

    def test_health(self, client):
        assert client.get("/api/v1/health").json()["status"] == "healthy"
