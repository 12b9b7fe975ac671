import pytest

import trie_service
from bytetrie import RadixTrie
from trie_service import app


@pytest.fixture
def client(monkeypatch):
    # Fresh seeded trie per test, whatever TRIE_SEED said at import time.
    monkeypatch.setattr(trie_service, "SEED_ENABLED", True)
    monkeypatch.setattr(trie_service, "trie", RadixTrie(trie_service._SEED_ROUTES))
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def test_index_lists_endpoints(client):
    resp = client.get("/")

    assert resp.status_code == 200
    body = resp.get_json()
    assert "GET  /match/all?q=<s>" in body["endpoints"]
    assert body["encodings"] == ["text", "hex"]


def test_health_and_stats(client):
    health = client.get("/health").get_json()
    stats = client.get("/stats").get_json()

    assert health["status"] == "healthy"
    assert health["trie_size"] == len(trie_service.trie)
    assert stats["total_keys"] == len(trie_service.trie)
    assert stats["seed_keys"] == len(trie_service._SEED_ROUTES)


@pytest.mark.parametrize(
    "route, expected",
    [
        ("/api/v1", "api-v1"),
        ("/static/img", "image-cdn"),
        ("/", "root"),
    ],
)
def test_lookup_seeded_route(client, route: str, expected: str):
    body = client.get("/lookup", query_string={"q": route}).get_json()

    assert body == {"key": route, "found": True, "value": expected}


def test_lookup_missing_key(client):
    resp = client.get("/lookup", query_string={"q": "/api/v3"})

    assert resp.status_code == 200
    assert resp.get_json() == {"key": "/api/v3", "found": False, "value": None}


def test_match_all_is_ordered(client):
    body = client.get("/match/all", query_string={"q": "/api/v1/users/42"}).get_json()

    assert body["count"] == 4
    assert [m["prefix"] for m in body["matches"]] == ["/", "/api", "/api/v1", "/api/v1/users"]
    assert [m["prefix_length"] for m in body["matches"]] == [1, 4, 7, 13]
    assert body["matches"][-1]["value"] == "users-service"


def test_match_shortest_and_longest(client):
    shortest = client.get("/match/shortest", query_string={"q": "/static/img/logo.png"}).get_json()
    longest = client.get("/match/longest", query_string={"q": "/static/img/logo.png"}).get_json()

    assert shortest["found"] is True
    assert (shortest["prefix"], shortest["value"]) == ("/", "root")
    assert longest["found"] is True
    assert (longest["prefix"], longest["prefix_length"], longest["value"]) == ("/static/img", 11, "image-cdn")


def test_match_without_prefix(client):
    for mode in ("shortest", "longest"):
        body = client.get(f"/match/{mode}", query_string={"q": "api/v1"}).get_json()
        assert body["found"] is False
        assert body["value"] is None

    body = client.get("/match/all", query_string={"q": ""}).get_json()
    assert body == {"input": "", "count": 0, "matches": []}


def test_insert_then_match(client):
    before = len(trie_service.trie)
    resp = client.post("/insert", json={"key": "/api/v1/users/admins", "value": {"backend": "admin-users"}})

    assert resp.status_code == 201
    assert resp.get_json()["trie_size"] == before + 1

    body = client.get("/match/longest", query_string={"q": "/api/v1/users/admins/7"}).get_json()
    assert body["value"] == {"backend": "admin-users"}

    # Overwrite keeps the size and replaces the value
    resp = client.post("/insert", json={"key": "/api/v1/users/admins", "value": "v2"})
    assert resp.get_json()["trie_size"] == before + 1
    assert client.get("/lookup", query_string={"q": "/api/v1/users/admins"}).get_json()["value"] == "v2"


def test_insert_value_defaults_to_key(client):
    resp = client.post("/insert", json={"key": "/docs"})

    assert resp.status_code == 201
    assert resp.get_json()["value"] == "/docs"


def test_hex_keys(client):
    resp = client.post("/insert", json={"key": "00ff10", "value": "binary", "encoding": "hex"})
    assert resp.status_code == 201

    body = client.get("/match/all", query_string={"q": "00ff1020", "encoding": "hex"}).get_json()
    assert body["input"] == "00ff1020"
    assert body["matches"] == [{"prefix": "00ff10", "prefix_length": 3, "value": "binary"}]


@pytest.mark.parametrize(
    "path, query_string",
    [
        ("/lookup", {}),
        ("/match/all", {}),
        ("/match/longest", {"q": "zz", "encoding": "hex"}),
        ("/match/shortest", {"q": "/api", "encoding": "base64"}),
    ],
)
def test_bad_query_is_rejected(client, path: str, query_string: dict):
    resp = client.get(path, query_string=query_string)

    assert resp.status_code == 400
    assert "error" in resp.get_json()


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"key": ""},
        {"key": 12},
        {"key": "x" * (trie_service.MAX_KEY_BYTES + 1)},
        {"key": "abc", "encoding": "hex"},
        ["/api"],
        "/api",
    ],
)
def test_bad_insert_is_rejected(client, payload):
    before = len(trie_service.trie)
    resp = client.post("/insert", json=payload)

    assert resp.status_code == 400
    assert "error" in resp.get_json()
    assert len(trie_service.trie) == before
