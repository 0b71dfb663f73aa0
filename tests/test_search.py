import logging

import pytest
import requests

from millpoint.errors import UpstreamIndexError
from millpoint.services.search import SearchClient, SearchIndexer


def test_documents_follow_program_writes(client, auth_headers, app, search_client, make_program):
    program = make_program(name="Flange_Face_Mill")
    app.state.indexer.drain()
    doc = search_client.documents[program["id"]]
    assert doc["partNumber"] == "0100"
    assert doc["status"] == "Draft"

    client.post(f"/api/programs/{program['id']}/approve", json={"status": "Released"}, headers=auth_headers)
    app.state.indexer.drain()
    assert search_client.documents[program["id"]]["status"] == "Released"

    client.delete(f"/api/programs/{program['id']}", headers=auth_headers)
    app.state.indexer.drain()
    assert program["id"] not in search_client.documents


def test_search_results_keep_index_order(client, app, search_client, make_program):
    first = make_program(name="Flange roughing")
    second = make_program(name="Flange finishing")
    make_program(name="Housing bore")
    app.state.indexer.drain()

    r = client.get("/api/programs", params={"search": "flange"})
    assert r.status_code == 200
    body = r.json()
    ids = [p["id"] for p in body["data"]]
    assert set(ids) == {first["id"], second["id"]}
    assert ids == search_client.search("flange")
    assert body["meta"]["total"] == 2


def test_search_passes_filters_and_intersects_part_number(client, app, search_client, machine, make_program):
    make_program(name="Flange A", partNumber="P-100")
    make_program(name="Flange B", partNumber="Q-200", status="Released")
    app.state.indexer.drain()

    r = client.get("/api/programs", params={"search": "flange", "status": "Released", "machineId": machine["id"]})
    assert [p["name"] for p in r.json()["data"]] == ["Flange B"]
    assert search_client.searches[-1]["filters"] == {"status": "Released", "machineId": machine["id"], "customer": None}

    r = client.get("/api/programs", params={"search": "flange", "partNumber": "P-"})
    assert [p["name"] for p in r.json()["data"]] == ["Flange A"]


def test_search_outage_returns_empty_page(client, app, search_client, make_program):
    make_program(name="Flange")
    app.state.indexer.drain()
    search_client.fail = True

    r = client.get("/api/programs", params={"search": "flange"})
    assert r.status_code == 200
    assert r.json() == {"success": True, "data": [], "meta": {"page": 1, "limit": 20, "total": 0, "totalPages": 0}}

    # listing without a search term does not touch the index
    r = client.get("/api/programs")
    assert r.json()["meta"]["total"] == 1


def test_index_failure_does_not_fail_the_write(client, app, search_client, make_program, caplog):
    search_client.fail = True
    with caplog.at_level(logging.ERROR, logger="millpoint.services.search"):
        program = make_program(name="Written anyway")
        app.state.indexer.drain()
    assert client.get(f"/api/programs/{program['id']}").status_code == 200
    assert program["id"] not in search_client.documents
    assert any("failed after 2 attempts" in rec.getMessage() for rec in caplog.records)


def test_reindex_all(app, client, search_client, make_program):
    make_program(name="One")
    make_program(name="Two")
    app.state.indexer.drain()
    search_client.documents.clear()

    assert app.state.program_service.reindex_all(clear=True) == 2
    app.state.indexer.drain()
    assert {d["name"] for d in search_client.documents.values()} == {"One", "Two"}


# SearchClient over HTTP

class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload or {}

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, responses=None, error=None):
        self.calls = []
        self.responses = list(responses or [])
        self.error = error

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error:
            raise self.error
        return self.responses.pop(0) if self.responses else FakeResponse()

    def close(self):
        pass


def test_client_builds_search_request():
    client = SearchClient(host="http://search:7700/", api_key="key", index_name="programs")
    client.session = FakeSession([FakeResponse(payload={"hits": [{"id": "b"}, {"id": "a"}]})])

    ids = client.search("flange", {"status": "In Review", "machineId": None, "customer": 'ACME "North"'}, limit=40)

    assert ids == ["b", "a"]
    method, url, kwargs = client.session.calls[0]
    assert (method, url) == ("POST", "http://search:7700/indexes/programs/search")
    assert kwargs["json"] == {
        "q": "flange",
        "limit": 40,
        "sort": ["lastModified:desc"],
        "filter": 'status = "In Review" AND customer = "ACME \\"North\\""',
    }
    assert kwargs["headers"]["Authorization"] == "Bearer key"


def test_client_wraps_http_failures():
    client = SearchClient(host="http://search:7700")
    client.session = FakeSession([FakeResponse(status_code=500)])
    with pytest.raises(UpstreamIndexError):
        client.search("x")

    client.session = FakeSession(error=requests.ConnectionError("refused"))
    with pytest.raises(UpstreamIndexError):
        client.index_documents([{"id": "1"}])


def test_disabled_client_returns_nothing():
    client = SearchClient(host="")
    assert not client.enabled
    assert client.search("anything") == []
    with pytest.raises(UpstreamIndexError):
        client.delete_document("1")


def test_indexer_retries_then_succeeds():
    client = SearchClient(host="http://search:7700")
    client.session = FakeSession([FakeResponse(status_code=503), FakeResponse(status_code=202)])
    indexer = SearchIndexer(client, retry_attempts=3, backoff_seconds=0)

    indexer.publish_upsert([{"id": "1"}])
    indexer.drain()

    assert len(client.session.calls) == 2
    assert all(call[1].endswith("/indexes/programs/documents") for call in client.session.calls)


def test_indexer_ignores_events_when_disabled():
    indexer = SearchIndexer(SearchClient(host=""), retry_attempts=1, backoff_seconds=0)
    indexer.publish_upsert([{"id": "1"}])
    indexer.publish_delete("1")
    indexer.drain()
    assert indexer._queue.empty()


class FlakyClient(SearchClient):
    def __init__(self):
        super().__init__(host="http://search:7700")
        self.indexed = []

    def index_documents(self, documents):
        if documents[0]["id"] == "bad":
            raise TypeError("not serializable")
        self.indexed.extend(documents)


def test_indexer_survives_unexpected_errors(caplog):
    client = FlakyClient()
    indexer = SearchIndexer(client, retry_attempts=3, backoff_seconds=0).start()
    try:
        with caplog.at_level(logging.ERROR, logger="millpoint.services.search"):
            indexer.publish_upsert([{"id": "bad"}])
            indexer.publish_upsert([{"id": "good"}])
            indexer.drain()
        assert indexer._thread.is_alive()
        assert client.indexed == [{"id": "good"}]
        assert "dropped after unexpected error" in caplog.text
    finally:
        indexer.stop()
