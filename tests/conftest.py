import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure project root is on sys.path so tests can import the 'millpoint' package
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from millpoint import crud
from millpoint.config.settings import Settings
from millpoint.errors import UpstreamIndexError
from millpoint.main import create_app
from millpoint.services.search import SearchClient

PASSWORD = "secret123"
SEARCH_FIELDS = ("name", "partNumber", "customer", "description", "operation", "material")


class FakeSearchClient(SearchClient):
    """In-memory stand-in for the search index; set .fail = True to simulate an outage."""

    def __init__(self):
        super().__init__(host="http://search.invalid")
        self.documents = {}
        self.fail = False
        self.searches = []

    def open(self):
        return self

    def close(self):
        pass

    def _check(self):
        if self.fail:
            raise UpstreamIndexError("search index unavailable")

    def index_documents(self, documents):
        self._check()
        for doc in documents:
            self.documents[doc["id"]] = dict(doc)

    def delete_document(self, document_id):
        self._check()
        self.documents.pop(document_id, None)

    def clear(self):
        self._check()
        self.documents.clear()

    def search(self, query, filters=None, limit=20):
        self._check()
        self.searches.append({"query": query, "filters": dict(filters or {}), "limit": limit})
        q = query.lower()
        hits = [
            doc for doc in sorted(self.documents.values(), key=lambda d: d["lastModified"], reverse=True)
            if any(q in str(doc.get(field) or "").lower() for field in SEARCH_FIELDS)
        ]
        for key, value in (filters or {}).items():
            if value:
                hits = [doc for doc in hits if doc.get(key) == value]
        return [doc["id"] for doc in hits[:limit]]


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        APP_ENV="test",
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        STORAGE_PATH=str(tmp_path / "storage"),
        SECRET_KEY="test-secret",
        MEILISEARCH_HOST="",
        SEARCH_RETRY_ATTEMPTS=2,
        SEARCH_RETRY_BACKOFF_SECONDS=0,
        MAX_UPLOAD_BYTES=1024,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def search_client():
    return FakeSearchClient()


@pytest.fixture
def app(test_settings, search_client):
    return create_app(test_settings, search_client=search_client)


@pytest.fixture
def client(app):
    # Entering the TestClient runs the lifespan: open DB, create tables, start the indexer
    with TestClient(app) as c:
        yield c
        # Drop everything so the next test starts from a clean schema
        app.state.database.drop_all()


@pytest.fixture
def user(app, client):
    with app.state.database.session() as db:
        u = crud.create_user(db, "programmer@millpoint.dk", "Hans Jensen", PASSWORD, role="programmer")
        db.expunge(u)
    return u


@pytest.fixture
def auth_headers(client, user):
    r = client.post("/api/auth/login", json={"email": user.email, "password": PASSWORD})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['data']['accessToken']}"}


@pytest.fixture
def make_machine(client, auth_headers):
    def _make(**overrides):
        payload = {"name": "Haas VF-2", "type": "Fræsemaskine", "manufacturer": "Haas", "model": "VF-2"}
        payload.update(overrides)
        r = client.post("/api/machines", json=payload, headers=auth_headers)
        assert r.status_code == 201, r.text
        return r.json()["data"]
    return _make


@pytest.fixture
def machine(make_machine):
    return make_machine()


@pytest.fixture
def make_program(client, auth_headers, machine):
    def _make(**overrides):
        payload = {
            "name": "Flange_Face_Mill",
            "revision": "A",
            "machineId": machine["id"],
            "operation": "Face milling",
            "material": "Aluminium 6061",
            "customer": "Vestas Wind Systems",
        }
        payload.update(overrides)
        r = client.post("/api/programs", json=payload, headers=auth_headers)
        assert r.status_code == 201, r.text
        return r.json()["data"]
    return _make


@pytest.fixture
def program(make_program):
    return make_program(ncCode="G21\nG90\nM30\n")


def setup_sheet_payload(program_id, machine_id, **overrides):
    payload = {
        "programId": program_id,
        "machineId": machine_id,
        "tools": [
            {"toolNumber": 1, "toolName": "Face Mill D100", "length": 150.5, "offsetH": 1, "offsetD": 1, "comment": "Sandvik"},
            {"toolNumber": 2, "toolName": "Spot Drill D6", "length": 75.0, "offsetH": 2, "offsetD": 2},
        ],
        "originOffsets": [{"name": "G54", "x": 0, "y": 0, "z": 50}],
        "fixtures": [{"fixtureId": "FIX-001", "quantity": 1, "setupDescription": "Vise with 4 jaws"}],
        "safetyChecklist": ["Safety glasses", "Check coolant level"],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_setup_sheet(client, auth_headers, program, machine):
    def _make(**overrides):
        r = client.post("/api/setup-sheets", json=setup_sheet_payload(program["id"], machine["id"], **overrides),
                        headers=auth_headers)
        assert r.status_code == 201, r.text
        return r.json()["data"]
    return _make
