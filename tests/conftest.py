import mongomock
import pytest
from fastapi.testclient import TestClient

from securevote.database.connection import ElectionStore
from securevote.main import create_app

UNIVERSITY_X = "University of Delhi"
UNIVERSITY_Y = "Jadavpur University"


@pytest.fixture
def store():
    store = ElectionStore(mongomock.MongoClient().db)
    store.ensure_indexes()
    store.seed_defaults(candidates=[], total_registered=2548)
    return store


@pytest.fixture
def app(store):
    return create_app(store=store, seed_defaults=False, consistency_interval=0)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_candidate(client):
    def _make(name="Alice", university=UNIVERSITY_X, position="President", bio=""):
        response = client.post(
            "/api/candidates",
            json={"name": name, "university": university, "position": position, "bio": bio},
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _make
