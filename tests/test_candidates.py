from bson import ObjectId

from tests.conftest import UNIVERSITY_X, UNIVERSITY_Y


def test_create_candidate_returns_id_and_zero_counter(client, store):
    response = client.post("/api/candidates", json={
        "name": "Alice",
        "university": UNIVERSITY_X,
        "position": "President",
        "bio": "Debate club captain",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["id"]
    assert body["name"] == "Alice"
    assert body["bio"] == "Debate club captain"
    assert store.votes.find_one({"candidateId": body["id"]})["count"] == 0

    election = client.get("/api/election").json()
    assert election["votes"] == {body["id"]: 0}


def test_bio_is_optional(client):
    response = client.post("/api/candidates", json={
        "name": "Bob", "university": UNIVERSITY_X, "position": "Treasurer",
    })
    assert response.status_code == 201
    assert response.json()["bio"] == ""


def test_create_candidate_missing_field_is_rejected(client, store):
    for missing in ("name", "university", "position"):
        payload = {"name": "Alice", "university": UNIVERSITY_X, "position": "President"}
        del payload[missing]
        response = client.post("/api/candidates", json=payload)
        assert response.status_code == 422

    blank = {"name": "   ", "university": UNIVERSITY_X, "position": "President"}
    assert client.post("/api/candidates", json=blank).status_code == 422

    assert store.candidates.count_documents({}) == 0
    assert store.votes.count_documents({}) == 0


def test_list_candidates(client, make_candidate):
    alice = make_candidate("Alice")
    bob = make_candidate("Bob", university=UNIVERSITY_Y)

    response = client.get("/api/candidates")

    assert response.status_code == 200
    assert {c["id"] for c in response.json()} == {alice["id"], bob["id"]}


def test_listing_creates_missing_counters(client, store):
    inserted = store.candidates.insert_one({"name": "Legacy", "university": UNIVERSITY_X, "position": "Secretary"})

    client.get("/api/candidates")

    assert store.votes.find_one({"candidateId": str(inserted.inserted_id)})["count"] == 0


def test_filter_by_university_uses_exact_name(client, make_candidate):
    alice = make_candidate("Alice", university=UNIVERSITY_X)
    make_candidate("Bob", university=UNIVERSITY_Y)
    make_candidate("Carol", university="University of Delhi South Campus")

    response = client.get(f"/api/candidates/university/{UNIVERSITY_X}")

    assert response.status_code == 200
    assert [c["id"] for c in response.json()] == [alice["id"]]


def test_filter_by_university_id(client, make_candidate):
    alice = make_candidate("Alice", university=UNIVERSITY_X)
    make_candidate("Bob", university=UNIVERSITY_Y)

    response = client.get("/api/candidates/university/uod")

    assert [c["id"] for c in response.json()] == [alice["id"]]


def test_get_candidate(client, make_candidate):
    alice = make_candidate("Alice")

    assert client.get(f"/api/candidates/{alice['id']}").json() == alice
    assert client.get(f"/api/candidates/{ObjectId()}").status_code == 404
    assert client.get("/api/candidates/not-an-id").status_code == 400


def test_update_candidate(client, make_candidate):
    alice = make_candidate("Alice")

    response = client.put(f"/api/candidates/{alice['id']}", json={
        "name": "Alice Cooper",
        "university": UNIVERSITY_Y,
        "position": "Vice President",
        "bio": "Moved campus",
    })

    assert response.status_code == 200
    assert response.json() == {
        "id": alice["id"],
        "name": "Alice Cooper",
        "university": UNIVERSITY_Y,
        "position": "Vice President",
        "bio": "Moved campus",
    }


def test_update_missing_candidate_returns_404(client):
    payload = {"name": "Ghost", "university": UNIVERSITY_X, "position": "President"}
    assert client.put(f"/api/candidates/{ObjectId()}", json=payload).status_code == 404
    assert client.put("/api/candidates/123", json=payload).status_code == 400


def test_delete_candidate_removes_counter(client, store, make_candidate):
    alice = make_candidate("Alice")
    client.post("/api/vote", json={"candidateId": alice["id"]})

    response = client.delete(f"/api/candidates/{alice['id']}")

    assert response.status_code == 204
    assert store.candidates.count_documents({}) == 0
    assert store.votes.find_one({"candidateId": alice["id"]}) is None
    assert client.get(f"/api/candidates/{alice['id']}").status_code == 404
    assert client.delete(f"/api/candidates/{alice['id']}").status_code == 404


def test_delete_with_malformed_id(client):
    response = client.delete("/api/candidates/xyz")
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid candidate ID"
