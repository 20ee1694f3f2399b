import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, OperationFailure, PyMongoError

from securevote import config
from securevote.database.connection import SETTINGS_ID, VOTER_STATS_ID, ElectionStore
from securevote.ledger import AlreadyVotedError, new_transaction_hash
from securevote.models.candidate_model import CandidateIn
from securevote.models.settings_model import ElectionSettingsUpdate

logger = logging.getLogger(__name__)


class UniversityMismatchError(ValueError):
    pass


def parse_object_id(value: str) -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidId(f"{value!r} is not a valid candidate ID")


def as_count(value: Any) -> int:
    """Stored counter value as a non-negative int; anything else counts as 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if value != value or value < 0:  # NaN or negative
        return 0
    return int(value)


def calculate_turnout(votes_cast: int, total_voters: int) -> float:
    if total_voters <= 0:
        return 0.0
    return round(votes_cast / total_voters * 100, 1)


def to_candidate(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(doc["_id"]),
        "name": doc.get("name", ""),
        "university": doc.get("university", ""),
        "position": doc.get("position", ""),
        "bio": doc.get("bio") or "",
    }


def resolve_university(name_or_id: str) -> str:
    for university in config.UNIVERSITIES:
        if university["id"] == name_or_id:
            return university["name"]
    return name_or_id


# --- Candidates ---

def _create_counter(store: ElectionStore, candidate_id: str) -> bool:
    try:
        store.votes.insert_one({"candidateId": candidate_id, "count": 0})
        return True
    except DuplicateKeyError:
        return False


def _ensure_counters(store: ElectionStore, candidates: List[Dict[str, Any]]):
    existing = {d.get("candidateId") for d in store.votes.find({}, {"candidateId": 1})}
    for candidate in candidates:
        candidate_id = str(candidate["_id"])
        if candidate_id not in existing and _create_counter(store, candidate_id):
            logger.info(f"Created missing vote record for candidate: {candidate.get('name')} ({candidate_id})")


def list_candidates(store: ElectionStore, university: Optional[str] = None) -> List[Dict[str, Any]]:
    query = {}
    if university is not None:
        query["university"] = resolve_university(university)
    docs = list(store.candidates.find(query))
    _ensure_counters(store, docs)
    return [to_candidate(d) for d in docs]


def get_candidate(store: ElectionStore, candidate_id: str) -> Optional[Dict[str, Any]]:
    doc = store.candidates.find_one({"_id": parse_object_id(candidate_id)})
    return to_candidate(doc) if doc else None


def create_candidate(store: ElectionStore, candidate: CandidateIn) -> Dict[str, Any]:
    data = candidate.model_dump()
    result = store.candidates.insert_one(data)
    candidate_id = str(result.inserted_id)
    _create_counter(store, candidate_id)
    logger.info(f"Candidate {data['name']} created with ID {candidate_id}")
    return {"id": candidate_id, **candidate.model_dump()}


def update_candidate(store: ElectionStore, candidate_id: str, candidate: CandidateIn) -> Optional[Dict[str, Any]]:
    doc = store.candidates.find_one_and_update(
        {"_id": parse_object_id(candidate_id)},
        {"$set": candidate.model_dump()},
        return_document=ReturnDocument.AFTER,
    )
    if doc is None:
        return None
    logger.info(f"Candidate {candidate_id} updated")
    return to_candidate(doc)


def delete_candidate(store: ElectionStore, candidate_id: str) -> bool:
    oid = parse_object_id(candidate_id)
    result = store.candidates.delete_one({"_id": oid})
    if result.deleted_count == 0:
        return False
    store.votes.delete_many({"candidateId": str(oid)})
    logger.info(f"Candidate {candidate_id} and its vote record deleted")
    return True


# --- Settings ---

def get_settings(store: ElectionStore) -> Dict[str, Any]:
    store.settings.update_one(
        {"_id": SETTINGS_ID},
        {"$setOnInsert": dict(config.DEFAULT_SETTINGS)},
        upsert=True,
    )
    doc = store.settings.find_one({"_id": SETTINGS_ID}) or {}
    doc.pop("_id", None)
    return {**config.DEFAULT_SETTINGS, **doc}


def update_settings(store: ElectionStore, update: ElectionSettingsUpdate) -> Dict[str, Any]:
    changes = update.model_dump(exclude_unset=True, exclude_none=True)
    current = get_settings(store)
    if not changes:
        return current
    store.settings.update_one({"_id": SETTINGS_ID}, {"$set": changes})
    logger.info(f"Election settings updated: {sorted(changes)}")
    return {**current, **changes}


# --- Votes & statistics ---

def get_vote_counts(store: ElectionStore, candidates: List[Dict[str, Any]]) -> Dict[str, int]:
    counts = {}
    for record in store.votes.find({}):
        candidate_id = record.get("candidateId")
        if candidate_id:
            counts[str(candidate_id)] = as_count(record.get("count"))
    return {c["id"]: counts.get(c["id"], 0) for c in candidates}


def get_stats(store: ElectionStore) -> Dict[str, Any]:
    voter_stats = store.voters.find_one({"_id": VOTER_STATS_ID})
    total_voters = as_count(voter_stats.get("totalRegistered")) if voter_stats else 0
    votes_cast = sum(as_count(v.get("count")) for v in store.votes.find({}, {"count": 1}))

    now = datetime.now(timezone.utc)
    store.voters.update_one({"_id": VOTER_STATS_ID}, {"$set": {"lastUpdated": now}})
    return {
        "totalVoters": total_voters,
        "votesCast": votes_cast,
        "turnoutPercentage": calculate_turnout(votes_cast, total_voters),
        "lastUpdated": now,
    }


def get_election_data(store: ElectionStore) -> Dict[str, Any]:
    candidates = list_candidates(store)
    return {
        "candidates": candidates,
        "settings": get_settings(store),
        "votes": get_vote_counts(store, candidates),
        "stats": get_stats(store),
    }


def _increment_counter(store: ElectionStore, candidate_id: str) -> int:
    query = {"candidateId": candidate_id}
    try:
        doc = store.votes.find_one_and_update(
            query, {"$inc": {"count": 1}}, upsert=True, return_document=ReturnDocument.AFTER
        )
    except DuplicateKeyError:
        # Lost the first-vote upsert race; the counter exists now
        doc = store.votes.find_one_and_update(
            query, {"$inc": {"count": 1}}, return_document=ReturnDocument.AFTER
        )
    except OperationFailure as e:
        # $inc refuses non-numeric counts; a corrupt counter restarts at 1
        logger.warning(f"Resetting corrupt vote record for {candidate_id}: {e}")
        doc = store.votes.find_one_and_update(
            query, {"$set": {"count": 1}}, return_document=ReturnDocument.AFTER
        )
    return as_count(doc.get("count")) if doc else 0


def cast_vote(
    store: ElectionStore,
    candidate_id: str,
    voter_id: Optional[str] = None,
    university_id: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """
    Record one vote for a candidate.

    Args:
        store: Election store handle
        candidate_id: Candidate ObjectId as string
        voter_id: When given, a receipt keyed by (university, voter) is stored
            first and a second vote for the same institution is refused
        university_id: Institution the voter believes they are voting in,
            as a name or id; must match the candidate's university

    Returns:
        The vote result, or None if the candidate does not exist

    Raises:
        InvalidId: malformed candidate_id
        AlreadyVotedError: the voter already holds a receipt for the institution
        UniversityMismatchError: university_id names another institution
    """
    oid = parse_object_id(candidate_id)
    candidate = store.candidates.find_one({"_id": oid})
    if not candidate:
        return None
    candidate_id = str(oid)
    university = candidate.get("university", "")
    if university_id and resolve_university(university_id) != university:
        raise UniversityMismatchError(f"Candidate does not stand in {university_id}")

    receipt = None
    if voter_id:
        receipt = {
            "universityId": university,
            "voterId": voter_id,
            "candidateId": candidate_id,
            "transactionHash": new_transaction_hash(),
            "timestamp": datetime.now(timezone.utc),
        }
        try:
            store.receipts.insert_one(dict(receipt))
        except DuplicateKeyError:
            logger.warning(f"Voter {voter_id} already voted in {receipt['universityId']}")
            raise AlreadyVotedError(f"Voter {voter_id} has already voted in {receipt['universityId']}")

    try:
        new_count = _increment_counter(store, candidate_id)
    except PyMongoError:
        # Receipt and counter move together
        if receipt is not None:
            store.receipts.delete_one({"universityId": university, "voterId": voter_id})
            logger.warning(f"Rolled back receipt for voter {voter_id} after failed increment")
        raise
    logger.info(f"New vote count for {candidate.get('name')}: {new_count}")

    candidates = list_candidates(store)
    return {
        "success": True,
        "candidate": {"id": candidate_id, "name": candidate.get("name", "")},
        "newCount": new_count,
        "votes": get_vote_counts(store, candidates),
        "stats": get_stats(store),
        "receipt": receipt,
    }


def list_receipts(store: ElectionStore, voter_id: str) -> List[Dict[str, Any]]:
    receipts = []
    for doc in store.receipts.find({"voterId": voter_id}).sort("timestamp", 1):
        doc.pop("_id", None)
        receipts.append(doc)
    return receipts
