# securevote/consistency.py
import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict

from securevote import config
from securevote.crud import as_count
from securevote.database.connection import VOTER_STATS_ID, ElectionStore

logger = logging.getLogger(__name__)


def _is_valid_count(value) -> bool:
    return as_count(value) == value and not isinstance(value, bool)


def ensure_data_consistency(store: ElectionStore) -> Dict[str, int]:
    """
    Repair vote counters that drifted from the candidate list.

    - every candidate gets a counter (created at zero)
    - missing, non-numeric or negative counts are reset to zero
    - counters for candidates that no longer exist are removed
    - the voter statistics record is recreated if missing

    Returns:
        {"fixed": <records created or repaired>, "removed": <orphans deleted>}
    """
    logger.info("Running data consistency check...")

    candidates = list(store.candidates.find({}, {"name": 1}))
    vote_records = list(store.votes.find({}))
    logger.info(f"Found {len(candidates)} candidates and {len(vote_records)} vote records")

    vote_map = {}
    for record in vote_records:
        if record.get("candidateId"):
            vote_map[str(record["candidateId"])] = record

    fixed = 0
    for candidate in candidates:
        candidate_id = str(candidate["_id"])
        record = vote_map.get(candidate_id)
        if record is None:
            store.votes.insert_one({"candidateId": candidate_id, "count": 0})
            fixed += 1
            logger.info(f"Created missing vote record for candidate: {candidate.get('name')} ({candidate_id})")
        elif not _is_valid_count(record.get("count")):
            store.votes.update_one({"_id": record["_id"]}, {"$set": {"count": 0}})
            fixed += 1
            logger.info(f"Fixed invalid vote count for candidate: {candidate.get('name')} ({candidate_id})")

    removed = 0
    candidate_ids = {str(c["_id"]) for c in candidates}
    for record in vote_records:
        candidate_id = record.get("candidateId")
        if not candidate_id or str(candidate_id) not in candidate_ids:
            store.votes.delete_one({"_id": record["_id"]})
            removed += 1
            logger.info(f"Removed orphaned vote record for non-existent candidate ID: {candidate_id}")

    if store.voters.find_one({"_id": VOTER_STATS_ID}) is None:
        store.voters.insert_one({
            "_id": VOTER_STATS_ID,
            "totalRegistered": config.TOTAL_REGISTERED_VOTERS,
            "lastUpdated": datetime.now(timezone.utc),
        })
        fixed += 1
        logger.info("Created missing voter statistics record")

    logger.info(f"Data consistency check completed. Fixed {fixed} records, removed {removed} orphaned records.")
    return {"fixed": fixed, "removed": removed}


async def run_periodic_consistency(store: ElectionStore, interval: float):
    """Sweep every `interval` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        try:
            await asyncio.to_thread(ensure_data_consistency, store)
        except Exception as e:
            logger.error(f"Error during data consistency check: {e}")
