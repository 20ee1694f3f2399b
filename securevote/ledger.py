# securevote/ledger.py
# Mock ledger: fabricated transaction hashes and per-device vote receipts
import json
import logging
import os
import secrets
import string
import time
from typing import Any, Dict, List, Optional

from securevote import config

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


class AlreadyVotedError(Exception):
    pass


def new_transaction_hash() -> str:
    """Random 0x-prefixed 64 hex digit string shown to the voter as a transaction hash."""
    return "0x" + secrets.token_hex(32)


def new_device_id() -> str:
    return "device_" + "".join(secrets.choice(_BASE36) for _ in range(13))


class MockLedger:
    """
    Local stand-in for an on-chain voting contract.

    Receipts live in a JSON file shaped like {"deviceId": ..., "votes": [...]}.
    A receipt blocks a second vote for the same institution from this device
    only; clearing the file clears the block.
    """

    def __init__(self, storage_path: str = None, delay: float = None):
        self.storage_path = storage_path or config.LEDGER_PATH
        self.delay = config.LEDGER_DELAY_SECONDS if delay is None else delay
        directory = os.path.dirname(self.storage_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

    def _read_db(self) -> Dict[str, Any]:
        """
        Read the ledger file safely.
        If file is missing, empty or corrupted, auto-reset to an empty ledger.
        """
        try:
            with open(self.storage_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict) and isinstance(data.get("votes"), list):
                return data
        except (ValueError, FileNotFoundError):
            # ValueError covers both malformed JSON and undecodable bytes
            pass
        reset_data = {"deviceId": None, "votes": []}
        self._write_db(reset_data)
        return reset_data

    def _write_db(self, data: Dict[str, Any]):
        with open(self.storage_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    @property
    def device_id(self) -> str:
        db = self._read_db()
        if not db.get("deviceId"):
            db["deviceId"] = new_device_id()
            self._write_db(db)
        return db["deviceId"]

    def get_votes(self) -> List[Dict[str, Any]]:
        return self._read_db()["votes"]

    def get_receipt(self, university_id: str) -> Optional[Dict[str, Any]]:
        device_id = self.device_id
        for vote in self.get_votes():
            if vote.get("deviceId") == device_id and vote.get("universityId") == university_id:
                return vote
        return None

    def has_device_voted(self, university_id: str) -> bool:
        return self.get_receipt(university_id) is not None

    def record_vote(self, university_id: str, candidate_id: str) -> str:
        """
        Record a vote receipt for this device.

        Args:
            university_id: Institution the vote belongs to
            candidate_id: Candidate voted for

        Returns:
            The fabricated transaction hash

        Raises:
            AlreadyVotedError: this device already voted for the institution
        """
        if self.has_device_voted(university_id):
            raise AlreadyVotedError("This device has already cast a vote in this election.")

        # Simulated transaction confirmation time
        if self.delay > 0:
            time.sleep(self.delay)

        db = self._read_db()
        if not db.get("deviceId"):
            db["deviceId"] = new_device_id()
        # Another writer may have recorded a vote during the delay
        for vote in db["votes"]:
            if vote.get("deviceId") == db["deviceId"] and vote.get("universityId") == university_id:
                raise AlreadyVotedError("This device has already cast a vote in this election.")

        transaction_hash = new_transaction_hash()
        db["votes"].append({
            "universityId": university_id,
            "candidateId": candidate_id,
            "deviceId": db["deviceId"],
            "timestamp": int(time.time() * 1000),
            "transactionHash": transaction_hash,
        })
        self._write_db(db)
        logger.info(f"Recorded vote receipt {transaction_hash} for {university_id}")
        return transaction_hash
