import json
import re

import pytest

from securevote.ledger import AlreadyVotedError, MockLedger, new_transaction_hash


@pytest.fixture
def ledger_path(tmp_path):
    return str(tmp_path / "ledger" / "votes.json")


def test_transaction_hash_format():
    assert re.match(r"^0x[0-9a-f]{64}$", new_transaction_hash())
    assert new_transaction_hash() != new_transaction_hash()


def test_device_id_is_persisted(ledger_path):
    device_id = MockLedger(ledger_path, delay=0).device_id

    assert re.match(r"^device_[0-9a-z]{13}$", device_id)
    assert MockLedger(ledger_path, delay=0).device_id == device_id


def test_record_vote_stores_receipt(ledger_path):
    ledger = MockLedger(ledger_path, delay=0)

    tx_hash = ledger.record_vote("uod", "candidate-1")

    assert ledger.has_device_voted("uod")
    assert not ledger.has_device_voted("bhu")
    receipt = ledger.get_receipt("uod")
    assert receipt["transactionHash"] == tx_hash
    assert receipt["candidateId"] == "candidate-1"
    assert receipt["deviceId"] == ledger.device_id
    assert receipt["timestamp"] > 0


def test_second_vote_from_device_is_refused(ledger_path):
    ledger = MockLedger(ledger_path, delay=0)
    ledger.record_vote("uod", "candidate-1")

    with pytest.raises(AlreadyVotedError):
        ledger.record_vote("uod", "candidate-2")

    ledger.record_vote("bhu", "candidate-3")
    assert len(ledger.get_votes()) == 2


def test_corrupted_storage_resets(ledger_path):
    ledger = MockLedger(ledger_path, delay=0)
    with open(ledger_path, "w") as f:
        f.write("{not json")

    assert ledger.get_votes() == []
    with open(ledger_path) as f:
        assert json.load(f)["votes"] == []


def test_clearing_storage_clears_the_block(ledger_path):
    ledger = MockLedger(ledger_path, delay=0)
    ledger.record_vote("uod", "candidate-1")

    with open(ledger_path, "w") as f:
        json.dump({"deviceId": None, "votes": []}, f)

    assert not ledger.has_device_voted("uod")


def test_undecodable_storage_resets(ledger_path):
    ledger = MockLedger(ledger_path, delay=0)
    with open(ledger_path, "wb") as f:
        f.write(b"\xff\xfe\x00garbage")

    assert not ledger.has_device_voted("uod")
    assert ledger.get_votes() == []


def test_vote_recorded_during_delay_is_refused(ledger_path, monkeypatch):
    ledger = MockLedger(ledger_path, delay=1)
    other_tab = MockLedger(ledger_path, delay=0)

    def record_elsewhere(seconds):
        other_tab.record_vote("uod", "candidate-1")

    monkeypatch.setattr("securevote.ledger.time.sleep", record_elsewhere)

    with pytest.raises(AlreadyVotedError):
        ledger.record_vote("uod", "candidate-2")

    votes = ledger.get_votes()
    assert len(votes) == 1
    assert votes[0]["candidateId"] == "candidate-1"
