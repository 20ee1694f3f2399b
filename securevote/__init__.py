__version__ = "1.0.0"

from securevote.client import ApiError, ElectionClient
from securevote.ledger import AlreadyVotedError, MockLedger
from securevote.poller import ElectionPoller

__all__ = ["ApiError", "AlreadyVotedError", "ElectionClient", "ElectionPoller", "MockLedger"]
