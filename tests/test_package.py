import securevote
from securevote import ApiError, ElectionClient, ElectionPoller, MockLedger


def test_client_side_api_is_exported():
    assert ElectionClient.__module__ == "securevote.client"
    assert issubclass(ApiError, Exception)
    assert ElectionPoller.__module__ == "securevote.poller"
    assert MockLedger.__module__ == "securevote.ledger"
    assert set(securevote.__all__) >= {"ApiError", "ElectionClient", "ElectionPoller", "MockLedger"}
