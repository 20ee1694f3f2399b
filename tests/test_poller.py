import threading

from securevote.poller import ElectionPoller


def test_fetches_immediately_then_on_interval():
    updates = []
    three_updates = threading.Event()

    def on_update(data):
        updates.append(data)
        if len(updates) >= 3:
            three_updates.set()

    counter = iter(range(1000))
    poller = ElectionPoller(fetch=lambda: next(counter), on_update=on_update, interval=0.01)

    with poller:
        assert three_updates.wait(5)

    assert not poller.running
    assert updates[:3] == [0, 1, 2]


def test_first_fetch_does_not_wait_for_interval():
    fetched = threading.Event()
    poller = ElectionPoller(fetch=lambda: "data", on_update=lambda data: fetched.set(), interval=60)

    poller.start()
    try:
        assert fetched.wait(5)
    finally:
        poller.stop(timeout=5)

    assert not poller.running


def test_errors_do_not_stop_polling():
    errors = []
    recovered = threading.Event()
    calls = {"n": 0}

    def fetch():
        calls["n"] += 1
        if calls["n"] == 1:
            raise ConnectionError("server down")
        return calls["n"]

    poller = ElectionPoller(
        fetch=fetch,
        on_update=lambda data: recovered.set(),
        interval=0.01,
        on_error=errors.append,
    )

    with poller:
        assert recovered.wait(5)

    assert isinstance(errors[0], ConnectionError)


def test_toggle():
    poller = ElectionPoller(fetch=lambda: None, on_update=lambda data: None, interval=60)

    assert poller.toggle() is True
    assert poller.running
    assert poller.toggle() is False
    assert not poller.running
