import threading

from workbeat.common.locks import KeyedLock


def test_lock_entry_dropped_after_release():
    locks = KeyedLock()

    with locks.hold(("emp", 1)):
        assert len(locks) == 1

    assert len(locks) == 0


def test_lock_is_reentrant():
    locks = KeyedLock()

    with locks.hold("row"):
        with locks.hold("row"):
            assert len(locks) == 1

    assert len(locks) == 0


def test_waiters_share_the_same_lock():
    locks = KeyedLock()
    counter = {"value": 0}
    start = threading.Barrier(20)

    def worker():
        start.wait()
        for _ in range(50):
            with locks.hold("balance"):
                current = counter["value"]
                counter["value"] = current + 1

    threads = [threading.Thread(target=worker) for _ in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert counter["value"] == 1000
    assert len(locks) == 0


def test_many_keys_do_not_accumulate():
    locks = KeyedLock()

    for day in range(500):
        with locks.hold(("emp", day)):
            pass

    assert len(locks) == 0
