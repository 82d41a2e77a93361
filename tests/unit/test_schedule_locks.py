import threading

from app.core.locks import TrainerScheduleLocks


def test_lock_is_dropped_after_release():
    locks = TrainerScheduleLocks()

    with locks.hold(1):
        assert len(locks) == 1

    assert len(locks) == 0


def test_lock_is_dropped_when_body_raises():
    locks = TrainerScheduleLocks()

    try:
        with locks.hold(1):
            raise LookupError("trainer missing")
    except LookupError:
        pass

    assert len(locks) == 0


def test_waiter_keeps_the_lock_registered():
    locks = TrainerScheduleLocks()
    entered = threading.Event()
    order: list[str] = []

    def waiter() -> None:
        entered.set()
        with locks.hold(1):
            order.append("waiter")

    with locks.hold(1):
        worker = threading.Thread(target=waiter)
        worker.start()
        entered.wait(timeout=1)
        worker.join(timeout=0.2)
        order.append("holder")
        assert worker.is_alive()

    worker.join(timeout=5)

    assert order == ["holder", "waiter"]
    assert len(locks) == 0
