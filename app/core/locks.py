import threading
from collections.abc import Iterator
from contextlib import contextmanager


class TrainerScheduleLocks:
    """Serializes schedule mutations per trainer inside one process.

    Cross-process serialization comes from locking the trainer row in the
    database; this registry covers the window before that row lock is taken
    and backends (SQLite) that ignore ``FOR UPDATE``. A trainer's lock lives
    only while someone holds or waits for it.
    """

    def __init__(self) -> None:
        self._locks: dict[int, threading.Lock] = {}
        self._holders: dict[int, int] = {}
        self._registry_lock = threading.Lock()

    def _acquire_entry(self, trainer_id: int) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.setdefault(trainer_id, threading.Lock())
            self._holders[trainer_id] = self._holders.get(trainer_id, 0) + 1
            return lock

    def _release_entry(self, trainer_id: int) -> None:
        with self._registry_lock:
            self._holders[trainer_id] -= 1
            if not self._holders[trainer_id]:
                del self._holders[trainer_id]
                del self._locks[trainer_id]

    @contextmanager
    def hold(self, trainer_id: int) -> Iterator[None]:
        lock = self._acquire_entry(trainer_id)
        try:
            with lock:
                yield
        finally:
            self._release_entry(trainer_id)

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._locks)

    def reset(self) -> None:
        with self._registry_lock:
            self._locks.clear()
            self._holders.clear()


schedule_locks = TrainerScheduleLocks()
