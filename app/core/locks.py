"""Per-user locks serializing progress read-modify-write cycles."""

import threading
import weakref
from contextlib import contextmanager

_registry_lock = threading.Lock()

# weak values: a user's lock lives only while some request holds a reference
_user_locks = weakref.WeakValueDictionary()


def get_user_lock(user_id: int) -> threading.RLock:
    with _registry_lock:
        lock = _user_locks.get(user_id)
        if lock is None:
            lock = threading.RLock()
            _user_locks[user_id] = lock
        return lock


@contextmanager
def user_lock(user_id: int):
    """
    Hold the user's lock for the duration of the block.

    Re-entrant: a task operation holding the lock can call award_xp,
    which takes it again.
    """
    lock = get_user_lock(user_id)
    with lock:
        yield
