from contextlib import contextmanager
from threading import Lock
from typing import Dict, Iterator

# product_id -> lock serializing lifecycle transitions on that product
_PRODUCT_LOCKS: Dict[int, Lock] = {}
_PRODUCT_LOCKS_GUARD = Lock()


def _get_product_lock(product_id: int) -> Lock:
    with _PRODUCT_LOCKS_GUARD:
        lock = _PRODUCT_LOCKS.get(product_id)
        if lock is None:
            lock = Lock()
            _PRODUCT_LOCKS[product_id] = lock
        return lock


@contextmanager
def product_lock(product_id: int) -> Iterator[None]:
    """
    Hold the exclusive lock for one product for the duration of a
    read-modify-write unit of work. Different products never contend.
    """
    lock = _get_product_lock(product_id)
    lock.acquire()
    try:
        yield
    finally:
        lock.release()
