import time
from typing import Callable

from cryptography.fernet import Fernet

from kvstore_lib.storage import create_storage


def make_storage(backend, tmp_path):
    """Create a store of `backend` kind rooted in `tmp_path`."""
    if backend == "plist":
        return create_storage("plist", path=tmp_path / "PlistStorage.plist", debounce_interval=0.05)
    if backend == "preferences":
        return create_storage("preferences", path=tmp_path / "preferences" / "tests.yml")
    if backend == "cloud":
        return create_storage("cloud", data_dir=tmp_path / "cloud")
    if backend == "vault":
        return create_storage("vault", path=tmp_path / "vault.bin", key=Fernet.generate_key())
    return create_storage(backend)


def dispose_storage(storage):
    storage.remove_all()
    close = getattr(storage, "close", None)
    if callable(close):
        close()


def wait_until(predicate: Callable[[], bool], timeout: float = 5.0, interval: float = 0.02) -> bool:
    """Poll `predicate` until it returns True or `timeout` seconds pass.

    Used by tests that observe work done on a background timer.
    """
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()
