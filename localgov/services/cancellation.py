# File: localgov/services/cancellation.py
import threading


class CancellationToken:
    """Cooperative cancellation flag shared by the submission and its upload workers."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
