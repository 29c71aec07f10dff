from __future__ import annotations

import logging
from typing import Any, Dict, List


class LifecycleTracker:
    """Tracks live panel and timer handles so teardown can verify nothing leaked."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger
        self._handles: Dict[str, Any] = {}

    @property
    def handles(self) -> List[Any]:
        return list(self._handles.values())

    def track_handle(self, label: str, handle: Any) -> None:
        if handle is None:
            return
        self._handles[label] = handle

    def untrack_handle(self, label: str) -> None:
        self._handles.pop(label, None)

    def is_tracked(self, label: str) -> bool:
        return label in self._handles

    def log_state(self, label: str) -> None:
        if self._handles:
            self._logger.warning("Tracked resources %s: %s", label, sorted(self._handles))
        else:
            self._logger.debug("No tracked resources %s", label)
