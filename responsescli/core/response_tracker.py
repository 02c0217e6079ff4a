# responsescli/core/response_tracker.py
"""
Response ID tracking for conversation chaining.

Keeps the ordered list of response ids issued during the active session
(used to link each new request to the previous one) plus a durable log of
every id ever seen, stored as a newline-joined text file. The log is what
lets us find orphans: ids whose remote conversation state outlived the
local session that referenced them.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

logger = logging.getLogger(__name__)

LOG_IDS_FILENAME = "LogIds.txt"


class ResponseIdTracker:
    """
    Tracks response ids for the active session and the durable id log.

    `last_id` is a cursor, not a stack top: `cancel()` moves it back one
    position without touching the underlying list.
    """

    def __init__(
        self,
        log_path: Union[str, Path],
        on_delete: Optional[Callable[[str], None]] = None,
    ):
        """
        Args:
            log_path: Path of the durable log file (created on first write)
            on_delete: Optional callback invoked per id by delete()/clear()
        """
        self.log_path = Path(log_path)
        self._on_delete = on_delete
        self._ids: List[str] = []
        self._log_ids: List[str] = []
        self._last_id: str = ""
        self._load_log()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def _load_log(self) -> None:
        if not self.log_path.exists():
            return
        try:
            raw = self.log_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"ResponseIdTracker: failed to read id log: {e}")
            return
        self._log_ids = [line.strip() for line in raw.splitlines() if line.strip()]

    def _save_log(self) -> None:
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            self.log_path.write_text(self.log_ids, encoding="utf-8")
        except OSError as e:
            logger.warning(f"ResponseIdTracker: failed to save id log: {e}")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def last_id(self) -> str:
        return self._last_id

    @property
    def ids(self) -> List[str]:
        """Active ids for the current session, oldest first."""
        return list(self._ids)

    @property
    def log_ids(self) -> str:
        """The durable log as newline-joined text."""
        return "\n".join(self._log_ids)

    def add(self, response_id: Optional[str]) -> None:
        """
        Record a new server-issued response id.

        Blank ids and a repeat of the most recent id are ignored.
        """
        if not response_id or not response_id.strip():
            return
        if self._ids and self._ids[-1] == response_id:
            return

        self._ids.append(response_id)
        self._last_id = response_id
        if response_id not in self._log_ids:
            self._log_ids.append(response_id)
            self._save_log()
        logger.debug(f"Tracking response id {response_id}")

    def cancel(self) -> None:
        """Move the chaining cursor back to the previous active id."""
        if len(self._ids) > 1:
            self._last_id = self._ids[-2]
        else:
            self._last_id = ""

    def delete(self, response_id: str) -> None:
        if self._on_delete is not None:
            self._on_delete(response_id)

    def clear(self) -> None:
        """
        Invoke the deletion callback for every active id, then empty the
        active list as well as the cursor, so a later `cancel()` cannot roll
        back onto an id from the previous chain. The durable log is kept.
        """
        for response_id in self._ids:
            self.delete(response_id)
        self._ids.clear()
        self._last_id = ""

    def remove_id(self, response_id: str) -> None:
        """Remove an id from the durable log only."""
        if response_id in self._log_ids:
            self._log_ids.remove(response_id)
            self._save_log()

    def get_orphans(self, session_ids: Iterable[str]) -> List[str]:
        """
        Return logged ids not referenced by any persisted session.

        Args:
            session_ids: Ids referenced by the current session list

        Returns:
            Orphan ids in log order
        """
        known = set(session_ids)
        return [response_id for response_id in self._log_ids if response_id not in known]
