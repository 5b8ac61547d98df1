import json
import os
from datetime import datetime
from typing import Any, Dict, Optional

from ..schema.core_schema import Report, SessionSnapshot, UserTurn


class ConversationLogger:
    """
    Write-only JSONL transcript of a session, for debugging.
    Each line is a JSON object with at least: event, timestamp.
    The file is never read back; sessions always start empty.
    Use attach() to log every store mutation via the store's change notification.
    """

    def __init__(self, log_path: str):
        self.log_path = log_path
        log_dir = os.path.dirname(log_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        self._seen_turns = 0
        self._last_phase: Optional[str] = None

    def _write(self, entry: Dict[str, Any]) -> None:
        entry.setdefault("timestamp", datetime.now().isoformat())
        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, ensure_ascii=False) + "\n")

    def log_user_turn(self, text: str) -> None:
        self._write({"event": "user", "content": text})

    def log_report(self, report: Report) -> None:
        self._write({
            "event": "report",
            "report_id": report.id,
            "query": report.query,
            "content": report.response,
            "timestamp": report.created_at.isoformat(),
        })

    def log_error(self, message: str, turn_index: Optional[int] = None) -> None:
        entry: Dict[str, Any] = {"event": "error", "content": message}
        if turn_index is not None:
            entry["turn_index"] = turn_index
        self._write(entry)

    def attach(self, store) -> None:
        """Subscribe to a SessionStore and log new turns and errors as they happen."""
        self._seen_turns = len(store)
        store.subscribe(self.on_change)

    def on_change(self, snapshot: SessionSnapshot) -> None:
        for turn in snapshot.turns[self._seen_turns:]:
            if isinstance(turn, UserTurn):
                self.log_user_turn(turn.text)
            else:
                self.log_report(turn.report)
        self._seen_turns = len(snapshot.turns)

        phase = snapshot.phase
        if phase.is_error and self._last_phase != "error":
            self.log_error(phase.message or "", phase.turn_index)
        self._last_phase = phase.kind.value
