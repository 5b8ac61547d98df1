"""
Session Store

Single source of truth for one chat session: the append-only log of turns
(user queries and assistant reports) and the current lifecycle phase.
No I/O happens here. Consumers either call snapshot() or subscribe to be
notified after every mutation.
"""

from typing import Callable, Iterator, List, Optional

from ..errors import InvalidTransitionError, ValidationError
from ..schema.core_schema import (
    Report,
    ReportTurn,
    SessionPhase,
    SessionSnapshot,
    Turn,
    UserTurn,
)

Listener = Callable[[SessionSnapshot], None]


class SessionStore:
    """Holds the ordered turn log and the session phase."""

    def __init__(self) -> None:
        self._turns: List[Turn] = []
        self._phase: SessionPhase = SessionPhase.idle()
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def append_user_turn(self, text: str) -> UserTurn:
        """Append the user's query exactly as typed. Whitespace-only text is rejected."""
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("User turn text must not be empty")
        turn = UserTurn(text=text)
        self._turns.append(turn)
        self._notify()
        return turn

    def append_report_turn(self, report: Report) -> ReportTurn:
        """
        Append a synthesized report. Only the orchestrator calls this, after
        the remote response has been validated.
        """
        if not isinstance(report, Report):
            raise ValidationError("Report turn requires a Report")
        if report.id in self.report_ids():
            raise ValidationError(f"Duplicate report id: {report.id}")
        turn = ReportTurn(report=report)
        self._turns.append(turn)
        self._notify()
        return turn

    def set_phase(self, phase: SessionPhase) -> None:
        """Transition the phase. A second PENDING while one is in flight is illegal."""
        if phase.is_pending and self._phase.is_pending:
            raise InvalidTransitionError("A request is already pending")
        self._phase = phase
        self._notify()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def turns(self) -> tuple:
        return tuple(self._turns)

    def snapshot(self) -> SessionSnapshot:
        """Current turns and phase for rendering. No side effects."""
        return SessionSnapshot(turns=tuple(self._turns), phase=self._phase)

    def reports(self) -> List[Report]:
        return [t.report for t in self._turns if isinstance(t, ReportTurn)]

    def report_ids(self) -> set:
        return {r.id for r in self.reports()}

    def get_report(self, report_id: str) -> Optional[Report]:
        """Look up a report by id (case-insensitive)."""
        wanted = (report_id or "").strip().upper()
        for report in self.reports():
            if report.id.upper() == wanted:
                return report
        return None

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with a snapshot after each mutation. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        """
        Called after a mutation is committed. Every listener is notified even
        if an earlier one fails; the first failure is then re-raised.
        """
        if not self._listeners:
            return
        snap = self.snapshot()
        first_error: Optional[Exception] = None
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception as e:
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error
