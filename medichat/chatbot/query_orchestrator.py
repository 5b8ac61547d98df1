"""
Query Orchestrator.

Pipeline for one user query:
- Check preconditions (non-empty query, configured credential)
- Commit the query to the session log and enter the PENDING phase
- Build the request (policy prompt + query, generation config, safety settings)
- Call the remote capability exactly once
- Validate the response and synthesize a Report
- Append the Report and return to IDLE, or record the failure in the ERROR phase
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, List, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import (
    EMPTY_QUERY_MESSAGE,
    MEDICAL_POLICY_PROMPT,
    MISSING_API_KEY_MESSAGE,
    REPORT_DISCLAIMER,
    REQUEST_FAILED_MESSAGE,
)
from ..errors import InvalidTransitionError, PreconditionError, ResponseError
from ..formatting import format_timestamp, to_rich_text
from ..memory.session_store import SessionStore
from ..schema.core_schema import (
    GenerateContentRequest,
    GenerationConfig,
    Report,
    SafetySetting,
    SessionPhase,
    UserTurn,
)
from .llm_client import LLMClient
from .report_builder import synthesize_report
from .request_builder import build_request


console = Console()


class QueryOrchestrator:
    """Runs the request/response cycle for single-turn medical queries."""

    def __init__(
        self,
        llm_client: Any = None,
        store: Optional[SessionStore] = None,
        policy_prompt: str = MEDICAL_POLICY_PROMPT,
        generation_config: Optional[GenerationConfig] = None,
        safety_settings: Optional[Sequence[SafetySetting]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        verbose: bool = False,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            llm_client: Remote capability. Any object with an `is_configured`
                        property and a `generate_content(request) -> dict` method.
                        Defaults to a Gemini LLMClient.
            store: Session store to commit turns to (a fresh one if None).
            policy_prompt: Instruction prefix placed before every query.
            generation_config: Sampling parameters (defaults from config).
            safety_settings: Safety thresholds (defaults from config).
            clock: Timestamp source for reports (local time if None).
            verbose: Print status lines to the console.
        """
        self.llm_client = llm_client if llm_client is not None else LLMClient()
        self.store = store if store is not None else SessionStore()
        self.policy_prompt = policy_prompt
        self.generation_config = generation_config
        self.safety_settings = safety_settings
        self.clock = clock
        self.verbose = verbose

        if self.verbose:
            console.print("[bold green]Medical chat session started![/bold green]")
            console.print(f"Model: {getattr(self.llm_client, 'model', 'custom')}\n")

    # ---------------------------------------------------------------------
    # Main entrypoint
    # ---------------------------------------------------------------------
    def submit(self, raw_text: str) -> Optional[Report]:
        """
        Run one query through the pipeline.

        Returns:
            The new Report on success; None if the request failed (the store
            is then in the ERROR phase) or if a request was already pending
            (nothing changes in that case).

        Raises:
            PreconditionError: empty query or missing credential. Nothing is
                written to the store and no request is sent.
        """
        # Single flight: a second submit while one is in flight is ignored
        if self.store.phase.is_pending:
            if self.verbose:
                console.print("[yellow]⚠ A request is already in progress; ignoring submit.[/yellow]")
            return None

        self._check_preconditions(raw_text)

        # 1) Commit the query before any network interaction
        self.store.append_user_turn(raw_text)
        turn_index = len(self.store) - 1

        # Once PENDING is entered, every exit path must leave it
        try:
            self.store.set_phase(SessionPhase.pending())

            # 2) Build, dispatch, validate, synthesize
            request = build_request(
                raw_text,
                policy_prompt=self.policy_prompt,
                generation_config=self.generation_config,
                safety_settings=self.safety_settings,
            )
            response = self._dispatch(request)
            report = synthesize_report(
                query=raw_text,
                response=response,
                existing_ids=self.store.report_ids(),
                clock=self.clock,
            )

            # 3) Commit the report
            self.store.append_report_turn(report)
            self.store.set_phase(SessionPhase.idle())
            return report
        except ResponseError as e:
            if self.verbose:
                console.print(f"[red]Error: {e.message}[/red]")
            self._fail_pending(turn_index)
            return None
        except BaseException:
            # Interrupts and listener failures propagate, but never leave the session PENDING
            self._fail_pending(turn_index)
            raise

    def _fail_pending(self, turn_index: int) -> None:
        if self.store.phase.is_pending:
            self.store.set_phase(SessionPhase.error(REQUEST_FAILED_MESSAGE, turn_index=turn_index))

    def _check_preconditions(self, raw_text: str) -> None:
        if not isinstance(raw_text, str) or not raw_text.strip():
            raise PreconditionError(EMPTY_QUERY_MESSAGE)
        if not getattr(self.llm_client, "is_configured", False):
            raise PreconditionError(MISSING_API_KEY_MESSAGE)

    def _dispatch(self, request: GenerateContentRequest) -> Any:
        """Call the remote capability once. Every failure surfaces as ResponseError."""
        try:
            return self.llm_client.generate_content(request)
        except ResponseError:
            raise
        except Exception as e:
            raise ResponseError(f"Transport failure: {e}") from e

    # ---------------------------------------------------------------------
    # Session helpers
    # ---------------------------------------------------------------------
    @property
    def last_error(self) -> Optional[str]:
        phase = self.store.phase
        return phase.message if phase.is_error else None

    def reset(self) -> SessionStore:
        """Start a new session with an empty store."""
        if self.store.phase.is_pending:
            raise InvalidTransitionError("Cannot reset while a request is pending")
        self.store = SessionStore()
        return self.store

    # ---------------------------------------------------------------------
    # Display helpers (CLI)
    # ---------------------------------------------------------------------
    def display_report(self, report: Report) -> None:
        """Display a report as a panel with query, response and disclaimer."""
        table = Table(show_header=False, box=None)
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="white")
        table.add_row("Report ID", report.id)
        table.add_row("Timestamp", format_timestamp(report.created_at))
        table.add_row("Patient Query", report.query)
        console.print(table)

        console.print(Panel(
            to_rich_text(report.response),
            title="[bold blue]Medical Response[/bold blue]",
            border_style="blue",
        ))
        console.print(f"[dim]{REPORT_DISCLAIMER}[/dim]\n")

    def display_session(self) -> None:
        """Display the turn log in order (queries without a report are marked)."""
        snapshot = self.store.snapshot()
        console.print("\n[bold cyan]Session Log[/bold cyan]")
        console.print("=" * 60)
        if not snapshot.turns:
            console.print("[dim]No queries yet.[/dim]")
            return

        rows: List[tuple] = []
        turns = list(snapshot.turns)
        for i, turn in enumerate(turns):
            if isinstance(turn, UserTurn):
                answered = i + 1 < len(turns) and not isinstance(turns[i + 1], UserTurn)
                rows.append((str(i), "You", turn.text if answered else f"{turn.text} [red](no report)[/red]"))
            else:
                rows.append((str(i), "Report", f"{turn.report.id} · {format_timestamp(turn.report.created_at)}"))

        table = Table(show_header=True)
        table.add_column("#", style="dim")
        table.add_column("Turn", style="cyan")
        table.add_column("Content", style="white")
        for row in rows:
            table.add_row(*row)
        console.print(table)
