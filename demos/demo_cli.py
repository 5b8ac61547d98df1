"""
CLI Demo Application
Single-turn medical chat: each question becomes a report that can be saved as PDF.
"""

import argparse
import os
import sys
from datetime import datetime
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt

_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, _PROJECT_ROOT)
_DEFAULT_LOG_DIR = os.path.join(_PROJECT_ROOT, "conversation_logger", "cli")

from medichat import LLMClient, PreconditionError, QueryOrchestrator
from medichat.export.pdf_report import save_report
from medichat.utils.conversation_logger import ConversationLogger

console = Console()


def main():
    """Main CLI demo"""
    parser = argparse.ArgumentParser(description="Medical Chat Assistant Demo (Gemini)")
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Gemini model name (default: MEDICHAT_MODEL or gemini-2.0-flash)"
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Path to a JSONL file or directory for a debug transcript (off by default)"
    )
    parser.add_argument(
        "--export-dir",
        type=str,
        default=".",
        help="Directory where 'save <id>' writes PDF reports"
    )

    args = parser.parse_args()

    assistant = QueryOrchestrator(llm_client=LLMClient(model=args.model), verbose=True)
    if not assistant.llm_client.is_configured:
        console.print("[yellow]⚠ No API key found. Set GOOGLE_API_KEY (or GEMINI_API_KEY) in .env[/yellow]\n")

    if args.log_file:
        log_path = os.path.abspath(args.log_file)
        if os.path.isdir(log_path):
            ts = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_path = os.path.join(log_path, f"cli_{ts}.jsonl")
        logger = ConversationLogger(log_path)
        logger.attach(assistant.store)
        console.print(f"[dim]Conversation log: {log_path}[/dim]")

    # Welcome message
    console.print(Panel(
        "[bold cyan]Virtual Healthcare Assistant[/bold cyan]\n\n"
        "Describe your symptoms for a brief health analysis.\n\n"
        "Commands: 'exit'/'quit' to exit | 'save <id>' to export a report as PDF | "
        "'log' to show the session",
        title="Welcome",
        border_style="cyan"
    ))
    console.print()

    # Main loop
    while True:
        try:
            user_input = Prompt.ask("[bold green]You[/bold green]")

            if user_input.lower() in ['exit', 'quit', 'q']:
                console.print("[yellow]Goodbye![/yellow]")
                break

            if user_input.lower() == 'log':
                assistant.display_session()
                continue

            if user_input.lower().startswith('save'):
                report_id = user_input[4:].strip()
                reports = assistant.store.reports()
                report = assistant.store.get_report(report_id) if report_id else (reports[-1] if reports else None)
                if report is None:
                    console.print("[red]No such report[/red]")
                else:
                    path = save_report(report, args.export_dir)
                    console.print(f"[green]✓ Saved {path}[/green]")
                continue

            with console.status("Analyzing your health information..."):
                report = assistant.submit(user_input)

            if report is not None:
                assistant.display_report(report)
            elif assistant.last_error:
                console.print(f"[red]{assistant.last_error}[/red]\n")

        except PreconditionError as e:
            console.print(f"[red]{e.message}[/red]\n")
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted. Type 'exit' to quit.[/yellow]\n")


if __name__ == "__main__":
    main()
