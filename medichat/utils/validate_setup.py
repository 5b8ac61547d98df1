"""
Setup check for medichat: interpreter, installed dependencies, Gemini
credential and (optionally) a Unicode font for PDF reports.

Installed as the `medichat-check` console script.
"""

import importlib.util
import sys
from typing import List, Optional

from rich.console import Console

from medichat.config import load_api_key
from medichat.export.pdf_report import find_unicode_font

console = Console()

MIN_PYTHON = (3, 9)

# import name -> distribution name
REQUIRED_PACKAGES = {
    "pydantic": "pydantic",
    "dotenv": "python-dotenv",
    "rich": "rich",
    "fpdf": "fpdf2",
    "langchain_core": "langchain-core",
    "langchain_google_genai": "langchain-google-genai",
}


def missing_packages() -> List[str]:
    return [dist for name, dist in REQUIRED_PACKAGES.items() if importlib.util.find_spec(name) is None]


def check_setup(version_info: Optional[tuple] = None) -> bool:
    """Print a report of the environment. Returns True when medichat can send queries."""
    version = tuple(version_info or sys.version_info[:3])
    problems: List[str] = []

    console.print("[bold cyan]medichat setup check[/bold cyan]\n")

    if version[:2] < MIN_PYTHON:
        problems.append(f"Python {MIN_PYTHON[0]}.{MIN_PYTHON[1]}+ required (found {version[0]}.{version[1]})")
    else:
        console.print(f"[green]✓[/green] Python {'.'.join(str(v) for v in version)}")

    missing = missing_packages()
    for dist in missing:
        problems.append(f"Missing package: {dist}")
    if not missing:
        console.print("[green]✓[/green] Dependencies installed")

    if load_api_key():
        console.print("[green]✓[/green] Gemini API key found")
    else:
        problems.append("No API key: set GOOGLE_API_KEY (or GEMINI_API_KEY) in .env")

    # Optional: reports still export without it, with non-latin-1 text shown as "?"
    if find_unicode_font():
        console.print("[green]✓[/green] Unicode font available for PDF reports")
    else:
        console.print("[yellow]![/yellow] No Unicode font found; set MEDICHAT_PDF_FONT for non-latin reports")

    console.print("\n" + "=" * 50)
    if problems:
        console.print("[red]Setup issues:[/red]")
        for problem in problems:
            console.print(f"  • {problem}")
        console.print("\nFix: pip install -e . and add your key to .env")
        return False
    console.print("[bold green]Setup OK.[/bold green] Run: python demos/demo_cli.py")
    return True


def main() -> None:
    sys.exit(0 if check_setup() else 1)


if __name__ == "__main__":
    main()
