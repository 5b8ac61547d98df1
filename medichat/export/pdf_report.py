"""
PDF export for a single Report.

export_report() is a pure read: it never touches the session store and
returns the same artifact (text and bytes) every time it is called with the
same Report. The PDF creation date is pinned to the report's timestamp.

Body text uses a Unicode TrueType font (DejaVu Sans, or the pair named by
MEDICHAT_PDF_FONT / MEDICHAT_PDF_FONT_BOLD) when one is installed. Without
one the core Helvetica font is used and characters outside latin-1 are
printed as "?".
"""

import os
import textwrap
from typing import List, Optional, Sequence, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos
from pydantic import BaseModel, ConfigDict

from ..config import REPORT_DISCLAIMER, REPORT_TITLE
from ..formatting import format_response, format_timestamp, strip_emphasis
from ..schema.core_schema import Report

ACCENT = (0, 0, 255)  # Title color
TEXT = (0, 0, 0)  # Body text
MUTED = (128, 128, 128)  # Disclaimer footer

TEXT_WRAP_WIDTH = 90  # characters per line in the plain-text rendition
LINE_HEIGHT = 6
PAGE_BOTTOM_MARGIN = 30  # leaves room for the disclaimer footer

FONT_ENV_VAR = "MEDICHAT_PDF_FONT"
BOLD_FONT_ENV_VAR = "MEDICHAT_PDF_FONT_BOLD"
UNICODE_FONT_FAMILY = "DejaVu"
UNICODE_FONT_CANDIDATES: List[Tuple[str, str]] = [  # (regular, bold) system fonts
    ("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf", "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
    ("/usr/share/fonts/dejavu/DejaVuSans.ttf", "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf"),
    ("/usr/share/fonts/TTF/DejaVuSans.ttf", "/usr/share/fonts/TTF/DejaVuSans-Bold.ttf"),
    ("/Library/Fonts/DejaVuSans.ttf", "/Library/Fonts/DejaVuSans-Bold.ttf"),
]

_LATIN1_REPLACEMENTS = {
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
    "–": "-",
    "—": "-",
    "•": "-",
    "…": "...",
}


class ReportArtifact(BaseModel):
    """Downloadable document produced from a Report."""
    model_config = ConfigDict(frozen=True)

    filename: str
    media_type: str = "application/pdf"
    content: bytes
    text: str


def report_filename(report: Report) -> str:
    return f"medical-report-{report.id}.pdf"


def to_latin1(text: str) -> str:
    """Map common punctuation to latin-1; anything else unsupported becomes '?'."""
    for src, dst in _LATIN1_REPLACEMENTS.items():
        text = text.replace(src, dst)
    return text.encode("latin-1", "replace").decode("latin-1")


def _wrap(text: str) -> List[str]:
    lines: List[str] = []
    for paragraph in text.split("\n"):
        lines.extend(textwrap.wrap(paragraph, width=TEXT_WRAP_WIDTH) or [""])
    return lines


def render_report_text(report: Report) -> str:
    """Plain-text rendition with the same sections as the PDF."""
    lines = [
        REPORT_TITLE,
        f"ID: {report.id}",
        f"Timestamp: {format_timestamp(report.created_at)}",
        "",
        "Patient Query:",
        *_wrap(report.query),
        "",
        "Medical Response:",
        *_wrap(strip_emphasis(report.response)),
        "",
        *_wrap(REPORT_DISCLAIMER),
    ]
    return "\n".join(lines)


def find_unicode_font(candidates: Optional[Sequence[Tuple[str, str]]] = None) -> Optional[Tuple[str, str]]:
    """First (regular, bold) TTF pair present on disk; the env override wins."""
    regular = os.getenv(FONT_ENV_VAR)
    if regular:
        pairs = [(regular, os.getenv(BOLD_FONT_ENV_VAR) or regular)]
    else:
        pairs = list(candidates if candidates is not None else UNICODE_FONT_CANDIDATES)
    for regular_path, bold_path in pairs:
        if os.path.isfile(regular_path) and os.path.isfile(bold_path):
            return regular_path, bold_path
    return None


class ReportPDF(FPDF):  # One-page report with a fixed disclaimer footer
    def __init__(self, *args, font_files: Optional[Tuple[str, str]] = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.body_font = "Helvetica"
        self.supports_unicode = False
        if font_files:
            self.add_font(UNICODE_FONT_FAMILY, "", fname=font_files[0])
            self.add_font(UNICODE_FONT_FAMILY, "B", fname=font_files[1])
            self.body_font = UNICODE_FONT_FAMILY
            self.supports_unicode = True

    def prepare_text(self, text: str) -> str:  # Core fonts only cover latin-1
        return text if self.supports_unicode else to_latin1(text)

    def footer(self) -> None:
        # The footer sits inside the bottom margin
        self.set_auto_page_break(auto=False)
        self.set_y(-25)
        self.set_font(self.body_font, "", 10)
        self.set_text_color(*MUTED)
        self.multi_cell(0, 5, self.prepare_text(REPORT_DISCLAIMER))
        self.set_text_color(*TEXT)
        self.set_auto_page_break(auto=True, margin=PAGE_BOTTOM_MARGIN)


def _section_title(pdf: ReportPDF, title: str) -> None:
    pdf.ln(4)
    pdf.set_font(pdf.body_font, "B", 12)
    pdf.cell(0, 8, title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font(pdf.body_font, "", 12)


def _render_response(pdf: ReportPDF, response: str) -> None:  # Bold spans + one paragraph per line
    for line in format_response(response):
        pdf.set_x(pdf.l_margin)
        for span in line:
            pdf.set_font(pdf.body_font, "B" if span.bold else "", 12)
            pdf.write(LINE_HEIGHT, pdf.prepare_text(span.text))
        pdf.ln(LINE_HEIGHT)
    pdf.set_font(pdf.body_font, "", 12)


def render_report_pdf(report: Report, font_files: Optional[Tuple[str, str]] = None) -> bytes:
    pdf = ReportPDF(font_files=font_files)
    pdf.set_creation_date(report.created_at)
    pdf.set_title(f"{REPORT_TITLE} {report.id}")
    pdf.set_margins(20, 20, 20)
    pdf.set_auto_page_break(auto=True, margin=PAGE_BOTTOM_MARGIN)
    pdf.add_page()

    pdf.set_font(pdf.body_font, "", 16)
    pdf.set_text_color(*ACCENT)
    pdf.cell(0, 10, REPORT_TITLE, new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.set_font(pdf.body_font, "", 12)
    pdf.set_text_color(*TEXT)
    pdf.cell(0, 8, f"ID: {report.id}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.cell(0, 8, f"Timestamp: {format_timestamp(report.created_at)}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    _section_title(pdf, "Patient Query:")
    pdf.multi_cell(0, LINE_HEIGHT, pdf.prepare_text(report.query), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    _section_title(pdf, "Medical Response:")
    _render_response(pdf, report.response)

    return bytes(pdf.output())


def export_report(report: Report) -> ReportArtifact:
    """Turn a Report into a downloadable PDF artifact."""
    return ReportArtifact(
        filename=report_filename(report),
        content=render_report_pdf(report, font_files=find_unicode_font()),
        text=render_report_text(report),
    )


def save_report(report: Report, directory: str = ".") -> str:
    """Write the exported PDF into `directory` and return its path."""
    artifact = export_report(report)
    if directory:
        os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, artifact.filename)
    with open(path, "wb") as f:
        f.write(artifact.content)
    return path
