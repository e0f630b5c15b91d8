"""
reports.py
Downloadable PDF reports (reportlab).
Bengali text needs a Unicode TTF font; set KHS_PDF_FONT to its path.
"""

from __future__ import annotations

import io
import logging

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from models import Database
from stats import contribution_summary, dashboard_stats, pending_contributions
from utils import format_currency

logger = logging.getLogger(__name__)

ORANGE = colors.Color(249 / 255, 115 / 255, 22 / 255)
RED = colors.Color(239 / 255, 68 / 255, 68 / 255)
GREEN = colors.Color(34 / 255, 197 / 255, 94 / 255)
UNKNOWN = "অজানা"


def register_font(path: str | None) -> str:
    """Register the configured TTF font and return the font name to use."""
    if not path:
        return "Helvetica"
    try:
        pdfmetrics.registerFont(TTFont("ReportFont", path))
    except Exception as e:  # reportlab raises TTFError and plain IOErrors
        logger.error("Could not load PDF font %s: %s", path, e)
        return "Helvetica"
    return "ReportFont"


class ReportBuilder:
    def __init__(self, org_name: str, font_path: str | None = None):
        self.org_name = org_name
        self.font = register_font(font_path)
        styles = getSampleStyleSheet()
        self.style_title = ParagraphStyle("Title", parent=styles["Title"], fontName=self.font, fontSize=18)
        self.style_sub = ParagraphStyle(
            "Sub", parent=styles["Heading2"], fontName=self.font, fontSize=14, alignment=TA_CENTER
        )
        self.style_heading = ParagraphStyle("Head", parent=styles["Heading3"], fontName=self.font, fontSize=12)
        self.style_normal = ParagraphStyle("Body", parent=styles["Normal"], fontName=self.font, fontSize=10)

    def _table(self, head: list[str], body: list[list[str]], header_color) -> Table:
        t = Table([head] + body, repeatRows=1, hAlign="CENTER")
        t.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (-1, -1), self.font),
                    ("FONTSIZE", (0, 0), (-1, -1), 9),
                    ("BACKGROUND", (0, 0), (-1, 0), header_color),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.whitesmoke]),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ]
            )
        )
        return t

    def _build(self, subtitle: str, elements: list) -> bytes:
        buf = io.BytesIO()
        doc = SimpleDocTemplate(buf, pagesize=A4, title=f"{self.org_name} - {subtitle}")
        story = [
            Paragraph(self.org_name, self.style_title),
            Paragraph(subtitle, self.style_sub),
            Spacer(1, 12),
            *elements,
        ]
        doc.build(story)
        return buf.getvalue()

    def member_list(self, db: Database) -> bytes:
        body = [[str(i), m.name, m.designation, m.phone, m.address] for i, m in enumerate(db.members, start=1)]
        table = self._table(["ক্রম", "নাম", "পদবি", "ফোন", "ঠিকানা"], body, ORANGE)
        return self._build("সদস্য তালিকা", [table])

    def pending_dues(self, db: Database) -> bytes:
        members = {m.id: m.name for m in db.members}
        pujas = {p.id: p.name for p in db.pujas}
        body = [
            [
                str(i),
                members.get(c.member_id, UNKNOWN),
                pujas.get(c.puja_id, UNKNOWN),
                format_currency(c.amount),
                format_currency(c.paid_amount),
                format_currency(c.pending),
            ]
            for i, c in enumerate(pending_contributions(db.contributions), start=1)
        ]
        table = self._table(["ক্রম", "সদস্য", "পূজা", "মোট চাঁদা", "পরিশোধ", "বকেয়া"], body, RED)
        return self._build("বকেয়া চাঁদার তালিকা", [table])

    def full_statement(self, db: Database) -> bytes:
        s = dashboard_stats(db)
        summary = [
            Paragraph("সারাংশ", self.style_heading),
            Paragraph(f"মোট অন্যান্য আয়: {format_currency(s.total_income)}", self.style_normal),
            Paragraph(f"মোট চাঁদা (পরিশোধিত): {format_currency(s.total_contributions_received)}", self.style_normal),
            Paragraph(f"মোট ব্যয়: {format_currency(s.total_expenses)}", self.style_normal),
            Paragraph(f"বর্তমান ব্যালেন্স: {format_currency(s.balance)}", self.style_normal),
            Spacer(1, 15),
        ]
        income = self._table(
            ["তারিখ", "ধরন", "উৎস", "পরিমাণ"],
            [[i.date, i.type, i.source, format_currency(i.amount)] for i in db.income],
            GREEN,
        )
        expenses = self._table(
            ["তারিখ", "ক্যাটাগরি", "বিবরণ", "পরিমাণ"],
            [[e.date, e.category, e.description, format_currency(e.amount)] for e in db.expenses],
            RED,
        )
        return self._build(
            "সম্পূর্ণ হিসাব বিবরণী",
            summary
            + [Paragraph("আয়ের বিবরণ", self.style_heading), income, Spacer(1, 10)]
            + [Paragraph("ব্যয়ের বিবরণ", self.style_heading), expenses],
        )

    def contribution_summary(self, db: Database) -> bytes:
        body = [
            [str(i), s.member_name, format_currency(s.total_expected), format_currency(s.total_paid),
             format_currency(s.total_pending)]
            for i, s in enumerate(contribution_summary(db.members, db.contributions), start=1)
        ]
        table = self._table(["ক্রম", "সদস্য", "মোট চাঁদা", "পরিশোধ", "বকেয়া"], body, ORANGE)
        return self._build("চাঁদা সারাংশ", [table])


# report key -> (label, builder method, file name)
REPORTS = {
    "members": ("Member list", ReportBuilder.member_list, "সদস্য_তালিকা.pdf"),
    "pending": ("Pending dues", ReportBuilder.pending_dues, "বকেয়া_চাঁদা.pdf"),
    "statement": ("Full income/expense statement", ReportBuilder.full_statement, "সম্পূর্ণ_হিসাব.pdf"),
    "summary": ("Dues summary per member", ReportBuilder.contribution_summary, "চাঁদা_সারাংশ.pdf"),
}
