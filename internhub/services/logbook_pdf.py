"""Weekly logbook sheet: one page per complete (intern, week), rendered with ReportLab."""
import io
import logging
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from internhub.config import settings
from internhub.errors import InsufficientEntriesError, NotFoundError
from internhub.models.logbook import LogbookEntry
from internhub.models.profile import Intern
from internhub.models.user import User
from internhub.services.lookups import safe_object_id
from internhub.services.storage import get_storage
from internhub.services.week_tracker import WEEKDAYS, missing_weekdays, week_entries, weekday_name

logger = logging.getLogger(__name__)


def sheet_key(week_number: int, matric_number: str) -> str:
    return f"logbooks/week_{week_number}_{matric_number}.pdf"


def intern_sheet_key(intern: Intern, week_number: int) -> str:
    return sheet_key(week_number, intern.matric_number or str(intern.id))


def build_week_sheet(entries: list[LogbookEntry]) -> dict:
    """Weekday -> entry map plus the period covered.

    Entries are applied in (date, submitted_at) order, so when two entries
    share a weekday the later date wins, then the later submission.
    """
    ordered = sorted(entries, key=lambda e: (e.date, e.submitted_at))
    by_day: dict[str, LogbookEntry] = {}
    for entry in ordered:
        by_day[weekday_name(entry.date)] = entry
    return {
        "days": {day: by_day[day] for day in WEEKDAYS if day in by_day},
        "period_from": ordered[0].date if ordered else None,
        "period_to": ordered[-1].date if ordered else None,
    }


def _entry_text(entry: LogbookEntry) -> str:
    # Paragraph parses mini-HTML; user text must be escaped
    parts = [f"<b>{escape(entry.title)}</b>", escape(entry.content)]
    if entry.tasks_completed:
        parts.append("Tasks: " + escape("; ".join(entry.tasks_completed)))
    if entry.challenges:
        parts.append(f"Challenges: {escape(entry.challenges)}")
    if entry.learnings:
        parts.append(f"Learnings: {escape(entry.learnings)}")
    return "<br/>".join(p.replace("\n", "<br/>") for p in parts if p)


def render_week_sheet(sheet: dict, header: dict, week_number: int) -> bytes:
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf, pagesize=A4, leftMargin=15 * mm, rightMargin=15 * mm, topMargin=12 * mm, bottomMargin=12 * mm
    )
    styles = getSampleStyleSheet()
    small = ParagraphStyle("small", parent=styles["Normal"], fontSize=9, leading=11)
    centered = ParagraphStyle("centered", parent=styles["Title"], fontSize=14)

    story = []
    company = [settings.company_name, settings.company_address, settings.company_phone, settings.company_email]
    company_lines = [line for line in company if line]
    if company_lines:
        story.append(Paragraph("<br/>".join(company_lines), small))
    if settings.company_division:
        story.append(Paragraph(settings.company_division, small))
    story.append(Spacer(1, 4 * mm))
    story.append(Paragraph(f"WEEKLY LOG SHEET - WEEK {week_number}", centered))

    info = [
        ["Name:", header.get("name") or "", "Matric No:", header.get("matric_number") or ""],
        ["Level:", header.get("level") or "", "Department:", header.get("department") or ""],
        ["Option:", header.get("option") or "", "Period:", header.get("period") or ""],
    ]
    info_table = Table(info, colWidths=[22 * mm, 68 * mm, 25 * mm, 65 * mm])
    info_table.setStyle(TableStyle([("FONTSIZE", (0, 0), (-1, -1), 9), ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                                    ("FONTNAME", (2, 0), (2, -1), "Helvetica-Bold")]))
    story.append(info_table)
    story.append(Spacer(1, 4 * mm))

    rows = [["Day", "Date", "Description of work done", "Hours"]]
    for day, entry in sheet["days"].items():
        hours = "" if entry.hours_worked is None else f"{entry.hours_worked:g}"
        rows.append([day.capitalize(), entry.date.strftime("%d/%m/%Y"), Paragraph(_entry_text(entry), small), hours])
    table = Table(rows, colWidths=[22 * mm, 24 * mm, 119 * mm, 15 * mm], repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#707070")),
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#E8E8E8")),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )
    story.append(table)
    story.append(Spacer(1, 12 * mm))
    story.append(Paragraph("Supervisor's signature: ______________________   Date: ____________", small))
    doc.build(story)
    return buf.getvalue()


async def _intern_header(intern: Intern) -> dict:
    user_oid = safe_object_id(intern.user_id)
    user = await User.get(user_oid) if user_oid else None
    return {
        "name": user.full_name if user else "",
        "matric_number": intern.matric_number,
        "level": intern.level,
        "department": intern.department,
        "option": intern.option,
    }


async def generate_weekly_pdf(intern_id: str, week_number: int) -> str:
    """Render and store the sheet for a complete week; returns the storage key.

    Raises InsufficientEntriesError (and writes nothing) unless Monday to
    Friday are all covered. An existing sheet at the same key is overwritten.
    """
    oid = safe_object_id(intern_id)
    intern: Optional[Intern] = await Intern.get(oid) if oid else None
    if not intern:
        raise NotFoundError("Intern not found")

    entries = await week_entries(intern_id, week_number)
    missing = missing_weekdays(e.date for e in entries)
    if missing:
        raise InsufficientEntriesError(week_number, missing)

    sheet = build_week_sheet(entries)
    header = await _intern_header(intern)
    header["period"] = f"{sheet['period_from']:%d/%m/%Y} - {sheet['period_to']:%d/%m/%Y}"

    body = render_week_sheet(sheet, header, week_number)
    key = intern_sheet_key(intern, week_number)
    await get_storage().save(key, body, "application/pdf")
    logger.info(f"Generated weekly logbook {key} ({len(sheet['days'])} days, {len(body)} bytes)")
    return key
