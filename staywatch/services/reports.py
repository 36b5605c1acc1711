"""PDF compliance report: one page of summaries plus the trip list, built with reportlab."""
from datetime import date
from io import BytesIO
from typing import Iterable, Mapping

from staywatch.models.trip import TripRecord
from staywatch.services.compliance import Summary
from staywatch.services.interval_math import count_inclusive_days


def _escape_for_reportlab(s: str) -> str:
    """Escape text for ReportLab Paragraph (XML-like markup)."""
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


def build_compliance_report_pdf(
    traveler_name: str,
    summaries: Mapping[str, Summary],
    trips: Iterable[TripRecord],
    generated_on: date,
) -> bytes:
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import A4
    from reportlab.lib.styles import getSampleStyleSheet
    from reportlab.lib.units import inch
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=0.75 * inch,
        rightMargin=0.75 * inch,
        topMargin=0.75 * inch,
        bottomMargin=0.75 * inch,
        title="Travel compliance report",
    )
    styles = getSampleStyleSheet()
    grid = TableStyle(
        [
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#1f3a5f")),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
        ]
    )

    story = [
        Paragraph("Travel compliance report", styles["Title"]),
        Paragraph(_escape_for_reportlab(f"{traveler_name} - generated {generated_on.isoformat()}"), styles["Normal"]),
        Spacer(1, 0.25 * inch),
        Paragraph("Summary", styles["Heading2"]),
    ]

    summary_rows = [["Jurisdiction", "Used", "Allowed", "Remaining", "Status", "Window", "Next expiry"]]
    for code, s in summaries.items():
        summary_rows.append(
            [
                code,
                str(s.days_used),
                str(s.days_allowed),
                str(s.days_remaining),
                s.status.value,
                f"{s.window_start.isoformat()} to {s.window_end.isoformat()}",
                s.next_expiring_date.isoformat() if s.next_expiring_date else "-",
            ]
        )
    summary_table = Table(summary_rows, repeatRows=1)
    summary_table.setStyle(grid)
    story += [summary_table, Spacer(1, 0.3 * inch), Paragraph("Trips", styles["Heading2"])]

    trip_rows = [["Start", "End", "Days", "Country", "Jurisdiction", "Category"]]
    for t in trips:
        trip_rows.append(
            [
                t.start_date.isoformat(),
                t.end_date.isoformat(),
                str(count_inclusive_days(t.start_date, t.end_date)),
                t.country or "",
                t.jurisdiction_code or "-",
                t.category or "",
            ]
        )
    if len(trip_rows) == 1:
        story.append(Paragraph("No trips recorded.", styles["Normal"]))
    else:
        trip_table = Table(trip_rows, repeatRows=1)
        trip_table.setStyle(grid)
        story.append(trip_table)

    doc.build(story)
    return buf.getvalue()
