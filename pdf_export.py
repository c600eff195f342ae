from __future__ import annotations
from datetime import date, timedelta
from io import BytesIO
from typing import List
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from models import DailyTask


def week_plan_to_pdf(
    tasks: List[DailyTask],
    week_start: date,
    study_hours_per_day: float,
    progress_rows: List[dict],
) -> bytes:
    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=letter,
        leftMargin=40,
        rightMargin=40,
        topMargin=40,
        bottomMargin=40,
    )
    styles = getSampleStyleSheet()
    elems = []

    week_end = week_start + timedelta(days=6)
    elems.append(Paragraph(f"Study Plan: {week_start.isoformat()} - {week_end.isoformat()}", styles["Title"]))
    elems.append(Spacer(1, 10))
    elems.append(Paragraph(f"Study hours per day: {study_hours_per_day:g}", styles["Normal"]))
    elems.append(Spacer(1, 12))

    if progress_rows:
        elems.append(Paragraph("Subjects", styles["Heading3"]))
        progress_table_data = [["Subject", "Exam", "Days left", "Difficulty", "Hours", "Progress"]]
        for r in progress_rows:
            progress_table_data.append([
                r["subject"],
                r["exam_date"].isoformat(),
                str(r["days_left"]),
                str(r["difficulty"]),
                f"{r['hours_needed']:g}",
                f"{r['progress']}%",
            ])
        progress_table = Table(progress_table_data, hAlign="LEFT")
        progress_table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("ALIGN", (2, 1), (-1, -1), "RIGHT"),
        ]))
        elems.append(progress_table)
        elems.append(Spacer(1, 12))

    # Tasks by day
    by_day: dict[date, List[DailyTask]] = {}
    for t in tasks:
        if week_start <= t.day <= week_end:
            by_day.setdefault(t.day, []).append(t)

    if not by_day:
        elems.append(Paragraph("No tasks scheduled this week.", styles["Normal"]))

    for day in sorted(by_day.keys()):
        elems.append(Paragraph(day.strftime("%A, %Y-%m-%d"), styles["Heading3"]))
        table_data = [["Subject", "Hours", "Type", "Done"]]
        total = 0.0
        for task in by_day[day]:
            total += task.hours
            table_data.append([
                task.subject_name,
                f"{task.hours:g}",
                task.kind.capitalize(),
                "Yes" if task.completed else "No",
            ])
        table_data.append(["Total", f"{total:g}", "", ""])

        table = Table(table_data, hAlign="LEFT", colWidths=[200, 60, 80, 50])
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("BACKGROUND", (0, -1), (-1, -1), colors.whitesmoke),
            ("ALIGN", (1, 1), (1, -1), "RIGHT"),
        ]))
        elems.append(table)
        elems.append(Spacer(1, 8))

    doc.build(elems)
    return buf.getvalue()
