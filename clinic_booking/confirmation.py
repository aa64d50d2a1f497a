"""Confirmation summary and printable appointment document.

The printable document is a standalone HTML page that opens the browser's
print dialog on load. It is rendered on demand and never stored.
"""
from datetime import date, datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from clinic_booking import config
from clinic_booking.models import BookedAppointment, ConfirmationSummary, TimeSlot

templates_dir = Path(__file__).parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(templates_dir)),
    autoescape=select_autoescape(["html"]),
)


def format_long_date(value: date) -> str:
    """Format as e.g. Sunday, June 1, 2025."""
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"


def format_clock(value: datetime) -> str:
    """Format as e.g. 9:00 AM."""
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value:%M} {meridiem}"


def format_time_range(slot: TimeSlot) -> str:
    return f"{format_clock(slot.start_time)} - {format_clock(slot.end_time)}"


def build_summary(booking: BookedAppointment) -> ConfirmationSummary:
    return ConfirmationSummary(
        patient_name=booking.full_name,
        mobile=booking.mobile,
        doctor_name=f"Dr. {booking.doctor.name}",
        date=format_long_date(booking.date),
        time_range=format_time_range(booking.time_slot),
        description=booking.description or None,
    )


def render_printable(booking: BookedAppointment) -> str:
    """
    Render the printable appointment confirmation.

    Args:
        booking: Confirmed appointment

    Returns:
        Complete HTML document
    """
    template = _env.get_template("appointment_print.html")
    return template.render(
        center_name=config.CENTER_NAME,
        summary=build_summary(booking),
    )
