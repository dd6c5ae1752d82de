"""
Tests for marker and popup rendering.

Run with: python -m pytest tests/test_render.py
"""

from logic.models import Category, Location, ScheduleEntry
from logic.render import category_label, format_schedule, render_marker


def test_category_label_prefers_name():
    categories = [Category(id="caps", name="CAPS")]
    assert category_label("caps", categories) == "CAPS"


def test_category_label_from_id():
    assert category_label("abrigo") == "Abrigo"
    assert category_label("centroDeAjuda") == "Centro De Ajuda"
    assert category_label("") == ""


def test_format_schedule():
    schedule = [ScheduleEntry(from_="08:00", to="12:00"), ScheduleEntry(from_="13:00", to="17:00")]
    assert format_schedule(schedule) == "08:00 - 12:00, 13:00 - 17:00"
    assert format_schedule([]) == ""


def test_render_marker():
    location = Location(
        id="a1",
        position=(-26.3, -48.8),
        title="Abrigo Central",
        category_id="abrigo",
        schedule=[ScheduleEntry(from_="08:00", to="18:00")],
    )

    marker = render_marker(location, [Category(id="abrigo", name="Abrigo")])

    assert marker["lat"] == -26.3
    assert marker["lon"] == -48.8
    assert marker["category"] == "Abrigo"
    assert marker["popup"] == {
        "title": "Abrigo Central",
        "description": "",
        "schedule": "08:00 - 18:00",
        "info": "",
    }
