"""HTML rendering with the package's Jinja2 templates."""
from datetime import UTC, datetime

from jinja2 import Environment, PackageLoader, select_autoescape

from asian_drama_board.services.browse import SORT_OPTIONS

ORIGIN_LABELS = {
    "all": "Worldwide",
    "KR": "Korean",
    "JP": "Japanese",
    "CN": "Chinese",
}

env = Environment(
    loader=PackageLoader("asian_drama_board", "templates"),
    autoescape=select_autoescape(["html", "xml"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def air_year(value) -> str:
    """Year part of a YYYY-MM-DD date, or an empty string."""
    if value and len(value) >= 4 and value[:4].isdigit():
        return value[:4]
    return ""


env.filters['air_year'] = air_year
env.globals.update(
    sort_options=SORT_OPTIONS,
    origin_labels=ORIGIN_LABELS,
    current_year=lambda: datetime.now(UTC).year,
)


def render(template_name: str, **context) -> str:
    """Render a template to a string."""
    return env.get_template(template_name).render(**context)
