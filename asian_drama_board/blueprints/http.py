"""Response helpers shared by the blueprints."""
import json

import azure.functions as func

from asian_drama_board.rendering import render


def json_response(body, status_code: int = 200) -> func.HttpResponse:
    """JSON response; datetimes are serialised with str()."""
    return func.HttpResponse(
        json.dumps(body, default=str),
        status_code=status_code,
        mimetype="application/json"
    )


def error_response(message: str, status_code: int = 400) -> func.HttpResponse:
    return json_response({"error": message}, status_code=status_code)


def html_response(template_name: str, status_code: int = 200, **context) -> func.HttpResponse:
    """Render a template into a text/html response."""
    return func.HttpResponse(
        render(template_name, **context),
        status_code=status_code,
        mimetype="text/html",
        charset="utf-8"
    )


def parse_tmdb_id(value) -> int:
    """
    Parse a route parameter as a positive TMDB id.

    Raises:
        ValueError: If the value is missing, not an integer or not positive
    """
    if value is None or value == "":
        raise ValueError("tmdb_id is required")
    try:
        tmdb_id = int(value)
    except (TypeError, ValueError):
        raise ValueError("tmdb_id must be an integer")
    if tmdb_id < 1:
        raise ValueError("tmdb_id must be positive")
    return tmdb_id
