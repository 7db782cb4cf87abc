"""Server-rendered pages."""
from datetime import UTC, datetime
from importlib import resources

import azure.functions as func
import logging

from asian_drama_board.blueprints.http import html_response, parse_tmdb_id
from asian_drama_board.config import get_site_url
from asian_drama_board.rendering import render
from asian_drama_board.services import InteractionService, TmdbClient
from asian_drama_board.services.browse import (
    DEFAULT_SORT,
    SORT_OPTIONS,
    collect_actors,
    filter_dramas,
    sort_dramas
)
from asian_drama_board.services.tmdb_client import ORIGINS

# Initialize blueprint
bp = func.Blueprint()

# Initialize services (singleton pattern)
tmdb_client = TmdbClient()
interaction_service = InteractionService(tmdb_client=tmdb_client)

logger = logging.getLogger(__name__)

DEFAULT_ORIGIN = "KR"

STATIC_TYPES = {
    ".js": "application/javascript",
    ".css": "text/css",
}

LIST_PAGES = {
    "favorites": {
        "heading": "Your Favorites",
        "subheading": "Collection",
        "clear_target": "favorites",
        "clear_label": "favorites",
        "empty_title": "No favorites yet",
        "empty_message": "Start exploring and click the heart icon on any drama to save it here for later!",
        "empty_cta": "Explore Dramas",
        "ranked": False,
    },
    "watched": {
        "heading": "Watched History",
        "subheading": "Your Journey",
        "clear_target": "watched",
        "clear_label": "watched",
        "empty_title": "No watched dramas yet",
        "empty_message": 'Keep track of your journey! Toggle the "Seen?" switch on any drama to add it here.',
        "empty_cta": "Explore Dramas",
        "ranked": False,
    },
    "best": {
        "heading": "My Best Gems",
        "subheading": "The Elite List",
        "clear_target": "ratings",
        "clear_label": "ratings",
        "empty_title": "Finding your gems...",
        "empty_message": 'Rate your favorite dramas 8/10 or higher to see them featured in this "Best" collection!',
        "empty_cta": "Start Rating",
        "ranked": True,
    },
}


def _server_error() -> func.HttpResponse:
    return html_response("error.html", status_code=500)


@bp.route(route="{ignored:maxlength(0)?}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def board_page(req: func.HttpRequest) -> func.HttpResponse:
    """
    The drama board, first page rendered on the server.

    Query Parameters:
        - origin: all, KR, JP or CN (default: KR)
        - q: Name filter
        - actor: Actor filter
        - sort: Sort option (default: popularity)
    """
    try:
        origin = req.params.get('origin') or DEFAULT_ORIGIN
        if origin not in ORIGINS:
            logger.warning(f"Unknown origin '{origin}', using {DEFAULT_ORIGIN}")
            origin = DEFAULT_ORIGIN

        sort_by = req.params.get('sort') or DEFAULT_SORT
        if sort_by not in SORT_OPTIONS:
            logger.warning(f"Unknown sort '{sort_by}', using {DEFAULT_SORT}")
            sort_by = DEFAULT_SORT

        q = req.params.get('q', '')
        actor = req.params.get('actor', '')

        dramas = tmdb_client.discover(page=1, origin_country=origin)
        stats = interaction_service.get_stats_map([d['id'] for d in dramas])
        visible = sort_dramas(filter_dramas(dramas, search=q, actor=actor), sort_by=sort_by, stats=stats)

        return html_response(
            "board.html",
            dramas=visible,
            stats=stats,
            actors=collect_actors(dramas),
            origin=origin,
            q=q,
            actor=actor,
            sort=sort_by,
            page=1
        )

    except Exception as e:
        logger.error(f"Error rendering board: {str(e)}", exc_info=True)
        return _server_error()


@bp.route(route="drama/{drama_id}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def drama_page(req: func.HttpRequest) -> func.HttpResponse:
    """Detail page for one drama."""
    try:
        try:
            tmdb_id = parse_tmdb_id(req.route_params.get('drama_id'))
        except ValueError:
            return html_response("not_found.html", status_code=404, message="That is not a valid drama id.")

        drama = tmdb_client.get_drama(tmdb_id)
        if drama is None:
            return html_response("not_found.html", status_code=404, message="We could not find that drama.")

        stats = interaction_service.get_interaction_stats([tmdb_id])[0]

        return html_response("detail.html", drama=drama, stats=stats)

    except Exception as e:
        logger.error(f"Error rendering drama page: {str(e)}", exc_info=True)
        return _server_error()


def _list_page(req: func.HttpRequest, list_name: str) -> func.HttpResponse:
    try:
        q = req.params.get('q', '')
        loader = {
            "favorites": interaction_service.get_favorites,
            "watched": interaction_service.get_watched,
            "best": interaction_service.get_top_rated,
        }[list_name]

        dramas = loader(query=q or None)
        stats = interaction_service.get_stats_map([d['id'] for d in dramas]) if dramas else {}

        return html_response(
            "list.html",
            list_name=list_name,
            dramas=dramas,
            stats=stats,
            q=q,
            **LIST_PAGES[list_name]
        )

    except Exception as e:
        logger.error(f"Error rendering {list_name} page: {str(e)}", exc_info=True)
        return _server_error()


@bp.route(route="favorites", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def favorites_page(req: func.HttpRequest) -> func.HttpResponse:
    """The guest's favorites."""
    return _list_page(req, "favorites")


@bp.route(route="watched", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def watched_page(req: func.HttpRequest) -> func.HttpResponse:
    """Dramas the guest has seen."""
    return _list_page(req, "watched")


@bp.route(route="best", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def best_page(req: func.HttpRequest) -> func.HttpResponse:
    """Dramas the guest rated 8 or higher."""
    return _list_page(req, "best")


# noinspection PyUnusedLocal
@bp.route(route="sitemap.xml", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def sitemap(req: func.HttpRequest) -> func.HttpResponse:
    """Sitemap listing the board."""
    base_url = get_site_url().rstrip('/')
    entries = [
        {
            "url": base_url,
            "last_modified": datetime.now(UTC).date().isoformat(),
            "change_frequency": "daily",
            "priority": 1,
        },
    ]
    return func.HttpResponse(
        render("sitemap.xml", entries=entries),
        status_code=200,
        mimetype="application/xml",
        charset="utf-8"
    )


@bp.route(route="static/{filename}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def static_file(req: func.HttpRequest) -> func.HttpResponse:
    """Serve a script or stylesheet from the package's static directory."""
    filename = req.route_params.get('filename') or ''
    suffix = filename[filename.rfind('.'):] if '.' in filename else ''

    if '/' in filename or '\\' in filename or suffix not in STATIC_TYPES:
        return func.HttpResponse("Not found", status_code=404)

    resource = resources.files("asian_drama_board").joinpath("static").joinpath(filename)
    if not resource.is_file():
        return func.HttpResponse("Not found", status_code=404)

    return func.HttpResponse(
        resource.read_text(encoding="utf-8"),
        status_code=200,
        mimetype=STATIC_TYPES[suffix],
        charset="utf-8"
    )
