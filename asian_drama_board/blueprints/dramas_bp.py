"""Paged drama feed for infinite scroll, plus health and stats."""
import azure.functions as func
import logging

from asian_drama_board.blueprints.http import error_response, json_response
from asian_drama_board.rendering import render
from asian_drama_board.services import InteractionService, TmdbClient
from asian_drama_board.services.browse import DEFAULT_SORT, collect_actors, filter_dramas, sort_dramas
from asian_drama_board.services.tmdb_client import validate_origin

# Initialize blueprint
bp = func.Blueprint()

# Initialize services (singleton pattern)
tmdb_client = TmdbClient()
interaction_service = InteractionService(tmdb_client=tmdb_client)

logger = logging.getLogger(__name__)

MAX_PAGE = 500


@bp.route(route="dramas", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def list_dramas(req: func.HttpRequest) -> func.HttpResponse:
    """
    One page of dramas with interaction stats merged in.

    Query Parameters:
        - page: Page number (default: 1, max: 500)
        - origin: all, KR, JP or CN (default: KR)
        - q: Name filter
        - actor: Actor filter
        - sort: Sort option (default: popularity)
        - format: "html" to include rendered cards

    The actors field lists the cast of the whole page before filtering,
    so the board can grow its actor dropdown as pages load.
    """
    try:
        try:
            page = int(req.params.get('page', 1))
        except ValueError:
            return error_response("page must be an integer")

        if page < 1 or page > MAX_PAGE:
            return error_response(f"page must be between 1 and {MAX_PAGE}")

        origin = req.params.get('origin', 'KR')
        sort_by = req.params.get('sort') or DEFAULT_SORT
        try:
            validate_origin(origin)
            dramas = tmdb_client.discover(page=page, origin_country=origin)
            stats = interaction_service.get_stats_map([d['id'] for d in dramas])
            visible = sort_dramas(
                filter_dramas(dramas, search=req.params.get('q'), actor=req.params.get('actor')),
                sort_by=sort_by,
                stats=stats
            )
        except ValueError as e:
            return error_response(str(e))

        for drama in visible:
            drama['stats'] = stats.get(drama['id'])

        response = {
            "page": page,
            "origin": origin,
            "fetched": len(dramas),
            "count": len(visible),
            "dramas": visible,
            "actors": collect_actors(dramas),
        }

        if req.params.get('format') == 'html':
            response["html"] = render("_cards.html", dramas=visible, stats=stats)

        return json_response(response)

    except Exception as e:
        logger.error(f"Error listing dramas: {str(e)}", exc_info=True)
        return error_response("Internal server error", status_code=500)


# noinspection PyUnusedLocal
@bp.route(route="stats", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_board_stats(req: func.HttpRequest) -> func.HttpResponse:
    """
    Get statistics about stored interactions.
    """
    try:
        return json_response(interaction_service.get_stats())

    except Exception as e:
        logger.error(f"Error getting stats: {str(e)}", exc_info=True)
        return error_response("Internal server error", status_code=500)


# noinspection PyUnusedLocal
@bp.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint."""
    return json_response({
        "status": "healthy",
        "service": "asian-drama-board",
        "version": "1.0.0"
    })
