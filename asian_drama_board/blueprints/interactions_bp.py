"""Record ratings, seen flags and favorites."""
import azure.functions as func
import logging

from asian_drama_board.blueprints.http import error_response, json_response, parse_tmdb_id
from asian_drama_board.services import InteractionService

# Initialize blueprint
bp = func.Blueprint()

# Initialize service (singleton pattern)
interaction_service = InteractionService()

logger = logging.getLogger(__name__)

MAX_STATS_IDS = 100

CLEAR_TARGETS = {
    "favorites": "clear_all_favorites",
    "watched": "clear_all_watched",
    "ratings": "clear_all_ratings",
}


def _json_body(req: func.HttpRequest) -> dict:
    try:
        body = req.get_json()
    except ValueError:
        raise ValueError("request body must be valid JSON")
    if not isinstance(body, dict):
        raise ValueError("request body must be a JSON object")
    return body


@bp.route(route="interactions/stats", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_interaction_stats(req: func.HttpRequest) -> func.HttpResponse:
    """
    Community stats and the guest's own state for several dramas.

    Query Parameters:
        - ids: Comma separated TMDB ids (max: 100)
    """
    try:
        raw_ids = req.params.get('ids', '')
        if not raw_ids:
            return error_response("ids is required")

        try:
            tmdb_ids = [int(part) for part in raw_ids.split(',') if part.strip()]
        except ValueError:
            return error_response("ids must be comma separated integers")

        if len(tmdb_ids) > MAX_STATS_IDS:
            return error_response(f"at most {MAX_STATS_IDS} ids are allowed")

        stats = interaction_service.get_interaction_stats(tmdb_ids)
        return json_response({"count": len(stats), "stats": stats})

    except Exception as e:
        logger.error(f"Error getting interaction stats: {str(e)}", exc_info=True)
        return error_response("Internal server error", status_code=500)


@bp.route(route="interactions/{tmdb_id}/score", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def update_score(req: func.HttpRequest) -> func.HttpResponse:
    """
    Set the guest's score for a drama.

    Body:
        {"score": 1-10, or 0 to clear}
    """
    try:
        try:
            tmdb_id = parse_tmdb_id(req.route_params.get('tmdb_id'))
            body = _json_body(req)
            if 'score' not in body:
                return error_response("score is required")
            rating = interaction_service.update_score(tmdb_id, body['score'])
        except ValueError as e:
            return error_response(str(e))

        return json_response(rating)

    except Exception as e:
        logger.error(f"Error updating score: {str(e)}", exc_info=True)
        return error_response("Internal server error", status_code=500)


@bp.route(route="interactions/{tmdb_id}/rating", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def submit_rating(req: func.HttpRequest) -> func.HttpResponse:
    """
    Set score and seen flag together.

    Body:
        {"score": 0-10, "has_seen": true|false}
    """
    try:
        try:
            tmdb_id = parse_tmdb_id(req.route_params.get('tmdb_id'))
            body = _json_body(req)
            if 'score' not in body:
                return error_response("score is required")
            has_seen = body.get('has_seen', False)
            if not isinstance(has_seen, bool):
                return error_response("has_seen must be a boolean")
            rating = interaction_service.submit_rating(tmdb_id, body['score'], has_seen)
        except ValueError as e:
            return error_response(str(e))

        return json_response(rating)

    except Exception as e:
        logger.error(f"Error submitting rating: {str(e)}", exc_info=True)
        return error_response("Internal server error", status_code=500)


@bp.route(route="interactions/{tmdb_id}/seen", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def toggle_seen(req: func.HttpRequest) -> func.HttpResponse:
    """Flip the guest's seen flag for a drama."""
    try:
        try:
            tmdb_id = parse_tmdb_id(req.route_params.get('tmdb_id'))
        except ValueError as e:
            return error_response(str(e))

        has_seen = interaction_service.toggle_seen(tmdb_id)
        return json_response({"tmdb_id": tmdb_id, "has_seen": has_seen})

    except Exception as e:
        logger.error(f"Error toggling seen: {str(e)}", exc_info=True)
        return error_response("Internal server error", status_code=500)


@bp.route(route="interactions/{tmdb_id}/favorite", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def toggle_favorite(req: func.HttpRequest) -> func.HttpResponse:
    """Flip the guest's favorite flag for a drama."""
    try:
        try:
            tmdb_id = parse_tmdb_id(req.route_params.get('tmdb_id'))
        except ValueError as e:
            return error_response(str(e))

        is_favorite = interaction_service.toggle_favorite(tmdb_id)
        return json_response({"tmdb_id": tmdb_id, "is_favorite": is_favorite})

    except Exception as e:
        logger.error(f"Error toggling favorite: {str(e)}", exc_info=True)
        return error_response("Internal server error", status_code=500)


@bp.route(route="interactions/{target}", methods=["DELETE"], auth_level=func.AuthLevel.ANONYMOUS)
def delete_interactions(req: func.HttpRequest) -> func.HttpResponse:
    """
    Reset one drama, or clear a whole list.

    Route:
        - favorites | watched | ratings: clear that list
        - a TMDB id: forget every interaction with that drama
    """
    try:
        target = req.route_params.get('target')

        if target in CLEAR_TARGETS:
            cleared = getattr(interaction_service, CLEAR_TARGETS[target])()
            return json_response({"cleared": target, "count": cleared})

        try:
            tmdb_id = parse_tmdb_id(target)
        except ValueError:
            return error_response(
                "target must be a tmdb_id or one of: " + ", ".join(CLEAR_TARGETS)
            )

        deleted = interaction_service.reset_interaction(tmdb_id)
        return json_response({"tmdb_id": tmdb_id, "reset": deleted})

    except Exception as e:
        logger.error(f"Error deleting interactions: {str(e)}", exc_info=True)
        return error_response("Internal server error", status_code=500)
