"""Personal media lists with persisted filter, sort and page size."""
import azure.functions as func
import logging

from mediafriend_recommendation_service.blueprints.responses import (
    error_response,
    get_actor_id,
    get_int_param,
    get_json_body,
    internal_error_response,
    json_response,
    service_error_response,
)
from mediafriend_recommendation_service.domain import LibraryEntry
from mediafriend_recommendation_service.errors import RecommendationServiceError
from mediafriend_recommendation_service.services import LibraryService
from mediafriend_recommendation_service.storage import PreferenceStore

# Initialize blueprint
bp = func.Blueprint()

# Initialize service and preference store (singleton pattern)
library_service = LibraryService()
preference_store = PreferenceStore()

logger = logging.getLogger(__name__)

MISSING_USER = "x-user-id header is required"


@bp.route(route="library/{domain}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_library_page(req: func.HttpRequest) -> func.HttpResponse:
    """
    One page of the caller's list.

    Query Parameters:
        - page: Page number (default: 1, clamped to the page count); ignored
          when per_page is given, since a page size change starts at page 1
        - per_page: Items per page (saved for next time)
        - sort: Sort id (saved for next time)
        - genres: Comma separated genre filter, "all" for none (saved for next time)
        - q: Search text (not saved)
        - reset: "true" restores the default view
    """
    actor_id = get_actor_id(req)
    if not actor_id:
        return error_response(MISSING_USER, 401)

    try:
        page_number = get_int_param(req, "page", 1)
        per_page = get_int_param(req, "per_page")
    except ValueError:
        return error_response("page and per_page must be integers", 400)

    try:
        domain = req.route_params.get("domain")
        engine = library_service.engine_for(actor_id, domain, store=preference_store)

        if req.params.get("reset", "").lower() == "true":
            engine.reset()
        if req.params.get("sort"):
            engine.set_sort(req.params["sort"])
        if req.params.get("genres") is not None:
            engine.set_genre_filters(req.params["genres"].split(","))
        if per_page is not None:
            engine.set_items_per_page(per_page)
        engine.set_search_query(req.params.get("q", ""))
        if per_page is None:
            engine.go_to_page(page_number)

        items = library_service.list_items(actor_id, domain)
        page = engine.page(items)

        response = page.to_dict(LibraryEntry.to_dict)
        response.update({
            "has_next_page": page.has_next_page,
            "has_prev_page": page.has_prev_page,
            "view": engine.state.preferences().to_dict(),
            "filters": engine.filter_sections(items),
        })
        return json_response(response)

    except RecommendationServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return internal_error_response(e, "getting library page")


@bp.route(route="library/{domain}", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def add_library_item(req: func.HttpRequest) -> func.HttpResponse:
    """Add an item (search result or manual entry) to the caller's list."""
    actor_id = get_actor_id(req)
    if not actor_id:
        return error_response(MISSING_USER, 401)

    body = get_json_body(req)
    if body is None:
        return error_response("Request body must be a JSON object", 400)

    try:
        entry = library_service.add_item(actor_id, req.route_params.get("domain"), body)
        return json_response(entry.to_dict(), status_code=201)

    except RecommendationServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return internal_error_response(e, "adding library item")


@bp.route(route="library/items/{item_id}/toggle", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def toggle_library_item(req: func.HttpRequest) -> func.HttpResponse:
    """Flip the watched/listened/read/played flag."""
    actor_id = get_actor_id(req)
    if not actor_id:
        return error_response(MISSING_USER, 401)

    try:
        entry = library_service.toggle_consumed(req.route_params.get("item_id"), actor_id)
        return json_response(entry.to_dict())

    except RecommendationServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return internal_error_response(e, "toggling library item")


@bp.route(route="library/items/{item_id}", methods=["DELETE"], auth_level=func.AuthLevel.ANONYMOUS)
def remove_library_item(req: func.HttpRequest) -> func.HttpResponse:
    actor_id = get_actor_id(req)
    if not actor_id:
        return error_response(MISSING_USER, 401)

    try:
        item_id = req.route_params.get("item_id")
        library_service.remove_item(item_id, actor_id)
        return json_response({"id": item_id, "removed": True})

    except RecommendationServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return internal_error_response(e, "removing library item")


@bp.route(route="library/{domain}/reorder", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def reorder_library(req: func.HttpRequest) -> func.HttpResponse:
    """
    Drag and drop in custom sort.

    Body:
        - source_id: Dragged item
        - target_id: Item it was dropped on
        - position: "before" (default) or "after"
    """
    actor_id = get_actor_id(req)
    if not actor_id:
        return error_response(MISSING_USER, 401)

    body = get_json_body(req)
    if body is None or not body.get("source_id") or not body.get("target_id"):
        return error_response("source_id and target_id are required", 400)

    position = body.get("position", "before")
    if position not in ("before", "after"):
        return error_response("position must be 'before' or 'after'", 400)

    try:
        domain = req.route_params.get("domain")
        engine = library_service.engine_for(actor_id, domain, store=preference_store)
        intent = library_service.reorder(
            actor_id,
            domain,
            engine,
            body["source_id"],
            body["target_id"],
            position
        )
        return json_response(intent.to_dict())

    except RecommendationServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return internal_error_response(e, "reordering library")
