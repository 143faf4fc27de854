"""JSON response helpers shared by the blueprints."""
import json
import logging
from typing import Any, Optional

import azure.functions as func

from mediafriend_recommendation_service.errors import RecommendationServiceError, status_code_for

logger = logging.getLogger(__name__)

USER_HEADER = "x-user-id"


def json_response(body: Any, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(body, default=str),  # default=str handles datetime
        status_code=status_code,
        mimetype="application/json"
    )


def error_response(message: str, status_code: int) -> func.HttpResponse:
    return json_response({"error": message}, status_code=status_code)


def service_error_response(e: RecommendationServiceError) -> func.HttpResponse:
    """Map a service error to its status code and log it with context."""
    status_code = status_code_for(e)
    if status_code >= 500:
        logger.error(f"{e.message}: {e.context()}")
    else:
        logger.warning(f"{e.message}: {e.context()}")

    body = {"error": e.message}
    if getattr(e, "field", None):
        body["field"] = e.field
    return json_response(body, status_code=status_code)


def internal_error_response(e: Exception, what: str) -> func.HttpResponse:
    logger.error(f"Error {what}: {str(e)}", exc_info=True)
    return error_response("Internal server error", 500)


def get_actor_id(req: func.HttpRequest) -> Optional[str]:
    """Acting user from the x-user-id header (authenticated upstream)."""
    value = req.headers.get(USER_HEADER)
    return value.strip() if value and value.strip() else None


def get_json_body(req: func.HttpRequest) -> Optional[dict]:
    """Parsed JSON body, or None if the body is missing or not an object."""
    try:
        body = req.get_json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def get_int_param(req: func.HttpRequest, name: str, default: Optional[int] = None) -> Optional[int]:
    """
    Integer query parameter.

    Raises:
        ValueError: parameter present but not an integer
    """
    raw = req.params.get(name)
    if raw is None or raw == "":
        return default
    return int(raw)
