"""Send, list and update friend recommendations."""
import azure.functions as func
import logging

from mediafriend_recommendation_service.blueprints.responses import (
    error_response,
    get_actor_id,
    get_json_body,
    internal_error_response,
    json_response,
    service_error_response,
)
from mediafriend_recommendation_service.errors import RecommendationServiceError
from mediafriend_recommendation_service.services import RecommendationLifecycleService, RecommendationSummaryService

# Initialize blueprint
bp = func.Blueprint()

# Initialize services (singleton pattern)
lifecycle_service = RecommendationLifecycleService()
summary_service = RecommendationSummaryService(lifecycle_service)

logger = logging.getLogger(__name__)

MISSING_USER = "x-user-id header is required"


@bp.route(route="recommendations/{domain}/received", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def list_received(req: func.HttpRequest) -> func.HttpResponse:
    """
    Recommendations sent to the caller.

    Query Parameters:
        - status: pending, the domain's consumed label, hit or miss
        - friend_id: Only recommendations from this friend
    """
    actor_id = get_actor_id(req)
    if not actor_id:
        return error_response(MISSING_USER, 401)

    try:
        records = lifecycle_service.list_received(
            actor_id,
            req.route_params.get("domain"),
            status=req.params.get("status"),
            friend_id=req.params.get("friend_id")
        )
        return json_response({
            "count": len(records),
            "recommendations": [record.to_dict() for record in records]
        })

    except RecommendationServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return internal_error_response(e, "listing received recommendations")


@bp.route(route="recommendations/{domain}/sent", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def list_sent(req: func.HttpRequest) -> func.HttpResponse:
    """Recommendations the caller sent, optionally filtered by status."""
    actor_id = get_actor_id(req)
    if not actor_id:
        return error_response(MISSING_USER, 401)

    try:
        records = lifecycle_service.list_sent(
            actor_id,
            req.route_params.get("domain"),
            status=req.params.get("status")
        )
        return json_response({
            "count": len(records),
            "recommendations": [record.to_dict() for record in records]
        })

    except RecommendationServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return internal_error_response(e, "listing sent recommendations")


@bp.route(route="recommendations/{domain}/friends", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_friend_summaries(req: func.HttpRequest) -> func.HttpResponse:
    """
    Per-friend status counts.

    Query Parameters:
        - direction: "received" (default) groups by sender, "sent" groups by recipient
    """
    actor_id = get_actor_id(req)
    if not actor_id:
        return error_response(MISSING_USER, 401)

    direction = req.params.get("direction", "received")
    if direction not in ("received", "sent"):
        return error_response("direction must be 'received' or 'sent'", 400)

    try:
        domain = req.route_params.get("domain")
        if direction == "sent":
            summaries = summary_service.recipient_summaries(actor_id, domain)
        else:
            summaries = summary_service.friend_summaries(actor_id, domain)
        return json_response({
            "direction": direction,
            "friends": [summary.to_dict() for summary in summaries]
        })

    except RecommendationServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return internal_error_response(e, "getting friend summaries")


@bp.route(route="recommendations/{domain}/stats", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_quick_stats(req: func.HttpRequest) -> func.HttpResponse:
    """Dashboard counts: hits, misses, queue, consumed and sent."""
    actor_id = get_actor_id(req)
    if not actor_id:
        return error_response(MISSING_USER, 401)

    try:
        stats = summary_service.quick_stats(actor_id, req.route_params.get("domain"))
        return json_response(stats.to_dict())

    except RecommendationServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return internal_error_response(e, "getting stats")


@bp.route(route="recommendations/{domain}/send", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def send_recommendation(req: func.HttpRequest) -> func.HttpResponse:
    """
    Send one item to one or more friends.

    Body:
        - to_user_ids: List of friend ids
        - item: Search result (external_id, title, media_type, ...)
        - message: Optional note
    """
    actor_id = get_actor_id(req)
    if not actor_id:
        return error_response(MISSING_USER, 401)

    body = get_json_body(req)
    if body is None:
        return error_response("Request body must be a JSON object", 400)

    to_user_ids = body.get("to_user_ids")
    if isinstance(to_user_ids, str):
        to_user_ids = [to_user_ids]
    if not isinstance(to_user_ids, list) or not isinstance(body.get("item"), dict):
        return error_response("to_user_ids (list) and item (object) are required", 400)

    try:
        result = lifecycle_service.send(
            actor_id,
            to_user_ids,
            req.route_params.get("domain"),
            body["item"],
            message=body.get("message")
        )
        return json_response(
            {
                "sent": [record.to_dict() for record in result.sent],
                "failed": result.failed,
            },
            status_code=201 if result.sent else 400
        )

    except RecommendationServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return internal_error_response(e, "sending recommendation")


@bp.route(route="recommendations/records/{rec_id}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_recommendation(req: func.HttpRequest) -> func.HttpResponse:
    """One recommendation, as seen by its sender or recipient."""
    actor_id = get_actor_id(req)
    if not actor_id:
        return error_response(MISSING_USER, 401)

    try:
        record = lifecycle_service.get(req.route_params.get("rec_id"), actor_id)
        return json_response(record.to_dict())

    except RecommendationServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return internal_error_response(e, "getting recommendation")


@bp.route(route="recommendations/records/{rec_id}/opened", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def mark_opened(req: func.HttpRequest) -> func.HttpResponse:
    """Recipient viewed the recommendation."""
    actor_id = get_actor_id(req)
    if not actor_id:
        return error_response(MISSING_USER, 401)

    try:
        record = lifecycle_service.mark_opened(req.route_params.get("rec_id"), actor_id)
        return json_response(record.to_dict())

    except RecommendationServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return internal_error_response(e, "marking recommendation opened")


@bp.route(route="recommendations/records/{rec_id}/status", methods=["PUT"], auth_level=func.AuthLevel.ANONYMOUS)
def update_status(req: func.HttpRequest) -> func.HttpResponse:
    """
    Recipient sets status.

    Body:
        - status: pending, the domain's consumed label, hit or miss
        - comment: Optional recipient comment written with the status
    """
    actor_id = get_actor_id(req)
    if not actor_id:
        return error_response(MISSING_USER, 401)

    body = get_json_body(req)
    if body is None or not body.get("status"):
        return error_response("status is required", 400)

    try:
        record = lifecycle_service.set_status(
            req.route_params.get("rec_id"),
            actor_id,
            body["status"],
            comment=body.get("comment")
        )
        return json_response(record.to_dict())

    except RecommendationServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return internal_error_response(e, "updating status")


@bp.route(route="recommendations/records/{rec_id}/comment", methods=["PUT"], auth_level=func.AuthLevel.ANONYMOUS)
def update_comment(req: func.HttpRequest) -> func.HttpResponse:
    """Recipient edits their comment; status is untouched."""
    actor_id = get_actor_id(req)
    if not actor_id:
        return error_response(MISSING_USER, 401)

    body = get_json_body(req)
    if body is None or "comment" not in body:
        return error_response("comment is required", 400)

    try:
        record = lifecycle_service.set_comment(req.route_params.get("rec_id"), actor_id, body["comment"])
        return json_response(record.to_dict())

    except RecommendationServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return internal_error_response(e, "updating comment")


@bp.route(
    route="recommendations/records/{rec_id}/sender-comment",
    methods=["PUT"],
    auth_level=func.AuthLevel.ANONYMOUS
)
def update_sender_comment(req: func.HttpRequest) -> func.HttpResponse:
    """Sender edits their comment."""
    actor_id = get_actor_id(req)
    if not actor_id:
        return error_response(MISSING_USER, 401)

    body = get_json_body(req)
    if body is None or "sender_comment" not in body:
        return error_response("sender_comment is required", 400)

    try:
        record = lifecycle_service.set_sender_comment(
            req.route_params.get("rec_id"),
            actor_id,
            body["sender_comment"]
        )
        return json_response(record.to_dict())

    except RecommendationServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return internal_error_response(e, "updating sender comment")


@bp.route(route="recommendations/records/{rec_id}", methods=["DELETE"], auth_level=func.AuthLevel.ANONYMOUS)
def remove_recommendation(req: func.HttpRequest) -> func.HttpResponse:
    """
    Remove a recommendation from the caller's list.

    Query Parameters:
        - role: "recipient" or "sender"
    """
    actor_id = get_actor_id(req)
    if not actor_id:
        return error_response(MISSING_USER, 401)

    role = req.params.get("role")
    if role not in ("recipient", "sender"):
        return error_response("role must be 'recipient' or 'sender'", 400)

    try:
        rec_id = req.route_params.get("rec_id")
        outcome = lifecycle_service.remove(rec_id, actor_id, role)
        return json_response({"id": rec_id, "outcome": outcome.value})

    except RecommendationServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return internal_error_response(e, "removing recommendation")


# noinspection PyUnusedLocal
@bp.route(route="recommendations/health", methods=["GET"])
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint."""
    return json_response({
        "status": "healthy",
        "service": "mediafriend-recommendation-service",
        "version": "1.0.0"
    })
