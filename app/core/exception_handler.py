"""
Central DRF exception handler.

Configured through REST_FRAMEWORK["EXCEPTION_HANDLER"]. Classifies every
exception escaping a view into the response envelope
``{"error": ..., "error_code": ..., "details": ...}``:

    BaseApplicationError      -> its own status_code
    DRF APIException          -> DRF status (400/401/403/404/405/429)
    simplejwt TokenError      -> 401
    IntegrityError            -> 409
    ObjectDoesNotExist        -> 404
    anything else             -> 500 (message hidden unless DEBUG)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist
from django.db import IntegrityError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework_simplejwt.exceptions import TokenError

from core.exceptions import BaseApplicationError

if TYPE_CHECKING:
    from typing import Any


logger = logging.getLogger(__name__)


def _view_name(context: dict[str, Any]) -> str:
    view = context.get("view")
    return view.__class__.__name__ if view is not None else "unknown"


def _normalize_drf_response(response: Response) -> Response:
    """Wrap DRF's native error payloads in the application envelope."""
    data = response.data
    if isinstance(data, dict) and set(data) == {"detail"}:
        detail = data["detail"]
        body: dict[str, Any] = {"error": str(detail)}
        code = getattr(detail, "code", None)
        if code:
            body["error_code"] = str(code).upper()
    else:
        body = {
            "error": "Validation failed",
            "error_code": "VALIDATION_ERROR",
            "details": data,
        }
    response.data = body
    return response


def api_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """
    Translate exceptions raised inside DRF views into JSON responses.

    Args:
        exc: The exception raised by the view
        context: DRF handler context (view, request, args, kwargs)

    Returns:
        Response with the error envelope
    """
    if isinstance(exc, BaseApplicationError):
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            f"Application error in {_view_name(context)}: {exc}",
            extra={"error_code": exc.error_code, "status_code": exc.status_code},
        )
        return Response(exc.to_dict(), status=exc.status_code)

    if isinstance(exc, TokenError):
        return Response(
            {"error": str(exc), "error_code": "TOKEN_INVALID"},
            status=status.HTTP_401_UNAUTHORIZED,
        )

    response = drf_exception_handler(exc, context)
    if response is not None:
        return _normalize_drf_response(response)

    if isinstance(exc, IntegrityError):
        logger.warning(
            f"Integrity error in {_view_name(context)}",
            extra={"error": str(exc)},
        )
        return Response(
            {
                "error": "Request conflicts with an existing record",
                "error_code": "INTEGRITY_ERROR",
            },
            status=status.HTTP_409_CONFLICT,
        )

    if isinstance(exc, ObjectDoesNotExist):
        return Response(
            {"error": str(exc) or "Not found", "error_code": "NOT_FOUND"},
            status=status.HTTP_404_NOT_FOUND,
        )

    logger.exception(f"Unhandled error in {_view_name(context)}: {type(exc).__name__}")
    body: dict[str, Any] = {
        "error": "Internal Server Error",
        "error_code": "INTERNAL_ERROR",
    }
    if settings.DEBUG:
        body["details"] = {"exception": repr(exc)}
    return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
