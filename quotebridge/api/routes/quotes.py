"""FastAPI routes for storefront quote requests.

POST /api/quotes turns a quote request into a Shopify draft order and
records it locally. OPTIONS answers CORS preflight; every other method is
rejected with 405. All responses carry the configured CORS headers.

Architecture:
    Storefront -> FastAPI -> QuoteService -> SessionStore / Shopify GraphQL -> DB
"""

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from quotebridge.api.middleware.cors import cors_headers
from quotebridge.api.schemas import ErrorResponse, QuoteResponse
from quotebridge.config import AppConfig, get_app_config
from quotebridge.db.connection import get_db
from quotebridge.errors import INTERNAL_ERROR_MESSAGE, DomainError, InvalidInputError
from quotebridge.services.quote_service import QuoteService
from quotebridge.services.shopify_graphql import ClientFactory, make_client_factory
from quotebridge.utils.redaction import redact_for_logging, sanitize_error_message

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/quotes", tags=["quotes"])

METHOD_NOT_ALLOWED_MESSAGE = "Method not allowed. Use POST to create quotes."


def get_client_factory(config: AppConfig = Depends(get_app_config)) -> ClientFactory:
    """Dependency building GraphQL clients pinned to the configured API version."""
    return make_client_factory(config.api_version)


@router.post(
    "",
    response_model=QuoteResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def create_quote(
    request: Request,
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
    client_factory: ClientFactory = Depends(get_client_factory),
) -> Response:
    """Create a Shopify draft order for a quote request.

    Every failure is converted here into a JSON error body; nothing is
    retried.
    """
    headers = cors_headers(request.headers.get("origin"), config.allowed_origins)

    try:
        try:
            body = await request.json()
        except ValueError as e:
            raise InvalidInputError("Request body must be valid JSON") from e

        logger.info("=== API Quotes Request Received ===")
        logger.info("Request URL: %s", request.url)
        logger.debug("Request Headers: %s", redact_for_logging(dict(request.headers)))
        if isinstance(body, dict):
            logger.info("Request Body: %s", json.dumps(redact_for_logging(body)))

        service = QuoteService(db, client_factory=client_factory)
        result = await service.create_quote(body)
    except DomainError as e:
        logger.warning(
            "Quote request failed [%s]: %s (remediation: %s)", e.code, e, e.remediation
        )
        content = e.to_body()
        if "message" in content:
            content["message"] = sanitize_error_message(content["message"])
        return JSONResponse(status_code=e.status_code, content=content, headers=headers)
    except Exception as e:
        logger.exception("Error creating quote")
        return JSONResponse(
            status_code=500,
            content={
                "error": INTERNAL_ERROR_MESSAGE,
                "message": sanitize_error_message(str(e)),
            },
            headers=headers,
        )

    response = QuoteResponse(
        draft_order_id=result.draft_order_id,
        invoice_url=result.invoice_url,
        quote_id=result.quote_id,
    )
    return JSONResponse(content=response.model_dump(by_alias=True), headers=headers)


@router.options("", status_code=204)
async def quote_preflight(
    request: Request,
    config: AppConfig = Depends(get_app_config),
) -> Response:
    """Answer a CORS preflight request."""
    headers = cors_headers(request.headers.get("origin"), config.allowed_origins)
    return Response(status_code=204, headers=headers)


@router.api_route("", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def quote_method_not_allowed(
    request: Request,
    config: AppConfig = Depends(get_app_config),
) -> Response:
    headers = cors_headers(request.headers.get("origin"), config.allowed_origins)
    return JSONResponse(
        status_code=405,
        content={"error": METHOD_NOT_ALLOWED_MESSAGE},
        headers=headers,
    )
