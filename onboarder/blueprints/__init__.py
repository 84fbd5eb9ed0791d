"""
Onboarder
Blueprint registry and shared helpers.
"""

import logging

from flask import current_app

from onboarder.core.exceptions import (
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    OrchestrationError,
    ValidationError,
)
from onboarder.utils.errors import E, api_error

logger = logging.getLogger(__name__)


def get_store():
    return current_app.extensions["store"]


def get_gateway():
    return current_app.extensions["redmine_gateway"]


def register_error_handlers(bp):
    """Map the onboarder exception hierarchy to JSON responses on ``bp``."""

    @bp.errorhandler(ValidationError)
    def _handle_validation(error: ValidationError):
        return api_error(error.code or E.VALIDATION_INVALID, str(error), status=422,
                         details=error.details)

    @bp.errorhandler(NotFoundError)
    def _handle_not_found(error: NotFoundError):
        return api_error(E.NOT_FOUND, str(error))

    @bp.errorhandler(ConflictError)
    def _handle_conflict(error: ConflictError):
        return api_error(E.CONFLICT_STATE, str(error))

    @bp.errorhandler(ExternalServiceError)
    def _handle_external(error: ExternalServiceError):
        logger.warning("Issue tracker call failed: %s", error)
        return api_error(E.UPSTREAM, str(error))

    @bp.errorhandler(OrchestrationError)
    def _handle_orchestration(error: OrchestrationError):
        details = error.result.to_dict() if error.result is not None else None
        return api_error(E.UPSTREAM, str(error), details=details)

    return bp
