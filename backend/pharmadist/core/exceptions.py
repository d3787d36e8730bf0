"""
Domain exceptions and their HTTP mapping.

Services raise the domain exceptions below. Routes translate them into
HTTPException through BusinessError, which also logs the outcome.
"""
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class PharmaDistError(ValueError):
    """Base class for every rejected business operation."""


class ValidationError(PharmaDistError):
    """Input failed validation. Nothing was mutated."""


class DuplicateNameError(PharmaDistError):
    """A name collides with another record of the same kind."""


class NotFoundError(PharmaDistError):
    """The referenced record does not exist for this account."""


class BusinessError:
    """HTTP exceptions with safe messages."""

    @staticmethod
    def not_found(detail: str = "Resource not found") -> HTTPException:
        logger.info(f"Not found: {detail}")
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
        )

    @staticmethod
    def unauthorized(reason: str = "") -> HTTPException:
        """
        Generic 401 for a missing or malformed account identity.
        """
        logger.warning(f"Unauthorized access attempt: {reason}")
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed",
        )

    @staticmethod
    def bad_request(detail: str) -> HTTPException:
        """
        400 for input validation / business rule errors.

        OK to include specific details here since the user caused the issue.
        Examples: "Bill #5 already exists", "Bill has no valid items."
        """
        logger.info(f"Bad request: {detail}")
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )

    @staticmethod
    def conflict(detail: str) -> HTTPException:
        """
        409 for name collisions.
        Example: 'Medicine "Panadol" already exists.'
        """
        logger.info(f"Conflict: {detail}")
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )

    @staticmethod
    def server_error(original_error: Exception = None) -> HTTPException:
        """
        Generic 500 - logs the actual error internally, hides it from the user.
        """
        if original_error:
            logger.error(
                f"Internal server error: {type(original_error).__name__}: {str(original_error)}",
                exc_info=True
            )
        else:
            logger.error("Internal server error occurred", exc_info=True)

        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An internal error occurred. Please try again later.",
        )

    @staticmethod
    def from_domain(error: PharmaDistError) -> HTTPException:
        """Map a domain exception to the matching HTTP error."""
        if isinstance(error, NotFoundError):
            return BusinessError.not_found(str(error))
        if isinstance(error, DuplicateNameError):
            return BusinessError.conflict(str(error))
        return BusinessError.bad_request(str(error))
