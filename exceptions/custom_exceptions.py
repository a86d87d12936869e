"""
Custom Exception Classes for the Kickabout backend

Provides a hierarchy of exceptions for consistent error responses.
All custom exceptions inherit from KickaboutException which carries a status code and details.
"""

from typing import Any


class KickaboutException(Exception):
    """Base exception for all Kickabout errors"""

    def __init__(self, message: str, status_code: int = 500, details: dict[Any, Any] | None = None):
        """
        Args:
            message: Human-readable error message
            status_code: HTTP status code for the error
            details: Additional context as a dictionary
        """
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ResourceNotFoundException(KickaboutException):
    """Raised when a requested resource doesn't exist"""

    def __init__(
        self, resource_type: str, resource_id: str = "", details: dict[Any, Any] | None = None
    ):
        """
        Args:
            resource_type: Type of resource (e.g., 'Match', 'Player', 'Rating')
            resource_id: ID of the missing resource
            details: Additional context

        Example:
            raise ResourceNotFoundException('Match', match_id)
        """
        message = f"{resource_type} with resource ID '{resource_id}' not found"
        extra_details = {"resource_type": resource_type, "resource_id": resource_id}
        if details:
            extra_details.update(details)
        super().__init__(message, status_code=404, details=extra_details)


class ValidationException(KickaboutException):
    """Raised when input validation fails"""

    def __init__(self, field: str, message: str, details: dict[Any, Any] | None = None):
        """
        Args:
            field: Name of the field that failed validation
            message: Description of the validation error
            details: Additional context

        Example:
            raise ValidationException('playerId', 'Player was not in this match')
        """
        full_message = f"Validation error on field '{field}': {message}"
        extra_details = {"field": field}
        if details:
            extra_details.update(details)
        super().__init__(full_message, status_code=400, details=extra_details)


class ConflictException(KickaboutException):
    """Raised when a resource already exists or an entry is already present"""

    def __init__(
        self,
        resource_type: str,
        message: str,
        details: dict[Any, Any] | None = None,
        status_code: int = 409,
    ):
        """
        Args:
            resource_type: Type of resource that conflicts (e.g., 'User', 'Rating')
            message: Description of the conflict
            details: Additional context
            status_code: 409 by default, some endpoints report conflicts as 400

        Example:
            raise ConflictException('Match', 'Player is already in a team', {'player_id': pid})
        """
        extra_details = {"resource_type": resource_type}
        if details:
            extra_details.update(details)
        super().__init__(message, status_code=status_code, details=extra_details)


class InvalidStateException(KickaboutException):
    """Raised when an operation is not allowed in the resource's current lifecycle state"""

    def __init__(
        self,
        resource_type: str,
        current_state: str,
        message: str,
        details: dict[Any, Any] | None = None,
    ):
        """
        Args:
            resource_type: Type of resource (e.g., 'Match')
            current_state: The state that blocks the operation
            message: Description of the rule that was violated

        Example:
            raise InvalidStateException('Match', 'scheduled', 'Can only rate completed matches')
        """
        extra_details = {"resource_type": resource_type, "current_state": current_state}
        if details:
            extra_details.update(details)
        super().__init__(message, status_code=400, details=extra_details)


class DatabaseOperationException(KickaboutException):
    """Raised when database operations fail"""

    def __init__(
        self,
        operation: str,
        message: str = "",
        collection: str = "",
        details: dict[Any, Any] | None = None,
    ):
        """
        Args:
            operation: Name of the operation (e.g., 'join_match', 'create_rating')
            message: Description of the database error
            collection: Name of the collection
            details: Additional context (e.g., the driver's error message)

        Example:
            raise DatabaseOperationException('update', collection='matches', details={'error': str(e)})
        """
        self.operation = operation
        self.collection = collection

        error_message = message or f"Database operation '{operation}' failed"
        if collection and not message:
            error_message += f" on collection '{collection}'"

        extra_details = {"operation": operation}
        if collection:
            extra_details["collection"] = collection
        if details:
            extra_details.update(details)
        super().__init__(error_message, status_code=500, details=extra_details)


class DatabaseTimeoutException(KickaboutException):
    """Raised when a database call exceeds its deadline or the database stays unreachable"""

    def __init__(self, operation: str, message: str = "", details: dict[Any, Any] | None = None):
        """
        Args:
            operation: Name of the operation that timed out
            message: Description of the failure

        Example:
            raise DatabaseTimeoutException('get_matches', 'Database operation timed out')
        """
        extra_details = {"operation": operation}
        if details:
            extra_details.update(details)
        super().__init__(
            message or "Database operation timed out. Please try again.",
            status_code=504,
            details=extra_details,
        )


class AuthenticationException(KickaboutException):
    """Raised when authentication fails"""

    def __init__(
        self, message: str = "Authentication required", details: dict[Any, Any] | None = None
    ):
        super().__init__(message, status_code=401, details=details)


class AuthorizationException(KickaboutException):
    """Raised when user lacks permission for an action"""

    def __init__(
        self, message: str = "Insufficient permissions", details: dict[Any, Any] | None = None
    ):
        """
        Args:
            message: Description of the authorization error
            details: Additional context (e.g., the owner and the caller)

        Example:
            raise AuthorizationException('Only the match creator can invite players')
        """
        super().__init__(message, status_code=403, details=details)
