# Exceptions package
from .custom_exceptions import (
    AuthenticationException,
    AuthorizationException,
    ConflictException,
    DatabaseOperationException,
    DatabaseTimeoutException,
    InvalidStateException,
    KickaboutException,
    ResourceNotFoundException,
    ValidationException,
)

__all__ = [
    'KickaboutException',
    'ResourceNotFoundException',
    'ValidationException',
    'ConflictException',
    'InvalidStateException',
    'DatabaseOperationException',
    'DatabaseTimeoutException',
    'AuthenticationException',
    'AuthorizationException',
]
