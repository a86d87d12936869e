# Services package
from .availability_service import AvailabilityService
from .match_service import MatchService
from .rating_service import RatingService
from .user_service import UserService

__all__ = ["AvailabilityService", "MatchService", "RatingService", "UserService"]
