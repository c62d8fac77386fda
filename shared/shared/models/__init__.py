from shared.models.envelope import ApiResponse
from shared.models.pagination import PaginatedResponse
from shared.models.user import CurrentUser

__all__ = ["ApiResponse", "CurrentUser", "PaginatedResponse"]
