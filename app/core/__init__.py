"""
Core Application - Infrastructure & Base Classes

Generic building blocks shared by the bookings and payments apps. Nothing
here knows about reservations, payments or providers.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ValidationError: Input validation failures
    - NotFoundError: Resource not found
    - ConflictError: State conflicts
    - ExternalServiceError: Third-party service failures
    - ConfigurationError: Missing or invalid deployment configuration

Views (import from core.views):
    - health_check: Database liveness probe
"""
