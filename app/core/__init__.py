"""
Core Application - Infrastructure & Base Classes

Generic building blocks shared by the domain apps:

Models (core.models / core.model_mixins):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)
    - UUIDPrimaryKeyMixin: UUID as primary key

Services (core.services):
    - BaseService: logger + transaction helpers for service classes

Exceptions (core.exceptions):
    - BaseApplicationError and its HTTP-mapped subclasses

Exception handling (core.exception_handler):
    - api_exception_handler: REST_FRAMEWORK["EXCEPTION_HANDLER"]

Views (core.views):
    - health_check
"""
