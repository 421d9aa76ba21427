"""
Tests for the authentication app.

- test_models.py: User model and manager (roles, statuses, superusers)
- test_permissions.py: role policy table and the OperationPolicy permission
"""
