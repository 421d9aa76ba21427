"""
Authentication application.

Accounts for all three marketplace roles and the role policy layer used by
every API view.

Key components:
    - User model: email-based login with a role and an account status
    - permissions: RolePermission / allow_roles / is_owner_or_admin
    - JWT token endpoints (djangorestframework-simplejwt)

Usage:
    from authentication.models import User, UserRole
    from authentication.permissions import allow_roles
"""
