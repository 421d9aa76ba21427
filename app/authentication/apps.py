from django.apps import AppConfig


class AuthenticationConfig(AppConfig):
    """Users, roles and the role policy layer."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "authentication"
    verbose_name = "Users & roles"
