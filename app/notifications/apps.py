from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    """Customer and provider notifications (no models)."""

    name = "notifications"
    verbose_name = "Notifications"
