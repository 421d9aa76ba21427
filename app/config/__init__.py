# =============================================================================
# Django Project Configuration Package
# =============================================================================
# Settings, URLs, WSGI application and the Celery app live here.
#
# The Celery app is imported so @shared_task decorators bind to it when
# Django starts.
# =============================================================================

from config.celery import app as celery_app

__all__ = ("celery_app",)
