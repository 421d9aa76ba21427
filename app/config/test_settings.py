"""
Settings used by the test suite.

Seeds the environment with throwaway values, then loads the regular
settings module so tests exercise the same configuration code path as
every other environment. Only infrastructure that tests must not touch
(Redis, slow password hashing) is swapped out afterwards.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECURE_SSL_REDIRECT", "False")
os.environ.setdefault("PAYSTACK_SECRET_KEY", "sk_test_secret")

from config.settings import *  # noqa: E402,F403

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "movers-tests",
    }
}

# PBKDF2 with 870K iterations makes user factories slow
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

CELERY_TASK_ALWAYS_EAGER = False
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"
