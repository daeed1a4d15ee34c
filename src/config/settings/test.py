"""Test settings: in-memory SQLite, eager Celery, locmem email and cache."""
import tempfile

from .base import *  # noqa: F401,F403

DEBUG = False
SECRET_KEY = "test-only-secret-key-for-the-lead-crm-suite-0123456789abcdef"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
        # Bulk imports commit row by row; tests observe that directly.
        "ATOMIC_REQUESTS": False,
    }
}

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

# Uploaded lead documents land in a throwaway directory (overridden per test).
MEDIA_ROOT = tempfile.mkdtemp(prefix="crm-test-media-")

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

# Throttling stays wired on the auth views but never trips.
REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []  # noqa: F405
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {  # noqa: F405
    "auth_burst": "10000/min",
    "auth_sustained": "10000/min",
}

SIMPLE_JWT["SIGNING_KEY"] = SECRET_KEY  # noqa: F405

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
DEFAULT_FROM_EMAIL = "crm@example.com"
PASSWORD_RESET_CODE_TTL_MINUTES = 15

LOGGING["root"]["level"] = "WARNING"  # noqa: F405
LOGGING["loggers"]["crm"]["handlers"] = ["console"]  # noqa: F405
LOGGING["loggers"]["crm"]["level"] = "WARNING"  # noqa: F405
