"""Development settings."""
from .base import *  # noqa: F401,F403

DEBUG = True
ENABLE_DJANGO_ADMIN = env.bool("ENABLE_DJANGO_ADMIN", default=True)  # noqa: F405

# Debug toolbar
try:
    import debug_toolbar  # noqa: F401
    INSTALLED_APPS += ["debug_toolbar"]  # noqa: F405
    MIDDLEWARE.insert(0, "debug_toolbar.middleware.DebugToolbarMiddleware")  # noqa: F405
    INTERNAL_IPS = ["127.0.0.1"]
except ImportError:
    pass

# Reset codes are printed to the console unless an SMTP backend is configured.
EMAIL_BACKEND = env(  # noqa: F405
    "EMAIL_BACKEND",
    default="django.core.mail.backends.console.EmailBackend",
)
DEFAULT_FROM_EMAIL = env("DEFAULT_FROM_EMAIL", default="crm@localhost")  # noqa: F405

# Run Celery tasks inline when no worker is started.
CELERY_TASK_ALWAYS_EAGER = env.bool("CELERY_TASK_ALWAYS_EAGER", default=True)  # noqa: F405

# Longer-lived access tokens while working on the frontend.
SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"] = timedelta(  # noqa: F405
    minutes=env.int("JWT_ACCESS_MINUTES", default=8 * 60),  # noqa: F405
)

# CORS
CORS_ALLOW_ALL_ORIGINS = True

# Logging
LOGGING["root"]["level"] = "DEBUG"  # noqa: F405
LOGGING["loggers"]["crm"]["level"] = "DEBUG"  # noqa: F405
