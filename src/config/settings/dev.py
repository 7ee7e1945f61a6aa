"""Development settings."""
from .base import *  # noqa: F401,F403

DEBUG = True

# Debug toolbar
try:
    import debug_toolbar  # noqa: F401
    INSTALLED_APPS += ["debug_toolbar"]  # noqa: F405
    MIDDLEWARE.insert(0, "debug_toolbar.middleware.DebugToolbarMiddleware")  # noqa: F405
    INTERNAL_IPS = ["127.0.0.1"]
except ImportError:
    pass

# CORS
CORS_ALLOW_ALL_ORIGINS = True
CORS_ALLOW_CREDENTIALS = True

# Short-lived dashboard cache
ANALYTICS_CACHE_SECONDS = env.int("ANALYTICS_CACHE_SECONDS", default=5)  # noqa: F405

# Offline by default; set EXCHANGE_RATE_PROVIDER=http to hit the rate APIs
EXCHANGE_RATE_PROVIDER = env("EXCHANGE_RATE_PROVIDER", default="static")  # noqa: F405

# Logging
LOGGING["root"]["level"] = "DEBUG"  # noqa: F405
LOGGING["loggers"]["uniqverse"]["handlers"] = ["console"]  # noqa: F405
