import os

# Mock SECRET_KEY for tests BEFORE importing settings to bypass validation
os.environ.setdefault("SECRET_KEY", "django-insecure-test-key-for-unit-tests-only")

from .settings import *  # noqa: F403

# Override Database to use SQLite for tests.
# A file-backed test database lets concurrent threads hold their own connections;
# IMMEDIATE mode takes the write lock at BEGIN so writers queue instead of deadlocking.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",  # noqa: F405
        "OPTIONS": {
            "timeout": 30,
            "transaction_mode": "IMMEDIATE",
        },
        "TEST": {
            "NAME": BASE_DIR / "test_db.sqlite3",  # noqa: F405
        },
    }
}

# Disable external services
INFRASTRUCTURE["EVENT_BUS_BACKEND"] = "memory"  # noqa: F405
OTEL_TRACING_ENABLED = False

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# Enable SessionAuthentication for tests to support client.force_login()
if "DEFAULT_AUTHENTICATION_CLASSES" in REST_FRAMEWORK:  # noqa: F405
    REST_FRAMEWORK["DEFAULT_AUTHENTICATION_CLASSES"].append(  # noqa: F405
        "rest_framework.authentication.SessionAuthentication"
    )
else:
    REST_FRAMEWORK["DEFAULT_AUTHENTICATION_CLASSES"] = [  # noqa: F405
        "rest_framework.authentication.SessionAuthentication"
    ]
