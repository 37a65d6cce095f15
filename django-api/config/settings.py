"""Django settings for the registration API.

All deploy-specific values come from environment variables.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "dev-only-insecure-key")

DEBUG = os.environ.get("DJANGO_DEBUG", "false").lower() == "true"

ALLOWED_HOSTS = [h.strip() for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "registrations",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"

_DB_ENGINE = os.environ.get("REGISTRATION_DB_ENGINE", "django.db.backends.sqlite3")

if _DB_ENGINE.endswith("sqlite3"):
    DATABASES = {
        "default": {
            "ENGINE": _DB_ENGINE,
            "NAME": os.environ.get("REGISTRATION_DB_NAME", str(BASE_DIR / "db.sqlite3")),
            "OPTIONS": {"timeout": 10},
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": _DB_ENGINE,
            "NAME": os.environ.get("REGISTRATION_DB_NAME", "registrations"),
            "USER": os.environ.get("REGISTRATION_DB_USER", "postgres"),
            "PASSWORD": os.environ.get("REGISTRATION_DB_PASSWORD", "postgres"),
            "HOST": os.environ.get("REGISTRATION_DB_HOST", "localhost"),
            "PORT": os.environ.get("REGISTRATION_DB_PORT", "5432"),
            "OPTIONS": {"connect_timeout": 5},
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

USE_TZ = True
TIME_ZONE = os.environ.get("REGISTRATION_TIME_ZONE", "UTC")

STATIC_URL = "static/"

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "registrations.handlers.authentication.GuardianHeaderAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "UNAUTHENTICATED_USER": None,
}

# Header set by the identity gateway carrying the caller's subject id.
REGISTRATION_AUTH_HEADER = os.environ.get("REGISTRATION_AUTH_HEADER", "X-Auth-Subject")

REGISTRATION_STORAGE = {
    "BUCKET": os.environ.get("AWS_BUCKET_NAME", ""),
    "REGION": os.environ.get("AWS_REGION", "us-west-1"),
    "CONNECT_TIMEOUT": float(os.environ.get("REGISTRATION_STORAGE_CONNECT_TIMEOUT", "5")),
    "READ_TIMEOUT": float(os.environ.get("REGISTRATION_STORAGE_READ_TIMEOUT", "15")),
    "MAX_ATTEMPTS": int(os.environ.get("REGISTRATION_STORAGE_MAX_ATTEMPTS", "3")),
}

WAIVER_CACHE_TIMEOUT = int(os.environ.get("WAIVER_CACHE_TIMEOUT", "300"))

# Calibration per waiver template family; see registrations.pdf.layout.
WAIVER_LAYOUTS = {
    "default": {},
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "loggers": {
        "registrations": {
            "handlers": ["console"],
            "level": os.environ.get("REGISTRATION_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}
