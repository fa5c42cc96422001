"""
PATH: backend/settings/base.py

BASE SETTINGS (shared by dev + prod)

Operational maturity:
- Throttling on public checkout + order polling
- Order notification policy (admin alert on, customer confirmation off)
- Order console refresh timings
- Status transition policy toggle (permissive by default)
- Sentry (optional): error visibility in production
"""

from __future__ import annotations

import sys
from datetime import timedelta
from pathlib import Path

import environ
from corsheaders.defaults import default_headers, default_methods

# -----------------------------------------
# BASE DIRECTORY
# -----------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# -----------------------------------------
# TEST MODE DETECTION
# -----------------------------------------
TESTING = "test" in sys.argv or "pytest" in sys.modules

# -----------------------------------------
# ENV (django-environ)
# -----------------------------------------
env = environ.Env(
    DEBUG=(bool, True),
    SECRET_KEY=(str, ""),
    TIME_ZONE=(str, "UTC"),
    LOG_LEVEL=(str, "INFO"),
    ALLOWED_HOSTS=(list, ["localhost", "127.0.0.1"]),
    CORS_ALLOWED_ORIGINS=(list, ["http://localhost:3000"]),
    CSRF_TRUSTED_ORIGINS=(list, ["http://localhost:3000"]),
    DATABASE_URL=(str, f"sqlite:///{BASE_DIR / 'db.sqlite3'}"),
    MEDIA_ROOT=(str, str(BASE_DIR / "media")),
    MEDIA_URL=(str, "/media/"),
    ADMIN_PATH=(str, "admin/"),
    # Receipts arrive base64-encoded inside the checkout JSON body
    DATA_UPLOAD_MAX_MEMORY_SIZE=(int, 10 * 1024 * 1024),
    # Throttling
    THROTTLE_ANON_RATE=(str, "60/min"),
    THROTTLE_USER_RATE=(str, "600/min"),
    THROTTLE_PUBLIC_POLL_RATE=(str, "1000/min" if TESTING else "120/min"),
    THROTTLE_PUBLIC_WRITE_RATE=(str, "1000/min" if TESTING else "10/min"),
    # Storefront identity
    STORE_NAME=(str, "Storefront"),
    CURRENCY_LABEL=(str, "Rs"),
    ORDER_ID_PREFIX=(str, "ORD"),
    SUPPORT_EMAIL=(str, ""),
    # Order notifications (Resend)
    RESEND_API_KEY=(str, ""),
    ADMIN_EMAIL=(str, ""),
    EMAIL_FROM=(str, "Storefront <onboarding@resend.dev>"),
    EMAIL_REPLY_TO=(str, ""),
    CUSTOMER_CONFIRMATION_ENABLED=(bool, False),
    # Order lifecycle + console
    ORDER_STATUS_STRICT_TRANSITIONS=(bool, False),
    ORDER_CONSOLE_STARTUP_DELAY=(float, 1.0),
    ORDER_CONSOLE_REFRESH_DEBOUNCE=(float, 0.5),
    ORDER_CONSOLE_POLL_INTERVAL=(float, 2.0),
    RECEIPT_URL_PROBE_TIMEOUT=(int, 5),
    # Sentry (optional; enable by setting SENTRY_DSN)
    SENTRY_DSN=(str, ""),
    SENTRY_ENVIRONMENT=(str, "development"),
    SENTRY_TRACES_SAMPLE_RATE=(float, 0.0),
    SENTRY_SEND_PII=(bool, False),
)

# -----------------------------------------
# LOAD .env
# -----------------------------------------
env_file_1 = BASE_DIR / ".env"
env_file_2 = BASE_DIR.parent / ".env"

if env_file_1.exists():
    env.read_env(str(env_file_1))
elif env_file_2.exists():
    env.read_env(str(env_file_2))

# -----------------------------------------
# CORE SECURITY
# -----------------------------------------
SECRET_KEY = (env("SECRET_KEY") or "dev-insecure-change-me").strip()
DEBUG = env.bool("DEBUG")
ALLOWED_HOSTS = env.list("ALLOWED_HOSTS")

# -----------------------------------------
# I18N / TZ
# -----------------------------------------
LANGUAGE_CODE = "en-us"
TIME_ZONE = (env("TIME_ZONE") or "UTC").strip()
USE_I18N = True
USE_TZ = True

# -----------------------------------------
# INSTALLED APPS
# -----------------------------------------
INSTALLED_APPS = [
    "corsheaders",
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "rest_framework_simplejwt",
    "drf_spectacular",
    "django_filters",
    "orders.apps.OrdersConfig",
    "public.apps.PublicConfig",
]

# -----------------------------------------
# MIDDLEWARE
# -----------------------------------------
MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "backend.urls"
WSGI_APPLICATION = "backend.wsgi.application"
APPEND_SLASH = True

# -----------------------------------------
# TEMPLATES (Django admin + order emails)
# -----------------------------------------
TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [str(BASE_DIR / "templates")],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    }
]

# -----------------------------------------
# REST FRAMEWORK
# -----------------------------------------
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": ("rest_framework.permissions.IsAuthenticated",),
    "DEFAULT_FILTER_BACKENDS": ("django_filters.rest_framework.DjangoFilterBackend",),
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": 20,
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "DEFAULT_THROTTLE_CLASSES": (
        "rest_framework.throttling.AnonRateThrottle",
        "rest_framework.throttling.UserRateThrottle",
    ),
    "DEFAULT_THROTTLE_RATES": {
        "anon": env("THROTTLE_ANON_RATE"),
        "user": env("THROTTLE_USER_RATE"),
        "public_poll": env("THROTTLE_PUBLIC_POLL_RATE"),
        "public_write": env("THROTTLE_PUBLIC_WRITE_RATE"),
    },
}

# -----------------------------------------
# SIMPLE JWT (replaces the shared admin password)
# -----------------------------------------
SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=30),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=1),
    "ROTATE_REFRESH_TOKENS": True,
}

# -----------------------------------------
# DATABASE
# -----------------------------------------
DATABASES = {
    "default": env.db("DATABASE_URL"),
}

# -----------------------------------------
# MEDIA (payment receipts)
# -----------------------------------------
MEDIA_ROOT = env("MEDIA_ROOT")
MEDIA_URL = env("MEDIA_URL")
DATA_UPLOAD_MAX_MEMORY_SIZE = env.int("DATA_UPLOAD_MAX_MEMORY_SIZE")

ADMIN_PATH = (env("ADMIN_PATH") or "admin/").strip()

# -----------------------------------------
# STOREFRONT
# -----------------------------------------
STORE_NAME = (env("STORE_NAME") or "Storefront").strip()
CURRENCY_LABEL = (env("CURRENCY_LABEL") or "Rs").strip()
ORDER_ID_PREFIX = (env("ORDER_ID_PREFIX") or "ORD").strip().upper()
SUPPORT_EMAIL = (env("SUPPORT_EMAIL") or "").strip()

# -----------------------------------------
# ORDER NOTIFICATIONS
# -----------------------------------------
ORDER_NOTIFICATIONS = {
    "RESEND": {
        "API_KEY": (env("RESEND_API_KEY") or "").strip(),
    },
    "ADMIN_EMAIL": (env("ADMIN_EMAIL") or "").strip(),
    "FROM": (env("EMAIL_FROM") or "").strip(),
    "REPLY_TO": (env("EMAIL_REPLY_TO") or SUPPORT_EMAIL).strip(),
    # Customer confirmations are off until the sending domain is verified.
    "CUSTOMER_CONFIRMATION_ENABLED": env.bool("CUSTOMER_CONFIRMATION_ENABLED"),
}

# -----------------------------------------
# ORDER LIFECYCLE + CONSOLE
# -----------------------------------------
ORDER_STATUS_STRICT_TRANSITIONS = env.bool("ORDER_STATUS_STRICT_TRANSITIONS")

ORDER_CONSOLE = {
    "STARTUP_DELAY": env.float("ORDER_CONSOLE_STARTUP_DELAY"),
    "REFRESH_DEBOUNCE": env.float("ORDER_CONSOLE_REFRESH_DEBOUNCE"),
    "POLL_INTERVAL": env.float("ORDER_CONSOLE_POLL_INTERVAL"),
    "RECEIPT_PROBE_TIMEOUT": env.int("RECEIPT_URL_PROBE_TIMEOUT"),
}

# -----------------------------------------
# LOGGING
# -----------------------------------------
LOG_LEVEL = (env("LOG_LEVEL") or "INFO").strip().upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "orders": {"level": LOG_LEVEL, "propagate": True},
        "public": {"level": LOG_LEVEL, "propagate": True},
    },
}

# -----------------------------------------
# SENTRY (optional)
# -----------------------------------------
SENTRY_DSN = (env("SENTRY_DSN") or "").strip()
SENTRY_ENVIRONMENT = (env("SENTRY_ENVIRONMENT") or "development").strip()
SENTRY_TRACES_SAMPLE_RATE = float(env("SENTRY_TRACES_SAMPLE_RATE"))
SENTRY_SEND_PII = env.bool("SENTRY_SEND_PII")

if SENTRY_DSN:
    import sentry_sdk
    from sentry_sdk.integrations.django import DjangoIntegration

    sentry_sdk.init(
        dsn=SENTRY_DSN,
        environment=SENTRY_ENVIRONMENT,
        integrations=[DjangoIntegration()],
        traces_sample_rate=SENTRY_TRACES_SAMPLE_RATE,
        send_default_pii=SENTRY_SEND_PII,
    )

# -----------------------------------------
# CORS / CSRF
# -----------------------------------------
CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS")
CORS_ALLOW_CREDENTIALS = True
CORS_ALLOW_METHODS = list(default_methods)
CORS_ALLOW_HEADERS = list(default_headers)

CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS")

# -----------------------------------------
# STATIC FILES
# -----------------------------------------
STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# -----------------------------------------
# SWAGGER
# -----------------------------------------
SPECTACULAR_SETTINGS = {
    "TITLE": "Storefront Orders API",
    "DESCRIPTION": "Checkout, order console and order notification API",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
}
