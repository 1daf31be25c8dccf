"""
PATH: backend/settings/base.py

BASE SETTINGS (shared by dev + prod)

Covers:
- django-environ driven configuration (.env in project dir or its parent)
- JWT auth, throttling, OpenAPI schema
- Named loggers per business area (billing, inventory, quotations, sequences)
- Sentry (optional): error visibility in production
- Business configuration: letterhead, bank block, GST defaults, numbering prefixes
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
    TIME_ZONE=(str, "Asia/Kolkata"),
    ALLOWED_HOSTS=(list, ["localhost", "127.0.0.1"]),
    CORS_ALLOWED_ORIGINS=(list, ["http://localhost:5173"]),
    CSRF_TRUSTED_ORIGINS=(list, ["http://localhost:5173"]),
    DATABASE_URL=(str, f"sqlite:///{BASE_DIR / 'db.sqlite3'}"),
    MEDIA_ROOT=(str, str(BASE_DIR / "media")),
    LOG_LEVEL=(str, "INFO"),
    # Throttling
    THROTTLE_ANON_RATE=(str, "60/min"),
    THROTTLE_USER_RATE=(str, "600/min"),
    THROTTLE_SCAN_RATE=(str, "240/min"),
    # Sentry (optional; enable by setting SENTRY_DSN)
    SENTRY_DSN=(str, ""),
    SENTRY_ENVIRONMENT=(str, "development"),
    SENTRY_TRACES_SAMPLE_RATE=(float, 0.0),
    SENTRY_SEND_PII=(bool, False),
    # Company letterhead (printed on invoices + quotations)
    COMPANY_NAME=(str, "RAZZAQ AUTOMOTIVES"),
    COMPANY_ADDRESS_LINES=(list, ["3rd CROSS, 2nd ROAD, AUTONAGAR, VIJAYAWADA-7"]),
    COMPANY_STATE=(str, "Andhra Pradesh"),
    COMPANY_GSTIN=(str, "37AFWPA9668K1ZH"),
    COMPANY_PHONE=(str, ""),
    # Bank block (printed on invoices)
    BANK_NAME=(str, "UNION BANK"),
    BANK_ACCOUNT_NO=(str, "071411011001693"),
    BANK_BRANCH=(str, "AUTONAGAR"),
    BANK_IFSC=(str, "UBIN0807141"),
    INVOICE_JURISDICTION=(str, "VIJAYAWADA"),
    # GST defaults for new bill lines
    BILLING_DEFAULT_CGST_RATE=(str, "14"),
    BILLING_DEFAULT_SGST_RATE=(str, "14"),
    BILLING_DEFAULT_PLACE_OF_SUPPLY=(str, "Andhra Pradesh - 37"),
    BILLING_DEFAULT_HSN=(str, "8708"),
    # Inventory
    LOW_STOCK_DEFAULT_THRESHOLD=(int, 10),
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
LANGUAGE_CODE = "en-in"
TIME_ZONE = (env("TIME_ZONE") or "Asia/Kolkata").strip()
USE_I18N = True
USE_TZ = True

# -----------------------------------------
# AUTH USER MODEL (custom)
# -----------------------------------------
AUTH_USER_MODEL = "users.User"

AUTHENTICATION_BACKENDS = [
    "users.auth_backends.EmailOrUsernameBackend",
]

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
    "rest_framework_simplejwt.token_blacklist",
    "drf_spectacular",
    "django_filters",
    "users",
    "sequences.apps.SequencesConfig",
    "products.apps.ProductsConfig",
    "billing.apps.BillingConfig",
    "quotations.apps.QuotationsConfig",
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
# TEMPLATES (required for Django admin)
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
        "scan": env("THROTTLE_SCAN_RATE"),
    },
}

# -----------------------------------------
# SIMPLE JWT
# -----------------------------------------
SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=30),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=1),
    "ROTATE_REFRESH_TOKENS": True,
    "BLACKLIST_AFTER_ROTATION": True,
}

# -----------------------------------------
# DATABASE
# -----------------------------------------
DATABASES = {
    "default": env.db("DATABASE_URL"),
}

# -----------------------------------------
# MEDIA (generated invoice PDFs live here)
# -----------------------------------------
MEDIA_URL = "media/"
MEDIA_ROOT = env("MEDIA_ROOT")

# -----------------------------------------
# BUSINESS CONFIG
# -----------------------------------------
INVOICE_LETTERHEAD = {
    "NAME": env("COMPANY_NAME").strip(),
    "ADDRESS_LINES": [line.strip() for line in env.list("COMPANY_ADDRESS_LINES")],
    "STATE": env("COMPANY_STATE").strip(),
    "GSTIN": env("COMPANY_GSTIN").strip(),
    "PHONE": env("COMPANY_PHONE").strip(),
}

INVOICE_BANK_DETAILS = {
    "BANK": env("BANK_NAME").strip(),
    "ACCOUNT_NO": env("BANK_ACCOUNT_NO").strip(),
    "BRANCH": env("BANK_BRANCH").strip(),
    "IFSC": env("BANK_IFSC").strip(),
}

INVOICE_TERMS = [
    f"All disputes are subject to {env('INVOICE_JURISDICTION').strip()} Jurisdiction.",
    "Certified that the particulars given above are true and correct.",
]

BILLING_DEFAULT_CGST_RATE = env("BILLING_DEFAULT_CGST_RATE")
BILLING_DEFAULT_SGST_RATE = env("BILLING_DEFAULT_SGST_RATE")
BILLING_DEFAULT_PLACE_OF_SUPPLY = env("BILLING_DEFAULT_PLACE_OF_SUPPLY")
BILLING_DEFAULT_HSN = env("BILLING_DEFAULT_HSN")

LOW_STOCK_DEFAULT_THRESHOLD = env.int("LOW_STOCK_DEFAULT_THRESHOLD")

# Document number prefixes: "<PREFIX>/<financial year>/<sequence>"
SEQUENCE_PREFIXES = {
    "bill": "INV",
    "order": "ORD",
    "quotation": "QT",
}

# -----------------------------------------
# LOGGING
# -----------------------------------------
LOG_LEVEL = (env("LOG_LEVEL") or "INFO").strip().upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "billing": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "inventory": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "quotations": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "sequences": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
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
    "TITLE": "Auto Parts Back Office API",
    "DESCRIPTION": "GST billing, warehouse scanning, quotations and order picking",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
}
