# core/settings.py
from pathlib import Path
from datetime import timedelta
import os
import sys
from dotenv import load_dotenv

# =============================================================================
# BASE DIR & ENV
# =============================================================================

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

TESTING = "test" in sys.argv or "pytest" in sys.modules

# =============================================================================
# SECURITY
# =============================================================================

DEBUG = os.getenv("DEBUG", "False").lower() == "true"

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY")
if not SECRET_KEY:
    if not (DEBUG or TESTING):
        raise RuntimeError("DJANGO_SECRET_KEY is not set")
    SECRET_KEY = "fitpro-insecure-dev-key"

ALLOWED_HOSTS = os.getenv(
    "ALLOWED_HOSTS", "127.0.0.1,localhost"
).split(",")

# =============================================================================
# APPLICATIONS
# =============================================================================

INSTALLED_APPS = [
    # Django core
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # Third-party
    "rest_framework",
    "rest_framework_simplejwt",
    "drf_spectacular",

    # Local apps
    "core.apps.CoreConfig",
    "users.apps.UsersConfig",
    "programs.apps.ProgramsConfig",
    "billing.apps.BillingConfig",
    "tracking.apps.TrackingConfig",
    "community.apps.CommunityConfig",
    "admin_moderation.apps.AdminModerationConfig",
]

# =============================================================================
# MIDDLEWARE
# =============================================================================

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "core.middleware.RequestLoggingMiddleware",
    "core.middleware.SecurityHeadersMiddleware",
    "core.middleware.ExceptionHandlerMiddleware",
]

# =============================================================================
# AUTH
# =============================================================================

AUTH_USER_MODEL = "users.User"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

# =============================================================================
# URLS & TEMPLATES
# =============================================================================

ROOT_URLCONF = "core.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "core.wsgi.application"

# =============================================================================
# DATABASE: POSTGRESQL (SQLite fallback for local dev)
# =============================================================================

if os.getenv("POSTGRES_PASSWORD"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("POSTGRES_DB", "fitpro_db"),
            "USER": os.getenv("POSTGRES_USER", "postgres"),
            "PASSWORD": os.getenv("POSTGRES_PASSWORD"),
            "HOST": os.getenv("POSTGRES_HOST", "127.0.0.1"),
            "PORT": os.getenv("POSTGRES_PORT", "5432"),
            "CONN_MAX_AGE": 600,
            "OPTIONS": {"connect_timeout": 10},
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

# =============================================================================
# I18N
# =============================================================================

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# =============================================================================
# STATIC & MEDIA
# =============================================================================

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

MEDIA_URL = "/media/"
MEDIA_ROOT = BASE_DIR / "media"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# =============================================================================
# REST FRAMEWORK
# =============================================================================

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "EXCEPTION_HANDLER": "core.exceptions.custom_exception_handler",
}

# =============================================================================
# JWT
# =============================================================================

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=30),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=7),
    "UPDATE_LAST_LOGIN": True,
    "SIGNING_KEY": SECRET_KEY,
    "AUTH_HEADER_TYPES": ("Bearer",),
    "TOKEN_OBTAIN_SERIALIZER": "users.api.serializers.SnapshotTokenObtainPairSerializer",
}

# =============================================================================
# DRF SPECTACULAR (API DOCUMENTATION)
# =============================================================================

SPECTACULAR_SETTINGS = {
    "TITLE": "FitPro Academy API",
    "DESCRIPTION": """
    Fitness course platform: program catalogue, Stripe membership billing,
    workout and nutrition tracking, achievements, trainer authoring and
    admin console.
    """,
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "COMPONENT_SPLIT_REQUEST": True,
    "SCHEMA_PATH_PREFIX": "/api/",
}

# =============================================================================
# CACHING
# =============================================================================

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "fitpro-cache",
    }
}

# =============================================================================
# LOGGING
# =============================================================================

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "[{levelname}] {asctime} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": os.getenv("LOG_LEVEL", "INFO"),
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "users": {
            "handlers": ["console"],
            "level": "DEBUG" if DEBUG else "INFO",
            "propagate": False,
        },
        "billing": {
            "handlers": ["console"],
            "level": "DEBUG" if DEBUG else "INFO",
            "propagate": False,
        },
        "programs": {
            "handlers": ["console"],
            "level": "DEBUG" if DEBUG else "INFO",
            "propagate": False,
        },
        "tracking": {
            "handlers": ["console"],
            "level": "DEBUG" if DEBUG else "INFO",
            "propagate": False,
        },
        "community": {
            "handlers": ["console"],
            "level": "DEBUG" if DEBUG else "INFO",
            "propagate": False,
        },
        "admin_moderation": {
            "handlers": ["console"],
            "level": "DEBUG" if DEBUG else "INFO",
            "propagate": False,
        },
    },
}

# =============================================================================
# REQUEST LOGGING
# =============================================================================

REQUEST_LOGGING = {
    "SLOW_REQUEST_MS": int(os.getenv("SLOW_REQUEST_MS", "1000")),
    # Logged at DEBUG only; probes hit these every few seconds
    "QUIET_PATHS": ["/health/live/", "/health/ready/"],
}

# =============================================================================
# BILLING (STRIPE)
# =============================================================================

APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:3000").rstrip("/")

BILLING_CONFIG = {
    "STRIPE_SECRET_KEY": os.getenv("STRIPE_SECRET_KEY", ""),
    "STRIPE_WEBHOOK_SECRET": os.getenv("STRIPE_WEBHOOK_SECRET", ""),

    # Optional fixed price ids; otherwise looked up / created on Stripe
    "MONTHLY_PRICE_ID": os.getenv("STRIPE_PRICE_MONTHLY_ID", ""),
    "YEARLY_PRICE_ID": os.getenv("STRIPE_PRICE_YEARLY_ID", ""),
    "PRODUCT_MARKER": "fitpro_subscription",
    "PRODUCT_NAME": "FitPro Academy Membership",
    "MONTHLY_AMOUNT_CENTS": 2900,   # $29.00 / month
    "YEARLY_AMOUNT_CENTS": 24900,   # $249.00 / year
    "CURRENCY": "usd",

    "CHECKOUT_SUCCESS_URL": f"{APP_BASE_URL}/checkout/success?session_id={{CHECKOUT_SESSION_ID}}",
    "CHECKOUT_CANCEL_URL": f"{APP_BASE_URL}/programs",

    # Every Stripe call is bounded by this timeout
    "TIMEOUT_SECONDS": int(os.getenv("STRIPE_TIMEOUT_SECONDS", "5")),
    "MAX_NETWORK_RETRIES": 0,

    # Checkout confirmation attempts before "contact support"
    "CONFIRM_MAX_ATTEMPTS": 3,
}

# =============================================================================
# ACCESS CONTROL
# =============================================================================

ACCESS_CONFIG = {
    "ACTIVE_SUBSCRIPTION_STATUSES": ["active"],
    # Legacy rule: a lingering subscription id alone grants access
    "SUBSCRIPTION_ID_GRANTS_ACCESS": os.getenv(
        "SUBSCRIPTION_ID_GRANTS_ACCESS", "False"
    ).lower() == "true",
}

# =============================================================================
# ADMIN AUDIT LOG
# =============================================================================

AUDIT_CONFIG = {
    "LOG_PATH": Path(os.getenv("AUDIT_LOG_PATH", BASE_DIR / "logs" / "admin-actions.log")),
    "DEFAULT_LIMIT": 20,
    "MAX_LIMIT": 200,
}

# =============================================================================
# SECURITY ENHANCEMENTS
# =============================================================================

SESSION_COOKIE_SECURE = not DEBUG
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = "Lax"

CSRF_COOKIE_SECURE = not DEBUG
CSRF_COOKIE_HTTPONLY = True
CSRF_COOKIE_SAMESITE = "Lax"

if not (DEBUG or TESTING):
    SECURE_SSL_REDIRECT = os.getenv("SECURE_SSL_REDIRECT", "True").lower() == "true"
    SECURE_HSTS_SECONDS = 31536000  # 1 year
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SECURE_CONTENT_TYPE_NOSNIFF = True
    X_FRAME_OPTIONS = "DENY"
