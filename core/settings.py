"""Django settings for the Academy LMS project.

This file centralizes environment-driven configuration used by manage
commands, tests, and the running application.
"""

import os
from datetime import timedelta
from pathlib import Path

import dj_database_url
from dotenv import load_dotenv
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# Load environment variables
load_dotenv()

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

# --------------------------------------------------------------------------
# CORE SECURITY & DEBUG SETTINGS
# --------------------------------------------------------------------------

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "default-insecure-key")
# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = os.getenv("DEBUG", "False") == "True"
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")

# --------------------------------------------------------------------------
# APPLICATION DEFINITION
# --------------------------------------------------------------------------

SYSTEM_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "api.apps.ApiConfig",
]


THIRD_PARTY_APPS = [
    "rest_framework",
    "django_ckeditor_5",
    "rest_framework_simplejwt.token_blacklist",
    "django_filters",
    "drf_spectacular",
    "corsheaders",
    "nested_admin",
]

# Combine all apps
INSTALLED_APPS = SYSTEM_APPS + THIRD_PARTY_APPS

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    # Reject requests where user was deleted/disabled after token issued
    "api.middleware.RejectDisabledUserMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "core.urls"

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

WSGI_APPLICATION = "core.wsgi.application"


# --------------------------------------------------------------------------
# DATABASE CONFIGURATION
# --------------------------------------------------------------------------

if ENVIRONMENT == "development":
    # Development: SQLite
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }
else:
    # Production: PostgreSQL
    DATABASES = {"default": dj_database_url.config(default=os.getenv("DATABASE_URL"))}


# --------------------------------------------------------------------------
# AUTHENTICATION & CUSTOM USER MODEL
# --------------------------------------------------------------------------

# Set your Custom User Model
AUTH_USER_MODEL = "api.CustomUser"

# Password validation
AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.NumericPasswordValidator",
    },
]

AUTHENTICATION_BACKENDS = [
    "django.contrib.auth.backends.ModelBackend",
]

# --------------------------------------------------------------------------
# DRF & JWT CONFIGURATION
# --------------------------------------------------------------------------


REST_FRAMEWORK = {
    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
        "rest_framework.filters.SearchFilter",
        "rest_framework.filters.OrderingFilter",
    ],
    # Use JWT for authentication by default
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ),
    "EXCEPTION_HANDLER": "api.utils.response_utils.custom_exception_handler",
    "DEFAULT_PERMISSION_CLASSES": ("rest_framework.permissions.IsAuthenticated",),
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.AnonRateThrottle",
        "rest_framework.throttling.UserRateThrottle",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "core.parsers.StrictJSONParser",
        "rest_framework.parsers.FormParser",
        "rest_framework.parsers.MultiPartParser",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "anon": os.getenv("THROTTLE_ANON", "50000/minute"),
        "user": os.getenv("THROTTLE_USER", "50000/hour"),
        "login": os.getenv("THROTTLE_LOGIN", "535/minute"),
        "password_reset": os.getenv("THROTTLE_PASSWORD_RESET", "100/minute"),
    },  # In production, consider:
    # "DEFAULT_THROTTLE_RATES": {
    #     "anon": "50/day",
    #     "user": "5000/day",
    #     "login": "5/minute",
    #     "password_reset": "5/hour",
    # },
    # ?format=csv|pdf selects export formats, not renderers
    "URL_FORMAT_OVERRIDE": None,
    # Configuration for drf-spectacular
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

# Settings for drf-spectacular
SPECTACULAR_SETTINGS = {
    # Basic API info
    "TITLE": "Academy LMS Backend API",
    "DESCRIPTION": (
        "REST API for the Academy learning management system. "
        "Provides endpoints for authentication, courses, assignments, submissions, "
        "grading, lecture progress and attendance."
    ),
    "VERSION": "1.0.0",
    # Security & schema visibility
    "SERVE_INCLUDE_SCHEMA": False,  # Hide raw schema in production
    "COMPONENT_SPLIT_REQUEST": True,  # Separate request/response schemas
    "DEFAULT_GENERATOR_CLASS": "drf_spectacular.generators.SchemaGenerator",
    # Authentication: JWT only
    "AUTHENTICATION_WHITELIST": [
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ],
    # Global security scheme for Swagger UI "Authorize"
    "SECURITY": [{"bearerAuth": []}],
    "COMPONENTS": {
        "securitySchemes": {
            "bearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
            }
        },
        # Optional: reusable query parameters
        "parameters": {
            "page": OpenApiParameter(
                name="page",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                description="Page number for paginated results",
            ),
            "page_size": OpenApiParameter(
                name="page_size",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                description="Number of items per page",
            ),
        },
    },
}


SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(hours=2),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=7),
    "ROTATE_REFRESH_TOKENS": True,
    "BLACKLIST_AFTER_ROTATION": True,
    "UPDATE_LAST_LOGIN": True,
    "ALGORITHM": "HS256",
    "SIGNING_KEY": SECRET_KEY,
    "VERIFYING_KEY": None,
    "AUTH_HEADER_TYPES": ("Bearer",),
    "AUTH_HEADER_NAME": "HTTP_AUTHORIZATION",
    "USER_ID_FIELD": "id",
    "USER_ID_CLAIM": "user_id",
    # Use your custom serializer to include 'role' in the response
    "TOKEN_OBTAIN_SERIALIZER": "api.serializers.serializers_auth.CustomTokenObtainPairSerializer",
}

# --------------------------------------------------------------------------
# STATIC & MEDIA FILES
# --------------------------------------------------------------------------
STATIC_URL = "/static/"

if ENVIRONMENT == "development":
    STATIC_ROOT = BASE_DIR / "staticfiles"  # For collectstatic in development
else:
    STATIC_ROOT = os.getenv("STATIC_ROOT", "/var/www/backend/api/staticfiles/")


MEDIA_URL = "/media/"

if ENVIRONMENT == "development":
    MEDIA_ROOT = BASE_DIR / "media"
else:
    MEDIA_ROOT = os.getenv("MEDIA_ROOT", "/var/www/backend/api/media/")


# --------------------------------------------------------------------------
# INTERNATIONALIZATION
# --------------------------------------------------------------------------

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True


# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


# --------------------------------------------------------------------------
# CORS & EMAIL
# --------------------------------------------------------------------------

# CORS settings (if your API is accessed by a frontend)
CORS_ALLOWED_ORIGINS = [
    origin
    for origin in os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if origin
]
CORS_ALLOW_CREDENTIALS = True

# Session and CSRF cookie settings
SESSION_COOKIE_SAMESITE = "Lax"
SESSION_COOKIE_SECURE = not DEBUG and ENVIRONMENT != "development"
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_AGE = 1209600

CSRF_COOKIE_SAMESITE = "Lax"
CSRF_COOKIE_SECURE = SESSION_COOKIE_SECURE
CSRF_TRUSTED_ORIGINS = CORS_ALLOWED_ORIGINS

# Development prints emails to the console; everything else sends via SMTP
if ENVIRONMENT == "development":
    EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"
else:
    EMAIL_BACKEND = "django.core.mail.backends.smtp.EmailBackend"
    EMAIL_HOST = os.getenv("EMAIL_HOST", "smtp.gmail.com")
    EMAIL_PORT = int(os.getenv("EMAIL_PORT", 587))
    EMAIL_USE_TLS = True
    EMAIL_HOST_USER = os.getenv("EMAIL_HOST_USER", "")
    EMAIL_HOST_PASSWORD = os.getenv("EMAIL_HOST_PASSWORD", "")

DEFAULT_FROM_EMAIL = os.getenv("DEFAULT_FROM_EMAIL", "Academy LMS <no-reply@academy-lms.local>")


# --------------------------------------------------------------------------
# SITE URLS
# --------------------------------------------------------------------------

if ENVIRONMENT == "development":
    SITE_BASE_URL = "http://127.0.0.1:8000"
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
else:
    SITE_BASE_URL = os.getenv("SITE_BASE_API_URL", "http://127.0.0.1:8000")
    FRONTEND_URL = os.getenv("FRONTEND_URL", "")


# --------------------------------------------------------------------------
# LOGGING
# --------------------------------------------------------------------------

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "[{asctime}] {levelname} {name}: {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "loggers": {
        "api": {
            "handlers": ["console"],
            "level": os.getenv("API_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        "django.request": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}


# CKEDITOR ===========================

CUSTOM_COLOR_PALETTE = [
    {"color": "#053867", "label": "Primary"},
    {"color": "#f7b922", "label": "Secondary"},
    {"color": "#ffffff", "label": "White"},
    {"color": "#000000", "label": "Black"},
    {"color": "#e0e0e0", "label": "Gray"},
    {"color": "#e53935", "label": "Red"},
    {"color": "#1e88e5", "label": "Blue"},
]

CKEDITOR_5_CONFIGS = {
    "default": {
        "toolbar": [
            "heading", "|",
            "bold", "italic", "link", "bulletedList", "numberedList", "blockQuote", "|",
            "fontColor", "fontBackgroundColor", "|",
            "insertTable", "mediaEmbed", "|",
            "outdent", "indent", "|",
            "undo", "redo",
        ],
        "height": 400,
        "width": 600,
        "table": {
            "contentToolbar": ["tableColumn", "tableRow", "mergeTableCells"],
        },
        "heading": {
            "options": [
                {"model": "paragraph", "title": "Paragraph", "class": "ck-heading_paragraph"},
                {"model": "heading1", "view": "h1", "title": "Heading 1", "class": "ck-heading_heading1"},
                {"model": "heading2", "view": "h2", "title": "Heading 2", "class": "ck-heading_heading2"},
                {"model": "heading3", "view": "h3", "title": "Heading 3", "class": "ck-heading_heading3"},
            ]
        },
        "fontColor": {"colors": CUSTOM_COLOR_PALETTE},
        "fontBackgroundColor": {"colors": CUSTOM_COLOR_PALETTE},
    },
}

CKEDITOR_5_ALLOW_ALL_FILE_TYPES = False
CKEDITOR_5_FILE_UPLOAD_PERMISSION = "staff"

# File size limits
FILE_UPLOAD_MAX_MEMORY_SIZE = 10 * 1024 * 1024  # 10MB
DATA_UPLOAD_MAX_MEMORY_SIZE = 10 * 1024 * 1024  # 10MB
