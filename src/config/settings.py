"""Django settings for EV trip planner project."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
PROJECT_ROOT = BASE_DIR.parent

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "change-me-in-production")
DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"
ALLOWED_HOSTS = [host for host in os.getenv("DJANGO_ALLOWED_HOSTS", "").split(",") if host]

INSTALLED_APPS = [
    "ev_planner",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

WSGI_APPLICATION = "config.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": PROJECT_ROOT / "db.sqlite3",
    }
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "ev-planner-cache",
    }
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
        "ev_planner": {
            "handlers": ["console"],
            "level": os.getenv("EV_PLANNER_LOG_LEVEL", "INFO"),
        },
    },
}

ROUTE_PROVIDER_BASE_URL = os.getenv(
    "ROUTE_PROVIDER_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
)
ROUTE_PROVIDER_API_KEY = os.getenv("GEMINI_API_KEY", "")
ROUTE_PROVIDER_MODEL = os.getenv("ROUTE_PROVIDER_MODEL", "gemini-2.5-flash")
ROUTE_PROVIDER_TIP_MODEL = os.getenv("ROUTE_PROVIDER_TIP_MODEL", "gemini-2.5-flash")
ROUTE_PROVIDER_TIMEOUT_SECONDS = float(os.getenv("ROUTE_PROVIDER_TIMEOUT_SECONDS", "20"))
ROUTE_PROVIDER_RETRY_COUNT = int(os.getenv("ROUTE_PROVIDER_RETRY_COUNT", "1"))

ROUTE_CACHE_TTL_SECONDS = int(os.getenv("ROUTE_CACHE_TTL_SECONDS", "300"))

# Shared by the feasibility partitioner and the fallback synthesizer.
MAX_RANGE_KM = float(os.getenv("MAX_RANGE_KM", "100"))
BATTERY_RESERVE_PERCENT = float(os.getenv("BATTERY_RESERVE_PERCENT", "5"))
DEFAULT_BATTERY_PERCENT = float(os.getenv("DEFAULT_BATTERY_PERCENT", "100"))
DEFAULT_DESTINATION = os.getenv("DEFAULT_DESTINATION", "VIT Chennai")
DEFAULT_ORIGIN_LATITUDE = float(os.getenv("DEFAULT_ORIGIN_LATITUDE", "13.0827"))
DEFAULT_ORIGIN_LONGITUDE = float(os.getenv("DEFAULT_ORIGIN_LONGITUDE", "80.2707"))

# Scanned in order, first substring match wins.
KNOWN_DESTINATION_DISTANCES_KM = [
    ("bangalore", 330.0),
    ("bengaluru", 330.0),
    ("mysore", 470.0),
    ("coimbatore", 505.0),
    ("madurai", 460.0),
    ("tirupati", 135.0),
    ("vellore", 140.0),
    ("pondicherry", 150.0),
    ("puducherry", 150.0),
    ("mahabalipuram", 55.0),
    ("kanchipuram", 75.0),
    ("airport", 18.0),
    ("vit chennai", 35.0),
    ("chennai", 20.0),
]
