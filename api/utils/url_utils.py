"""Links into the frontend application, used in outgoing emails."""

from urllib.parse import urlencode

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


def frontend_url(path: str, **query_params) -> str:
    """Absolute frontend URL for ``path``, e.g. ``frontend_url("reset-password", token=t)``."""
    base = (getattr(settings, "FRONTEND_URL", "") or "").rstrip("/")
    if not base:
        raise ImproperlyConfigured("FRONTEND_URL must be set to build links for emails.")

    url = f"{base}/{path.lstrip('/')}"
    if query_params:
        url = f"{url}?{urlencode(query_params)}"
    return url
