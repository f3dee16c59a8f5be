"""Helpers for rich-text (CKEditor) content."""

import re

from django.conf import settings

MEDIA_ATTR_PATTERN = re.compile(r"(src|href)=([\'\"])(.*?)\2", flags=re.IGNORECASE)


def absolutize_media_urls(html: str, request=None) -> str:
    """Rewrite src/href attributes that point to MEDIA files into absolute URLs.

    Uses the configured SITE_BASE_URL from Django settings as the
    authoritative base for generated absolute URLs, so output is the same
    in scripts, tests and requests.

    Leaves already-absolute URLs (http(s):// or //) untouched.
    """
    if not html or not isinstance(html, str):
        return html

    media_url = getattr(settings, "MEDIA_URL", "/media/")
    media_url = "/" + media_url.strip("/") + "/"

    site_base = getattr(settings, "SITE_BASE_URL", "").rstrip("/")
    if not site_base:
        site_base = "http://127.0.0.1:8000"

    def _replace(match):
        attr, quote, url = match.group(1), match.group(2), match.group(3)

        # Already absolute -> ignore
        if url.startswith(("http://", "https://", "//")):
            return match.group(0)

        url_path = url if url.startswith("/") else "/" + url
        if not url_path.startswith(media_url):
            return match.group(0)

        return f"{attr}={quote}{site_base}{url_path}{quote}"

    return MEDIA_ATTR_PATTERN.sub(_replace, html)
