"""Shared serializer behaviour for rich-text (CKEditor) fields."""

from typing import Iterable

from api.utils.ckeditor_paths import absolutize_media_urls


class HTMLFieldsMixin:
    """Rewrites uploaded-media links inside ``html_fields`` to absolute URLs.

    Used for course module descriptions and assignment instructions, which
    are authored in the admin and rendered by a separate frontend.
    """

    html_fields: Iterable[str] = ()

    def to_representation(self, instance):
        rep = super().to_representation(instance)
        request = self.context.get("request")
        for field in self.html_fields:
            if rep.get(field):
                rep[field] = absolutize_media_urls(rep[field], request)
        return rep
