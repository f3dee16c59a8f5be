"""Root URL configuration.

Mounts the admin site, the academy API under ``/api/`` and the OpenAPI
schema and docs, which require a staff session.
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.contrib.auth.decorators import login_required
from django.urls import include, path
from django.utils.decorators import method_decorator
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView

docs_login_required = method_decorator(login_required(login_url="/admin/login/"), name="dispatch")


@docs_login_required
class ProtectedSchemaView(SpectacularAPIView):
    pass


@docs_login_required
class ProtectedSwaggerView(SpectacularSwaggerView):
    pass


@docs_login_required
class ProtectedRedocView(SpectacularRedocView):
    pass


urlpatterns = [
    path("admin/", admin.site.urls),
    # Course outline inlines and module rich text in the admin
    path("_nested_admin/", include("nested_admin.urls")),
    path("ckeditor5/", include("django_ckeditor_5.urls")),
    path("api/", include("api.urls")),
    path("api/schema/", ProtectedSchemaView.as_view(), name="schema"),
    path("api/docs/", ProtectedSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/redoc/", ProtectedRedocView.as_view(url_name="schema"), name="redoc"),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
