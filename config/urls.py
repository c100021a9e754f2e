"""URL configuration for the back office.

The `urlpatterns` list routes URLs to views. It includes the Django admin,
the application routers provided by Django Rest Framework and each app,
and the OpenAPI schema.
"""
from django.conf import settings  # type: ignore
from django.conf.urls.static import static  # type: ignore
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView  # type: ignore

# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('admin/', admin.site.urls),
    # Application URLs
    path('api/v1/auth/', include(('apps.users.auth_urls', 'auth'), namespace='auth')),
    path('api/v1/users/', include('apps.users.urls')),
    path('api/v1/properties/', include('apps.properties.urls')),
    # Routes nested under properties/<id>/ plus the cross-property endpoints
    path('api/v1/', include('apps.bookings.urls')),
    path('api/v1/', include('apps.pricing.urls')),
    path('api/v1/', include('apps.contacts.urls')),
    path('api/v1/', include('apps.documents.urls')),
    path('api/v1/audit/', include('apps.audit.urls')),
    # API schema and docs
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
