"""
URL configuration for the retailpos project.

Every app mounts its routes under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "RetailPOS Admin Panel"
admin.site.site_title = "RetailPOS Admin Portal"
admin.site.index_title = "Store administration"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('retailpos.core.urls')),
    path('api/v1/', include('retailpos.catalog.urls')),
    path('api/v1/', include('retailpos.parties.urls')),
    path('api/v1/', include('retailpos.sales.urls')),
    path('api/v1/', include('retailpos.purchasing.urls')),
    path('api/v1/', include('retailpos.labels.urls')),
    path('api/v1/', include('retailpos.reports.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
]
