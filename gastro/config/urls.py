"""
URL configuration for the gastro marketplace.

Every app mounts its routes under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "Gastro Compare Admin Panel"
admin.site.site_title = "Gastro Compare Admin Portal"
admin.site.index_title = "Marketplace administration"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('gastro.core.urls')),
    path('api/v1/', include('gastro.catalog.urls')),
    path('api/v1/', include('gastro.inventory.urls')),
    path('api/v1/', include('gastro.commissions.urls')),
    path('api/v1/', include('gastro.comparison.urls')),
    path('api/v1/', include('gastro.orders.urls')),
    path('api/v1/', include('gastro.suppliers.urls')),
    path('api/v1/', include('gastro.chat.urls')),
    path('api/v1/', include('gastro.support.urls')),
    path('api/v1/', include('gastro.reports.urls')),
    re_path(r'^static/(?P<path>.*)$', serve, {'document_root': settings.STATIC_ROOT}),
]
