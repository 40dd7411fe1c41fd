# config/urls.py

from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

from apps.core.views import health_check

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # API
    path('api/', include('apps.core.urls')),
    path('api/', include('apps.board.urls')),

    # Monitoramento
    path('health/', health_check, name='health'),
]

# Servir arquivos de mídia em desenvolvimento
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

    # Debug Toolbar se disponível
    try:
        import debug_toolbar

        urlpatterns = [
                          path('__debug__/', include(debug_toolbar.urls)),
                      ] + urlpatterns
    except ImportError:
        pass

# Customizar títulos do admin
admin.site.site_header = 'Kanban Admin'
admin.site.site_title = 'Kanban'
admin.site.index_title = 'Administração do Sistema'
