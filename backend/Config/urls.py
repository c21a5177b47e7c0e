"""
URL configuration for Config project.

公开接口挂在 /api/ 下，管理员接口挂在 /api/admin/ 下；
上传文件通过 /files/<path> 对外提供。
"""
from django.urls import include, path, re_path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView

from apps.common.health import HealthCheckView
from apps.puzzles.views import serve_upload

urlpatterns = [
    path('api/health', HealthCheckView.as_view(), name='health'),
    path('api/', include('apps.puzzles.urls')),
    path('api/', include('apps.submissions.urls')),
    path('api/', include('apps.leaderboard.urls')),
    path('api/admin/', include('apps.accounts.urls')),
    path('api/admin/', include('apps.puzzles.admin_urls')),
    path('api/admin/', include('apps.submissions.admin_urls')),
    # OpenAPI 文档：提供 schema JSON 及 UI
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/schema/swagger-ui/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/schema/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
    # 上传的题面/题解文件
    re_path(r"^files/(?P<path>.+)$", serve_upload, name="uploaded-file"),
]
