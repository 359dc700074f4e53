from django.contrib import admin
from django.urls import path, include

from core.views import SessionTokenObtainPairView, SessionTokenRefreshView

urlpatterns = [
    path("admin/", admin.site.urls),

    # Endpoints de autenticação JWT (papel e empresa vão no token)
    path("api/token/", SessionTokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("api/token/refresh/", SessionTokenRefreshView.as_view(), name="token_refresh"),

    # API principal do projeto
    path("api/", include("core.urls")),

    # Login/logout do DRF no modo browsable API (opcional)
    path("api-auth/", include("rest_framework.urls", namespace="rest_framework")),
]
