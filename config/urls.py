# config/urls.py
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from core import views as v

router = DefaultRouter()
router.register(r"me", v.MeViewSet, basename="me")
router.register(r"floors", v.FloorViewSet)
router.register(r"events", v.MaintenanceEventViewSet)
router.register(r"monthly-payments", v.MonthlyPaymentViewSet)
router.register(r"event-payments", v.EventPaymentViewSet)
router.register(r"expenses", v.ExpenseViewSet)
router.register(r"activity-logs", v.ActivityLogViewSet, basename="activitylog")

urlpatterns = [
    path("admin/", admin.site.urls),

    # Own login, plus the SimpleJWT endpoints
    path("api/auth/login/", v.LoginView.as_view(), name="auth-login"),
    path("api/auth/logout/", v.LogoutView.as_view(), name="auth-logout"),
    path("api/auth/token/", TokenObtainPairView.as_view()),
    path("api/auth/refresh/", TokenRefreshView.as_view()),

    path("api/balance/", v.BalanceView.as_view(), name="balance"),
    path("api/monthly-due/", v.MonthlyDueView.as_view(), name="monthly-due"),
    path("api/reports/monthly-status/", v.MonthlyStatusView.as_view(), name="monthly-status"),
    path("api/reports/dashboard-stats/", v.DashboardStatsView.as_view(), name="dashboard-stats"),
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),

    path("api/", include(router.urls)),
]
