from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'redemptions'

router = DefaultRouter()
router.register(r'', views.RedemptionViewSet, basename='redemption')

urlpatterns = [
    # POST /api/redemptions/                     - Redeem a package
    # GET  /api/redemptions/?member=&status=     - List redemptions
    # GET  /api/redemptions/{id}/                - Redemption details
    # POST /api/redemptions/{id}/approve/        - Approve (admin)
    # POST /api/redemptions/{id}/cancel/         - Cancel a pending redemption
    # GET  /api/redemptions/{id}/usage/          - All-Access days used
    # POST /api/redemptions/{id}/usage/          - Record an All-Access day
    # POST /api/redemptions/{id}/release_usage/  - Release the day of a cancelled booking
    path('', include(router.urls)),
]
