from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'members'

router = DefaultRouter()
router.register(r'', views.MemberViewSet, basename='member')

urlpatterns = [
    # GET    /api/members/                       - List members (admin) / own profile
    # POST   /api/members/                       - Enroll member (admin)
    # GET    /api/members/{id}/                  - Member with balance
    # POST   /api/members/{id}/adjust_balance/   - Add, deduct or set credits (admin)
    # GET    /api/members/{id}/transactions/     - Ledger history
    path('', include(router.urls)),
]
