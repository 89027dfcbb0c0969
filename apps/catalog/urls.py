from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'catalog'

router = DefaultRouter()
router.register(r'packages', views.PackageViewSet, basename='package')
router.register(r'coupons', views.CouponViewSet, basename='coupon')

urlpatterns = [
    # GET    /api/catalog/packages/               - List packages
    # POST   /api/catalog/packages/               - Create package (admin)
    # GET    /api/catalog/packages/{id}/          - Package details
    # PATCH  /api/catalog/packages/{id}/          - Update package (admin)
    # DELETE /api/catalog/packages/{id}/          - Deactivate package (admin)
    #
    # GET    /api/catalog/coupons/                - List coupons (admin)
    # POST   /api/catalog/coupons/                - Create coupon (admin)
    # GET    /api/catalog/coupons/code/{code}/    - Look up a coupon by code
    path('', include(router.urls)),
]
