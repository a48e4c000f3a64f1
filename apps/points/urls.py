from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'points'

router = DefaultRouter()
router.register(r'transfers', views.TransferViewSet, basename='transfer')
router.register(r'purchases', views.PurchaseViewSet, basename='purchase')

urlpatterns = [
    # GET /api/points/balance/?userId&restaurantId
    path('balance/', views.balance, name='balance'),
    # GET /api/points/balances/
    path('balances/', views.balances, name='balances'),

    # Transfer routes
    # GET  /api/points/transfers/       - Caller's history
    # POST /api/points/transfers/       - Transfer points
    # GET  /api/points/transfers/{id}/  - Transfer detail
    # Purchase routes
    # GET  /api/points/purchases/       - Caller's purchases
    # POST /api/points/purchases/       - Record scanned receipt
    path('', include(router.urls)),
]
