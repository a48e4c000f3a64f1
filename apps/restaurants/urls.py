from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'restaurants'

# Registered at the empty prefix, so no API root view
router = SimpleRouter()
router.register(r'', views.RestaurantViewSet, basename='restaurant')

urlpatterns = [
    # GET    /api/restaurants/        - List active restaurants
    # GET    /api/restaurants/{id}/   - Get restaurant details
    path('', include(router.urls)),
]
