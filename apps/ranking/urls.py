from django.urls import path
from . import views

app_name = 'ranking'

urlpatterns = [
    # GET /api/ranking/?userId&criterion&lat&lon
    path('', views.rank, name='rank'),
]
