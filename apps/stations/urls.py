from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'stations'

router = DefaultRouter()
router.register(r'', views.StationViewSet, basename='station')

urlpatterns = [
    # GET /api/stations/        - Accessible stations
    # GET /api/stations/{id}/   - Station details
    path('', include(router.urls)),
]
