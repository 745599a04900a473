from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'handovers'

router = SimpleRouter()
router.register(r'handovers', views.CashHandoverViewSet, basename='handover')

urlpatterns = [
    # Handover ViewSet routes
    # POST   /api/handovers/                 - Create handover
    # GET    /api/handovers/pending/         - Handovers waiting on the caller
    # POST   /api/handovers/bank-deposit/    - Record bank deposit
    # POST   /api/handovers/shift-close/     - Record shift collection
    # GET    /api/handovers/{id}/            - Handover details
    # GET    /api/handovers/{id}/chain/      - Handover and its predecessors
    # POST   /api/handovers/{id}/confirm/    - Confirm receipt
    # POST   /api/handovers/{id}/resolve/    - Resolve dispute

    # Station reports
    path(
        'stations/<uuid:station_id>/handovers/',
        views.station_handovers,
        name='station-handovers'
    ),
    path(
        'stations/<uuid:station_id>/handovers/summary/',
        views.cash_flow_summary,
        name='station-summary'
    ),
    path(
        'stations/<uuid:station_id>/handovers/unconfirmed/',
        views.unconfirmed_handovers,
        name='station-unconfirmed'
    ),
    path(
        'stations/<uuid:station_id>/handovers/bank-deposits/',
        views.bank_deposits,
        name='station-bank-deposits'
    ),

    path('', include(router.urls)),
]
