from django.db import transaction
from rest_framework import serializers as drf_serializers, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.accounts.models import UserRole
from apps.stations.permissions import HasMinRole
from .apps import get_handover_config
from .models import HandoverStatus
from .serializers import (
    BankDepositInputSerializer,
    BankDepositReportSerializer,
    CashFlowSummarySerializer,
    CashHandoverSerializer,
    DateRangeSerializer,
    HandoverConfirmInputSerializer,
    HandoverCreateInputSerializer,
    HandoverResolveInputSerializer,
    OptionalDateRangeSerializer,
    PendingFilterSerializer,
    ShiftCloseInputSerializer,
    StationHandoverFilterSerializer,
)
from . import services


# Response serializers for API documentation
class HandoverResponseSerializer(drf_serializers.Serializer):
    success = drf_serializers.BooleanField()
    message = drf_serializers.CharField(required=False)
    data = CashHandoverSerializer()


class HandoverListResponseSerializer(drf_serializers.Serializer):
    success = drf_serializers.BooleanField()
    data = CashHandoverSerializer(many=True)
    count = drf_serializers.IntegerField()


class UnconfirmedResponseSerializer(HandoverListResponseSerializer):
    alert = drf_serializers.CharField(required=False)


class SummaryResponseSerializer(drf_serializers.Serializer):
    success = drf_serializers.BooleanField()
    data = CashFlowSummarySerializer()


class BankDepositsResponseSerializer(drf_serializers.Serializer):
    success = drf_serializers.BooleanField()
    data = BankDepositReportSerializer()


class HandoverPagination(PageNumberPagination):
    """Page-number pagination wrapped in the API envelope."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100

    def get_paginated_response(self, data):
        return Response({
            'success': True,
            'data': data,
            'pagination': {
                'page': self.page.number,
                'page_size': self.get_page_size(self.request),
                'total': self.page.paginator.count,
                'total_pages': self.page.paginator.num_pages,
            },
        })


def _handover_response(handover, message=None, status_code=status.HTTP_200_OK):
    body = {'success': True, 'data': CashHandoverSerializer(handover).data}
    if message:
        body['message'] = message
    return Response(body, status=status_code)


class CashHandoverViewSet(viewsets.GenericViewSet):
    """
    Cash handover workflow.

    create: Create the next handover in a station's chain
    retrieve: Get a handover
    pending: Handovers waiting on the caller
    chain: A handover and its predecessors
    confirm: Confirm receipt of a pending handover
    resolve: Resolve a disputed handover
    bank_deposit: Record a bank deposit
    shift_close: Record cash collected at the end of a shift
    """

    serializer_class = CashHandoverSerializer
    permission_classes = [IsAuthenticated]
    lookup_value_regex = '[0-9a-fA-F-]{36}'

    def get_permissions(self):
        """Role gates run before any input is parsed."""
        if self.action in ['create', 'shift_close']:
            return [IsAuthenticated(), HasMinRole.at_least(UserRole.MANAGER)()]
        elif self.action == 'bank_deposit':
            return [IsAuthenticated(), HasMinRole.at_least(UserRole.OWNER)()]
        return super().get_permissions()

    @extend_schema(
        request=HandoverCreateInputSerializer,
        responses={201: HandoverResponseSerializer},
        tags=['handovers'],
    )
    def create(self, request):
        """
        Create a handover.

        POST /api/handovers/
        """
        serializer = HandoverCreateInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        handover = services.create_handover(
            actor=request.user,
            station_id=data['station_id'],
            handover_type=data['handover_type'],
            handover_date=data.get('handover_date'),
            from_user_id=data.get('from_user_id'),
            expected_amount=data.get('expected_amount'),
            notes=data.get('notes', ''),
            config=get_handover_config(),
        )
        return _handover_response(handover, 'Handover created', status.HTTP_201_CREATED)

    @extend_schema(responses={200: HandoverResponseSerializer}, tags=['handovers'])
    def retrieve(self, request, pk=None):
        """
        Get a handover.

        GET /api/handovers/{id}/
        """
        handover = services.get_handover(actor=request.user, handover_id=pk)
        return _handover_response(handover)

    @extend_schema(
        parameters=[OpenApiParameter('station_id', str, required=False)],
        responses={200: HandoverListResponseSerializer},
        tags=['handovers'],
    )
    @action(detail=False, methods=['get'])
    def pending(self, request):
        """
        Handovers waiting on the caller.

        GET /api/handovers/pending/?station_id=
        """
        filter_serializer = PendingFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)

        handovers = services.pending_for_user(
            actor=request.user,
            station_id=filter_serializer.validated_data.get('station_id'),
        )
        return Response({
            'success': True,
            'data': CashHandoverSerializer(handovers, many=True).data,
            'count': len(handovers),
        })

    @extend_schema(responses={200: HandoverListResponseSerializer}, tags=['handovers'])
    @action(detail=True, methods=['get'])
    def chain(self, request, pk=None):
        """
        A handover and its predecessors, oldest first.

        GET /api/handovers/{id}/chain/
        """
        handovers = services.handover_chain(actor=request.user, handover_id=pk)
        return Response({
            'success': True,
            'data': CashHandoverSerializer(handovers, many=True).data,
            'count': len(handovers),
        })

    @extend_schema(
        request=HandoverConfirmInputSerializer,
        responses={200: HandoverResponseSerializer},
        tags=['handovers'],
    )
    @action(detail=True, methods=['post'])
    def confirm(self, request, pk=None):
        """
        Confirm receipt of a pending handover.

        POST /api/handovers/{id}/confirm/
        Body: {"actual_amount": "4500.00"} or {"accept_as_is": true}
        """
        serializer = HandoverConfirmInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        handover = services.confirm_handover(
            actor=request.user,
            handover_id=pk,
            actual_amount=data.get('actual_amount'),
            accept_as_is=data.get('accept_as_is', False),
            notes=data.get('notes'),
            config=get_handover_config(),
        )
        if handover.status == HandoverStatus.DISPUTED:
            message = 'Handover disputed: amount differs from expected'
        else:
            message = 'Handover confirmed'
        return _handover_response(handover, message)

    @extend_schema(
        request=HandoverResolveInputSerializer,
        responses={200: HandoverResponseSerializer},
        tags=['handovers'],
    )
    @action(detail=True, methods=['post'])
    def resolve(self, request, pk=None):
        """
        Resolve a disputed handover.

        POST /api/handovers/{id}/resolve/
        Body: {"resolution_notes": "..."}
        """
        serializer = HandoverResolveInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        handover = services.resolve_dispute(
            actor=request.user,
            handover_id=pk,
            resolution_notes=serializer.validated_data['resolution_notes'],
        )
        return _handover_response(handover, 'Dispute resolved')

    @extend_schema(
        request=BankDepositInputSerializer,
        responses={201: HandoverResponseSerializer},
        tags=['handovers'],
    )
    @action(detail=False, methods=['post'], url_path='bank-deposit')
    def bank_deposit(self, request):
        """
        Record a bank deposit.

        POST /api/handovers/bank-deposit/
        """
        serializer = BankDepositInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        handover = services.record_bank_deposit(
            actor=request.user,
            station_id=data['station_id'],
            amount=data['amount'],
            handover_date=data.get('handover_date'),
            bank_name=data.get('bank_name', ''),
            deposit_reference=data.get('deposit_reference', ''),
            deposit_receipt_url=data.get('deposit_receipt_url', ''),
            notes=data.get('notes', ''),
            config=get_handover_config(),
        )
        return _handover_response(handover, 'Bank deposit recorded', status.HTTP_201_CREATED)

    @extend_schema(
        request=ShiftCloseInputSerializer,
        responses={201: HandoverResponseSerializer},
        tags=['handovers'],
    )
    @action(detail=False, methods=['post'], url_path='shift-close')
    def shift_close(self, request):
        """
        Record the cash an employee collected during a shift.

        POST /api/handovers/shift-close/
        """
        serializer = ShiftCloseInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        handover = services.create_shift_collection(
            actor=request.user,
            station_id=data['station_id'],
            employee_id=data['employee_id'],
            cash_collected=data['cash_collected'],
            expected_cash=data.get('expected_cash'),
            handover_date=data.get('handover_date'),
            config=get_handover_config(),
        )
        return _handover_response(handover, 'Shift collection recorded', status.HTTP_201_CREATED)


# =============================================================================
# Station-scoped reports
# =============================================================================

@extend_schema(
    parameters=[StationHandoverFilterSerializer],
    responses={200: CashHandoverSerializer(many=True)},
    tags=['handovers'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def station_handovers(request, station_id):
    """
    Handover history of a station, newest first.

    GET /api/stations/{station_id}/handovers/?start_date=&end_date=&handover_type=&status=&page=&page_size=
    """
    filter_serializer = StationHandoverFilterSerializer(data=request.query_params)
    filter_serializer.is_valid(raise_exception=True)
    params = filter_serializer.validated_data

    # Count and page slice read the same snapshot
    with transaction.atomic():
        queryset = services.station_handovers(
            actor=request.user,
            station_id=station_id,
            start_date=params.get('start_date'),
            end_date=params.get('end_date'),
            handover_type=params.get('handover_type'),
            status=params.get('status'),
        )

        paginator = HandoverPagination()
        page = paginator.paginate_queryset(queryset, request)
        serializer = CashHandoverSerializer(page, many=True)
        data = serializer.data
    return paginator.get_paginated_response(data)


@extend_schema(
    parameters=[DateRangeSerializer],
    responses={200: SummaryResponseSerializer},
    tags=['handovers'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def cash_flow_summary(request, station_id):
    """
    Cash flow totals per stage and status.

    GET /api/stations/{station_id}/handovers/summary/?start_date=&end_date=
    """
    range_serializer = DateRangeSerializer(data=request.query_params)
    range_serializer.is_valid(raise_exception=True)

    summary = services.cash_flow_summary(
        actor=request.user,
        station_id=station_id,
        start_date=range_serializer.validated_data['start_date'],
        end_date=range_serializer.validated_data['end_date'],
    )
    return Response({'success': True, 'data': CashFlowSummarySerializer(summary).data})


@extend_schema(
    parameters=[OptionalDateRangeSerializer],
    responses={200: UnconfirmedResponseSerializer},
    tags=['handovers'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def unconfirmed_handovers(request, station_id):
    """
    Pending handovers that still need confirmation.

    GET /api/stations/{station_id}/handovers/unconfirmed/?start_date=&end_date=
    """
    range_serializer = OptionalDateRangeSerializer(data=request.query_params)
    range_serializer.is_valid(raise_exception=True)

    handovers = services.unconfirmed_handovers(
        actor=request.user,
        station_id=station_id,
        start_date=range_serializer.validated_data.get('start_date'),
        end_date=range_serializer.validated_data.get('end_date'),
        config=get_handover_config(),
    )

    body = {
        'success': True,
        'data': CashHandoverSerializer(handovers, many=True).data,
        'count': len(handovers),
    }
    if handovers:
        body['alert'] = f"{len(handovers)} handover(s) awaiting confirmation"
    return Response(body)


@extend_schema(
    parameters=[DateRangeSerializer],
    responses={200: BankDepositsResponseSerializer},
    tags=['handovers'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def bank_deposits(request, station_id):
    """
    Bank deposits with a running total.

    GET /api/stations/{station_id}/handovers/bank-deposits/?start_date=&end_date=
    """
    range_serializer = DateRangeSerializer(data=request.query_params)
    range_serializer.is_valid(raise_exception=True)

    report = services.bank_deposits(
        actor=request.user,
        station_id=station_id,
        start_date=range_serializer.validated_data['start_date'],
        end_date=range_serializer.validated_data['end_date'],
    )
    return Response({'success': True, 'data': BankDepositReportSerializer(report).data})
