from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .access import accessible_station_ids
from .models import Station
from .permissions import CanAccessStation
from .serializers import StationSerializer


class StationViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only station listing scoped by the access policy.

    list: Stations the caller can act on
    retrieve: A single station (403 if outside the caller's scope)
    """

    serializer_class = StationSerializer
    permission_classes = [IsAuthenticated, CanAccessStation]

    def get_queryset(self):
        queryset = Station.objects.select_related('owner')
        if self.action == 'list':
            return queryset.filter(id__in=accessible_station_ids(self.request.user))
        return queryset

    def list(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return Response({
            'success': True,
            'data': serializer.data,
            'count': len(serializer.data),
        })

    def retrieve(self, request, *args, **kwargs):
        station = self.get_object()
        return Response({'success': True, 'data': self.get_serializer(station).data})
