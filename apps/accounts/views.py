from rest_framework import serializers as drf_serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .serializers import UserLoginSerializer, UserSerializer
from .services import start_session


class TokenPairSerializer(drf_serializers.Serializer):
    refresh = drf_serializers.CharField()
    access = drf_serializers.CharField()


class SessionSerializer(drf_serializers.Serializer):
    user = UserSerializer()
    tokens = TokenPairSerializer()


class LoginResponseSerializer(drf_serializers.Serializer):
    success = drf_serializers.BooleanField()
    message = drf_serializers.CharField()
    data = SessionSerializer()


class ProfileResponseSerializer(drf_serializers.Serializer):
    success = drf_serializers.BooleanField()
    data = UserSerializer()


@extend_schema(
    request=UserLoginSerializer,
    responses={200: LoginResponseSerializer},
    description="Exchange staff email and password for a JWT pair.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """
    POST /api/auth/login/

    Wrong credentials answer 401, a deactivated account 403.
    """
    serializer = UserLoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    session = start_session(**serializer.validated_data)
    return Response({
        'success': True,
        'message': 'Login successful',
        'data': SessionSerializer(session).data,
    })


@extend_schema(responses={200: ProfileResponseSerializer}, tags=['auth'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me(request):
    """GET /api/auth/me/"""
    return Response({'success': True, 'data': UserSerializer(request.user).data})
