import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
from django.db.models import Q
from .models import AuditLog
from .permissions import IsAdminRole, is_admin_user
from .serializers import (
    UserSerializer, UserAdminSerializer, UserCreateSerializer, AdminUserCreateSerializer,
    AuditLogSerializer
)
from .utils import create_audit_log

logger = logging.getLogger(__name__)

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = user.role
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that reports deleted users as an invalid token"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """User registration endpoint (customers and suppliers)"""
    serializer = UserCreateSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        token = CustomTokenObtainPairSerializer.get_token(user)
        create_audit_log(
            request=request, user=user, action='register', model_name='User',
            object_id=user.id, object_name=user.username, changes={'role': user.role}
        )
        logger.info(f"Registered {user.role} account {user.username}")
        return Response({
            'user': UserSerializer(user).data,
            'access': str(token.access_token),
            'refresh': str(token),
        }, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get current user with role-derived access flags"""
    user = request.user
    user_data = UserSerializer(user).data
    is_admin = is_admin_user(user)
    user_data['is_admin'] = is_admin
    user_data['is_supplier'] = user.role == User.ROLE_SUPPLIER
    user_data['can_access_admin_dashboard'] = is_admin
    user_data['can_access_supplier_dashboard'] = user.role == User.ROLE_SUPPLIER or is_admin
    return Response(user_data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_list_create(request):
    """List users (optionally by role) or create a user of any role"""
    if request.method == 'GET':
        users = User.objects.all().order_by('id')
        role = request.query_params.get('role')
        if role:
            users = users.filter(role=role)
        active = request.query_params.get('active')
        if active in ('true', 'false'):
            users = users.filter(is_active=(active == 'true'))
        search = request.query_params.get('search', '').strip()
        if search:
            users = users.filter(
                Q(username__icontains=search) |
                Q(name__icontains=search) |
                Q(email__icontains=search) |
                Q(company_name__icontains=search)
            )
        serializer = UserAdminSerializer(users, many=True)
        return Response(serializer.data)
    else:
        serializer = AdminUserCreateSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            create_audit_log(
                request=request, action='create', model_name='User',
                object_id=user.id, object_name=user.username, changes={'role': user.role}
            )
            return Response(UserAdminSerializer(user).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_detail(request, pk):
    """Retrieve or update a user"""
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        serializer = UserAdminSerializer(user)
        return Response(serializer.data)

    previous_role = user.role
    serializer = UserAdminSerializer(user, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        if previous_role != user.role:
            create_audit_log(
                request=request, action='role_change', model_name='User', object_id=user.id,
                object_name=user.username, changes={'role': {'old': previous_role, 'new': user.role}}
            )
        else:
            create_audit_log(
                request=request, action='update', model_name='User', object_id=user.id,
                object_name=user.username, changes={'fields': sorted(request.data.keys())}
            )
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user')

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model_name', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    queryset = queryset.order_by('-created_at')[:500]
    serializer = AuditLogSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    audit_log = get_object_or_404(AuditLog, pk=pk)
    serializer = AuditLogSerializer(audit_log)
    return Response(serializer.data)
