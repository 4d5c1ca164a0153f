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
from datetime import datetime
from .models import Setting, AuditLog
from .permissions import IsAdminRole, IsManagerOrAdmin
from .serializers import (
    UserSerializer, UserCreateSerializer, RegisterSerializer,
    UserStatusSerializer, UserRoleSerializer,
    SettingSerializer, ReceiptSettingsSerializer, AuditLogSerializer
)
from .utils import create_audit_log, get_receipt_settings, save_receipt_settings

User = get_user_model()

# Fields only an admin may change on a user record
ADMIN_ONLY_USER_FIELDS = ('role', 'is_active')


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
    """User registration endpoint (cashier accounts)"""
    serializer = RegisterSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        token = CustomTokenObtainPairSerializer.get_token(user)
        return Response({
            'user': UserSerializer(user).data,
            'access': str(token.access_token),
            'refresh': str(token),
        }, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get current user with role-derived capabilities"""
    user = request.user
    user_data = UserSerializer(user).data

    is_admin = user.is_admin_role
    is_manager_or_admin = user.is_manager_or_admin

    user_data['is_admin'] = is_admin
    user_data['can_access_dashboard'] = is_manager_or_admin
    user_data['can_access_reports'] = is_manager_or_admin
    user_data['can_manage_inventory'] = is_manager_or_admin
    user_data['can_manage_users'] = is_admin
    user_data['can_manage_settings'] = is_admin

    return Response(user_data)


# User views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsManagerOrAdmin])
def user_list_create(request):
    """List all users or create a new user (create is admin only)"""
    if request.method == 'GET':
        users = User.objects.all().order_by('username')
        role = request.query_params.get('role')
        if role:
            users = users.filter(role=role)
        serializer = UserSerializer(users, many=True)
        return Response(serializer.data)

    if not request.user.is_admin_role:
        return Response({'error': 'Only admins can create users'}, status=status.HTTP_403_FORBIDDEN)
    serializer = UserCreateSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        create_audit_log(
            request=request,
            action='create',
            model_name='User',
            object_id=user.id,
            object_name=user.username,
            changes={'role': user.role}
        )
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_roles(request):
    """Available roles"""
    return Response([value for value, _label in User.ROLE_CHOICES])


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def user_detail(request, pk):
    """Retrieve, update or delete a user. Users may manage their own record."""
    user = get_object_or_404(User, pk=pk)
    acting_user = request.user
    is_self = acting_user.pk == user.pk

    if not (is_self or acting_user.is_admin_role):
        if request.method == 'GET' and acting_user.is_manager_or_admin:
            return Response(UserSerializer(user).data)
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'GET':
        serializer = UserSerializer(user)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        if not acting_user.is_admin_role:
            blocked = [field for field in ADMIN_ONLY_USER_FIELDS if field in request.data]
            if blocked:
                return Response(
                    {'error': f"Only admins can change: {', '.join(blocked)}"},
                    status=status.HTTP_403_FORBIDDEN
                )
        serializer = UserSerializer(user, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            old_role = user.role
            serializer.save()
            if user.role != old_role:
                create_audit_log(
                    request=request,
                    action='role_change',
                    model_name='User',
                    object_id=user.id,
                    object_name=user.username,
                    changes={'role': {'old': old_role, 'new': user.role}}
                )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if not acting_user.is_admin_role:
            return Response({'error': 'Only admins can delete users'}, status=status.HTTP_403_FORBIDDEN)
        if is_self:
            return Response({'error': 'You cannot delete your own account'}, status=status.HTTP_400_BAD_REQUEST)
        username = user.username
        user_id = user.id
        user.delete()
        create_audit_log(
            request=request,
            action='delete',
            model_name='User',
            object_id=user_id,
            object_name=username
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PATCH', 'PUT'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_status(request, pk):
    """Activate or deactivate a user"""
    user = get_object_or_404(User, pk=pk)
    serializer = UserStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    is_active = serializer.validated_data['is_active']
    if user.pk == request.user.pk and not is_active:
        return Response({'error': 'You cannot deactivate your own account'}, status=status.HTTP_400_BAD_REQUEST)

    old_value = user.is_active
    user.is_active = is_active
    user.save(update_fields=['is_active', 'updated_at'])
    create_audit_log(
        request=request,
        action='status_change',
        model_name='User',
        object_id=user.id,
        object_name=user.username,
        changes={'is_active': {'old': old_value, 'new': is_active}}
    )
    return Response(UserSerializer(user).data)


@api_view(['PATCH', 'PUT'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_role(request, pk):
    """Change a user's role"""
    user = get_object_or_404(User, pk=pk)
    serializer = UserRoleSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_role = user.role
    user.role = serializer.validated_data['role']
    user.save(update_fields=['role', 'updated_at'])
    create_audit_log(
        request=request,
        action='role_change',
        model_name='User',
        object_id=user.id,
        object_name=user.username,
        changes={'role': {'old': old_role, 'new': user.role}}
    )
    return Response(UserSerializer(user).data)


# Setting views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def setting_list_create(request):
    """List all settings or create a new setting"""
    if request.method == 'GET':
        settings = Setting.objects.all()
        serializer = SettingSerializer(settings, many=True)
        return Response(serializer.data)
    else:
        serializer = SettingSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def setting_detail(request, pk):
    """Retrieve, update or delete a setting"""
    setting = get_object_or_404(Setting, pk=pk)

    if request.method == 'GET':
        serializer = SettingSerializer(setting)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SettingSerializer(setting, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        setting.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def receipt_settings(request):
    """Business profile printed on receipts"""
    if request.method == 'GET':
        return Response(get_receipt_settings())

    if not request.user.is_admin_role:
        return Response({'error': 'Admin access required.'}, status=status.HTTP_403_FORBIDDEN)
    serializer = ReceiptSettingsSerializer(data=request.data)
    if serializer.is_valid():
        saved = save_receipt_settings(serializer.validated_data)
        create_audit_log(
            request=request,
            action='update',
            model_name='Setting',
            object_id='receipt',
            object_name='Receipt settings',
            changes={'fields': sorted(serializer.validated_data.keys())}
        )
        return Response(saved)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user')

    # Non-admins only see their own activity
    if not request.user.is_admin_role:
        queryset = queryset.filter(user=request.user)

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    try:
        if date_from:
            queryset = queryset.filter(created_at__date__gte=datetime.strptime(date_from, '%Y-%m-%d').date())
        if date_to:
            queryset = queryset.filter(created_at__date__lte=datetime.strptime(date_to, '%Y-%m-%d').date())
    except ValueError:
        return Response({'error': 'Invalid date format. Use YYYY-MM-DD'}, status=status.HTTP_400_BAD_REQUEST)

    queryset = queryset.order_by('-created_at')[:500]
    serializer = AuditLogSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    audit_log = get_object_or_404(AuditLog, pk=pk)

    if not request.user.is_admin_role and audit_log.user != request.user:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    serializer = AuditLogSerializer(audit_log)
    return Response(serializer.data)
