from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, AuditLog


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'name', 'role', 'company_name', 'cnpj', 'phone',
                  'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class UserAdminSerializer(UserSerializer):
    """Admin view of a user; role and active flag are writable"""

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['is_staff', 'is_superuser', 'last_login']
        read_only_fields = ['created_at', 'updated_at', 'is_superuser', 'last_login']


class PublicUserSerializer(serializers.ModelSerializer):
    """User data that is safe to show other marketplace users"""
    class Meta:
        model = User
        fields = ['id', 'username', 'name', 'role', 'company_name', 'phone']


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True)
    role = serializers.ChoiceField(
        choices=[(User.ROLE_USER, 'Customer'), (User.ROLE_SUPPLIER, 'Supplier')],
        default=User.ROLE_USER
    )

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password_confirm', 'name', 'role',
                  'company_name', 'cnpj', 'phone']

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        if attrs.get('role') == User.ROLE_SUPPLIER and not attrs.get('company_name'):
            raise serializers.ValidationError({"company_name": "Suppliers must provide a company name"})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        user = User(**validated_data, is_active=True)
        user.set_password(password)
        user.save()
        return user


class AdminUserCreateSerializer(UserCreateSerializer):
    """Admins may also create other admins"""
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES, default=User.ROLE_USER)


class AuditLogSerializer(serializers.ModelSerializer):
    user = PublicUserSerializer(read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'action', 'model_name', 'object_id', 'object_name',
                  'object_reference', 'changes', 'ip_address', 'created_at']
