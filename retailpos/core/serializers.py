from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from django.contrib.auth.validators import UnicodeUsernameValidator
from .models import User, Setting, AuditLog
from .validators import validate_gstin, validate_phone


class UserSerializer(serializers.ModelSerializer):
    """Read/update serializer; never exposes the password hash"""
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True,
                                  validators=[validate_phone])

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'phone', 'role',
                  'is_active', 'last_login', 'created_at', 'updated_at']
        read_only_fields = ['last_login', 'created_at', 'updated_at']

    def validate_phone(self, value):
        return value or None


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True, required=False)
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES, default=User.ROLE_CASHIER)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password_confirm', 'first_name', 'last_name', 'phone', 'role']
        extra_kwargs = {
            # Duplicate usernames are reported by validate_username below
            'username': {'validators': [UnicodeUsernameValidator()]},
            'phone': {'validators': [validate_phone]},
        }

    def validate_username(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Username is required")
        if User.objects.filter(username__iexact=value).exists():
            raise serializers.ValidationError("Username already exists")
        return value

    def validate(self, attrs):
        confirm = attrs.get('password_confirm')
        if confirm is not None and attrs['password'] != confirm:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm', None)
        password = validated_data.pop('password')
        user = User(**validated_data, is_active=True)
        user.set_password(password)
        user.save()
        return user


class RegisterSerializer(UserCreateSerializer):
    """Self-registration always yields a cashier"""
    password_confirm = serializers.CharField(write_only=True)

    class Meta(UserCreateSerializer.Meta):
        fields = ['username', 'email', 'password', 'password_confirm', 'first_name', 'last_name', 'phone']

    def create(self, validated_data):
        validated_data['role'] = User.ROLE_CASHIER
        return super().create(validated_data)


class UserStatusSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()

    def to_internal_value(self, data):
        # Only real booleans are accepted; "yes" or 1 are rejected
        value = data.get('is_active') if hasattr(data, 'get') else None
        if not isinstance(value, bool):
            raise serializers.ValidationError({'is_active': ['Must be a boolean (true or false).']})
        return super().to_internal_value(data)


class UserRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES)


class SettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Setting
        fields = ['id', 'key', 'value', 'description', 'updated_at']


class ReceiptSettingsSerializer(serializers.Serializer):
    business_name = serializers.CharField(max_length=200)
    business_address = serializers.CharField(required=False, allow_blank=True)
    phone_number = serializers.CharField(max_length=20, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    tax_id = serializers.CharField(max_length=15, required=False, allow_blank=True)
    receipt_footer = serializers.CharField(required=False, allow_blank=True)
    show_qr_code = serializers.BooleanField(required=False)
    terms_conditions = serializers.CharField(required=False, allow_blank=True)
    return_policy = serializers.CharField(required=False, allow_blank=True)

    def validate_business_name(self, value):
        if not value.strip():
            raise serializers.ValidationError("Business name is required")
        return value.strip()

    def validate_tax_id(self, value):
        value = value.strip().upper()
        if value:
            validate_gstin(value)
        return value


class AuditLogSerializer(serializers.ModelSerializer):
    user = serializers.SerializerMethodField()

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'action', 'model_name', 'object_id', 'object_name',
                  'object_reference', 'changes', 'ip_address', 'created_at']

    def get_user(self, obj):
        if obj.user is None:
            return None
        return {'id': obj.user.id, 'username': obj.user.username, 'role': obj.user.role}
