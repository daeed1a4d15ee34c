"""Serializers for the CRM API v1 (accounts, stores, purchases, notifications)."""
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers
from rest_framework.exceptions import PermissionDenied
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from notifications.models import LeadNotification
from purchases.models import MTokenSerialNumber, PurchaseOrder
from stores.models import Store

User = get_user_model()


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

class UserSerializer(serializers.ModelSerializer):
    """Read/update serializer for User model."""

    class Meta:
        model = User
        fields = [
            'id', 'email', 'full_name', 'phone', 'image',
            'role', 'is_active', 'date_joined',
        ]
        read_only_fields = ['id', 'email', 'date_joined']


class UserCreateSerializer(serializers.ModelSerializer):
    """Serializer used by admins to create accounts."""

    password = serializers.CharField(write_only=True, min_length=8)

    class Meta:
        model = User
        fields = [
            'id', 'email', 'full_name', 'phone', 'image',
            'role', 'is_active', 'password',
        ]
        read_only_fields = ['id']

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('Email already exists')
        return value

    def validate_password(self, value):
        try:
            validate_password(value)
        except DjangoValidationError as exc:
            raise serializers.ValidationError(list(exc.messages))
        return value

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(password=password, **validated_data)


class RegisterSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=30)
    password = serializers.CharField(write_only=True, min_length=8)
    image = serializers.ImageField(required=False, allow_null=True)

    def validate_full_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Full name is required.')
        return value.strip()


class MeSerializer(serializers.ModelSerializer):
    """The authenticated user's own profile (GET/PATCH)."""

    class Meta:
        model = User
        fields = [
            'id', 'email', 'full_name', 'phone', 'image',
            'role', 'is_active', 'is_superuser',
        ]
        read_only_fields = ['id', 'email', 'role', 'is_active', 'is_superuser']


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

class LoginSerializer(TokenObtainPairSerializer):
    """JWT pair for users who log in under the role they actually hold."""

    selected_role = serializers.CharField(
        write_only=True,
        error_messages={
            'required': 'Please select a role to continue',
            'blank': 'Please select a role to continue',
        },
    )

    def validate(self, attrs):
        selected_role = attrs.pop('selected_role').strip().upper()
        data = super().validate(attrs)
        if self.user.role != selected_role:
            raise PermissionDenied(
                f'Invalid credentials for {selected_role.lower()} role. '
                'Please select the correct role or check your credentials.'
            )
        data['user'] = MeSerializer(self.user, context=self.context).data
        return data


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()


class VerifyResetCodeSerializer(serializers.Serializer):
    email = serializers.EmailField()
    code = serializers.RegexField(r'^\d{6}$', error_messages={'invalid': 'Code must be 6 digits.'})


class ResetPasswordSerializer(VerifyResetCodeSerializer):
    new_password = serializers.CharField(
        write_only=True,
        min_length=8,
        error_messages={'min_length': 'Password must be at least 8 characters long'},
    )


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField()


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

class StoreSerializer(serializers.ModelSerializer):
    purchase_order_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Store
        fields = ['id', 'name', 'description', 'purchase_order_count', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']


class StoreWriteSerializer(serializers.Serializer):
    """Presence is checked by the service so both fields report together."""

    name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)


# ---------------------------------------------------------------------------
# Purchase orders / MToken serials
# ---------------------------------------------------------------------------

class MTokenSerialNumberSerializer(serializers.ModelSerializer):
    store_name = serializers.CharField(source='store.name', read_only=True)

    class Meta:
        model = MTokenSerialNumber
        fields = [
            'id', 'serial_number', 'purchase_order', 'store', 'store_name',
            'purchase_date', 'is_used', 'used_in_lead', 'created_at',
        ]
        read_only_fields = fields


class PurchaseOrderSerializer(serializers.ModelSerializer):
    store_name = serializers.CharField(source='store.name', read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = [
            'id', 'store', 'store_name', 'product_name', 'quantity',
            'amount', 'purchase_date', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class PurchaseOrderDetailSerializer(PurchaseOrderSerializer):
    serial_numbers = MTokenSerialNumberSerializer(many=True, read_only=True)

    class Meta(PurchaseOrderSerializer.Meta):
        fields = PurchaseOrderSerializer.Meta.fields + ['serial_numbers']
        read_only_fields = fields


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

class LeadNotificationSerializer(serializers.ModelSerializer):
    lead_client_name = serializers.CharField(source='lead.client_name', read_only=True)
    lead_order_id = serializers.CharField(source='lead.order_id', read_only=True)

    class Meta:
        model = LeadNotification
        fields = [
            'id', 'lead', 'lead_client_name', 'lead_order_id',
            'is_viewed', 'viewed_at', 'created_at',
        ]
        read_only_fields = fields
