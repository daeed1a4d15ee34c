"""Serializers for leads."""
from rest_framework import serializers

from leads.models import Lead


class ReferredClientSerializer(serializers.ModelSerializer):
    class Meta:
        model = Lead
        fields = ['id', 'client_name', 'client_company_name', 'order_id', 'stage', 'created_at']
        read_only_fields = fields


class LeadSerializer(serializers.ModelSerializer):
    """Read serializer; documents render as URLs."""

    class Meta:
        model = Lead
        fields = '__all__'
        read_only_fields = [f.name for f in Lead._meta.concrete_fields]


class LeadDetailSerializer(LeadSerializer):
    referred_clients = ReferredClientSerializer(many=True, read_only=True)


class LeadWriteSerializer(serializers.ModelSerializer):
    """Create/update input.

    Referral inputs are write-only and resolved by the service:
    ``existing`` needs ``referred_by_client_id``, ``other`` needs
    ``referred_by_other_name``, ``fresh`` clears the referral.
    """

    referred_by_type = serializers.ChoiceField(
        choices=Lead.ReferralType.choices,
        required=False,
        allow_null=True,
        allow_blank=True,
    )
    referred_by_client_id = serializers.UUIDField(required=False, allow_null=True)
    referred_by_client_name = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    referred_by_other_name = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    class Meta:
        model = Lead
        exclude = ['id', 'referred_by', 'referred_by_client', 'discounted_price', 'created_at', 'updated_at']
        extra_kwargs = {
            # Uniqueness is enforced by the service (409) and the database.
            'order_id': {'validators': []},
            'stage': {'required': True},
            'quoted_price': {'required': True},
            'billing_sent_status': {'required': True},
        }

    def validate(self, attrs):
        if self.partial:
            source = attrs.get('source', getattr(self.instance, 'source', None))
            other_source = attrs.get('other_source', getattr(self.instance, 'other_source', ''))
        else:
            source = attrs.get('source')
            other_source = attrs.get('other_source', '')
        if source == Lead.Source.OTHER and not (other_source or '').strip():
            raise serializers.ValidationError(
                {'other_source': 'Other Source is required when Source is "Other"'}
            )
        for field in ('quoted_price', 'discount_amount'):
            if attrs.get(field) is not None and attrs[field] < 0:
                raise serializers.ValidationError({field: 'Must not be negative.'})
        return attrs

