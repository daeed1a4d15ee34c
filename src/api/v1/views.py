"""ViewSets and API views for the CRM API v1 (users, stores, purchases, notifications)."""
import logging
import uuid

from django.contrib.auth import get_user_model
from django.db.models import Count

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from notifications.models import LeadNotification
from notifications.services import mark_all_viewed
from purchases.models import PurchaseOrder
from purchases.services import (
    create_purchase_order,
    delete_purchase_order,
    list_serial_numbers,
    mark_mtoken_as_used,
    search_unused_serial_numbers,
    update_purchase_order,
)
from stores.models import Store
from stores.services import create_store, delete_store, update_store

from api.v1.permissions import IsManagerOrAdmin, ReadOnlyOrAdmin, ReadOnlyOrManager
from api.v1.serializers import (
    LeadNotificationSerializer,
    MeSerializer,
    MTokenSerialNumberSerializer,
    PurchaseOrderDetailSerializer,
    PurchaseOrderSerializer,
    StoreSerializer,
    StoreWriteSerializer,
    UserCreateSerializer,
    UserSerializer,
)

logger = logging.getLogger("crm")
User = get_user_model()


def _query_uuid(request, name):
    """Read an optional UUID query parameter; a malformed value is a 400."""
    raw = (request.query_params.get(name) or "").strip()
    if not raw:
        return None
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise ValidationError({name: "Must be a valid UUID."})


def _query_bool(request, name):
    raw = (request.query_params.get(name) or "").strip().lower()
    if raw in ("true", "1", "yes"):
        return True
    if raw in ("false", "0", "no"):
        return False
    return None


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

class UserViewSet(viewsets.ModelViewSet):
    """
    Users. Everyone authenticated can list them (name pickers on lead
    forms); only admins create, edit or remove accounts.
    """

    queryset = User.objects.all()
    permission_classes = [ReadOnlyOrAdmin]
    filterset_fields = ['role', 'is_active']
    search_fields = ['email', 'full_name']
    ordering_fields = ['full_name', 'date_joined', 'role']
    not_found_message = 'User not found'

    def get_serializer_class(self):
        if self.action == 'create':
            return UserCreateSerializer
        return UserSerializer

    def perform_destroy(self, instance):
        if instance.pk == self.request.user.pk:
            raise ValidationError({'detail': 'You cannot delete your own account.'})
        instance.delete()


class MeView(APIView):
    """
    GET /api/v1/auth/me/ - return the authenticated user's profile.
    PATCH /api/v1/auth/me/ - update full_name, phone, image.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        serializer = MeSerializer(request.user, context={'request': request})
        return Response(serializer.data)

    def patch(self, request):
        serializer = MeSerializer(
            request.user, data=request.data, partial=True, context={'request': request},
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

class StoreViewSet(viewsets.ModelViewSet):
    """
    Stores that MToken purchase orders are booked against.

    A store still referenced by a purchase order cannot be deleted (409).
    """

    queryset = Store.objects.annotate(purchase_order_count=Count('purchase_orders'))
    serializer_class = StoreSerializer
    permission_classes = [ReadOnlyOrManager]
    search_fields = ['name', 'description']
    ordering_fields = ['name', 'created_at']
    not_found_message = 'Store not found'

    def create(self, request, *args, **kwargs):
        payload = StoreWriteSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        store = create_store(
            name=payload.validated_data.get('name'),
            description=payload.validated_data.get('description'),
        )
        store.purchase_order_count = 0
        return Response(
            {'message': 'Store created successfully', 'store': StoreSerializer(store).data},
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, *args, **kwargs):
        store = self.get_object()
        payload = StoreWriteSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        store = update_store(
            store,
            name=payload.validated_data.get('name'),
            description=payload.validated_data.get('description'),
        )
        return Response(
            {'message': 'Store updated successfully', 'store': StoreSerializer(store).data},
        )

    def destroy(self, request, *args, **kwargs):
        store_id = delete_store(kwargs['pk'])
        return Response({'message': 'Store deleted successfully', 'store_id': str(store_id)})


# ---------------------------------------------------------------------------
# Purchase orders and MToken serial numbers
# ---------------------------------------------------------------------------

class PurchaseOrderViewSet(viewsets.ModelViewSet):
    """
    MToken purchase orders and the serial numbers they allocate.

    Managers and admins book, edit and delete orders.  Any authenticated
    user can browse serials and mark one as used by a lead.
    """

    queryset = PurchaseOrder.objects.select_related('store').prefetch_related('serial_numbers')
    filterset_fields = ['store']
    search_fields = ['product_name', 'store__name']
    ordering_fields = ['purchase_date', 'created_at', 'amount', 'quantity']
    not_found_message = 'Purchase order not found'

    def get_permissions(self):
        if self.action in ('create', 'update', 'partial_update', 'destroy'):
            return [IsManagerOrAdmin()]
        return [IsAuthenticated()]

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return PurchaseOrderDetailSerializer
        return PurchaseOrderSerializer

    def create(self, request, *args, **kwargs):
        data = request.data
        order, serials = create_purchase_order(
            store_id=data.get('store_id') or data.get('store'),
            quantity=data.get('quantity'),
            amount=data.get('amount'),
            purchase_date=data.get('purchase_date'),
            serial_numbers=data.get('serial_numbers'),
            product_name=data.get('product_name') or '',
        )
        return Response(
            {
                'message': 'Purchase order created successfully',
                'order': PurchaseOrderSerializer(order).data,
                'serial_numbers': MTokenSerialNumberSerializer(serials, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, *args, **kwargs):
        order = self.get_object()
        data = request.data
        order = update_purchase_order(
            order,
            store_id=data.get('store_id') or data.get('store'),
            quantity=data.get('quantity'),
            amount=data.get('amount'),
            purchase_date=data.get('purchase_date'),
            product_name=data.get('product_name'),
        )
        order = self.get_queryset().get(pk=order.pk)
        return Response(
            {
                'message': 'Purchase order updated successfully',
                'order': PurchaseOrderDetailSerializer(order).data,
            },
        )

    def destroy(self, request, *args, **kwargs):
        order_id = delete_purchase_order(self.get_object())
        return Response(
            {'message': 'Purchase order deleted successfully', 'order_id': str(order_id)},
        )

    @action(detail=False, methods=['get'], url_path='serial/all')
    def serial_all(self, request):
        """Every serial number, optionally filtered by ``store_id`` and ``is_used``."""
        serials = list_serial_numbers(
            store_id=_query_uuid(request, 'store_id'),
            is_used=_query_bool(request, 'is_used'),
        )
        data = MTokenSerialNumberSerializer(serials, many=True).data
        return Response({'serials': data, 'total': len(data)})

    @action(detail=False, methods=['get'], url_path='serial/search')
    def serial_search(self, request):
        """Unused serial numbers matching ``query`` (substring), optionally per store."""
        serials = search_unused_serial_numbers(
            query=request.query_params.get('query'),
            store_id=_query_uuid(request, 'store_id'),
        )
        data = MTokenSerialNumberSerializer(serials, many=True).data
        return Response({'results': data, 'total': len(data)})

    @action(detail=False, methods=['post'], url_path='serial/mark-used')
    def serial_mark_used(self, request):
        serial = mark_mtoken_as_used(
            serial_number=request.data.get('serial_number'),
            lead_id=request.data.get('lead_id'),
        )
        return Response(
            {'message': 'MToken marked as used', 'serial': MTokenSerialNumberSerializer(serial).data},
        )


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

class NotificationViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    The caller's lead-assignment notifications.

    Notifications are created by the lead services, never directly via the
    API.  This ViewSet only exposes list, retrieve, mark-viewed,
    mark-all-viewed and unread-count.
    """

    serializer_class = LeadNotificationSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ['is_viewed']
    ordering_fields = ['created_at']
    not_found_message = 'Notification not found'

    def get_queryset(self):
        return (
            LeadNotification.objects
            .filter(user=self.request.user)
            .select_related('lead')
            .order_by('-created_at')
        )

    @action(detail=True, methods=['post'], url_path='mark-viewed')
    def mark_viewed(self, request, pk=None):
        notification = self.get_object()
        notification.mark_as_viewed()
        return Response(LeadNotificationSerializer(notification).data)

    @action(detail=False, methods=['post'], url_path='mark-all-viewed')
    def mark_all_viewed(self, request):
        updated = mark_all_viewed(request.user)
        return Response({'message': f'{updated} notification(s) marked as viewed', 'updated': updated})

    @action(detail=False, methods=['get'], url_path='unread-count')
    def unread_count(self, request):
        count = self.get_queryset().filter(is_viewed=False).count()
        return Response({'unread_count': count})
