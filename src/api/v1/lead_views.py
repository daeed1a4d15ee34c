"""ViewSet for leads, including the bulk CSV, Excel and JSON import."""
import csv
import io
import json
import logging
from collections.abc import Mapping
from datetime import date, datetime
from zipfile import BadZipFile

import openpyxl
from django.db import transaction
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from leads.importer import import_leads
from leads.models import Lead
from leads.services import (
    assigned_leads_for,
    create_lead,
    delete_lead,
    update_assignment_status,
    update_lead,
)

from api.v1.lead_serializers import (
    LeadDetailSerializer,
    LeadSerializer,
    LeadWriteSerializer,
)
from api.v1.permissions import IsManagerOrAdmin

logger = logging.getLogger("crm")

CSV_MAX_BYTES = 5 * 1024 * 1024
XLSX_EXTENSIONS = (".xlsx", ".xlsm")


def _decode_uploaded_csv(uploaded_file) -> str:
    """Decode uploaded CSV content with utf-8 fallback and size guard."""
    if getattr(uploaded_file, "size", 0) and uploaded_file.size > CSV_MAX_BYTES:
        raise ValidationError({"file": "The CSV file exceeds 5 MB."})

    raw = uploaded_file.read()
    if not raw:
        raise ValidationError({"file": "The CSV file is empty."})

    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def _build_csv_dict_reader(content: str) -> csv.DictReader:
    """Build a DictReader with automatic delimiter detection."""
    sample = content[:4096]
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=",;|\t")
    except csv.Error:
        dialect = csv.excel
    return csv.DictReader(io.StringIO(content), dialect=dialect)


def _xlsx_cell(value):
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return value


def _read_xlsx_rows(uploaded_file) -> list[dict]:
    """First sheet of an Excel workbook as dicts keyed by the header row."""
    if getattr(uploaded_file, "size", 0) and uploaded_file.size > CSV_MAX_BYTES:
        raise ValidationError({"file": "The Excel file exceeds 5 MB."})
    try:
        wb = openpyxl.load_workbook(uploaded_file, read_only=True, data_only=True)
    except (BadZipFile, OSError, KeyError, ValueError):
        raise ValidationError({"file": "The Excel file could not be read."})

    try:
        rows = wb.active.iter_rows(values_only=True)
        header = next(rows, None)
        if not header or not any(cell is not None for cell in header):
            raise ValidationError({"file": "Excel headers not found."})
        headers = [str(cell).strip() if cell is not None else "" for cell in header]
        records = []
        for row in rows:
            if all(cell is None or str(cell).strip() == "" for cell in row):
                continue
            records.append({
                name: _xlsx_cell(cell)
                for name, cell in zip(headers, row)
                if name
            })
    finally:
        wb.close()
    return records


def _records_from_request(request):
    """Rows to import: a multipart ``file`` (CSV or Excel) or a ``leads`` list (JSON)."""
    uploaded = request.FILES.get("file")
    if uploaded and uploaded.name.lower().endswith(XLSX_EXTENSIONS):
        return _read_xlsx_rows(uploaded)
    if uploaded:
        reader = _build_csv_dict_reader(_decode_uploaded_csv(uploaded))
        if not reader.fieldnames:
            raise ValidationError({"file": "CSV headers not found."})
        return [
            row for row in reader
            if any(str(value).strip() for value in row.values() if value is not None)
        ]

    if not isinstance(request.data, Mapping):
        raise ValidationError({"leads": "Must be a JSON array of lead objects."})
    leads = request.data.get("leads")
    if isinstance(leads, str):
        try:
            leads = json.loads(leads)
        except ValueError:
            raise ValidationError({"leads": "Must be a JSON array of lead objects."})
    if leads is None:
        return []
    if not isinstance(leads, list):
        raise ValidationError({"leads": "Must be a JSON array of lead objects."})
    return leads


class LeadViewSet(viewsets.ModelViewSet):
    """
    Sales-pipeline leads.

    - Any authenticated user can read, create and update leads.
    - Deleting a lead is reserved to managers and admins.
    - Documents are sent as multipart uploads on create/update.
    """

    queryset = Lead.objects.all()
    permission_classes = [IsAuthenticated]
    filterset_fields = ['stage', 'source', 'payment_status', 'assignment_status', 'assign_team_member']
    search_fields = ['client_name', 'client_company_name', 'order_id', 'email', 'phone']
    ordering_fields = ['created_at', 'order_date', 'quoted_price', 'client_name']
    not_found_message = 'Lead not found'

    def get_permissions(self):
        if self.action == 'destroy':
            return [IsManagerOrAdmin()]
        return super().get_permissions()

    def get_serializer_class(self):
        if self.action in ('create', 'update', 'partial_update'):
            return LeadWriteSerializer
        if self.action == 'retrieve':
            return LeadDetailSerializer
        return LeadSerializer

    def get_queryset(self):
        qs = super().get_queryset()
        if self.action == 'retrieve':
            qs = qs.prefetch_related('referred_clients')
        return qs

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        lead = create_lead(dict(serializer.validated_data))
        return Response(
            LeadDetailSerializer(lead, context={'request': request}).data,
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, *args, **kwargs):
        # Every update is a merge of the supplied fields.
        lead = self.get_object()
        serializer = self.get_serializer(lead, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        lead = update_lead(lead, dict(serializer.validated_data))
        return Response(LeadDetailSerializer(lead, context={'request': request}).data)

    def destroy(self, request, *args, **kwargs):
        lead_id = delete_lead(self.get_object())
        return Response({'message': 'Lead deleted successfully', 'id': str(lead_id)})

    @action(detail=True, methods=['patch', 'post'], url_path='assignment-status')
    def assignment_status(self, request, pk=None):
        lead = update_assignment_status(self.get_object(), request.data.get('assignment_status'))
        return Response(LeadSerializer(lead, context={'request': request}).data)

    @action(detail=False, methods=['get'])
    def assigned(self, request):
        """Leads on the caller's board: all of them for managers and admins."""
        leads = assigned_leads_for(request.user)
        data = LeadSerializer(leads, many=True, context={'request': request}).data
        return Response({'leads': data, 'total': len(data)})

    @action(detail=False, methods=['post'], url_path='bulk-upload')
    def bulk_upload(self, request):
        """
        Import many leads at once.

        Accepts ``{"leads": [...]}`` (JSON) or a CSV or Excel ``file``.  Each row is
        validated and saved on its own; the response lists every row under
        ``results.success`` or ``results.failed``.
        """
        records = _records_from_request(request)
        if not records:
            return Response({'error': 'No leads data provided'}, status=status.HTTP_400_BAD_REQUEST)

        try:
            result = import_leads(records)
        except Exception:
            logger.exception("Bulk upload aborted after %d record(s) submitted", len(records))
            return Response(
                {'error': 'Failed to process bulk upload'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response(
            {
                'message': (
                    f'Bulk upload completed. {result.success_count} succeeded, '
                    f'{result.failed_count} failed.'
                ),
                'results': result.as_dict(),
                'total_processed': result.total_processed,
                'success_count': result.success_count,
                'failed_count': result.failed_count,
            },
            status=status.HTTP_201_CREATED,
        )


# Rows commit one by one, so the import runs outside the request transaction.
bulk_upload_view = transaction.non_atomic_requests(
    LeadViewSet.as_view({'post': 'bulk_upload'})
)
