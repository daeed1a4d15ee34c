from decimal import Decimal

import pytest

from accounts.services import UserDirectory
from leads.importer import (
    REQUIRED_FIELDS,
    import_leads,
    normalize_record,
    validate_record,
)
from leads.models import Lead
from notifications.models import LeadNotification


@pytest.mark.django_db
def test_valid_row_is_saved_with_new_assignment_status(lead_row, employee_user):
    result = import_leads([lead_row()])

    assert result.failed == []
    assert result.success_count == 1
    lead = Lead.objects.get(order_id="ORD-1001")
    assert result.success == [{"row": 2, "client_name": "Ravi Kumar", "id": str(lead.pk)}]
    assert lead.assignment_status == "new"
    assert lead.quoted_price == Decimal("1500.00")
    assert lead.discounted_price == Decimal("0.00")
    assert LeadNotification.objects.filter(lead=lead, user=employee_user, is_viewed=False).count() == 1


@pytest.mark.django_db
def test_duplicate_order_id_within_batch_is_rejected(lead_row):
    result = import_leads([
        lead_row(),
        lead_row(clientName="Second Client"),
    ])

    assert result.success_count == 1
    assert result.failed == [
        {
            "row": 3,
            "client_name": "Second Client",
            "error": "Duplicate order ID: ORD-1001. A lead with this order ID already exists.",
        }
    ]
    assert Lead.objects.filter(order_id="ORD-1001").count() == 1


@pytest.mark.django_db
def test_duplicate_order_id_already_stored_is_rejected(lead_row, make_lead):
    make_lead(order_id="ORD-1001")

    result = import_leads([lead_row()])

    assert result.success_count == 0
    assert result.failed[0]["error"].startswith("Duplicate order ID: ORD-1001.")


@pytest.mark.django_db
def test_missing_fields_are_all_listed(lead_row):
    result = import_leads([lead_row(clientName="  ", phone="")])

    assert result.success == []
    assert result.failed == [
        {
            "row": 2,
            "client_name": "Unknown",
            "error": "Missing required fields: client_name, phone",
        }
    ]
    assert not Lead.objects.exists()


@pytest.mark.django_db
def test_duplicate_check_takes_precedence_over_missing_fields(lead_row, make_lead):
    make_lead(order_id="ORD-1001")

    result = import_leads([lead_row(phone="", stage="Nope")])

    assert "Duplicate order ID" in result.failed[0]["error"]


@pytest.mark.django_db
def test_unknown_user_name_lists_available_users(lead_row):
    result = import_leads([lead_row(assignTeamMember="Ghost User")])

    error = result.failed[0]["error"]
    assert error.startswith('Assign Team Member "Ghost User" not found. Available users: ')
    for name in ("Asha Admin", "Manoj Manager", "Esha Employee"):
        assert name in error


@pytest.mark.django_db
def test_invalid_stage_reports_allowed_values(lead_row):
    result = import_leads([lead_row(stage="Negotiation")])

    assert result.failed[0]["error"] == (
        'Invalid Stage "Negotiation". Must be one of: '
        "Lead, Contacted, Qualified, Proposal Made, Won, Lost, Fridge"
    )


@pytest.mark.django_db
def test_invalid_billing_sent_status(lead_row):
    result = import_leads([lead_row(billingSentStatus="mailed")])

    assert result.failed[0]["error"] == (
        'Invalid Billing Sent Status "mailed". Must be one of: sent, not_sent, process'
    )


@pytest.mark.django_db
@pytest.mark.parametrize("key,value,message", [
    ("source", "Radio", 'Invalid Source "Radio". Must be one of: Survey, Facebook, Website, Other'),
    (
        "downloadStatus", "done",
        'Invalid Download Status "done". Must be one of: completed, not_complete, process',
    ),
    (
        "paymentStatus", "refunded",
        'Invalid Payment Status "refunded". Must be one of: paid, pending, failed, other',
    ),
])
def test_invalid_enum_values_report_allowed_values(lead_row, key, value, message):
    result = import_leads([lead_row(**{key: value})])

    assert result.success == []
    assert result.failed[0]["error"] == message
    assert not Lead.objects.exists()


@pytest.mark.django_db
def test_unknown_user_is_reported_before_invalid_stage(lead_row):
    result = import_leads([lead_row(assignTeamMember="Ghost User", stage="Nope")])

    assert result.failed[0]["error"].startswith('Assign Team Member "Ghost User" not found.')


@pytest.mark.django_db
def test_quoted_price_wider_than_the_column_fails_the_row(lead_row):
    result = import_leads([
        lead_row(quotedPrice="1e15"),
        lead_row(orderId="ORD-1002", quotedPrice="9999999999.99"),
    ])

    assert result.failed == [
        {
            "row": 2,
            "client_name": "Ravi Kumar",
            "error": "Invalid quoted_price: 1e15 has more than 10 digits before the decimal point",
        }
    ]
    assert Lead.objects.get(order_id="ORD-1002").quoted_price == Decimal("9999999999.99")


@pytest.mark.django_db
def test_other_source_requires_detail(lead_row):
    result = import_leads([
        lead_row(source="Other"),
        lead_row(orderId="ORD-1002", source="Other", otherSource="Trade fair"),
    ])

    assert result.failed == [
        {
            "row": 2,
            "client_name": "Ravi Kumar",
            "error": 'Other Source is required when Source is "Other"',
        }
    ]
    assert Lead.objects.get(order_id="ORD-1002").other_source == "Trade fair"


@pytest.mark.django_db
def test_unparseable_date_fails_only_that_row(lead_row):
    result = import_leads([
        lead_row(orderDate="sometime soon"),
        lead_row(orderId="ORD-1002", orderDate="06/01/2024"),
    ])

    assert result.failed_count == 1
    assert result.failed[0]["row"] == 2
    assert "order_date" in result.failed[0]["error"]
    assert result.success_count == 1
    assert result.total_processed == 2
    assert Lead.objects.get(order_id="ORD-1002").order_date.isoformat() == "2024-01-06"


@pytest.mark.django_db
def test_non_mapping_row_is_reported(lead_row):
    result = import_leads(["not a row", lead_row()])

    assert result.failed == [{"row": 2, "client_name": "Unknown", "error": "Invalid row format"}]
    assert result.success[0]["row"] == 3


@pytest.mark.django_db
def test_failed_order_id_can_be_reused_later_in_batch(lead_row):
    result = import_leads([
        lead_row(stage="Nope"),
        lead_row(),
    ])

    assert result.failed_count == 1
    assert result.success_count == 1


@pytest.mark.django_db
def test_assignee_without_notification_user_still_imports(lead_row, employee_user, monkeypatch):
    def _boom(*args, **kwargs):
        raise RuntimeError("notification store down")

    monkeypatch.setattr(LeadNotification.objects, "create", _boom)

    result = import_leads([lead_row()])

    assert result.success_count == 1
    assert not LeadNotification.objects.exists()


def test_normalize_record_accepts_any_key_spelling():
    record = normalize_record({
        "Order ID": " ORD-9 ",
        "client-name": "Meera",
        "QUOTED_PRICE": 2500,
        "aadhaarPdfUrl": "leads/documents/a.pdf",
        "unrelated": "x",
    })

    assert record == {
        "order_id": "ORD-9",
        "client_name": "Meera",
        "quoted_price": "2500",
        "aadhaar_pdf": "leads/documents/a.pdf",
    }


def test_validate_record_uses_given_directory_and_seen_set():
    class Person:
        def __init__(self, full_name):
            self.full_name = full_name

    directory = UserDirectory([Person("A"), Person("B")])
    record = {name: "x" for name in REQUIRED_FIELDS}
    record.update({
        "order_id": "ORD-1",
        "employee_name": "A",
        "assign_team_member": "B",
        "processed_by": "A",
        "source": "Survey",
        "stage": "Won",
        "download_status": "completed",
        "payment_status": "paid",
        "billing_sent_status": "sent",
    })

    assert validate_record(record, seen_order_ids=set(), directory=directory) is None
    assert validate_record(record, seen_order_ids={"ORD-1"}, directory=directory).startswith(
        "Duplicate order ID: ORD-1."
    )
