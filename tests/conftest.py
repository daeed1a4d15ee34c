from datetime import date
from decimal import Decimal

import pytest
from django.core.cache import cache

from accounts.models import User
from leads.models import Lead
from stores.models import Store

PASSWORD = "Testpass123"


@pytest.fixture(autouse=True)
def _isolated_media_and_cache(settings, tmp_path):
    settings.MEDIA_ROOT = str(tmp_path / "media")
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email="admin@test.com",
        password=PASSWORD,
        full_name="Asha Admin",
        role=User.Role.ADMIN,
    )


@pytest.fixture
def manager_user(db):
    return User.objects.create_user(
        email="manager@test.com",
        password=PASSWORD,
        full_name="Manoj Manager",
        role=User.Role.MANAGER,
    )


@pytest.fixture
def employee_user(db):
    return User.objects.create_user(
        email="employee@test.com",
        password=PASSWORD,
        full_name="Esha Employee",
        role=User.Role.EMPLOYEE,
    )


@pytest.fixture
def store(db):
    return Store.objects.create(
        name="Central Store",
        description="Main MToken counter",
    )


@pytest.fixture
def lead_row(admin_user, manager_user, employee_user):
    """Factory for a complete, valid bulk-import row (spreadsheet-style keys)."""

    def _make(**overrides):
        row = {
            "employeeName": manager_user.full_name,
            "source": "Website",
            "leadCreatedAt": "2024-01-05",
            "stage": "Lead",
            "clientName": "Ravi Kumar",
            "clientCompanyName": "Kumar Traders",
            "productName": "DSC Class 3",
            "assignTeamMember": employee_user.full_name,
            "email": "ravi@example.com",
            "phone": "9876543210",
            "orderId": "ORD-1001",
            "orderDate": "2024-01-06",
            "clientAddress": "12 MG Road, Pune",
            "clientKycId": "KYC-77",
            "kycPin": "4321",
            "downloadStatus": "process",
            "processedBy": admin_user.full_name,
            "processedAt": "2024-01-07",
            "quotedPrice": "1500",
            "companyNameAddress": "Kumar Traders, Pune",
            "paymentStatus": "pending",
            "billingSentStatus": "not_sent",
        }
        row.update(overrides)
        return row

    return _make


@pytest.fixture
def make_lead(db):
    """Factory that saves a lead directly, bypassing the services."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        values = {
            "employee_name": "Manoj Manager",
            "source": Lead.Source.WEBSITE,
            "lead_created_at": date(2024, 1, 5),
            "stage": Lead.Stage.LEAD,
            "client_name": f"Client {counter['n']}",
            "client_company_name": "Acme",
            "product_name": "DSC Class 3",
            "assign_team_member": "Esha Employee",
            "email": "client@example.com",
            "phone": "9000000000",
            "order_id": f"ORD-{counter['n']:04d}",
            "order_date": date(2024, 1, 6),
            "client_address": "1 Main Street",
            "client_kyc_id": "KYC-1",
            "kyc_pin": "1111",
            "download_status": Lead.DownloadStatus.PROCESS,
            "processed_by": "Asha Admin",
            "processed_at": date(2024, 1, 7),
            "quoted_price": Decimal("1000.00"),
            "company_name_address": "Acme, Main Street",
            "payment_status": Lead.PaymentStatus.PENDING,
            "billing_sent_status": Lead.BillingSentStatus.NOT_SENT,
        }
        values.update(overrides)
        return Lead.objects.create(**values)

    return _make
