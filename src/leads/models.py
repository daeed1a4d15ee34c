"""Models for the leads app."""
from decimal import Decimal

from django.db import models

from core.files import UploadPath, validate_image_upload, validate_pdf_upload
from core.models import TimeStampedModel

DOCUMENTS_DIR = "leads/documents"
IMAGES_DIR = "leads/images"


class Lead(TimeStampedModel):
    """A sales-pipeline record for one client order.

    ``employee_name``, ``assign_team_member`` and ``processed_by`` hold user
    full names rather than foreign keys; they are resolved against the user
    directory when leads are imported or assigned.
    """

    class Source(models.TextChoices):
        SURVEY = "Survey", "Survey"
        FACEBOOK = "Facebook", "Facebook"
        WEBSITE = "Website", "Website"
        OTHER = "Other", "Other"

    class Stage(models.TextChoices):
        LEAD = "Lead", "Lead"
        CONTACTED = "Contacted", "Contacted"
        QUALIFIED = "Qualified", "Qualified"
        PROPOSAL_MADE = "Proposal Made", "Proposal Made"
        WON = "Won", "Won"
        LOST = "Lost", "Lost"
        FRIDGE = "Fridge", "Fridge"

    class DownloadStatus(models.TextChoices):
        COMPLETED = "completed", "Completed"
        NOT_COMPLETE = "not_complete", "Not complete"
        PROCESS = "process", "In process"

    class PaymentStatus(models.TextChoices):
        PAID = "paid", "Paid"
        PENDING = "pending", "Pending"
        FAILED = "failed", "Failed"
        OTHER = "other", "Other"

    class BillingSentStatus(models.TextChoices):
        SENT = "sent", "Sent"
        NOT_SENT = "not_sent", "Not sent"
        PROCESS = "process", "In process"

    class DiscountType(models.TextChoices):
        AMOUNT = "amount", "Flat amount"
        PERCENTAGE = "percentage", "Percentage"

    class ReferralType(models.TextChoices):
        FRESH = "fresh", "Fresh"
        EXISTING = "existing", "Existing client"
        OTHER = "other", "Other"

    # Pipeline
    employee_name = models.CharField(max_length=255)
    source = models.CharField(max_length=20, choices=Source.choices)
    other_source = models.CharField(max_length=255, blank=True, default="")
    lead_created_at = models.DateField()
    expected_close_date = models.DateField(null=True, blank=True)
    last_contacted_at = models.DateField(null=True, blank=True)
    stage = models.CharField(max_length=20, choices=Stage.choices, default=Stage.LEAD, db_index=True)
    comment = models.TextField(blank=True, default="")
    remarks = models.TextField(blank=True, default="")

    # Client and order
    client_name = models.CharField(max_length=255)
    client_company_name = models.CharField(max_length=255)
    product_name = models.CharField(max_length=255)
    assign_team_member = models.CharField(max_length=255, db_index=True)
    email = models.EmailField(max_length=255)
    phone = models.CharField(max_length=50)
    order_id = models.CharField(max_length=100, unique=True)
    order_date = models.DateField()
    client_address = models.TextField()
    client_kyc_id = models.CharField(max_length=100)
    kyc_pin = models.CharField(max_length=100)
    download_status = models.CharField(
        max_length=20,
        choices=DownloadStatus.choices,
        default=DownloadStatus.PROCESS,
    )
    processed_by = models.CharField(max_length=255)
    processed_at = models.DateField()

    # Documents
    aadhaar_pdf = models.FileField(
        upload_to=UploadPath(DOCUMENTS_DIR, "aadhaarPdf"),
        validators=[validate_pdf_upload],
        max_length=255,
        blank=True,
        null=True,
    )
    pan_pdf = models.FileField(
        upload_to=UploadPath(DOCUMENTS_DIR, "panPdf"),
        validators=[validate_pdf_upload],
        max_length=255,
        blank=True,
        null=True,
    )
    optional_pdf = models.FileField(
        upload_to=UploadPath(DOCUMENTS_DIR, "optionalPdf"),
        validators=[validate_pdf_upload],
        max_length=255,
        blank=True,
        null=True,
    )
    client_image = models.ImageField(
        upload_to=UploadPath(IMAGES_DIR, "clientImage"),
        validators=[validate_image_upload],
        max_length=255,
        blank=True,
        null=True,
    )
    bill_doc = models.FileField(
        upload_to=UploadPath(DOCUMENTS_DIR, "billDoc"),
        validators=[validate_pdf_upload],
        max_length=255,
        blank=True,
        null=True,
    )

    # Referral
    referred_by_type = models.CharField(
        max_length=20,
        choices=ReferralType.choices,
        blank=True,
        null=True,
    )
    referred_by = models.CharField(max_length=255, blank=True, null=True)
    referred_by_client = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="referred_clients",
    )

    # Billing
    quoted_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    company_name = models.CharField(max_length=255, blank=True, default="")
    company_name_address = models.TextField()
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    payment_status_note = models.CharField(max_length=255, blank=True, default="")
    invoice_number = models.CharField(max_length=100, blank=True, default="")
    invoice_date = models.DateField(null=True, blank=True)
    billing_sent_status = models.CharField(
        max_length=20,
        choices=BillingSentStatus.choices,
        default=BillingSentStatus.NOT_SENT,
    )
    billing_date = models.DateField(null=True, blank=True)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount_type = models.CharField(
        max_length=20,
        choices=DiscountType.choices,
        default=DiscountType.AMOUNT,
    )
    discounted_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    assignment_status = models.CharField(max_length=30, default="new", db_index=True)

    FILE_FIELDS = ("aadhaar_pdf", "pan_pdf", "optional_pdf", "client_image", "bill_doc")

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.client_name} ({self.order_id})"

    def stored_file_names(self):
        """Storage names of every attached document, keyed by field."""
        return {
            field: getattr(self, field).name
            for field in self.FILE_FIELDS
            if getattr(self, field)
        }
