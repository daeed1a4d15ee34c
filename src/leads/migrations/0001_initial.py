import uuid
from decimal import Decimal

import core.files
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Lead",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                ("employee_name", models.CharField(max_length=255)),
                (
                    "source",
                    models.CharField(
                        choices=[
                            ("Survey", "Survey"),
                            ("Facebook", "Facebook"),
                            ("Website", "Website"),
                            ("Other", "Other"),
                        ],
                        max_length=20,
                    ),
                ),
                ("other_source", models.CharField(blank=True, default="", max_length=255)),
                ("lead_created_at", models.DateField()),
                ("expected_close_date", models.DateField(blank=True, null=True)),
                ("last_contacted_at", models.DateField(blank=True, null=True)),
                (
                    "stage",
                    models.CharField(
                        choices=[
                            ("Lead", "Lead"),
                            ("Contacted", "Contacted"),
                            ("Qualified", "Qualified"),
                            ("Proposal Made", "Proposal Made"),
                            ("Won", "Won"),
                            ("Lost", "Lost"),
                            ("Fridge", "Fridge"),
                        ],
                        db_index=True,
                        default="Lead",
                        max_length=20,
                    ),
                ),
                ("comment", models.TextField(blank=True, default="")),
                ("remarks", models.TextField(blank=True, default="")),
                ("client_name", models.CharField(max_length=255)),
                ("client_company_name", models.CharField(max_length=255)),
                ("product_name", models.CharField(max_length=255)),
                ("assign_team_member", models.CharField(db_index=True, max_length=255)),
                ("email", models.EmailField(max_length=255)),
                ("phone", models.CharField(max_length=50)),
                ("order_id", models.CharField(max_length=100, unique=True)),
                ("order_date", models.DateField()),
                ("client_address", models.TextField()),
                ("client_kyc_id", models.CharField(max_length=100)),
                ("kyc_pin", models.CharField(max_length=100)),
                (
                    "download_status",
                    models.CharField(
                        choices=[
                            ("completed", "Completed"),
                            ("not_complete", "Not complete"),
                            ("process", "In process"),
                        ],
                        default="process",
                        max_length=20,
                    ),
                ),
                ("processed_by", models.CharField(max_length=255)),
                ("processed_at", models.DateField()),
                (
                    "aadhaar_pdf",
                    models.FileField(
                        blank=True,
                        max_length=255,
                        null=True,
                        upload_to=core.files.UploadPath("leads/documents", "aadhaarPdf"),
                        validators=[core.files.validate_pdf_upload],
                    ),
                ),
                (
                    "pan_pdf",
                    models.FileField(
                        blank=True,
                        max_length=255,
                        null=True,
                        upload_to=core.files.UploadPath("leads/documents", "panPdf"),
                        validators=[core.files.validate_pdf_upload],
                    ),
                ),
                (
                    "optional_pdf",
                    models.FileField(
                        blank=True,
                        max_length=255,
                        null=True,
                        upload_to=core.files.UploadPath("leads/documents", "optionalPdf"),
                        validators=[core.files.validate_pdf_upload],
                    ),
                ),
                (
                    "client_image",
                    models.ImageField(
                        blank=True,
                        max_length=255,
                        null=True,
                        upload_to=core.files.UploadPath("leads/images", "clientImage"),
                        validators=[core.files.validate_image_upload],
                    ),
                ),
                (
                    "bill_doc",
                    models.FileField(
                        blank=True,
                        max_length=255,
                        null=True,
                        upload_to=core.files.UploadPath("leads/documents", "billDoc"),
                        validators=[core.files.validate_pdf_upload],
                    ),
                ),
                (
                    "referred_by_type",
                    models.CharField(
                        blank=True,
                        choices=[("fresh", "Fresh"), ("existing", "Existing client"), ("other", "Other")],
                        max_length=20,
                        null=True,
                    ),
                ),
                ("referred_by", models.CharField(blank=True, max_length=255, null=True)),
                (
                    "referred_by_client",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="referred_clients",
                        to="leads.lead",
                    ),
                ),
                ("quoted_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("company_name", models.CharField(blank=True, default="", max_length=255)),
                ("company_name_address", models.TextField()),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("paid", "Paid"),
                            ("pending", "Pending"),
                            ("failed", "Failed"),
                            ("other", "Other"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("payment_status_note", models.CharField(blank=True, default="", max_length=255)),
                ("invoice_number", models.CharField(blank=True, default="", max_length=100)),
                ("invoice_date", models.DateField(blank=True, null=True)),
                (
                    "billing_sent_status",
                    models.CharField(
                        choices=[("sent", "Sent"), ("not_sent", "Not sent"), ("process", "In process")],
                        default="not_sent",
                        max_length=20,
                    ),
                ),
                ("billing_date", models.DateField(blank=True, null=True)),
                ("discount_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                (
                    "discount_type",
                    models.CharField(
                        choices=[("amount", "Flat amount"), ("percentage", "Percentage")],
                        default="amount",
                        max_length=20,
                    ),
                ),
                ("discounted_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("assignment_status", models.CharField(db_index=True, default="new", max_length=30)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
