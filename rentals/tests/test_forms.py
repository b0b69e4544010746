"""
Entity form tests against the in-memory backend.

Each test checks which writes reached the backend, so "nothing was written"
is asserted as ``backend.writes == []``.
"""
from datetime import date
from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, override_settings
from django.utils.datastructures import MultiValueDict

from rentals.backend import BackendError, MemoryBackend, Write
from rentals.forms import MaintenanceRequestForm, PropertyForm, TenantForm
from rentals.outcomes import Submitted
from rentals.records import PropertyRecord

SUNSET_VILLA = {
    "name": "Sunset Villa",
    "address": "12 Rue de Paris",
    "type": "House",
    "rooms": "3",
    "bathrooms": "2",
    "area": "90m2",
    "rent_amount": "1500",
}


class FailingUploadBackend(MemoryBackend):
    def upload(self, bucket, path, content):
        raise BackendError("bucket unavailable")


# =============================================================================
# PROPERTY FORM
# =============================================================================

@override_settings(PROPERTY_IMAGE_BUCKET="property-images")
class PropertyFormTest(SimpleTestCase):
    def setUp(self):
        self.backend = MemoryBackend()

    def test_valid_input_inserts_one_row_with_mapped_columns(self):
        form = PropertyForm(SUNSET_VILLA)
        self.assertTrue(form.is_valid(), form.errors)

        outcome = form.submit(self.backend)

        self.assertIsInstance(outcome, Submitted)
        self.assertEqual(outcome.entity.name, "Sunset Villa")
        self.assertEqual(
            self.backend.writes,
            [
                Write(
                    "insert",
                    "properties",
                    [
                        {
                            "name": "Sunset Villa",
                            "address": "12 Rue de Paris",
                            "type": "House",
                            "rooms": 3,
                            "bathrooms": 2,
                            "area": "90m2",
                            "rent_amount": Decimal("1500"),
                            "description": "",
                            "images": [],
                        }
                    ],
                    None,
                )
            ],
        )

    def test_required_fields(self):
        for field in ("name", "address", "type", "area", "rent_amount"):
            with self.subTest(field=field):
                data = dict(SUNSET_VILLA, **{field: ""})
                form = PropertyForm(data)
                self.assertFalse(form.is_valid())
                self.assertIn(field, form.errors)

        form = PropertyForm(dict(SUNSET_VILLA, name=""))
        form.is_valid()
        self.assertEqual(form.errors["name"], ["Name is required"])

    def test_negative_numbers_are_rejected(self):
        for field in ("rooms", "bathrooms", "rent_amount"):
            with self.subTest(field=field):
                form = PropertyForm(dict(SUNSET_VILLA, **{field: "-1"}))
                self.assertFalse(form.is_valid())
                self.assertIn(field, form.errors)

    def test_unknown_type_is_rejected(self):
        form = PropertyForm(dict(SUNSET_VILLA, type="Castle"))
        self.assertFalse(form.is_valid())

    def test_chosen_status_is_sent(self):
        form = PropertyForm(dict(SUNSET_VILLA, status="Occupied"))
        self.assertTrue(form.is_valid(), form.errors)
        form.submit(self.backend)
        self.assertEqual(self.backend.writes[0].payload[0]["status"], "Occupied")

    def test_images_are_uploaded_before_insert(self):
        files = MultiValueDict(
            {
                "images": [
                    SimpleUploadedFile("front.JPG", b"front", content_type="image/jpeg"),
                    SimpleUploadedFile("garden.png", b"garden", content_type="image/png"),
                ]
            }
        )
        form = PropertyForm(SUNSET_VILLA, files)
        self.assertTrue(form.is_valid(), form.errors)

        outcome = form.submit(self.backend)

        self.assertIsInstance(outcome, Submitted)
        keys = [path for bucket, path in self.backend.files]
        self.assertEqual(len(keys), 2)
        self.assertRegex(keys[0], r"^properties/[0-9a-f-]{36}\.JPG$")
        self.assertRegex(keys[1], r"^properties/[0-9a-f-]{36}\.png$")
        self.assertEqual({bucket for bucket, path in self.backend.files}, {"property-images"})

        images = self.backend.writes[0].payload[0]["images"]
        self.assertEqual(
            images,
            [f"https://storage.example.test/property-images/{key}" for key in keys],
        )
        self.assertEqual(outcome.entity.cover_image, images[0])

    def test_failed_upload_writes_nothing(self):
        backend = FailingUploadBackend()
        files = MultiValueDict({"images": [SimpleUploadedFile("front.jpg", b"x", content_type="image/jpeg")]})
        form = PropertyForm(SUNSET_VILLA, files)
        self.assertTrue(form.is_valid(), form.errors)

        self.assertIsNone(form.submit(backend))
        self.assertEqual(backend.writes, [])
        self.assertIn("Failed to upload image. Please try again.", form.non_field_errors())

    def test_edit_updates_row_and_keeps_selected_images(self):
        row = self.backend.seed(
            "properties",
            dict(
                SUNSET_VILLA,
                rooms=3,
                bathrooms=2,
                rent_amount=Decimal("1500"),
                images=["https://cdn.example.test/a.jpg", "https://cdn.example.test/b.jpg"],
            ),
        )[0]
        instance = PropertyRecord.from_row(row)

        initial_form = PropertyForm(instance=instance)
        self.assertEqual(initial_form.initial["name"], "Sunset Villa")
        self.assertEqual(initial_form.initial["keep_images"], list(instance.images))

        data = MultiValueDict(dict((key, [value]) for key, value in SUNSET_VILLA.items()))
        data.setlist("keep_images", ["https://cdn.example.test/b.jpg"])
        data["rent_amount"] = "1600"
        form = PropertyForm(data, instance=instance)
        self.assertTrue(form.is_valid(), form.errors)

        outcome = form.submit(self.backend)

        self.assertIsInstance(outcome, Submitted)
        self.assertEqual(len(self.backend.writes), 1)
        write = self.backend.writes[0]
        self.assertEqual((write.operation, write.table, write.pk), ("update", "properties", row["id"]))
        self.assertEqual(write.payload["images"], ["https://cdn.example.test/b.jpg"])
        self.assertEqual(outcome.entity.rent_amount, Decimal("1600"))


# =============================================================================
# TENANT FORM
# =============================================================================

class TenantFormTest(SimpleTestCase):
    def setUp(self):
        self.backend = MemoryBackend()
        rows = self.backend.seed("properties", {"name": "Sunset Villa", "address": "12 Rue de Paris", "type": "House", "area": "90m2"})
        self.property = PropertyRecord.from_row(rows[0])

    def tenant_data(self, **overrides):
        data = {
            "first_name": "Ana",
            "last_name": "Silva",
            "email": "ana@example.com",
            "phone": "+33 6 00 00 00 00",
        }
        data.update(overrides)
        return data

    def test_tenant_without_property_is_one_insert(self):
        form = TenantForm(self.tenant_data(), properties=[self.property])
        self.assertTrue(form.is_valid(), form.errors)

        outcome = form.submit(self.backend)

        self.assertEqual(outcome.entity.full_name, "Ana Silva")
        self.assertEqual([(w.operation, w.table) for w in self.backend.writes], [("insert", "tenants")])
        self.assertEqual(
            self.backend.writes[0].payload,
            [{"first_name": "Ana", "last_name": "Silva", "email": "ana@example.com", "phone": "+33 6 00 00 00 00"}],
        )

    def test_tenant_with_lease_is_two_ordered_inserts(self):
        form = TenantForm(
            self.tenant_data(
                property_id=str(self.property.id),
                lease_start_date="2024-01-01",
                lease_end_date="2024-12-31",
                rent_amount="950",
                deposit_amount="1900",
            ),
            properties=[self.property],
        )
        self.assertTrue(form.is_valid(), form.errors)

        outcome = form.submit(self.backend)

        self.assertIsInstance(outcome, Submitted)
        self.assertEqual(
            [(w.operation, w.table) for w in self.backend.writes],
            [("insert", "tenants"), ("insert", "leases")],
        )
        self.assertEqual(
            self.backend.writes[1].payload,
            [
                {
                    "property_id": self.property.id,
                    "tenant_id": outcome.entity.id,
                    "start_date": date(2024, 1, 1),
                    "end_date": date(2024, 12, 31),
                    "rent_amount": Decimal("950"),
                    "deposit_amount": Decimal("1900"),
                }
            ],
        )

    def test_property_without_dates_skips_lease(self):
        form = TenantForm(self.tenant_data(property_id=str(self.property.id)), properties=[self.property])
        self.assertTrue(form.is_valid(), form.errors)
        form.submit(self.backend)
        self.assertEqual([w.table for w in self.backend.writes], ["tenants"])

    def test_end_date_before_start_date_is_rejected(self):
        form = TenantForm(
            self.tenant_data(
                property_id=str(self.property.id),
                lease_start_date="2024-06-01",
                lease_end_date="2024-05-01",
            ),
            properties=[self.property],
        )
        self.assertFalse(form.is_valid())
        self.assertEqual(form.errors["lease_end_date"], ["End date must be after start date."])

    def test_invalid_email_is_rejected(self):
        form = TenantForm(self.tenant_data(email="not-an-email"), properties=[])
        self.assertFalse(form.is_valid())
        self.assertEqual(form.errors["email"], ["Invalid email address"])

    def test_missing_required_fields_write_nothing(self):
        form = TenantForm(self.tenant_data(first_name="", phone=""), properties=[])
        self.assertFalse(form.is_valid())
        self.assertIn("first_name", form.errors)
        self.assertIn("phone", form.errors)
        self.assertEqual(self.backend.writes, [])

    def test_failed_lease_insert_keeps_tenant_and_reports_error(self):
        ghost = PropertyRecord.from_row({"id": 99, "name": "Gone"})
        form = TenantForm(
            self.tenant_data(property_id="99", lease_start_date="2024-01-01", lease_end_date="2024-12-31"),
            properties=[ghost],
        )
        self.assertTrue(form.is_valid(), form.errors)

        with self.assertLogs("rentals.forms", level="WARNING"):
            outcome = form.submit(self.backend)

        self.assertIsNone(outcome)
        self.assertEqual([w.table for w in self.backend.writes], ["tenants"])
        self.assertIn("Ana Silva was saved, but the lease could not be created.", form.non_field_errors())


# =============================================================================
# MAINTENANCE REQUEST FORM
# =============================================================================

class MaintenanceRequestFormTest(SimpleTestCase):
    def setUp(self):
        self.backend = MemoryBackend()
        rows = self.backend.seed("properties", {"name": "Sunset Villa", "address": "12 Rue de Paris", "type": "House", "area": "90m2"})
        self.property = PropertyRecord.from_row(rows[0])

    def data(self, **overrides):
        data = {
            "property_id": str(self.property.id),
            "description": "Leaking tap",
            "priority": "High",
            "assigned_to": "",
            "estimated_cost": "120",
        }
        data.update(overrides)
        return data

    def test_status_is_always_pending(self):
        form = MaintenanceRequestForm(self.data(status="Completed"), properties=[self.property])
        self.assertTrue(form.is_valid(), form.errors)

        outcome = form.submit(self.backend)

        self.assertEqual(outcome.entity.status, "Pending")
        self.assertEqual(
            self.backend.writes[0].payload,
            [
                {
                    "property_id": self.property.id,
                    "description": "Leaking tap",
                    "priority": "High",
                    "assigned_to": "",
                    "estimated_cost": Decimal("120"),
                    "status": "Pending",
                }
            ],
        )

    def test_property_is_required(self):
        form = MaintenanceRequestForm(self.data(property_id=""), properties=[self.property])
        self.assertFalse(form.is_valid())
        self.assertEqual(form.errors["property_id"], ["Property is required"])

    def test_negative_estimate_is_rejected(self):
        form = MaintenanceRequestForm(self.data(estimated_cost="-5"), properties=[self.property])
        self.assertFalse(form.is_valid())
        self.assertIn("estimated_cost", form.errors)

    def test_load_error_is_kept_on_form(self):
        form = MaintenanceRequestForm(properties=[], load_error="Failed to load properties")
        self.assertEqual(form.load_error, "Failed to load properties")
        self.assertEqual(form.fields["property_id"].choices, [("", "Select a property")])
