import logging
import uuid

from django import forms
from django.conf import settings

from .backend import BackendError
from .models import MaintenanceRequest, Property
from .outcomes import Submitted
from .records import MaintenanceRecord, PropertyRecord, TenantRecord

logger = logging.getLogger(__name__)


def _apply_widget_classes(form, small=False):
    for name, field in form.fields.items():
        base_class = "form-control form-control-sm" if small else "form-control"
        if isinstance(field.widget, forms.CheckboxSelectMultiple):
            base_class = "form-check-input"
        elif isinstance(field.widget, forms.Select):
            base_class = "form-select form-select-sm" if small else "form-select"
        field.widget.attrs.setdefault("class", base_class)


class MultipleFileInput(forms.ClearableFileInput):
    allow_multiple_selected = True


class MultipleFileField(forms.FileField):
    def __init__(self, *args, **kwargs):
        kwargs.setdefault("widget", MultipleFileInput(attrs={"accept": "image/*"}))
        super().__init__(*args, **kwargs)

    def clean(self, data, initial=None):
        single_file_clean = super().clean
        if isinstance(data, (list, tuple)):
            return [single_file_clean(item, initial) for item in data]
        if data:
            return [single_file_clean(data, initial)]
        return []


class PropertyForm(forms.Form):
    name = forms.CharField(max_length=255, error_messages={"required": "Name is required"})
    address = forms.CharField(max_length=510, error_messages={"required": "Address is required"})
    type = forms.ChoiceField(
        choices=[("", "Select type")] + Property.TYPE_CHOICES,
        error_messages={"required": "Type is required"},
    )
    rooms = forms.IntegerField(min_value=0)
    bathrooms = forms.IntegerField(min_value=0)
    area = forms.CharField(max_length=50, error_messages={"required": "Area is required"})
    rent_amount = forms.DecimalField(min_value=0, max_digits=10, decimal_places=2)
    description = forms.CharField(required=False, widget=forms.Textarea(attrs={"rows": 3}))
    status = forms.ChoiceField(
        choices=[("", "Select status")] + Property.STATUS_CHOICES, required=False
    )
    keep_images = forms.MultipleChoiceField(
        required=False, widget=forms.CheckboxSelectMultiple, label="Current images"
    )
    images = MultipleFileField(required=False, label="Upload images")

    def __init__(self, *args, instance=None, **kwargs):
        self.instance = instance
        existing = list(instance.images) if instance is not None else []
        if instance is not None and "initial" not in kwargs:
            kwargs["initial"] = dict(instance.initial(), keep_images=existing)
        super().__init__(*args, **kwargs)
        self.fields["keep_images"].choices = [(url, url) for url in existing]
        _apply_widget_classes(self)

    def submit(self, backend):
        """
        Upload any new images, then insert (or, when editing, update) the
        property row. Returns ``Submitted(PropertyRecord)`` or ``None`` after
        recording a form error.
        """
        data = self.cleaned_data
        kept = set(data["keep_images"])
        images = [url for url, _ in self.fields["keep_images"].choices if url in kept]

        try:
            for upload in data["images"]:
                images.append(self._upload_image(backend, upload))
        except BackendError:
            logger.error("Error uploading image", exc_info=True)
            self.add_error(None, "Failed to upload image. Please try again.")
            return None

        payload = {
            "name": data["name"],
            "address": data["address"],
            "type": data["type"],
            "rooms": data["rooms"],
            "bathrooms": data["bathrooms"],
            "area": data["area"],
            "rent_amount": data["rent_amount"],
            "description": data["description"],
            "images": images,
        }
        if data["status"]:
            payload["status"] = data["status"]

        try:
            if self.instance is not None:
                rows = backend.update("properties", payload, self.instance.id)
            else:
                rows = backend.insert("properties", payload)
            if not rows:
                raise BackendError("Property no longer exists")
            return Submitted(PropertyRecord.from_row(rows[0]))
        except BackendError:
            logger.error("Error saving property", exc_info=True)
            self.add_error(None, "Could not save the property. Please try again.")
            return None

    def _upload_image(self, backend, upload):
        bucket = settings.PROPERTY_IMAGE_BUCKET
        extension = upload.name.rsplit(".", 1)[-1]
        path = f"properties/{uuid.uuid4()}.{extension}"
        key = backend.upload(bucket, path, upload)
        return backend.public_url(bucket, key)


class TenantForm(forms.Form):
    LEASE_FIELDS = ("lease_start_date", "lease_end_date", "rent_amount", "deposit_amount")

    first_name = forms.CharField(max_length=255, error_messages={"required": "First name is required"})
    last_name = forms.CharField(max_length=255, error_messages={"required": "Last name is required"})
    email = forms.EmailField(
        max_length=255,
        error_messages={"required": "Invalid email address", "invalid": "Invalid email address"},
    )
    phone = forms.CharField(max_length=50, error_messages={"required": "Phone number is required"})
    property_id = forms.TypedChoiceField(
        required=False, coerce=int, empty_value=None, label="Assign Property (Optional)"
    )
    lease_start_date = forms.DateField(required=False, widget=forms.DateInput(attrs={"type": "date"}))
    lease_end_date = forms.DateField(required=False, widget=forms.DateInput(attrs={"type": "date"}))
    rent_amount = forms.DecimalField(required=False, min_value=0, max_digits=10, decimal_places=2)
    deposit_amount = forms.DecimalField(required=False, min_value=0, max_digits=10, decimal_places=2)

    def __init__(self, *args, properties=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["property_id"].choices = [("", "Select a property")] + [
            (prop.id, prop.name) for prop in properties
        ]
        for name in self.LEASE_FIELDS:
            self.fields[name].widget.attrs["data-lease-field"] = "true"
        _apply_widget_classes(self, small=True)

    def clean(self):
        cleaned_data = super().clean()
        start_date = cleaned_data.get("lease_start_date")
        end_date = cleaned_data.get("lease_end_date")
        if cleaned_data.get("property_id") and start_date and end_date and end_date < start_date:
            self.add_error("lease_end_date", "End date must be after start date.")
        return cleaned_data

    @property
    def has_lease(self):
        data = self.cleaned_data
        return bool(data.get("property_id") and data.get("lease_start_date") and data.get("lease_end_date"))

    def submit(self, backend):
        """
        Insert the tenant, then the lease when a property and both dates were
        given. The two inserts are separate writes: if the lease fails the
        tenant row stays behind.
        """
        data = self.cleaned_data
        try:
            rows = backend.insert(
                "tenants",
                {
                    "first_name": data["first_name"],
                    "last_name": data["last_name"],
                    "email": data["email"],
                    "phone": data["phone"],
                },
            )
            tenant = TenantRecord.from_row(rows[0])
        except BackendError:
            logger.error("Error saving tenant", exc_info=True)
            self.add_error(None, "Could not save the tenant. Please try again.")
            return None

        if self.has_lease:
            try:
                backend.insert(
                    "leases",
                    {
                        "property_id": data["property_id"],
                        "tenant_id": tenant.id,
                        "start_date": data["lease_start_date"],
                        "end_date": data["lease_end_date"],
                        "rent_amount": data["rent_amount"],
                        "deposit_amount": data["deposit_amount"],
                    },
                )
            except BackendError:
                logger.warning(
                    f"Lease insert failed; tenant {tenant.id} was saved without a lease",
                    exc_info=True,
                )
                self.add_error(
                    None, f"{tenant.full_name} was saved, but the lease could not be created."
                )
                return None

        return Submitted(tenant)


class MaintenanceRequestForm(forms.Form):
    property_id = forms.TypedChoiceField(coerce=int, error_messages={"required": "Property is required"})
    description = forms.CharField(
        widget=forms.Textarea(attrs={"rows": 3}),
        error_messages={"required": "Description is required"},
    )
    priority = forms.ChoiceField(
        choices=[("", "Select priority")] + MaintenanceRequest.PRIORITY_CHOICES,
        error_messages={"required": "Priority is required"},
    )
    assigned_to = forms.CharField(max_length=255, required=False)
    estimated_cost = forms.DecimalField(min_value=0, max_digits=10, decimal_places=2)

    def __init__(self, *args, properties=(), load_error=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.load_error = load_error
        self.fields["property_id"].choices = [("", "Select a property")] + [
            (prop.id, prop.name) for prop in properties
        ]
        _apply_widget_classes(self)

    def submit(self, backend):
        data = self.cleaned_data
        try:
            rows = backend.insert(
                "maintenance_requests",
                {
                    "property_id": data["property_id"],
                    "description": data["description"],
                    "priority": data["priority"],
                    "assigned_to": data["assigned_to"],
                    "estimated_cost": data["estimated_cost"],
                    "status": MaintenanceRequest.STATUS_PENDING,
                },
            )
            return Submitted(MaintenanceRecord.from_row(rows[0]))
        except BackendError:
            logger.error("Error saving maintenance request", exc_info=True)
            self.add_error(None, "Could not save the maintenance request. Please try again.")
            return None
