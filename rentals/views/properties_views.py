import logging

from django.contrib import messages
from django.http import Http404
from django.shortcuts import redirect, render
from django.views import View

from ..backend import BackendError
from ..forms import PropertyForm
from ..models import Lease
from ..outcomes import Submitted
from ..records import LeaseRecord, MaintenanceRecord, PropertyRecord
from .mixins import BackendViewMixin, run_form

logger = logging.getLogger(__name__)

TENANT_COLUMNS = ("id", "first_name", "last_name", "email", "phone")


def _get_properties_context(backend):
    try:
        rows = backend.select("properties", order_by="name")
        return {"properties": [PropertyRecord.from_row(row) for row in rows], "error": None}
    except BackendError:
        logger.error("Error fetching properties", exc_info=True)
        return {"properties": [], "error": "Error fetching properties"}


def _get_property_or_404(backend, property_id):
    row = backend.get("properties", property_id)
    if row is None:
        raise Http404("Property not found")
    return PropertyRecord.from_row(row)


class PropertyListView(BackendViewMixin, View):
    def get(self, request):
        return render(
            request,
            "rentals/properties/index.html",
            _get_properties_context(self.get_backend()),
        )


class PropertyDetailView(BackendViewMixin, View):
    def get(self, request, property_id):
        backend = self.get_backend()
        context = _get_properties_context(backend)

        try:
            property_obj = _get_property_or_404(backend, property_id)
        except BackendError:
            logger.error(f"Error fetching property {property_id}", exc_info=True)
            messages.error(request, "Error fetching property details.")
            return redirect("property_list")

        leases = []
        maintenance = []
        error = None
        try:
            lease_rows = backend.select(
                "leases",
                eq={"property_id": property_id, "status": Lease.STATUS_ACTIVE},
                embed={"tenant": TENANT_COLUMNS},
            )
            leases = [LeaseRecord.from_row(row) for row in lease_rows]

            maintenance_rows = backend.select(
                "maintenance_requests",
                eq={"property_id": property_id},
                order_by="created_at",
                descending=True,
            )
            maintenance = [MaintenanceRecord.from_row(row) for row in maintenance_rows]
        except BackendError:
            logger.error(f"Error fetching details for property {property_id}", exc_info=True)
            error = "Error fetching lease and maintenance details"

        context.update(
            {
                "property": property_obj,
                "leases": leases,
                "maintenance": maintenance,
                "detail_error": error,
                "modal_title": "Property Details",
            }
        )
        return render(request, "rentals/properties/detail.html", context)


class PropertyCreateView(BackendViewMixin, View):
    def get(self, request):
        context = _get_properties_context(self.get_backend())
        context.update({"form": PropertyForm(), "modal_title": "Add Property"})
        return render(request, "rentals/properties/form.html", context)

    def post(self, request):
        backend = self.get_backend()
        form = PropertyForm(request.POST, request.FILES)
        outcome = run_form(request, form, backend)

        if isinstance(outcome, Submitted):
            messages.success(request, "Property added successfully.")
        if outcome is not None:
            return redirect("property_list")

        context = _get_properties_context(backend)
        context.update({"form": form, "modal_title": "Add Property"})
        return render(request, "rentals/properties/form.html", context)


class PropertyEditView(BackendViewMixin, View):
    def _load(self, request, property_id):
        try:
            return _get_property_or_404(self.get_backend(), property_id)
        except BackendError:
            logger.error(f"Error fetching property {property_id}", exc_info=True)
            messages.error(request, "Error fetching property details.")
            return None

    def get(self, request, property_id):
        property_obj = self._load(request, property_id)
        if property_obj is None:
            return redirect("property_list")

        context = _get_properties_context(self.get_backend())
        context.update(
            {
                "property": property_obj,
                "form": PropertyForm(instance=property_obj),
                "modal_title": "Edit Property",
            }
        )
        return render(request, "rentals/properties/form.html", context)

    def post(self, request, property_id):
        property_obj = self._load(request, property_id)
        if property_obj is None:
            return redirect("property_list")

        backend = self.get_backend()
        form = PropertyForm(request.POST, request.FILES, instance=property_obj)
        outcome = run_form(request, form, backend)

        if isinstance(outcome, Submitted):
            messages.success(request, "Property updated successfully.")
        if outcome is not None:
            return redirect("property_list")

        context = _get_properties_context(backend)
        context.update({"property": property_obj, "form": form, "modal_title": "Edit Property"})
        return render(request, "rentals/properties/form.html", context)
