import logging

from django.contrib import messages
from django.shortcuts import redirect, render
from django.views import View

from ..backend import BackendError
from ..forms import TenantForm
from ..outcomes import Submitted
from ..records import LeaseRecord, PropertyRecord, TenantRecord
from .mixins import BackendViewMixin, run_form

logger = logging.getLogger(__name__)


def _get_tenants_context(backend):
    try:
        tenants = [
            TenantRecord.from_row(row)
            for row in backend.select("tenants", order_by="last_name")
        ]
        leases = [
            LeaseRecord.from_row(row)
            for row in backend.select(
                "leases",
                order_by="start_date",
                descending=True,
                embed={"property": ("id", "name")},
            )
        ]
    except BackendError:
        logger.error("Error fetching tenants", exc_info=True)
        return {"rows": [], "error": "Error fetching tenants"}

    # leases arrive newest first, so the first one seen per tenant is the latest
    latest_lease = {}
    for lease in leases:
        latest_lease.setdefault(lease.tenant_id, lease)

    rows = [{"tenant": tenant, "lease": latest_lease.get(tenant.id)} for tenant in tenants]
    return {"rows": rows, "error": None}


def _property_choices(backend):
    try:
        rows = backend.select("properties", ["id", "name"], order_by="name")
        return [PropertyRecord.from_row(row) for row in rows], None
    except BackendError:
        logger.error("Error fetching properties", exc_info=True)
        return [], "Failed to load properties"


class TenantListView(BackendViewMixin, View):
    def get(self, request):
        return render(
            request,
            "rentals/tenants/index.html",
            _get_tenants_context(self.get_backend()),
        )


class TenantCreateView(BackendViewMixin, View):
    def get(self, request):
        backend = self.get_backend()
        properties, load_error = _property_choices(backend)
        context = _get_tenants_context(backend)
        context.update(
            {
                "form": TenantForm(properties=properties),
                "load_error": load_error,
                "modal_title": "Add Tenant",
            }
        )
        return render(request, "rentals/tenants/form.html", context)

    def post(self, request):
        backend = self.get_backend()
        properties, load_error = _property_choices(backend)
        form = TenantForm(request.POST, properties=properties)
        outcome = run_form(request, form, backend)

        if isinstance(outcome, Submitted):
            messages.success(request, f"Tenant {outcome.entity.full_name} created successfully.")
        if outcome is not None:
            return redirect("tenant_list")

        context = _get_tenants_context(backend)
        context.update({"form": form, "load_error": load_error, "modal_title": "Add Tenant"})
        return render(request, "rentals/tenants/form.html", context)
