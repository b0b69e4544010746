import logging

from django.contrib import messages
from django.shortcuts import redirect, render
from django.views import View

from ..backend import BackendError
from ..forms import MaintenanceRequestForm
from ..outcomes import Submitted
from ..records import MaintenanceRecord
from .mixins import BackendViewMixin, run_form
from .tenants_views import _property_choices

logger = logging.getLogger(__name__)


def _get_maintenance_context(backend):
    try:
        rows = backend.select(
            "maintenance_requests",
            order_by="created_at",
            descending=True,
            embed={"property": ("id", "name")},
        )
        return {"requests": [MaintenanceRecord.from_row(row) for row in rows], "error": None}
    except BackendError:
        logger.error("Error fetching maintenance requests", exc_info=True)
        return {"requests": [], "error": "Error fetching maintenance requests"}


class MaintenanceListView(BackendViewMixin, View):
    def get(self, request):
        return render(
            request,
            "rentals/maintenance/index.html",
            _get_maintenance_context(self.get_backend()),
        )


class MaintenanceCreateView(BackendViewMixin, View):
    def get(self, request):
        backend = self.get_backend()
        properties, load_error = _property_choices(backend)
        context = _get_maintenance_context(backend)
        context.update(
            {
                "form": MaintenanceRequestForm(properties=properties, load_error=load_error),
                "modal_title": "New Maintenance Request",
            }
        )
        return render(request, "rentals/maintenance/form.html", context)

    def post(self, request):
        backend = self.get_backend()
        properties, load_error = _property_choices(backend)
        form = MaintenanceRequestForm(request.POST, properties=properties, load_error=load_error)
        outcome = run_form(request, form, backend)

        if isinstance(outcome, Submitted):
            messages.success(request, "Maintenance request created.")
        if outcome is not None:
            return redirect("maintenance_list")

        context = _get_maintenance_context(backend)
        context.update({"form": form, "modal_title": "New Maintenance Request"})
        return render(request, "rentals/maintenance/form.html", context)
