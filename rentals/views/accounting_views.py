import csv
import logging
from datetime import date

from django.http import HttpResponse
from django.shortcuts import render
from django.views import View

from ..backend import BackendError
from ..records import LeaseRecord, MaintenanceRecord
from ..summaries import accounting_summary
from .mixins import BackendViewMixin

logger = logging.getLogger(__name__)


def _get_summary(backend):
    leases = [
        LeaseRecord.from_row(row)
        for row in backend.select("leases", embed={"property": ("id", "name")})
    ]
    requests = [
        MaintenanceRecord.from_row(row)
        for row in backend.select("maintenance_requests")
    ]
    return accounting_summary(leases, requests, today=date.today())


class AccountingView(BackendViewMixin, View):
    def get(self, request):
        try:
            summary = _get_summary(self.get_backend())
            error = None
        except BackendError:
            logger.error("Error fetching accounting data", exc_info=True)
            summary = None
            error = "Error fetching accounting data"

        return render(
            request,
            "rentals/accounting/index.html",
            {"summary": summary, "error": error},
        )


class AccountingExportView(BackendViewMixin, View):
    def get(self, request):
        try:
            summary = _get_summary(self.get_backend())
        except BackendError:
            logger.error("Error exporting transactions", exc_info=True)
            return HttpResponse("Error exporting transactions", status=502, content_type="text/plain")

        response = HttpResponse(content_type="text/csv")
        response["Content-Disposition"] = 'attachment; filename="transactions.csv"'
        writer = csv.writer(response)
        writer.writerow(["Date", "Description", "Type", "Amount", "Status"])
        for transaction in summary.transactions:
            writer.writerow(
                [
                    transaction.date.isoformat(),
                    transaction.description,
                    transaction.type,
                    f"{transaction.signed_amount:.2f}",
                    transaction.status,
                ]
            )
        return response
