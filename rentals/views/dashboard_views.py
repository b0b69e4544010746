import logging
from datetime import date

from django.shortcuts import render
from django.views import View

from ..backend import BackendError
from ..models import MaintenanceRequest
from ..records import LeaseRecord, MaintenanceRecord, PropertyRecord
from ..summaries import DashboardStats, dashboard_stats
from .mixins import BackendViewMixin

logger = logging.getLogger(__name__)


class DashboardView(BackendViewMixin, View):
    def get(self, request):
        backend = self.get_backend()
        stats = DashboardStats()
        recent_activity = []
        upcoming_payments = []

        try:
            # Figures are reduced here from full row sets, not aggregated in the query
            properties = [PropertyRecord.from_row(row) for row in backend.select("properties")]
            leases = [LeaseRecord.from_row(row) for row in backend.select("leases")]
            pending = backend.select(
                "maintenance_requests",
                ["id"],
                eq={"status": MaintenanceRequest.STATUS_PENDING},
            )
            stats = dashboard_stats(properties, leases, pending)

            recent_activity = [
                MaintenanceRecord.from_row(row)
                for row in backend.select(
                    "maintenance_requests",
                    order_by="created_at",
                    descending=True,
                    limit=5,
                    embed={"property": ("id", "name")},
                )
            ]

            upcoming_payments = [
                LeaseRecord.from_row(row)
                for row in backend.select(
                    "leases",
                    gte={"start_date": date.today()},
                    order_by="start_date",
                    limit=5,
                    embed={"property": ("id", "name")},
                )
            ]
        except BackendError:
            logger.error("Error fetching dashboard data", exc_info=True)

        context = {
            "stats": stats,
            "recent_activity": recent_activity,
            "upcoming_payments": upcoming_payments,
        }
        return render(request, "rentals/dashboard/index.html", context)
