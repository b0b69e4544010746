from datetime import date, datetime, timezone
from decimal import Decimal

from django.test import SimpleTestCase

from rentals.records import LeaseRecord, MaintenanceRecord, PropertyRecord
from rentals.summaries import accounting_summary, build_transactions, dashboard_stats

TODAY = date(2024, 6, 15)


def lease(id, tenant_id, start, rent="1000", status="Active", property_name="Sunset Villa"):
    return LeaseRecord.from_row(
        {
            "id": id,
            "property_id": 1,
            "tenant_id": tenant_id,
            "start_date": start,
            "end_date": date(2025, 6, 1),
            "rent_amount": rent,
            "status": status,
            "property": {"id": 1, "name": property_name} if property_name else None,
        }
    )


def request(id, status, estimated="0", actual=None, created=datetime(2024, 5, 1, tzinfo=timezone.utc)):
    return MaintenanceRecord.from_row(
        {
            "id": id,
            "property_id": 1,
            "description": f"Job {id}",
            "estimated_cost": estimated,
            "actual_cost": actual,
            "status": status,
            "created_at": created,
        }
    )


class DashboardStatsTest(SimpleTestCase):
    def test_counts_distinct_active_tenants_and_sums_rent(self):
        properties = [
            PropertyRecord.from_row({"id": 1, "name": "A", "rent_amount": "1500"}),
            PropertyRecord.from_row({"id": 2, "name": "B", "rent_amount": "950.50"}),
        ]
        leases = [
            lease(1, tenant_id=1, start=date(2024, 1, 1)),
            lease(2, tenant_id=1, start=date(2024, 2, 1)),
            lease(3, tenant_id=2, start=date(2024, 1, 1), status="Ended"),
        ]

        stats = dashboard_stats(properties, leases, pending_requests=[{"id": 1}, {"id": 2}])

        self.assertEqual(stats.total_properties, 2)
        self.assertEqual(stats.active_tenants, 1)
        self.assertEqual(stats.monthly_revenue, Decimal("2450.50"))
        self.assertEqual(stats.pending_maintenance, 2)

    def test_empty_tables_give_zeros(self):
        stats = dashboard_stats([], [], [])
        self.assertEqual(stats.total_properties, 0)
        self.assertEqual(stats.monthly_revenue, Decimal("0"))


class TransactionsTest(SimpleTestCase):
    def test_income_from_active_leases_and_expenses_from_maintenance(self):
        transactions = build_transactions(
            [
                lease(1, 1, date(2024, 6, 1), rent="1200"),
                lease(2, 2, date(2024, 7, 1), rent="800"),
                lease(3, 3, date(2024, 1, 1), status="Ended"),
            ],
            [request(1, "Completed", estimated="150", actual="120")],
            today=TODAY,
        )

        self.assertEqual([t.date for t in transactions], [date(2024, 7, 1), date(2024, 6, 1), date(2024, 5, 1)])
        upcoming, current, repair = transactions
        self.assertEqual(current.description, "Rent Payment - Sunset Villa")
        self.assertEqual(current.status, "Completed")
        self.assertEqual(upcoming.status, "Pending")
        self.assertEqual(repair.type, "Expense")
        self.assertEqual(repair.amount, Decimal("120"))
        self.assertEqual(repair.signed_amount, Decimal("-120"))

    def test_lease_without_property_is_labelled(self):
        transactions = build_transactions([lease(1, 1, date(2024, 1, 1), property_name=None)], [], today=TODAY)
        self.assertEqual(transactions[0].description, "Rent Payment - Unknown property")


class AccountingSummaryTest(SimpleTestCase):
    def test_totals(self):
        summary = accounting_summary(
            [lease(1, 1, date(2024, 6, 1), rent="1200"), lease(2, 2, date(2024, 8, 1), rent="900")],
            [
                request(1, "Completed", estimated="100", actual="90"),
                request(2, "Pending", estimated="300"),
                request(3, "Scheduled", estimated="50"),
            ],
            today=TODAY,
        )

        self.assertEqual(summary.total_income, Decimal("1200"))
        self.assertEqual(summary.total_expenses, Decimal("90"))
        self.assertEqual(summary.net_income, Decimal("1110"))
        self.assertEqual(summary.pending_payments, Decimal("350"))
        self.assertEqual(len(summary.transactions), 5)
