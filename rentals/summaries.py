"""
Aggregates computed from fetched rows.

Nothing here queries the backend: views fetch the full row sets and these
functions reduce them, so the same numbers come out whichever backend is in
use.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List

from .models import Lease, MaintenanceRequest

INCOME = "Income"
EXPENSE = "Expense"
COMPLETED = "Completed"
PENDING = "Pending"


@dataclass(frozen=True)
class DashboardStats:
    total_properties: int = 0
    active_tenants: int = 0
    monthly_revenue: Decimal = Decimal("0")
    pending_maintenance: int = 0


@dataclass(frozen=True)
class Transaction:
    date: date
    description: str
    type: str
    amount: Decimal
    status: str

    @property
    def signed_amount(self):
        return -self.amount if self.type == EXPENSE else self.amount


@dataclass(frozen=True)
class AccountingSummary:
    total_income: Decimal
    total_expenses: Decimal
    net_income: Decimal
    pending_payments: Decimal
    transactions: List[Transaction]


def dashboard_stats(properties, leases, pending_requests):
    """
    Reduce full row sets to the four dashboard figures.

    ``properties`` are PropertyRecords, ``leases`` LeaseRecords (any status)
    and ``pending_requests`` the maintenance requests still Pending. A tenant
    counts as active when at least one of their leases is Active.
    """
    active_tenant_ids = {
        lease.tenant_id for lease in leases if lease.status == Lease.STATUS_ACTIVE
    }
    return DashboardStats(
        total_properties=len(properties),
        active_tenants=len(active_tenant_ids),
        monthly_revenue=sum((prop.rent_amount or Decimal("0") for prop in properties), Decimal("0")),
        pending_maintenance=len(pending_requests),
    )


def build_transactions(leases, requests, today=None):
    """Income rows from active leases and expense rows from maintenance, newest first."""
    today = today or date.today()
    transactions = []

    for lease in leases:
        if lease.status != Lease.STATUS_ACTIVE:
            continue
        transactions.append(
            Transaction(
                date=lease.start_date,
                description=f"Rent Payment - {lease.property_name or 'Unknown property'}",
                type=INCOME,
                amount=lease.rent_amount or Decimal("0"),
                status=COMPLETED if lease.start_date <= today else PENDING,
            )
        )

    for request in requests:
        transactions.append(
            Transaction(
                date=request.created_at.date() if request.created_at else today,
                description=f"Maintenance - {request.description}",
                type=EXPENSE,
                amount=request.cost,
                status=COMPLETED if request.status == MaintenanceRequest.STATUS_COMPLETED else PENDING,
            )
        )

    transactions.sort(key=lambda transaction: transaction.date, reverse=True)
    return transactions


def accounting_summary(leases, requests, today=None):
    transactions = build_transactions(leases, requests, today=today)

    def total(kind, status):
        return sum(
            (t.amount for t in transactions if t.type == kind and t.status == status),
            Decimal("0"),
        )

    total_income = total(INCOME, COMPLETED)
    total_expenses = total(EXPENSE, COMPLETED)
    return AccountingSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        net_income=total_income - total_expenses,
        pending_payments=total(EXPENSE, PENDING),
        transactions=transactions,
    )
