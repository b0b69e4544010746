# Views package
from .accounting_views import AccountingExportView, AccountingView
from .dashboard_views import DashboardView
from .maintenance_views import MaintenanceCreateView, MaintenanceListView
from .properties_views import PropertyCreateView, PropertyDetailView, PropertyEditView, PropertyListView
from .tenants_views import TenantCreateView, TenantListView

__all__ = [
    'AccountingExportView',
    'AccountingView',
    'DashboardView',
    'MaintenanceCreateView',
    'MaintenanceListView',
    'PropertyCreateView',
    'PropertyDetailView',
    'PropertyEditView',
    'PropertyListView',
    'TenantCreateView',
    'TenantListView',
]
