from django.urls import path

from .views import (
    AccountingExportView,
    AccountingView,
    DashboardView,
    MaintenanceCreateView,
    MaintenanceListView,
    PropertyCreateView,
    PropertyDetailView,
    PropertyEditView,
    PropertyListView,
    TenantCreateView,
    TenantListView,
)

urlpatterns = [
    path('', DashboardView.as_view(), name="dashboard"),
    path('properties/', PropertyListView.as_view(), name="property_list"),
    path('properties/new/', PropertyCreateView.as_view(), name="property_add"),
    path('properties/<int:property_id>/', PropertyDetailView.as_view(), name="property_detail"),
    path('properties/<int:property_id>/edit/', PropertyEditView.as_view(), name="property_edit"),
    path('tenants/', TenantListView.as_view(), name="tenant_list"),
    path('tenants/new/', TenantCreateView.as_view(), name="tenant_add"),
    path('maintenance/', MaintenanceListView.as_view(), name="maintenance_list"),
    path('maintenance/new/', MaintenanceCreateView.as_view(), name="maintenance_add"),
    path('accounting/', AccountingView.as_view(), name="accounting"),
    path('accounting/export.csv', AccountingExportView.as_view(), name="accounting_export"),
]
