NAVIGATION = [
    {"name": "Dashboard", "url_name": "dashboard", "icon": "bi-house"},
    {"name": "Properties", "url_name": "property_list", "icon": "bi-building"},
    {"name": "Tenants", "url_name": "tenant_list", "icon": "bi-people"},
    {"name": "Accounting", "url_name": "accounting", "icon": "bi-file-earmark-text"},
    {"name": "Maintenance", "url_name": "maintenance_list", "icon": "bi-tools"},
]
