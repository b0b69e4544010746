from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from rentals.models import Lease, MaintenanceRequest, Property, Tenant


class Command(BaseCommand):
    help = "Create example properties, tenants, leases, and maintenance requests."

    def handle(self, *args, **options):
        with transaction.atomic():
            self._get_or_create_owner()
            properties = self._create_properties()
            tenants = self._create_tenants()
            leases = self._create_leases(properties, tenants)
            requests = self._create_maintenance_requests(properties)

        self.stdout.write(self.style.SUCCESS("Seed data created"))
        self.stdout.write(f"Properties: {len(properties)}")
        self.stdout.write(f"Tenants: {len(tenants)} (with {len(tenants) - len(leases)} without a lease)")
        self.stdout.write(f"Leases: {len(leases)}")
        self.stdout.write(f"Maintenance requests: {len(requests)}")

    def _get_or_create_owner(self):
        User = get_user_model()
        owner, created = User.objects.get_or_create(
            email="owner@example.com",
            defaults={"first_name": "Olivia", "last_name": "Owner", "is_staff": True},
        )
        if created:
            owner.set_password("changeme123")
            owner.save(update_fields=["password"])
            self.stdout.write("Created demo user: owner@example.com / changeme123")
        return owner

    def _create_properties(self):
        property_data = [
            {"name": "Sunset Villa", "address": "12 Rue de Paris", "type": Property.TYPE_HOUSE, "rooms": 3, "bathrooms": 2, "area": "90m2", "rent_amount": Decimal("1500.00"), "status": Property.STATUS_OCCUPIED},
            {"name": "Harbour View Flat", "address": "4 Quai des Docks", "type": Property.TYPE_APARTMENT, "rooms": 2, "bathrooms": 1, "area": "65m2", "rent_amount": Decimal("980.00"), "status": Property.STATUS_OCCUPIED},
            {"name": "Old Town Studio", "address": "27 Rue du Marché", "type": Property.TYPE_STUDIO, "rooms": 1, "bathrooms": 1, "area": "28m2", "rent_amount": Decimal("620.00"), "status": Property.STATUS_AVAILABLE},
            {"name": "Garden Cottage", "address": "9 Chemin des Lilas", "type": Property.TYPE_HOUSE, "rooms": 4, "bathrooms": 2, "area": "120m2", "rent_amount": Decimal("1850.00"), "status": Property.STATUS_AVAILABLE},
        ]
        properties = []
        for data in property_data:
            name = data.pop("name")
            prop, _ = Property.objects.get_or_create(name=name, defaults=data)
            properties.append(prop)
        return properties

    def _create_tenants(self):
        tenant_data = [
            {"first_name": "Hannah", "last_name": "Hart", "email": "hannah@example.com", "phone": "+33 6 12 34 56 01"},
            {"first_name": "Brian", "last_name": "Banks", "email": "brian@example.com", "phone": "+33 6 12 34 56 02"},
            {"first_name": "Priya", "last_name": "Patel", "email": "priya@example.com", "phone": "+33 6 12 34 56 03"},
            {"first_name": "Miguel", "last_name": "Mora", "email": "miguel@example.com", "phone": "+33 6 12 34 56 04"},
        ]
        tenants = []
        for data in tenant_data:
            tenant, _ = Tenant.objects.get_or_create(
                email=data["email"],
                defaults={
                    "first_name": data["first_name"],
                    "last_name": data["last_name"],
                    "phone": data["phone"],
                },
            )
            tenants.append(tenant)
        return tenants

    def _create_leases(self, properties, tenants):
        today = date.today()
        lease_data = [
            {"property": properties[0], "tenant": tenants[0], "start_date": today - timedelta(days=120), "end_date": today + timedelta(days=245), "deposit_amount": Decimal("3000.00")},
            {"property": properties[1], "tenant": tenants[1], "start_date": today - timedelta(days=60), "end_date": today + timedelta(days=305), "deposit_amount": Decimal("1960.00")},
            {"property": properties[3], "tenant": tenants[2], "start_date": today + timedelta(days=14), "end_date": today + timedelta(days=379), "deposit_amount": Decimal("3700.00")},
        ]
        leases = []
        for data in lease_data:
            lease, _ = Lease.objects.get_or_create(
                property=data["property"],
                tenant=data["tenant"],
                defaults={
                    "start_date": data["start_date"],
                    "end_date": data["end_date"],
                    "rent_amount": data["property"].rent_amount,
                    "deposit_amount": data["deposit_amount"],
                },
            )
            leases.append(lease)
        return leases

    def _create_maintenance_requests(self, properties):
        request_data = [
            {"property": properties[0], "description": "Leaking kitchen tap", "priority": MaintenanceRequest.PRIORITY_MEDIUM, "assigned_to": "Plomberie Martin", "estimated_cost": Decimal("120.00"), "actual_cost": Decimal("95.00"), "status": MaintenanceRequest.STATUS_COMPLETED},
            {"property": properties[1], "description": "Boiler service", "priority": MaintenanceRequest.PRIORITY_HIGH, "assigned_to": "Chauffage Express", "estimated_cost": Decimal("250.00"), "status": MaintenanceRequest.STATUS_SCHEDULED},
            {"property": properties[2], "description": "Repaint hallway", "priority": MaintenanceRequest.PRIORITY_LOW, "estimated_cost": Decimal("400.00"), "status": MaintenanceRequest.STATUS_PENDING},
        ]
        requests = []
        for data in request_data:
            prop = data.pop("property")
            description = data.pop("description")
            request, _ = MaintenanceRequest.objects.get_or_create(
                property=prop,
                description=description,
                defaults=data,
            )
            requests.append(request)
        return requests
