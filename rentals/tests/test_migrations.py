from io import StringIO

from django.core.management import call_command
from django.test import TestCase


class MigrationsInSyncTest(TestCase):
    def test_models_match_migrations(self):
        """makemigrations --check exits non-zero when a model has drifted from its migrations"""
        out = StringIO()
        try:
            call_command("makemigrations", "accounts", "rentals", check=True, dry_run=True, stdout=out)
        except SystemExit:
            self.fail(f"Missing migrations:\n{out.getvalue()}")
