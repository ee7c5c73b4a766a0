"""
Project configuration tests.

manage.py check, migrate and runserver refuse to start while a serious
system check error is reported.
"""
import pytest
from django.core import checks
from django.core.management import call_command


def _blocking(errors):
    return [e for e in errors if e.is_serious() and not e.is_silenced()]


class TestSystemChecks:
    def test_email_login_unique_per_restaurant_passes_checks(self):
        """users.User logs in by email, which is only unique within a restaurant"""
        errors = checks.run_checks(tags=[checks.Tags.models])

        assert not [e.id for e in _blocking(errors) if e.id.startswith("auth.")]
        assert _blocking(errors) == []


@pytest.mark.django_db
class TestMigrations:
    def test_models_match_committed_migrations(self):
        """Every model change ships with its migration"""
        call_command("makemigrations", "--check", "--dry-run", verbosity=0)
