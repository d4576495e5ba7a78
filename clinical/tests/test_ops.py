import pytest
from django.core.management import call_command

from clinical.models import AdmissionType, DischargeType, Ward

pytestmark = pytest.mark.django_db


def test_healthz(client):
    r = client.get('/healthz')
    assert r.status_code == 200
    assert r.json()['ok'] is True


def test_populate_catalogs_is_idempotent():
    call_command('populate_catalogs')
    wards = Ward.objects.count()
    call_command('populate_catalogs')
    assert Ward.objects.count() == wards > 0
    assert Ward.objects.get(code='OPD').is_opd
    assert AdmissionType.objects.filter(code='A').exists()
    assert DischargeType.objects.filter(code='D').exists()
