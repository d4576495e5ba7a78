import pytest
from django.contrib.auth.models import User
from django.urls import reverse
from rest_framework.test import APIClient

from clinical.models import Vaccine, VaccineType

pytestmark = pytest.mark.django_db


@pytest.fixture
def client():
    c = APIClient()
    c.force_authenticate(user=User.objects.create_user(username='nurse', password='nursepass'))
    return c


@pytest.fixture
def child():
    return VaccineType.objects.create(code='C', description='Child')


def vaccine(code, description, type_code):
    return {'code': code, 'description': description, 'vaccineType': {'code': type_code}}


def test_create_and_list(client, child):
    r = client.post(reverse('vaccines'), vaccine('BCG', 'Bacillus Calmette-Guerin', 'C'), format='json')
    assert r.status_code == 201
    assert r.data['vaccineType'] == {'code': 'C', 'description': 'Child'}

    r = client.get(reverse('vaccines'))
    assert r.status_code == 200
    assert [v['code'] for v in r.data] == ['BCG']


def test_create_duplicate_code(client, child):
    Vaccine.objects.create(code='BCG', description='BCG', vaccine_type=child)
    r = client.post(reverse('vaccines'), vaccine('BCG', 'Again', 'C'), format='json')
    assert r.status_code == 409
    assert r.data['error']['message'] == 'Vaccine already present!'


def test_create_with_unknown_type(client):
    r = client.post(reverse('vaccines'), vaccine('OPV', 'Polio', 'X'), format='json')
    assert r.status_code == 404
    assert r.data['error']['field'] == 'vaccineType'
    assert not Vaccine.objects.exists()


def test_description_is_sanitised(client, child):
    r = client.post(reverse('vaccines'), vaccine('MV', '<script>x</script>Measles', 'C'), format='json')
    assert r.status_code == 201
    assert '<script>' not in Vaccine.objects.get(code='MV').description


def test_update(client, child):
    Vaccine.objects.create(code='BCG', description='BCG', vaccine_type=child)
    r = client.put(reverse('vaccines'), vaccine('BCG', 'Tuberculosis', 'C'), format='json')
    assert r.status_code == 200
    assert r.data['description'] == 'Tuberculosis'


def test_update_missing_vaccine(client, child):
    r = client.put(reverse('vaccines'), vaccine('NONE', 'Nothing', 'C'), format='json')
    assert r.status_code == 404


def test_list_by_type(client, child):
    pregnant = VaccineType.objects.create(code='P', description='Pregnant')
    Vaccine.objects.create(code='BCG', description='BCG', vaccine_type=child)
    Vaccine.objects.create(code='TT', description='Tetanus', vaccine_type=pregnant)
    r = client.get(reverse('vaccine-by-code', args=['P']))
    assert r.status_code == 200
    assert [v['code'] for v in r.data] == ['TT']


def test_delete(client, child):
    Vaccine.objects.create(code='BCG', description='BCG', vaccine_type=child)
    r = client.delete(reverse('vaccine-by-code', args=['BCG']))
    assert r.status_code == 200
    assert r.data is True
    r = client.delete(reverse('vaccine-by-code', args=['BCG']))
    assert r.status_code == 404


def test_check_code(client, child):
    Vaccine.objects.create(code='BCG', description='BCG', vaccine_type=child)
    assert client.get(reverse('vaccine-check', args=['BCG'])).data is True
    assert client.get(reverse('vaccine-check', args=['OPV'])).data is False


def test_blank_code_rejected(client, child):
    r = client.post(reverse('vaccines'), vaccine('  ', 'Blank', 'C'), format='json')
    assert r.status_code == 400
