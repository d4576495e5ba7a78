"""
Management command to populate the reference catalogs with default codes.

Safe to run repeatedly: existing rows are updated in place.
"""
from django.core.management.base import BaseCommand
from django.db import transaction

from clinical.models import (
    AdmissionType,
    DeliveryResultType,
    DeliveryType,
    DischargeType,
    Disease,
    Operation,
    PregnantTreatmentType,
    VaccineType,
    Ward,
)

WARDS = [
    {'code': 'M', 'description': 'Medical', 'beds': 30},
    {'code': 'S', 'description': 'Surgery', 'beds': 25},
    {'code': 'P', 'description': 'Paediatric', 'beds': 20},
    {'code': 'MT', 'description': 'Maternity', 'beds': 15},
    {'code': 'OPD', 'description': 'Outpatient department', 'beds': 0, 'is_opd': True},
]

CATALOGS = [
    (AdmissionType, [
        ('A', 'Ambulance'),
        ('R', 'Referral'),
        ('S', 'Self'),
    ]),
    (DischargeType, [
        ('D', 'Dead'),
        ('EQ', 'Equally'),
        ('H', 'Healed'),
        ('IMP', 'Improved'),
        ('RF', 'Referred'),
    ]),
    (Disease, [
        ('1', 'Malaria'),
        ('2', 'Pneumonia'),
        ('3', 'Tuberculosis'),
        ('4', 'Diarrhoea'),
        ('5', 'Hypertension'),
    ]),
    (PregnantTreatmentType, [
        ('ANC', 'Antenatal care'),
        ('PNC', 'Postnatal care'),
    ]),
    (DeliveryType, [
        ('N', 'Normal'),
        ('C', 'Caesarean'),
    ]),
    (DeliveryResultType, [
        ('A', 'Alive'),
        ('S', 'Stillbirth'),
    ]),
    (VaccineType, [
        ('C', 'Child'),
        ('P', 'Pregnant'),
    ]),
]

OPERATIONS = [
    {'code': 'APP', 'description': 'Appendectomy', 'major': True},
    {'code': 'CS', 'description': 'Caesarean section', 'major': True},
    {'code': 'SUT', 'description': 'Suture', 'major': False},
]


class Command(BaseCommand):
    help = 'Populate the reference catalogs with default codes'

    @transaction.atomic
    def handle(self, *args, **options):
        total = 0
        for data in WARDS:
            total += self._upsert(Ward, dict(data))
        for data in OPERATIONS:
            total += self._upsert(Operation, dict(data))
        for model, rows in CATALOGS:
            for code, description in rows:
                total += self._upsert(model, {'code': code, 'description': description})
        self.stdout.write(self.style.SUCCESS(f'Catalogs populated, {total} new entries'))

    def _upsert(self, model, data):
        code = data.pop('code')
        _, created = model.objects.update_or_create(code=code, defaults=data)
        if created:
            self.stdout.write(f'Created {model.__name__}: {code}')
        return int(created)
