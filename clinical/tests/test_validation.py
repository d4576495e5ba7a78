"""
Unit tests for the admission validator.

Catalogs come from an in-memory snapshot and the patient lookup is a
plain function, so nothing here touches the database.
"""
from datetime import datetime, timezone

import pytest

from clinical.exceptions import InvalidField, MissingField, NotFound
from clinical.models import (
    Admission,
    AdmissionType,
    DeliveryResultType,
    DeliveryType,
    DischargeType,
    Disease,
    Operation,
    Patient,
    PregnantTreatmentType,
    Ward,
)
from clinical.services.catalog import CatalogSnapshot
from clinical.services.validation import AdmissionCandidate, AdmissionValidator

PATIENT = Patient(code=42, first_name='Ada', second_name='Lovelace')

ADM = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def validator():
    snap = CatalogSnapshot.from_entries(
        ward=[Ward(code='W1', description='Ward one')],
        admission_type=[AdmissionType(code='A1', description='Ambulance')],
        disease=[Disease(code='D1', description='Malaria'), Disease(code='D2', description='Pneumonia')],
        discharge_type=[DischargeType(code='H', description='Healed')],
        operation=[Operation(code='OP', description='Suture')],
        preg_treatment_type=[PregnantTreatmentType(code='ANC', description='Antenatal care')],
        delivery_type=[DeliveryType(code='N', description='Normal')],
        delivery_result_type=[DeliveryResultType(code='A', description='Alive')],
    )
    return AdmissionValidator(snap, patient_lookup=lambda code: PATIENT if code == 42 else None)


def candidate(**kw):
    values = dict(ward_code='W1', adm_type_code='A1', patient_code=42, adm_date=ADM)
    values.update(kw)
    return AdmissionCandidate(**values)


def test_valid_candidate_resolves_references(validator):
    adm = validator.validate(candidate(disease_in_code='D1', operation_code='OP', note='ok'))
    assert isinstance(adm, Admission)
    assert adm.ward_id == 'W1'
    assert adm.adm_type_id == 'A1'
    assert adm.patient_id == 42
    assert adm.disease_in.description == 'Malaria'
    assert adm.operation_id == 'OP'
    assert adm.note == 'ok'
    assert adm.pk is None


@pytest.mark.parametrize('kw, exc, field', [
    ({'ward_code': None}, MissingField, 'ward'),
    ({'ward_code': '  '}, MissingField, 'ward'),
    ({'ward_code': 'W9'}, NotFound, 'ward'),
    ({'ward_code': 'w1'}, NotFound, 'ward'),
    ({'adm_type_code': None}, MissingField, 'admType'),
    ({'adm_type_code': 'ZZ'}, NotFound, 'admType'),
    ({'patient_code': None}, MissingField, 'patient'),
    ({'patient_code': 7}, NotFound, 'patient'),
    ({'disease_in_code': 'XX'}, NotFound, 'diseaseIn'),
    ({'disease_out2_code': ''}, NotFound, 'diseaseOut2'),
    ({'operation_code': 'NOPE'}, NotFound, 'operation'),
    ({'dis_type_code': 'NOPE'}, NotFound, 'disType'),
    ({'preg_treatment_type_code': 'ZZ'}, NotFound, 'pregTreatmentType'),
    ({'delivery_type_code': 'ZZ'}, NotFound, 'deliveryType'),
    ({'delivery_result_code': 'ZZ'}, NotFound, 'deliveryResult'),
    ({'adm_date': None}, MissingField, 'admDate'),
])
def test_rejected_candidates(validator, kw, exc, field):
    with pytest.raises(exc) as err:
        validator.validate(candidate(**kw))
    assert err.value.field == field


def test_ward_is_checked_before_patient(validator):
    with pytest.raises(MissingField) as err:
        validator.validate(candidate(ward_code=None, patient_code=None))
    assert err.value.message == 'Ward field is required!'


def test_blank_optional_codes_are_absent(validator):
    adm = validator.validate(candidate(operation_code='', dis_type_code=' ', delivery_type_code=''))
    assert adm.operation is None
    assert adm.dis_type is None
    assert adm.delivery_type is None


def test_obstetric_codes_resolve(validator):
    adm = validator.validate(candidate(
        preg_treatment_type_code='ANC', delivery_type_code='N', delivery_result_code='A',
        delivery_date=ADM, weight=3.2,
    ))
    assert adm.preg_treatment_type.description == 'Antenatal care'
    assert adm.delivery_type_id == 'N'
    assert adm.delivery_result_id == 'A'
    assert adm.weight == 3.2


def test_candidate_type_is_left_to_the_model(validator):
    assert validator.validate(candidate()).type == 'I'
    assert validator.validate(candidate(type='O')).type == 'O'


def test_discharge_requires_disease_out(validator):
    c = candidate(dis_date=datetime(2024, 3, 5, tzinfo=timezone.utc), dis_type_code='H')
    with pytest.raises(MissingField) as err:
        validator.validate(c, discharge=True)
    assert err.value.message == 'At least one disease must be given!'


def test_discharge_requires_exit_date(validator):
    c = candidate(disease_out1_code='D1', dis_type_code='H')
    with pytest.raises(MissingField) as err:
        validator.validate(c, discharge=True)
    assert err.value.message == 'The exit date must be filled in!'


def test_discharge_before_admission_is_invalid(validator):
    c = candidate(disease_out1_code='D1', dis_type_code='H', dis_date=datetime(2024, 2, 1, tzinfo=timezone.utc))
    with pytest.raises(InvalidField) as err:
        validator.validate(c, discharge=True)
    assert err.value.message == 'The exit date must be after the entry date!'
    assert err.value.status_code == 400


def test_discharge_requires_type(validator):
    c = candidate(disease_out1_code='D1', dis_date=datetime(2024, 3, 5, tzinfo=timezone.utc))
    with pytest.raises(MissingField) as err:
        validator.validate(c, discharge=True)
    assert err.value.field == 'disType'


def test_discharge_on_same_day_is_accepted(validator):
    c = candidate(disease_out1_code='D1', dis_type_code='H', dis_date=ADM)
    adm = validator.validate(c, discharge=True)
    assert adm.dis_date == ADM


def test_discharge_rules_skipped_without_flag(validator):
    adm = validator.validate(candidate(dis_date=datetime(2024, 2, 1, tzinfo=timezone.utc)))
    assert adm.disease_out1 is None


def test_coalesce_keeps_given_values():
    stored = Admission(
        id=5, ward_id='W1', adm_type_id='A1', patient_id=42, adm_date=ADM,
        disease_in_id='D1', note='stored note', fhu='HU',
    )
    merged = AdmissionCandidate(id=5, disease_out1_code='D2', note='').coalesce(stored)
    assert merged.id == 5
    assert merged.ward_code == 'W1'
    assert merged.patient_code == 42
    assert merged.disease_in_code == 'D1'
    assert merged.disease_out1_code == 'D2'
    assert merged.note == 'stored note'
    assert merged.fhu == 'HU'
    assert merged.adm_date == ADM
    assert merged.admitted is None
