"""
Admission lifecycle: create, update, discharge and soft-delete, plus the
read queries used by the admission views.

Every write runs in a transaction and goes through
:class:`~clinical.services.validation.AdmissionValidator` first, so a
rejected request never leaves a partial change behind.  Soft-deleted
admissions are invisible to all functions in this module.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import List, Optional, Sequence

from django.conf import settings
from django.db import transaction
from django.db.models import Max, Q
from django.utils import timezone

from clinical.exceptions import Conflict, NotFound, PersistenceFailure
from clinical.models import Admission, Patient
from clinical.services import catalog as cat
from clinical.services.catalog import CatalogSnapshot
from clinical.services.validation import AdmissionCandidate, AdmissionValidator

logger = logging.getLogger(__name__)

RELATED = (
    'patient', 'ward', 'adm_type', 'disease_in', 'disease_out1', 'disease_out2', 'disease_out3',
    'operation', 'dis_type', 'preg_treatment_type', 'delivery_type', 'delivery_result',
)

# Columns never overwritten by an update
_PRESERVED = {'id', 'created_at', 'deleted'}


def _with_related(qs):
    return qs.select_related(*RELATED)


def get_admission(pk: int) -> Optional[Admission]:
    return _with_related(Admission.objects.alive()).filter(pk=pk).first()


def get_patient_or_raise(code: int) -> Patient:
    patient = Patient.objects.filter(code=code).first()
    if patient is None:
        raise NotFound('Patient not found!', field='patientCode')
    return patient


def current_admission(patient: Patient) -> Optional[Admission]:
    """The patient's open admission, if any."""
    return _with_related(Admission.objects.current()).filter(patient=patient).order_by('-adm_date').first()


def patient_admissions(patient: Patient) -> List[Admission]:
    return list(_with_related(Admission.objects.alive()).filter(patient=patient).order_by('-adm_date', '-id'))


def _check_ward(ward_code: Optional[str], catalogs: CatalogSnapshot) -> None:
    if not ward_code or not ward_code.strip() or not catalogs.is_code_present(cat.WARD, ward_code):
        raise NotFound(f'Ward not found for code: {ward_code}', field='wardCode')


def next_progressive_number(
    ward_code: str, catalogs: Optional[CatalogSnapshot] = None, year: Optional[int] = None
) -> int:
    """Next admission number of the ward for ``year`` (default: this year), starting at 1."""
    _check_ward(ward_code, catalogs or CatalogSnapshot())
    year = year or timezone.localdate().year
    top = (
        Admission.objects.filter(ward_id=ward_code, adm_date__year=year)
        .aggregate(top=Max('yprog'))['top']
    )
    return (top or 0) + 1


def beds_occupied(ward_code: str, catalogs: Optional[CatalogSnapshot] = None) -> int:
    _check_ward(ward_code, catalogs or CatalogSnapshot())
    return Admission.objects.current().filter(ward_id=ward_code).count()


def admitted_patients(
    search_terms: str = '',
    admission_range: Optional[Sequence[datetime]] = None,
    discharge_range: Optional[Sequence[datetime]] = None,
    limit: Optional[int] = None,
) -> List[Admission]:
    """Admissions matching the filters, one row per admission.

    Without a discharge range only open admissions are returned.  Every
    whitespace separated search term must match the patient's name,
    city or numeric code.
    """
    qs = _with_related(Admission.objects.alive())
    if discharge_range:
        qs = qs.filter(dis_date__gte=discharge_range[0], dis_date__lte=discharge_range[1])
    else:
        qs = qs.filter(admitted=Admission.ADMITTED)
    if admission_range:
        qs = qs.filter(adm_date__gte=admission_range[0], adm_date__lte=admission_range[1])
    for term in (search_terms or '').split():
        cond = (
            Q(patient__name__icontains=term)
            | Q(patient__first_name__icontains=term)
            | Q(patient__second_name__icontains=term)
            | Q(patient__city__icontains=term)
        )
        if term.isdigit():
            cond |= Q(patient__code=int(term))
        qs = qs.filter(cond)
    limit = limit or settings.HMIS_SEARCH_MAX_RESULTS
    return list(qs.order_by('patient__name', '-adm_date')[:limit])


def _local_year(value: datetime) -> int:
    if timezone.is_aware(value):
        value = timezone.localtime(value)
    return value.year


def _write(pk: int, admission: Admission) -> int:
    values = {
        f.attname: getattr(admission, f.attname)
        for f in Admission._meta.concrete_fields
        if f.attname not in _PRESERVED
    }
    values['updated_at'] = timezone.now()
    return Admission.objects.alive().filter(pk=pk).update(**values)


def _ensure_single_current(admission: Admission, exclude_pk: Optional[int] = None) -> None:
    others = Admission.objects.current().filter(patient_id=admission.patient_id)
    if exclude_pk is not None:
        others = others.exclude(pk=exclude_pk)
    if others.exists():
        raise Conflict('The patient is already admitted!', field='patient')


@transaction.atomic
def create_admission(candidate: AdmissionCandidate, catalogs: Optional[CatalogSnapshot] = None) -> Admission:
    validator = AdmissionValidator(catalogs or CatalogSnapshot())
    admission = validator.validate(candidate)
    _ensure_single_current(admission)

    admission.pk = None
    admission.admitted = Admission.ADMITTED
    admission.dis_date = None
    admission.deleted = False
    if not candidate.yprog:
        admission.yprog = next_progressive_number(
            admission.ward_id, validator.catalogs, year=_local_year(admission.adm_date)
        )
    admission.save(force_insert=True)
    if not admission.pk:
        raise PersistenceFailure('Admission not created!')
    logger.info('Created admission %s for patient %s', admission.pk, admission.patient.name)
    return admission


@transaction.atomic
def update_admission(pk: int, candidate: AdmissionCandidate, catalogs: Optional[CatalogSnapshot] = None) -> Admission:
    """Replace admission ``pk`` with ``candidate``.

    The payload id must equal ``pk``.  When the candidate closes the
    admission (``admitted=0``) the discharge rules apply as well.
    """
    prior = get_admission(pk)
    if prior is None:
        raise NotFound('Admission not found!', field='id')
    if candidate.id != prior.pk:
        raise Conflict(f'Admission id {candidate.id} does not match {pk}!', field='id')
    if candidate.admitted is None:
        candidate = replace(candidate, admitted=prior.admitted)
    if candidate.yprog is None:
        candidate = replace(candidate, yprog=prior.yprog)
    if candidate.type is None:
        candidate = replace(candidate, type=prior.type)

    validator = AdmissionValidator(catalogs or CatalogSnapshot())
    admission = validator.validate(candidate, discharge=candidate.admitted == Admission.DISCHARGED)
    if admission.admitted == Admission.ADMITTED:
        _ensure_single_current(admission, exclude_pk=pk)

    if not _write(pk, admission):
        raise PersistenceFailure('Admission not updated!')
    logger.info('Updated admission %s for patient %s', pk, admission.patient.name)
    return get_admission(pk)


@transaction.atomic
def discharge_admission(
    patient_code: int, candidate: AdmissionCandidate, catalogs: Optional[CatalogSnapshot] = None
) -> Optional[bool]:
    """Close the patient's current admission.

    Returns ``None`` when the patient has no open admission.  Fields the
    payload leaves empty keep their stored values.
    """
    patient = get_patient_or_raise(patient_code)
    current = current_admission(patient)
    if current is None:
        return None
    if candidate.id != current.pk:
        raise Conflict('The admission to discharge is not the current one!', field='id')

    validator = AdmissionValidator(catalogs or CatalogSnapshot())
    admission = validator.validate(candidate.coalesce(current), discharge=True)
    if admission.patient_id != patient.pk:
        raise Conflict('The admission belongs to another patient!', field='patient')

    admission.admitted = Admission.DISCHARGED
    updated = _write(current.pk, admission) > 0
    logger.info('Discharged admission %s for patient %s: %s', current.pk, patient.name, updated)
    return updated


@transaction.atomic
def soft_delete_admission(pk: int) -> bool:
    """Flag the admission as deleted.  A second call raises :class:`NotFound`."""
    rows = Admission.objects.alive().filter(pk=pk).update(deleted=True, updated_at=timezone.now())
    if not rows:
        raise NotFound('Admission not found!', field='id')
    logger.info('Admission %s set to deleted', pk)
    return True
