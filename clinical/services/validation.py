"""
Admission validation.

:class:`AdmissionValidator` turns an :class:`AdmissionCandidate` (the
request payload after shape validation) into an unsaved
:class:`~clinical.models.Admission` whose references are resolved
against a :class:`~clinical.services.catalog.CatalogSnapshot`.  Rules
are checked in a fixed order and the first failure is raised; nothing
is written to the database here.
"""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import datetime
from typing import Callable, Optional

from clinical.exceptions import InvalidField, MissingField, NotFound
from clinical.models import Admission, Patient
from clinical.services import catalog as cat
from clinical.services.catalog import CatalogSnapshot

# Candidate attributes copied verbatim onto the Admission
PLAIN_FIELDS = (
    'type', 'yprog', 'fhu', 'adm_date', 'dis_date', 'op_date', 'op_result',
    'note', 'trans_unit', 'visit_date', 'delivery_date', 'weight',
    'ctrl_date1', 'ctrl_date2', 'abort_date',
)

# Candidate code attribute -> Admission foreign key column
REFERENCE_ATTRS = {
    'ward_code': 'ward_id',
    'adm_type_code': 'adm_type_id',
    'patient_code': 'patient_id',
    'disease_in_code': 'disease_in_id',
    'disease_out1_code': 'disease_out1_id',
    'disease_out2_code': 'disease_out2_id',
    'disease_out3_code': 'disease_out3_id',
    'operation_code': 'operation_id',
    'dis_type_code': 'dis_type_id',
    'preg_treatment_type_code': 'preg_treatment_type_id',
    'delivery_type_code': 'delivery_type_id',
    'delivery_result_code': 'delivery_result_id',
}


@dataclass
class AdmissionCandidate:
    id: Optional[int] = None
    admitted: Optional[int] = None
    type: Optional[str] = None
    ward_code: Optional[str] = None
    adm_type_code: Optional[str] = None
    patient_code: Optional[int] = None
    disease_in_code: Optional[str] = None
    disease_out1_code: Optional[str] = None
    disease_out2_code: Optional[str] = None
    disease_out3_code: Optional[str] = None
    operation_code: Optional[str] = None
    dis_type_code: Optional[str] = None
    preg_treatment_type_code: Optional[str] = None
    delivery_type_code: Optional[str] = None
    delivery_result_code: Optional[str] = None
    adm_date: Optional[datetime] = None
    dis_date: Optional[datetime] = None
    op_date: Optional[datetime] = None
    op_result: str = ''
    visit_date: Optional[datetime] = None
    delivery_date: Optional[datetime] = None
    ctrl_date1: Optional[datetime] = None
    ctrl_date2: Optional[datetime] = None
    abort_date: Optional[datetime] = None
    yprog: Optional[int] = None
    fhu: str = ''
    note: str = ''
    trans_unit: Optional[float] = None
    weight: Optional[float] = None

    def coalesce(self, admission: Admission) -> 'AdmissionCandidate':
        """Take every field the payload left empty from ``admission``."""
        changes = {}
        for f in fields(self):
            if f.name in ('id', 'admitted'):
                continue
            value = getattr(self, f.name)
            if value is None or (isinstance(value, str) and not value.strip()):
                changes[f.name] = getattr(admission, REFERENCE_ATTRS.get(f.name, f.name))
        return replace(self, **changes)


def _present(code: Optional[str]) -> bool:
    return code is not None and bool(code.strip())


def find_patient(code: int) -> Optional[Patient]:
    return Patient.objects.filter(code=code).first()


class AdmissionValidator:
    def __init__(self, catalogs: CatalogSnapshot, patient_lookup: Callable[[int], Optional[Patient]] = find_patient):
        self.catalogs = catalogs
        self.patient_lookup = patient_lookup

    def validate(self, candidate: AdmissionCandidate, *, discharge: bool = False) -> Admission:
        values = {f: getattr(candidate, f) for f in PLAIN_FIELDS if getattr(candidate, f) is not None}
        admission = Admission(id=candidate.id, **values)
        if candidate.admitted is not None:
            admission.admitted = candidate.admitted

        admission.ward = self._required(cat.WARD, candidate.ward_code, 'ward', 'Ward')
        admission.adm_type = self._required(cat.ADMISSION_TYPE, candidate.adm_type_code, 'admType', 'Admission type')
        admission.patient = self._patient(candidate.patient_code)

        admission.disease_in = self._disease(candidate.disease_in_code, 'diseaseIn', 'Disease in')
        admission.disease_out1 = self._disease(candidate.disease_out1_code, 'diseaseOut1', 'Disease out 1')
        admission.disease_out2 = self._disease(candidate.disease_out2_code, 'diseaseOut2', 'Disease out 2')
        admission.disease_out3 = self._disease(candidate.disease_out3_code, 'diseaseOut3', 'Disease out 3')

        admission.operation = self._optional(cat.OPERATION, candidate.operation_code, 'operation', 'Operation')
        admission.dis_type = self._optional(cat.DISCHARGE_TYPE, candidate.dis_type_code, 'disType', 'Discharge type')
        admission.preg_treatment_type = self._optional(
            cat.PREG_TREATMENT_TYPE, candidate.preg_treatment_type_code, 'pregTreatmentType', 'Pregnant treatment type'
        )
        admission.delivery_type = self._optional(
            cat.DELIVERY_TYPE, candidate.delivery_type_code, 'deliveryType', 'Delivery type'
        )
        admission.delivery_result = self._optional(
            cat.DELIVERY_RESULT_TYPE, candidate.delivery_result_code, 'deliveryResult', 'Delivery result type'
        )

        if admission.adm_date is None:
            raise MissingField('Admission date is required!', field='admDate')
        if discharge:
            self.check_discharge(admission)
        return admission

    def check_discharge(self, admission: Admission) -> None:
        """Rules an admission must satisfy to be closed."""
        if admission.disease_out1 is None:
            raise MissingField('At least one disease must be given!', field='diseaseOut1')
        if admission.dis_date is None:
            raise MissingField('The exit date must be filled in!', field='disDate')
        if admission.dis_date < admission.adm_date:
            raise InvalidField('The exit date must be after the entry date!', field='disDate')
        if admission.dis_type is None:
            raise MissingField('The type of output is mandatory or does not exist!', field='disType')

    def _required(self, name, code, field, label):
        if not _present(code):
            raise MissingField(f'{label} field is required!', field=field)
        entry = self.catalogs.resolve(name, code)
        if entry is None:
            raise NotFound(f'{label} not found!', field=field)
        return entry

    def _optional(self, name, code, field, label):
        # blank codes count as absent
        if not _present(code):
            return None
        entry = self.catalogs.resolve(name, code)
        if entry is None:
            raise NotFound(f'{label} not found!', field=field)
        return entry

    def _disease(self, code, field, label):
        # any non-null code is looked up, blank included
        if code is None:
            return None
        entry = self.catalogs.resolve(cat.DISEASE, code)
        if entry is None:
            raise NotFound(f'{label} not found!', field=field)
        return entry

    def _patient(self, code):
        if code is None:
            raise MissingField('Patient field is required!', field='patient')
        patient = self.patient_lookup(code)
        if patient is None:
            raise NotFound('Patient not found!', field='patient')
        return patient
