"""
Request serializers and response formatters for admissions.

Reference fields travel as nested objects carrying a ``code``
(``{"ward": {"code": "M"}}``), the same shape the formatters emit, so a
client can send back what it received.
"""
import bleach
from rest_framework import serializers

from clinical.models import Admission
from clinical.services.validation import AdmissionCandidate

# payload key -> candidate attribute
REFERENCE_KEYS = {
    'ward': 'ward_code',
    'admType': 'adm_type_code',
    'diseaseIn': 'disease_in_code',
    'diseaseOut1': 'disease_out1_code',
    'diseaseOut2': 'disease_out2_code',
    'diseaseOut3': 'disease_out3_code',
    'operation': 'operation_code',
    'disType': 'dis_type_code',
    'pregTreatmentType': 'preg_treatment_type_code',
    'deliveryType': 'delivery_type_code',
    'deliveryResult': 'delivery_result_code',
}

VALUE_KEYS = {
    'id': 'id',
    'admitted': 'admitted',
    'type': 'type',
    'yProg': 'yprog',
    'fhu': 'fhu',
    'admDate': 'adm_date',
    'disDate': 'dis_date',
    'opDate': 'op_date',
    'opResult': 'op_result',
    'note': 'note',
    'transUnit': 'trans_unit',
    'visitDate': 'visit_date',
    'deliveryDate': 'delivery_date',
    'weight': 'weight',
    'ctrlDate1': 'ctrl_date1',
    'ctrlDate2': 'ctrl_date2',
    'abortDate': 'abort_date',
}


class CodeRefSerializer(serializers.Serializer):
    code = serializers.CharField(required=False, allow_null=True, allow_blank=True, trim_whitespace=False)


class PatientRefSerializer(serializers.Serializer):
    code = serializers.IntegerField(required=False, allow_null=True)


def _ref():
    return CodeRefSerializer(required=False, allow_null=True)


class AdmissionSerializer(serializers.Serializer):
    id = serializers.IntegerField(required=False, allow_null=True)
    admitted = serializers.ChoiceField(choices=[Admission.ADMITTED, Admission.DISCHARGED], required=False, allow_null=True)
    type = serializers.ChoiceField(choices=['I', 'O'], required=False)
    ward = _ref()
    admType = _ref()
    patient = PatientRefSerializer(required=False, allow_null=True)
    diseaseIn = _ref()
    diseaseOut1 = _ref()
    diseaseOut2 = _ref()
    diseaseOut3 = _ref()
    operation = _ref()
    disType = _ref()
    pregTreatmentType = _ref()
    deliveryType = _ref()
    deliveryResult = _ref()
    yProg = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    fhu = serializers.CharField(required=False, allow_blank=True, max_length=50)
    admDate = serializers.DateTimeField(required=False, allow_null=True)
    disDate = serializers.DateTimeField(required=False, allow_null=True)
    opDate = serializers.DateTimeField(required=False, allow_null=True)
    opResult = serializers.CharField(required=False, allow_blank=True, max_length=10)
    note = serializers.CharField(required=False, allow_blank=True)
    transUnit = serializers.FloatField(required=False, allow_null=True)
    visitDate = serializers.DateTimeField(required=False, allow_null=True)
    deliveryDate = serializers.DateTimeField(required=False, allow_null=True)
    weight = serializers.FloatField(required=False, allow_null=True, min_value=0)
    ctrlDate1 = serializers.DateTimeField(required=False, allow_null=True)
    ctrlDate2 = serializers.DateTimeField(required=False, allow_null=True)
    abortDate = serializers.DateTimeField(required=False, allow_null=True)

    def validate_note(self, v):
        return bleach.clean((v or '').strip(), strip=True)

    def to_candidate(self) -> AdmissionCandidate:
        data = self.validated_data
        values = {attr: data[key] for key, attr in VALUE_KEYS.items() if key in data}
        for key, attr in REFERENCE_KEYS.items():
            ref = data.get(key)
            values[attr] = ref.get('code') if ref else None
        patient = data.get('patient')
        values['patient_code'] = patient.get('code') if patient else None
        return AdmissionCandidate(**values)


class PatientCodeQuerySerializer(serializers.Serializer):
    patientCode = serializers.IntegerField()


class WardCodeQuerySerializer(serializers.Serializer):
    wardCode = serializers.CharField(allow_blank=True, trim_whitespace=False)


class AdmittedPatientsQuerySerializer(serializers.Serializer):
    searchterms = serializers.CharField(required=False, allow_blank=True, max_length=200, default='')
    admissionrange = serializers.ListField(
        child=serializers.DateTimeField(), min_length=2, max_length=2, required=False
    )
    dischargerange = serializers.ListField(
        child=serializers.DateTimeField(), min_length=2, max_length=2, required=False
    )

    def validate_searchterms(self, v):
        return bleach.clean((v or '').strip(), strip=True)

    def validate(self, attrs):
        for key in ('admissionrange', 'dischargerange'):
            bounds = attrs.get(key)
            if bounds and bounds[0] > bounds[1]:
                raise serializers.ValidationError({key: 'range start must not be after its end'})
        return attrs

    @classmethod
    def from_query(cls, params):
        """Accept ranges as a repeated parameter or as one comma separated value."""
        data = {'searchterms': params.get('searchterms', '')}
        for key in ('admissionrange', 'dischargerange'):
            values = [v for raw in params.getlist(key) for v in raw.split(',') if v.strip()]
            if values:
                data[key] = values
        return cls(data=data)


# -----------------------------------------------------------------------------
# Response formatting
# -----------------------------------------------------------------------------

def _iso(value):
    return value.isoformat() if value else None


def format_ref(entry):
    if entry is None:
        return None
    return {'code': entry.code, 'description': entry.description}


def format_patient(patient) -> dict:
    return {
        'code': patient.code,
        'firstName': patient.first_name,
        'secondName': patient.second_name,
        'name': patient.name,
        'sex': patient.sex,
        'birthDate': _iso(patient.birth_date),
        'city': patient.city,
    }


def format_admission(admission: Admission) -> dict:
    data = {
        'id': admission.id,
        'admitted': admission.admitted,
        'type': admission.type,
        'patient': format_patient(admission.patient),
        'yProg': admission.yprog,
        'fhu': admission.fhu,
        'opResult': admission.op_result,
        'note': admission.note,
        'transUnit': admission.trans_unit,
        'weight': admission.weight,
    }
    for key, attr in REFERENCE_KEYS.items():
        data[key] = format_ref(getattr(admission, attr[:-len('_code')]))
    for key in ('admDate', 'disDate', 'opDate', 'visitDate', 'deliveryDate', 'ctrlDate1', 'ctrlDate2', 'abortDate'):
        data[key] = _iso(getattr(admission, VALUE_KEYS[key]))
    return data


def format_admitted_patient(admission: Admission) -> dict:
    return {
        'patient': format_patient(admission.patient),
        'admission': format_admission(admission),
    }
