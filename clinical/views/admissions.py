"""
Admission endpoints.

Views only translate between HTTP and the services in
:mod:`clinical.services.admissions`; every failure is raised as a
:class:`~clinical.exceptions.ClinicalError` and rendered by the project
exception handler.
"""
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinical.exceptions import MissingField
from clinical.serializers.admission import (
    AdmissionSerializer,
    AdmittedPatientsQuerySerializer,
    PatientCodeQuerySerializer,
    WardCodeQuerySerializer,
    format_admission,
    format_admitted_patient,
)
from clinical.services.admissions import (
    admitted_patients,
    beds_occupied,
    create_admission,
    current_admission,
    discharge_admission,
    get_admission,
    get_patient_or_raise,
    next_progressive_number,
    patient_admissions,
    soft_delete_admission,
    update_admission,
)

logger = logging.getLogger(__name__)


def _patient_code(request) -> int:
    q = PatientCodeQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return q.validated_data['patientCode']


def _candidate(request):
    s = AdmissionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return s.to_candidate()


@api_view(['GET', 'POST', 'PUT'])
@permission_classes([IsAuthenticated])
def admissions(request):
    """List a patient's admissions, create one, or update one by payload id."""
    if request.method == 'GET':
        code = _patient_code(request)
        logger.info('Get patient admissions by patient code: %s', code)
        patient = get_patient_or_raise(code)
        return Response([format_admission(a) for a in patient_admissions(patient)])

    candidate = _candidate(request)
    if request.method == 'POST':
        logger.info('Create admission for patient code: %s', candidate.patient_code)
        admission = create_admission(candidate)
        return Response(format_admission(admission), status=status.HTTP_201_CREATED)

    if candidate.id is None:
        raise MissingField('Admission id is required!', field='id')
    logger.info('Update admission: %s', candidate.id)
    return Response(format_admission(update_admission(candidate.id, candidate)))


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def admission_detail(request, pk: int):
    if request.method == 'GET':
        logger.info('Get admission by id: %s', pk)
        admission = get_admission(pk)
        if admission is None:
            return Response(status=status.HTTP_204_NO_CONTENT)
        return Response(format_admission(admission))
    if request.method == 'PUT':
        logger.info('Update admission: %s', pk)
        return Response(format_admission(update_admission(pk, _candidate(request))))
    logger.info('Setting admission to deleted: %s', pk)
    return Response(soft_delete_admission(pk))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def current_admission_view(request):
    """The only admission without discharge for the patient, or 204."""
    code = _patient_code(request)
    logger.info('Get current admission by patient code: %s', code)
    admission = current_admission(get_patient_or_raise(code))
    if admission is None:
        return Response(status=status.HTTP_204_NO_CONTENT)
    return Response(format_admission(admission))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def all_admitted_patients(request):
    logger.info('Get all admitted patients')
    return Response([format_admitted_patient(a) for a in admitted_patients()])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def admitted_patients_view(request):
    q = AdmittedPatientsQuerySerializer.from_query(request.query_params)
    q.is_valid(raise_exception=True)
    logger.info('Get admitted patients search terms: %s', q.validated_data.get('searchterms'))
    rows = admitted_patients(
        q.validated_data.get('searchterms', ''),
        admission_range=q.validated_data.get('admissionrange'),
        discharge_range=q.validated_data.get('dischargerange'),
    )
    return Response([format_admitted_patient(a) for a in rows])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def next_progressive_id(request):
    q = WardCodeQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    ward_code = q.validated_data['wardCode']
    logger.info('Get the next prog in the year for ward code: %s', ward_code)
    return Response(next_progressive_number(ward_code))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def beds_occupation(request):
    q = WardCodeQuerySerializer(data={'wardCode': request.query_params.get('wardid')})
    q.is_valid(raise_exception=True)
    ward_code = q.validated_data['wardCode']
    logger.info('Count used beds for ward code: %s', ward_code)
    return Response(beds_occupied(ward_code))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def discharge_patient(request):
    code = _patient_code(request)
    logger.info('Discharge patient code: %s', code)
    discharged = discharge_admission(code, _candidate(request))
    if discharged is None:
        return Response(status=status.HTTP_204_NO_CONTENT)
    return Response(discharged)
