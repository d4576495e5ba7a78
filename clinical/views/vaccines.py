"""
Vaccine catalogue endpoints.

``/api/vaccines/<code>`` is shared by two operations as in the legacy
client: ``GET`` treats the segment as a vaccine *type* code and lists its
vaccines, ``DELETE`` treats it as a vaccine code.
"""
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinical.serializers.vaccine import VaccineSerializer, format_vaccine
from clinical.services.vaccines import (
    create_vaccine,
    delete_vaccine,
    is_code_used,
    list_vaccines,
    update_vaccine,
)

logger = logging.getLogger(__name__)


def _payload(request):
    s = VaccineSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = s.validated_data
    return {'code': data['code'], 'description': data['description'], 'type_code': data['vaccineType']['code']}


@api_view(['GET', 'POST', 'PUT'])
@permission_classes([IsAuthenticated])
def vaccines(request):
    if request.method == 'GET':
        logger.info('Get vaccines')
        return Response([format_vaccine(v) for v in list_vaccines()])
    payload = _payload(request)
    if request.method == 'POST':
        logger.info('Create vaccine: %s', payload['code'])
        vaccine = create_vaccine(**payload)
        return Response(format_vaccine(vaccine), status=status.HTTP_201_CREATED)
    logger.info('Update vaccine: %s', payload['code'])
    return Response(format_vaccine(update_vaccine(**payload)))


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def vaccine_by_code(request, code: str):
    if request.method == 'GET':
        logger.info('Get vaccines by type code: %s', code)
        return Response([format_vaccine(v) for v in list_vaccines(code)])
    logger.info('Delete vaccine code: %s', code)
    return Response(delete_vaccine(code))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def check_vaccine_code(request, code: str):
    logger.info('Check vaccine code: %s', code)
    return Response(is_code_used(code))
