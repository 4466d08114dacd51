"""
Patient registry views.

Listing supports a free-text ``search`` and optional server side
pagination with ``page``/``pageSize``; without them the full list is
returned and the client paginates.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from ..models import Patient
from ..serializers.patient import PatientListQuerySerializer, PatientWriteSerializer
from ..services.directory import search_patients
from ..services.formatting import format_patient
from ..services.patients import create_patient, update_patient


def _get_patient(pk) -> Patient:
    obj = Patient.objects.filter(pk=pk).first()
    if not obj:
        raise NotFound('patient not found')
    return obj


@api_view(['GET', 'POST'])
def patients(request):
    if request.method == 'POST':
        s = PatientWriteSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        patient = create_patient(**s.validated_data)
        return Response(format_patient(patient), status=status.HTTP_201_CREATED)

    q = PatientListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    qs = search_patients(q.validated_data.get('search'))
    total = qs.count()
    page = q.validated_data.get('page') or 1
    page_size = q.validated_data.get('pageSize') or 0
    if page_size:
        start = (page - 1) * page_size
        qs = qs[start:start + page_size]
    return Response({'patients': [format_patient(p) for p in qs], 'total': total})


@api_view(['GET'])
def patient_picker(request):
    """Bare list of all patients for select boxes."""
    return Response([format_patient(p) for p in Patient.objects.order_by('last_name', 'first_name')])


@api_view(['GET', 'PATCH', 'DELETE'])
def patient_detail(request, pk):
    patient = _get_patient(pk)
    if request.method == 'GET':
        return Response(format_patient(patient))
    if request.method == 'DELETE':
        # clinical records PROTECT the patient; the exception handler turns that into 409
        patient.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
    s = PatientWriteSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    return Response(format_patient(update_patient(patient, **s.validated_data)))
