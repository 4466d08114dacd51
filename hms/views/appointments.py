from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from ..models import Appointment
from ..serializers.clinical import (
    AppointmentListQuerySerializer, AppointmentStatusSerializer, AppointmentUpdateSerializer,
    AppointmentWriteSerializer,
)
from ..services import appointments as svc
from ..services.directory import filter_by_status
from ..services.formatting import format_appointment

RELATED = ('patient', 'doctor__user', 'doctor__department')


def _fetch(pk) -> Appointment:
    obj = Appointment.objects.select_related(*RELATED).filter(pk=pk).first()
    if not obj:
        raise NotFound('appointment not found')
    return obj


@api_view(['GET', 'POST'])
def appointments(request):
    if request.method == 'POST':
        s = AppointmentWriteSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        appt = svc.create_appointment(**s.validated_data)
        return Response(format_appointment(_fetch(appt.pk)), status=status.HTTP_201_CREATED)

    q = AppointmentListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    qs = Appointment.objects.select_related(*RELATED).order_by('-appointment_date', '-appointment_time')
    qs = filter_by_status(qs, q.validated_data.get('status'))
    data = [format_appointment(a) for a in qs]
    return Response({'appointments': data, 'total': len(data)})


@api_view(['PATCH', 'DELETE'])
def appointment_detail(request, pk):
    appt = _fetch(pk)
    if request.method == 'DELETE':
        appt.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
    s = AppointmentUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    with transaction.atomic():
        # a status in the body goes through the same transition rules as the status endpoint
        if 'status' in request.data:
            st = AppointmentStatusSerializer(data={'status': request.data['status']})
            st.is_valid(raise_exception=True)
            svc.change_status(appt.pk, st.validated_data['status'])
        svc.update_appointment(_fetch(pk), **s.validated_data)
    return Response(format_appointment(_fetch(pk)))


@api_view(['PATCH'])
def appointment_status(request, pk):
    s = AppointmentStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    svc.change_status(pk, s.validated_data['status'])
    return Response(format_appointment(_fetch(pk)))
