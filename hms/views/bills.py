"""
Billing views: invoices and the payments recorded against them.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from ..models import Bill
from ..serializers.billing import BillCreateSerializer, BillListQuerySerializer, PaymentSerializer
from ..services import billing as svc
from ..services.directory import filter_by_status
from ..services.formatting import format_bill


def _fetch(pk) -> Bill:
    obj = Bill.objects.select_related('patient').filter(pk=pk).first()
    if not obj:
        raise NotFound('bill not found')
    return obj


@api_view(['GET', 'POST'])
def bills(request):
    if request.method == 'POST':
        s = BillCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        vd = s.validated_data
        bill = svc.create_bill(
            vd['patientId'],
            [dict(item) for item in vd['items']],
            appointment_id=vd.get('appointmentId'),
            admission_id=vd.get('admissionId'),
            discount=vd['discount'],
            tax=vd['tax'],
            notes=vd['notes'],
            insurance_claim=vd['insuranceClaim'],
        )
        return Response(format_bill(_fetch(bill.pk)), status=status.HTTP_201_CREATED)

    q = BillListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    qs = Bill.objects.select_related('patient').order_by('-created_at')
    qs = filter_by_status(qs, q.validated_data.get('status'), field='payment_status')
    if q.validated_data.get('patientId'):
        qs = qs.filter(patient_id=q.validated_data['patientId'])
    return Response([format_bill(b) for b in qs])


@api_view(['GET'])
def bill_detail(request, pk):
    return Response(format_bill(_fetch(pk)))


@api_view(['POST'])
def bill_payment(request, pk):
    s = PaymentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    svc.record_payment(pk, s.validated_data['amount'], s.validated_data['paymentMethod'])
    return Response(format_bill(_fetch(pk)))


@api_view(['PATCH'])
def bill_cancel(request, pk):
    svc.cancel_bill(pk)
    return Response(format_bill(_fetch(pk)))
