"""
Laboratory views: the test catalog and per-patient test orders.
"""
from __future__ import annotations

from django.db import IntegrityError, transaction
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from ..exceptions import Conflict
from ..models import LabTest, LabTestCatalog
from ..serializers.clinical import (
    LabCatalogSerializer, LabResultsSerializer, LabTestListQuerySerializer, LabTestOrderSerializer,
    LabTestStatusSerializer,
)
from ..services import labs as svc
from ..services.directory import filter_by_status
from ..services.formatting import format_catalog_entry, format_lab_test

RELATED = ('patient', 'doctor__user', 'doctor__department', 'test_catalog')


def _fetch(pk) -> LabTest:
    obj = LabTest.objects.select_related(*RELATED).filter(pk=pk).first()
    if not obj:
        raise NotFound('lab test not found')
    return obj


@api_view(['GET', 'POST'])
def lab_catalog(request):
    if request.method == 'POST':
        s = LabCatalogSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        try:
            with transaction.atomic():
                entry = LabTestCatalog.objects.create(**s.validated_data)
        except IntegrityError:
            raise Conflict(f"lab test code {s.validated_data['code']} already exists")
        return Response(format_catalog_entry(entry), status=status.HTTP_201_CREATED)
    return Response([format_catalog_entry(c) for c in LabTestCatalog.objects.order_by('name')])


@api_view(['GET', 'POST'])
def lab_tests(request):
    if request.method == 'POST':
        s = LabTestOrderSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        test = svc.order_test(**s.validated_data)
        return Response(format_lab_test(_fetch(test.pk)), status=status.HTTP_201_CREATED)

    q = LabTestListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    qs = LabTest.objects.select_related(*RELATED).order_by('-created_at')
    qs = filter_by_status(qs, q.validated_data.get('status'))
    return Response([format_lab_test(t) for t in qs])


@api_view(['PATCH'])
def lab_test_status(request, pk):
    s = LabTestStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    svc.change_status(pk, s.validated_data['status'])
    return Response(format_lab_test(_fetch(pk)))


@api_view(['PATCH'])
def lab_test_results(request, pk):
    s = LabResultsSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    svc.record_results(pk, dict(s.validated_data))
    return Response(format_lab_test(_fetch(pk)))
