"""
Department directory views.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from ..models import Department, Doctor
from ..serializers.staff import DepartmentSerializer
from ..services.formatting import format_department


def _check_head_doctor(data: dict) -> None:
    head_id = data.get('head_doctor_id')
    if head_id and not Doctor.objects.filter(pk=head_id).exists():
        raise NotFound('doctor not found')


@api_view(['GET', 'POST'])
def departments(request):
    if request.method == 'POST':
        s = DepartmentSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        _check_head_doctor(s.validated_data)
        dept = Department.objects.create(**s.validated_data)
        return Response(format_department(dept), status=status.HTTP_201_CREATED)
    return Response([format_department(d) for d in Department.objects.order_by('name')])


@api_view(['PATCH', 'DELETE'])
def department_detail(request, pk):
    dept = Department.objects.filter(pk=pk).first()
    if not dept:
        raise NotFound('department not found')
    if request.method == 'DELETE':
        dept.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
    s = DepartmentSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    _check_head_doctor(s.validated_data)
    for field, value in s.validated_data.items():
        setattr(dept, field, value)
    dept.save()
    return Response(format_department(dept))
