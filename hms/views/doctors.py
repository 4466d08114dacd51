from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from ..models import Doctor
from ..serializers.staff import DoctorListQuerySerializer, DoctorWriteSerializer
from ..services.doctors import create_doctor, list_doctors, update_doctor
from ..services.formatting import format_doctor


def _get_doctor(pk) -> Doctor:
    obj = Doctor.objects.select_related('user', 'department').filter(pk=pk).first()
    if not obj:
        raise NotFound('doctor not found')
    return obj


@api_view(['GET', 'POST'])
def doctors(request):
    if request.method == 'POST':
        s = DoctorWriteSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        user_fields, profile_fields = s.split()
        doctor = create_doctor(**user_fields, **profile_fields)
        return Response(format_doctor(doctor), status=status.HTTP_201_CREATED)

    q = DoctorListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    qs = list_doctors(
        department_id=q.validated_data.get('departmentId'),
        available_only=q.validated_data.get('available', False),
    )
    return Response([format_doctor(d) for d in qs])


@api_view(['GET'])
def doctor_picker(request):
    """Bare list of all doctors for select boxes."""
    return Response([format_doctor(d) for d in list_doctors()])


@api_view(['GET', 'PATCH'])
def doctor_detail(request, pk):
    doctor = _get_doctor(pk)
    if request.method == 'GET':
        return Response(format_doctor(doctor))
    s = DoctorWriteSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    user_fields, profile_fields = s.split()
    doctor = update_doctor(doctor, user_fields=user_fields, profile_fields=profile_fields)
    return Response(format_doctor(_get_doctor(doctor.pk)))
