from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from ..models import Admission
from ..serializers.wards import AdmissionCreateSerializer, AdmissionListQuerySerializer
from ..services.admissions import admit_patient, discharge_patient
from ..services.directory import filter_by_status
from ..services.formatting import format_admission

RELATED = ('patient', 'bed__ward')


def _fetch(pk) -> Admission:
    return Admission.objects.select_related(*RELATED).get(pk=pk)


@api_view(['GET', 'POST'])
def admissions(request):
    if request.method == 'POST':
        s = AdmissionCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        vd = s.validated_data
        admission = admit_patient(
            vd['patientId'], vd['bedId'], vd.get('doctorId'),
            diagnosis=vd['diagnosis'], notes=vd['notes'],
        )
        return Response(format_admission(_fetch(admission.pk)), status=status.HTTP_201_CREATED)

    q = AdmissionListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    qs = Admission.objects.select_related(*RELATED).order_by('-admission_date')
    qs = filter_by_status(qs, q.validated_data.get('status'))
    return Response([format_admission(a) for a in qs])


@api_view(['PATCH'])
def discharge(request, pk):
    admission = discharge_patient(pk)
    if admission is None:
        raise NotFound('admission not found')
    return Response(format_admission(_fetch(admission.pk)))
