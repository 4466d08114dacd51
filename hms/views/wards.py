"""
Ward and bed views.

Bed occupancy is owned by admissions; the status endpoint here is only
for maintenance/reservation changes on beds that hold no patient.
"""
from __future__ import annotations

from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from ..exceptions import Conflict
from ..models import Bed, Ward
from ..serializers.wards import BedCreateSerializer, BedListQuerySerializer, BedStatusSerializer, WardSerializer
from ..services.admissions import set_bed_status
from ..services.broadcast import publish_bed_change
from ..services.directory import list_beds
from ..services.formatting import format_bed, format_ward


@api_view(['GET', 'POST'])
def wards(request):
    if request.method == 'POST':
        s = WardSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        ward = Ward.objects.create(**s.validated_data)
        return Response(format_ward(ward, bed_count=0, available_beds=0), status=status.HTTP_201_CREATED)

    qs = Ward.objects.annotate(
        bed_count=Count('beds'),
        available_count=Count('beds', filter=Q(beds__status=Bed.STATUS_AVAILABLE)),
    ).order_by('name')
    return Response([format_ward(w, bed_count=w.bed_count, available_beds=w.available_count) for w in qs])


@api_view(['GET', 'POST'])
def beds(request):
    if request.method == 'POST':
        s = BedCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        try:
            with transaction.atomic():
                # the ward row lock serialises concurrent bed creation
                ward = Ward.objects.select_for_update().filter(pk=s.validated_data['ward_id']).first()
                if not ward:
                    raise NotFound('ward not found')
                if ward.beds.count() >= ward.capacity:
                    raise Conflict(f'ward {ward.name} is at capacity ({ward.capacity} beds)')
                bed = Bed.objects.create(ward=ward, bed_number=s.validated_data['bed_number'])
                publish_bed_change(bed)
        except IntegrityError:
            raise Conflict(f"bed {s.validated_data['bed_number']} already exists in {ward.name}")
        return Response(format_bed(bed), status=status.HTTP_201_CREATED)

    q = BedListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    qs = list_beds(q.validated_data.get('wardId'))
    return Response([format_bed(b, with_admission=True) for b in qs])


@api_view(['PATCH'])
def bed_status(request, pk):
    s = BedStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    bed = set_bed_status(pk, s.validated_data['status'])
    return Response(format_bed(bed))
