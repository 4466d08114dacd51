"""
Read-side queries shared by the list endpoints.
"""
from __future__ import annotations

from typing import Optional

from django.db.models import Prefetch, Q, QuerySet

from hms.models import Admission, Bed, Patient

ALL = 'all'


def search_patients(term: Optional[str] = None) -> QuerySet:
    """Patients whose name, code or phone contains ``term`` (case-insensitive), newest first."""
    qs = Patient.objects.order_by('-created_at')
    term = (term or '').strip()
    if term:
        qs = qs.filter(
            Q(first_name__icontains=term)
            | Q(last_name__icontains=term)
            | Q(patient_code__icontains=term)
            | Q(phone__icontains=term)
        )
    return qs


def filter_by_status(qs: QuerySet, status: Optional[str], field: str = 'status') -> QuerySet:
    if not status or status == ALL:
        return qs
    return qs.filter(**{field: status})


def list_beds(ward_id=None) -> QuerySet:
    """Beds with their ward and, for occupied beds, the current admission and patient.

    The current admission (if any) is available as ``bed.active_admissions[0]``.
    """
    active = Prefetch(
        'admissions',
        queryset=Admission.objects.filter(status=Admission.STATUS_ADMITTED).select_related('patient'),
        to_attr='active_admissions',
    )
    qs = Bed.objects.select_related('ward').prefetch_related(active).order_by('bed_number')
    if ward_id:
        qs = qs.filter(ward_id=ward_id)
    return qs
