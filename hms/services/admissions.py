"""
Admission and bed coordination.

A bed is ``occupied`` exactly while an ``admitted`` admission references
it.  Admitting and discharging change the admission row and the bed row
together inside one transaction with the bed row locked, so the two can
never disagree and two simultaneous admissions cannot share a bed.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from hms.exceptions import Conflict
from hms.models import Admission, Bed, Doctor, Patient
from hms.services.broadcast import publish_bed_change

logger = logging.getLogger(__name__)

# Statuses an administrator may set by hand; ``occupied`` only follows admissions.
MANUAL_BED_STATUSES = (Bed.STATUS_AVAILABLE, Bed.STATUS_MAINTENANCE, Bed.STATUS_RESERVED)


def _get_or_404(model, pk, label: str):
    obj = model.objects.filter(pk=pk).first()
    if obj is None:
        raise NotFound(f'{label} not found')
    return obj


def _lock_bed(bed_id) -> Bed:
    bed = Bed.objects.select_for_update().select_related('ward').filter(pk=bed_id).first()
    if bed is None:
        raise NotFound('bed not found')
    return bed


@transaction.atomic
def admit_patient(patient_id, bed_id, doctor_id=None, *, diagnosis: str = '', notes: str = '') -> Admission:
    patient = _get_or_404(Patient, patient_id, 'patient')
    doctor = _get_or_404(Doctor, doctor_id, 'doctor') if doctor_id else None
    bed = _lock_bed(bed_id)

    if bed.status != Bed.STATUS_AVAILABLE:
        logger.warning('admission refused: bed %s is %s', bed.id, bed.status)
        raise Conflict(f'bed {bed.bed_number} is {bed.status}')
    if Admission.objects.filter(patient=patient, status=Admission.STATUS_ADMITTED).exists():
        logger.warning('admission refused: patient %s already admitted', patient.id)
        raise Conflict(f'patient {patient.patient_code} is already admitted')

    admission = Admission.objects.create(
        patient=patient,
        bed=bed,
        doctor=doctor,
        admission_date=timezone.now(),
        diagnosis=diagnosis,
        notes=notes,
        status=Admission.STATUS_ADMITTED,
    )
    bed.status = Bed.STATUS_OCCUPIED
    bed.save(update_fields=['status'])
    publish_bed_change(bed)

    logger.info('patient %s admitted to bed %s (admission %s)', patient.patient_code, bed.bed_number, admission.id)
    return admission


@transaction.atomic
def discharge_patient(admission_id) -> Optional[Admission]:
    """Discharge an admission and free its bed.

    Returns ``None`` when no admission has the given id; callers decide
    how to report that.
    """
    admission = (
        Admission.objects.select_for_update()
        .select_related('patient')
        .filter(pk=admission_id)
        .first()
    )
    if admission is None:
        return None
    if admission.status != Admission.STATUS_ADMITTED:
        raise Conflict('patient is not currently admitted')

    bed = _lock_bed(admission.bed_id)
    admission.status = Admission.STATUS_DISCHARGED
    admission.discharge_date = timezone.now()
    admission.save(update_fields=['status', 'discharge_date'])
    bed.status = Bed.STATUS_AVAILABLE
    bed.save(update_fields=['status'])
    publish_bed_change(bed)

    logger.info('admission %s discharged, bed %s released', admission.id, bed.bed_number)
    return admission


@transaction.atomic
def set_bed_status(bed_id, status: str) -> Bed:
    """Administrative status change for a bed that is not holding a patient."""
    if status not in MANUAL_BED_STATUSES:
        raise ValidationError({'status': [f'status must be one of {", ".join(MANUAL_BED_STATUSES)}']})
    bed = _lock_bed(bed_id)
    if Admission.objects.filter(bed=bed, status=Admission.STATUS_ADMITTED).exists():
        raise Conflict('bed has an active admission; discharge the patient first')
    if bed.status != status:
        bed.status = status
        bed.save(update_fields=['status'])
        publish_bed_change(bed)
        logger.info('bed %s set to %s', bed.bed_number, status)
    return bed
