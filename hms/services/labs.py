"""
Lab orders and their progress through the laboratory.

Results are only accepted through :func:`record_results`, which also
completes the order; a plain status change never carries results.
"""
import logging

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from hms.models import Appointment, Doctor, LabTest, LabTestCatalog, Patient

logger = logging.getLogger(__name__)

T = LabTest
TRANSITIONS = {
    T.STATUS_PENDING: {T.STATUS_SAMPLE_COLLECTED, T.STATUS_CANCELLED},
    T.STATUS_SAMPLE_COLLECTED: {T.STATUS_IN_PROGRESS, T.STATUS_COMPLETED, T.STATUS_CANCELLED},
    T.STATUS_IN_PROGRESS: {T.STATUS_COMPLETED, T.STATUS_CANCELLED},
    T.STATUS_COMPLETED: set(),
    T.STATUS_CANCELLED: set(),
}


def _get(model, pk, label):
    obj = model.objects.filter(pk=pk).first()
    if obj is None:
        raise NotFound(f'{label} not found')
    return obj


def order_test(*, patient_id, test_catalog_id, doctor_id=None, appointment_id=None, notes: str = '') -> LabTest:
    test = LabTest.objects.create(
        patient=_get(Patient, patient_id, 'patient'),
        test_catalog=_get(LabTestCatalog, test_catalog_id, 'lab test'),
        doctor=_get(Doctor, doctor_id, 'doctor') if doctor_id else None,
        appointment=_get(Appointment, appointment_id, 'appointment') if appointment_id else None,
        status=LabTest.STATUS_PENDING,
        notes=notes,
    )
    logger.info('lab test %s ordered for patient %s', test.id, test.patient_id)
    return test


def _lock(test_id) -> LabTest:
    test = LabTest.objects.select_for_update().select_related('test_catalog').filter(pk=test_id).first()
    if test is None:
        raise NotFound('lab test not found')
    return test


def _move(test: LabTest, status: str) -> list[str]:
    if status not in TRANSITIONS.get(test.status, set()):
        logger.warning('lab test %s: refused %s -> %s', test.id, test.status, status)
        raise ValidationError({'status': [f'cannot move a lab test from {test.status} to {status}']})
    test.status = status
    changed = ['status']
    now = timezone.now()
    if status == LabTest.STATUS_SAMPLE_COLLECTED:
        test.collected_at = now
        changed.append('collected_at')
    elif status == LabTest.STATUS_COMPLETED:
        test.completed_at = now
        changed.append('completed_at')
    return changed


@transaction.atomic
def change_status(test_id, status: str) -> LabTest:
    test = _lock(test_id)
    if test.status == status:
        return test
    test.save(update_fields=_move(test, status))
    logger.info('lab test %s is now %s', test.id, status)
    return test


@transaction.atomic
def record_results(test_id, results: dict) -> LabTest:
    test = _lock(test_id)
    changed = _move(test, LabTest.STATUS_COMPLETED)
    catalog = test.test_catalog
    # fall back to the catalog's unit and range when the lab leaves them out
    results = {
        'unit': catalog.unit,
        'normalRange': catalog.normal_range,
        **{k: v for k, v in results.items() if v not in (None, '')},
    }
    test.results = results
    test.save(update_fields=[*changed, 'results'])
    logger.info('results recorded for lab test %s', test.id)
    return test
