import logging

from django.db import transaction
from rest_framework.exceptions import NotFound, ValidationError

from hms.models import Appointment, Department, Doctor, Patient

logger = logging.getLogger(__name__)

S = Appointment
# current status -> statuses it may move to
TRANSITIONS = {
    S.STATUS_SCHEDULED: {S.STATUS_IN_PROGRESS, S.STATUS_COMPLETED, S.STATUS_CANCELLED, S.STATUS_NO_SHOW},
    S.STATUS_IN_PROGRESS: {S.STATUS_COMPLETED, S.STATUS_CANCELLED},
    S.STATUS_CANCELLED: {S.STATUS_SCHEDULED},
    S.STATUS_NO_SHOW: {S.STATUS_SCHEDULED},
    S.STATUS_COMPLETED: set(),
}


def _get(model, pk, label):
    obj = model.objects.filter(pk=pk).first()
    if obj is None:
        raise NotFound(f'{label} not found')
    return obj


def create_appointment(*, patient_id, doctor_id, department_id=None, **fields) -> Appointment:
    patient = _get(Patient, patient_id, 'patient')
    doctor = _get(Doctor, doctor_id, 'doctor')
    department = _get(Department, department_id, 'department') if department_id else doctor.department
    return Appointment.objects.create(patient=patient, doctor=doctor, department=department, **fields)


def update_appointment(appointment: Appointment, **fields) -> Appointment:
    if 'doctor_id' in fields:
        fields['doctor'] = _get(Doctor, fields.pop('doctor_id'), 'doctor')
    if 'department_id' in fields:
        department_id = fields.pop('department_id')
        fields['department'] = _get(Department, department_id, 'department') if department_id else None
    for name, value in fields.items():
        setattr(appointment, name, value)
    appointment.save()
    return appointment


@transaction.atomic
def change_status(appointment_id, status: str) -> Appointment:
    appointment = Appointment.objects.select_for_update().filter(pk=appointment_id).first()
    if appointment is None:
        raise NotFound('appointment not found')
    if appointment.status == status:
        return appointment
    if status not in TRANSITIONS.get(appointment.status, set()):
        logger.warning('appointment %s: refused %s -> %s', appointment.id, appointment.status, status)
        raise ValidationError({'status': [f'cannot move an appointment from {appointment.status} to {status}']})
    appointment.status = status
    appointment.save(update_fields=['status', 'updated_at'])
    logger.info('appointment %s is now %s', appointment.id, status)
    return appointment
