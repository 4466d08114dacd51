from django.db import transaction

from hms.models import Patient
from hms.services.sequences import next_patient_code


def create_patient(**fields) -> Patient:
    # code and row are issued together; a failed insert does not consume the code
    with transaction.atomic():
        return Patient.objects.create(patient_code=next_patient_code(), **fields)


def update_patient(patient: Patient, **fields) -> Patient:
    for name, value in fields.items():
        setattr(patient, name, value)
    patient.save()
    return patient
