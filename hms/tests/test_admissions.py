import uuid

import pytest
from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from rest_framework.exceptions import NotFound, ValidationError

from hms.exceptions import Conflict
from hms.models import Admission, Bed, Ward
from hms.services import admissions as svc

pytestmark = pytest.mark.django_db


def _occupied_matches_admissions():
    for bed in Bed.objects.all():
        active = Admission.objects.filter(bed=bed, status=Admission.STATUS_ADMITTED).count()
        assert active <= 1
        assert (bed.status == Bed.STATUS_OCCUPIED) == (active == 1)


def test_admit_then_discharge_keeps_bed_in_step(patient, bed):
    admission = svc.admit_patient(patient.id, bed.id)
    bed.refresh_from_db()
    assert admission.status == Admission.STATUS_ADMITTED
    assert admission.admission_date is not None
    assert bed.status == Bed.STATUS_OCCUPIED
    _occupied_matches_admissions()

    discharged = svc.discharge_patient(admission.id)
    bed.refresh_from_db()
    assert discharged.status == Admission.STATUS_DISCHARGED
    assert discharged.discharge_date is not None
    assert bed.status == Bed.STATUS_AVAILABLE
    _occupied_matches_admissions()


def test_second_admission_to_occupied_bed_is_refused(patient, other_patient, bed):
    svc.admit_patient(patient.id, bed.id)
    with pytest.raises(Conflict):
        svc.admit_patient(other_patient.id, bed.id)
    assert Admission.objects.filter(bed=bed).count() == 1
    _occupied_matches_admissions()


def test_patient_cannot_hold_two_beds(patient, bed, second_bed):
    svc.admit_patient(patient.id, bed.id)
    with pytest.raises(Conflict):
        svc.admit_patient(patient.id, second_bed.id)
    second_bed.refresh_from_db()
    assert second_bed.status == Bed.STATUS_AVAILABLE


def test_bed_under_maintenance_cannot_be_used(patient, bed):
    svc.set_bed_status(bed.id, Bed.STATUS_MAINTENANCE)
    with pytest.raises(Conflict):
        svc.admit_patient(patient.id, bed.id)


def test_unknown_ids():
    with pytest.raises(NotFound):
        svc.admit_patient(uuid.uuid4(), uuid.uuid4())
    assert svc.discharge_patient(uuid.uuid4()) is None


def test_discharging_twice_conflicts(patient, bed):
    admission = svc.admit_patient(patient.id, bed.id)
    svc.discharge_patient(admission.id)
    with pytest.raises(Conflict):
        svc.discharge_patient(admission.id)


def test_failed_admission_leaves_nothing_behind(patient, bed, monkeypatch):
    def boom(_bed):
        raise RuntimeError('channel layer down')

    monkeypatch.setattr(svc, 'publish_bed_change', boom)
    with pytest.raises(RuntimeError):
        svc.admit_patient(patient.id, bed.id)
    bed.refresh_from_db()
    assert bed.status == Bed.STATUS_AVAILABLE
    assert not Admission.objects.exists()


def test_database_rejects_two_active_admissions_for_one_bed(patient, other_patient, bed):
    Admission.objects.create(patient=patient, bed=bed)
    with pytest.raises(IntegrityError):
        with transaction.atomic():
            Admission.objects.create(patient=other_patient, bed=bed)


def test_manual_status_cannot_occupy_or_touch_admitted_bed(patient, bed):
    with pytest.raises(ValidationError):
        svc.set_bed_status(bed.id, Bed.STATUS_OCCUPIED)
    svc.admit_patient(patient.id, bed.id)
    with pytest.raises(Conflict):
        svc.set_bed_status(bed.id, Bed.STATUS_AVAILABLE)


def test_admission_endpoints(api, patient, bed, doctor):
    r = api.post('/api/admissions', {'patientId': str(patient.id), 'bedId': str(bed.id), 'doctorId': str(doctor.id),
                                      'diagnosis': 'Pneumonia'}, format='json')
    assert r.status_code == 201
    assert r.data['status'] == 'admitted'
    assert r.data['bed']['status'] == 'occupied'
    admission_id = r.data['id']

    r = api.post('/api/admissions', {'patientId': str(patient.id), 'bedId': str(bed.id)}, format='json')
    assert r.status_code == 409
    assert 'error' in r.data

    r = api.get('/api/beds')
    assert r.data[0]['currentAdmission']['id'] == admission_id

    r = api.patch(f'/api/admissions/{admission_id}/discharge')
    assert r.status_code == 200
    assert r.data['status'] == 'discharged'
    assert r.data['bed']['status'] == 'available'

    r = api.patch(f'/api/admissions/{uuid.uuid4()}/discharge')
    assert r.status_code == 404

    r = api.get('/api/admissions', {'status': 'discharged'})
    assert [a['id'] for a in r.data] == [admission_id]


def test_bed_capacity_is_checked_under_the_ward_lock(api, ward, bed, monkeypatch):
    ward.capacity = 2
    ward.save()
    locked = []
    real = QuerySet.select_for_update

    def spy(self, *args, **kwargs):
        locked.append(self.model)
        return real(self, *args, **kwargs)

    monkeypatch.setattr(QuerySet, 'select_for_update', spy)
    r = api.post('/api/beds', {'wardId': str(ward.id), 'bedNumber': 'GA-02'}, format='json')
    assert r.status_code == 201
    assert Ward in locked

    r = api.post('/api/beds', {'wardId': str(ward.id), 'bedNumber': 'GA-03'}, format='json')
    assert r.status_code == 409
    assert ward.beds.count() == 2
