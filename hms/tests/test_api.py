"""
Integration tests for the hospital administration API.

These exercise the registry, staff directory, appointment and lab
workflows, wards and the dashboard through DRF's APIClient.  Run with::

    pytest -q hms/tests
"""

import datetime
import uuid
from decimal import Decimal

from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from ..models import Appointment, Bed, LabTestCatalog, Patient, User, Ward
from ..services.doctors import create_doctor
from ..services.patients import create_patient


class HospitalAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(username='admin', email='admin@medicare.hospital', role='admin')
        self.nurse = User.objects.create_user(username='nurse', email='nurse@medicare.hospital', role='nurse')
        self.client = APIClient()
        self.client.force_authenticate(self.admin)

        self.jane = create_patient(first_name='Jane', last_name='Doe', phone='+1 555-0100', gender='female')
        self.john = create_patient(first_name='John', last_name='Smith', phone='+1 555-0101', gender='male')
        self.doctor = create_doctor(first_name='Robert', last_name='Chen', email='dr.chen@medicare.hospital',
                                    specialization='Cardiology')

    # ------------------------------------------------------------------
    # patients
    # ------------------------------------------------------------------
    def test_search_matches_name_case_insensitively(self):
        r = self.client.get('/api/patients', {'search': 'jan'})
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual([p['firstName'] for p in r.data['patients']], ['Jane'])
        self.assertEqual(r.data['total'], 1)

    def test_empty_search_returns_everyone(self):
        r = self.client.get('/api/patients', {'search': ''})
        self.assertEqual(r.data['total'], 2)
        r = self.client.get('/api/patients')
        self.assertEqual(len(r.data['patients']), 2)

    def test_search_by_code_and_phone(self):
        r = self.client.get('/api/patients', {'search': self.john.patient_code.lower()})
        self.assertEqual([p['id'] for p in r.data['patients']], [str(self.john.id)])
        r = self.client.get('/api/patients', {'search': '0100'})
        self.assertEqual([p['id'] for p in r.data['patients']], [str(self.jane.id)])

    def test_patient_list_pagination(self):
        r = self.client.get('/api/patients', {'page': 2, 'pageSize': 1})
        self.assertEqual(r.data['total'], 2)
        self.assertEqual(len(r.data['patients']), 1)

    def test_create_update_delete_patient(self):
        r = self.client.post('/api/patients', {
            'firstName': '<b>Priya</b>', 'lastName': 'Nair', 'phone': '+91 98450 00000', 'gender': 'female',
            'bloodGroup': 'B+', 'medicalHistory': {'allergies': ['Penicillin']},
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertRegex(r.data['patientId'], r'^PAT-\d{5}$')
        self.assertEqual(r.data['firstName'], 'Priya')
        self.assertEqual(r.data['medicalHistory']['allergies'], ['Penicillin'])
        pid = r.data['id']

        r = self.client.patch(f'/api/patients/{pid}', {'address': '12 MG Road'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['address'], '12 MG Road')
        self.assertEqual(r.data['lastName'], 'Nair')

        r = self.client.delete(f'/api/patients/{pid}')
        self.assertEqual(r.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(self.client.get(f'/api/patients/{pid}').status_code, status.HTTP_404_NOT_FOUND)

    def test_invalid_patient_payload(self):
        r = self.client.post('/api/patients', {'firstName': 'X', 'gender': 'unknown'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('lastName', r.data['fields'])
        self.assertIn('gender', r.data['fields'])

    def test_deleting_referenced_patient_conflicts(self):
        Appointment.objects.create(patient=self.jane, doctor=self.doctor,
                                   appointment_date=datetime.date.today(), appointment_time=datetime.time(9, 0))
        r = self.client.delete(f'/api/patients/{self.jane.id}')
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)
        self.assertTrue(Patient.objects.filter(pk=self.jane.pk).exists())

    def test_patient_picker_is_a_bare_list(self):
        r = self.client.get('/api/patients/list')
        self.assertIsInstance(r.data, list)
        self.assertEqual(len(r.data), 2)

    # ------------------------------------------------------------------
    # staff
    # ------------------------------------------------------------------
    def test_create_doctor_creates_doctor_user(self):
        dept = self.client.post('/api/departments', {'name': 'Neurology'}, format='json').data
        r = self.client.post('/api/doctors', {
            'firstName': 'Amanda', 'lastName': 'Wilson', 'email': 'dr.wilson@medicare.hospital',
            'specialization': 'Neurology', 'departmentId': dept['id'],
            'schedule': {'monday': {'start': '09:00', 'end': '17:00'}},
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['user']['role'], 'doctor')
        self.assertEqual(r.data['consultationFee'], '500.00')
        self.assertEqual(r.data['department']['name'], 'Neurology')

        r = self.client.patch(f"/api/doctors/{r.data['id']}", {'isAvailable': False, 'phone': '555'}, format='json')
        self.assertFalse(r.data['isAvailable'])
        self.assertEqual(r.data['user']['phone'], '555')

        r = self.client.get('/api/doctors', {'available': 'true'})
        self.assertEqual([d['id'] for d in r.data], [str(self.doctor.id)])

    def test_doctor_picker_is_a_bare_list(self):
        r = self.client.get('/api/doctors/list')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertIsInstance(r.data, list)
        self.assertEqual([d['id'] for d in r.data], [str(self.doctor.id)])
        self.assertEqual(r.data[0]['user']['lastName'], 'Chen')

    def test_duplicate_doctor_email_conflicts(self):
        r = self.client.post('/api/doctors', {
            'firstName': 'R', 'lastName': 'C', 'email': 'dr.chen@medicare.hospital', 'specialization': 'x',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)

    def test_departments_sorted_and_editable(self):
        self.client.post('/api/departments', {'name': 'Radiology'}, format='json')
        b = self.client.post('/api/departments', {'name': 'Cardiology'}, format='json').data
        r = self.client.get('/api/departments')
        self.assertEqual([d['name'] for d in r.data], ['Cardiology', 'Radiology'])
        r = self.client.patch(f"/api/departments/{b['id']}", {'headDoctorId': str(self.doctor.id)}, format='json')
        self.assertEqual(r.data['headDoctorId'], str(self.doctor.id))
        self.assertEqual(self.client.delete(f"/api/departments/{b['id']}").status_code, 204)

    # ------------------------------------------------------------------
    # appointments
    # ------------------------------------------------------------------
    def _book(self, patient, **extra):
        r = self.client.post('/api/appointments', {
            'patientId': str(patient.id), 'doctorId': str(self.doctor.id),
            'appointmentDate': timezone.localdate().isoformat(), 'appointmentTime': '10:30', **extra,
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED, r.data)
        return r.data

    def test_appointment_status_filter(self):
        a = self._book(self.jane)
        b = self._book(self.john)
        r = self.client.patch(f"/api/appointments/{b['id']}/status", {'status': 'cancelled'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)

        r = self.client.get('/api/appointments', {'status': 'cancelled'})
        self.assertEqual([x['id'] for x in r.data['appointments']], [b['id']])
        r = self.client.get('/api/appointments', {'status': 'all'})
        self.assertEqual(r.data['total'], 2)
        r = self.client.get('/api/appointments')
        self.assertEqual({x['id'] for x in r.data['appointments']}, {a['id'], b['id']})
        self.assertEqual(self.client.get('/api/appointments', {'status': 'later'}).status_code, 400)

    def test_appointment_transitions(self):
        a = self._book(self.jane)
        url = f"/api/appointments/{a['id']}/status"
        self.assertEqual(self.client.patch(url, {'status': 'in_progress'}, format='json').status_code, 200)
        self.assertEqual(self.client.patch(url, {'status': 'scheduled'}, format='json').status_code, 400)
        self.assertEqual(self.client.patch(url, {'status': 'completed'}, format='json').status_code, 200)
        self.assertEqual(self.client.patch(url, {'status': 'completed'}, format='json').status_code, 200)
        self.assertEqual(self.client.patch(url, {'status': 'cancelled'}, format='json').status_code, 400)

    def test_appointment_update_records_prescription(self):
        a = self._book(self.jane, type='follow_up')
        r = self.client.patch(f"/api/appointments/{a['id']}", {
            'diagnosis': 'Hypertension',
            'prescription': {'medications': [{'name': 'Amlodipine', 'dosage': '5mg', 'frequency': 'daily'}]},
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['diagnosis'], 'Hypertension')
        self.assertEqual(r.data['prescription']['medications'][0]['name'], 'Amlodipine')
        self.assertEqual(r.data['patient']['id'], str(self.jane.id))
        self.assertEqual(self.client.delete(f"/api/appointments/{a['id']}").status_code, 204)

    def test_appointment_for_unknown_doctor(self):
        r = self.client.post('/api/appointments', {
            'patientId': str(self.jane.id), 'doctorId': str(uuid.uuid4()),
            'appointmentDate': '2026-01-05', 'appointmentTime': '10:30',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    # ------------------------------------------------------------------
    # laboratory
    # ------------------------------------------------------------------
    def test_lab_test_lifecycle(self):
        cat = self.client.post('/api/lab-catalog', {
            'name': 'Lipid Profile', 'code': 'LP', 'price': '350', 'unit': 'mg/dL', 'normalRange': '<200 mg/dL total',
        }, format='json')
        self.assertEqual(cat.status_code, status.HTTP_201_CREATED)
        self.assertEqual(cat.data['price'], '350.00')
        dup = self.client.post('/api/lab-catalog', {'name': 'Again', 'code': 'LP', 'price': '1'}, format='json')
        self.assertEqual(dup.status_code, status.HTTP_409_CONFLICT)

        order = self.client.post('/api/lab-tests', {
            'patientId': str(self.jane.id), 'testCatalogId': cat.data['id'], 'doctorId': str(self.doctor.id),
        }, format='json')
        self.assertEqual(order.status_code, status.HTTP_201_CREATED)
        self.assertEqual(order.data['status'], 'pending')
        tid = order.data['id']

        r = self.client.patch(f'/api/lab-tests/{tid}/status', {'status': 'sample_collected'}, format='json')
        self.assertEqual(r.data['status'], 'sample_collected')
        self.assertIsNotNone(r.data['collectedAt'])

        r = self.client.patch(f'/api/lab-tests/{tid}/results', {'value': '180', 'interpretation': 'normal'},
                              format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['status'], 'completed')
        self.assertIsNotNone(r.data['completedAt'])
        self.assertEqual(r.data['results']['value'], '180')
        self.assertEqual(r.data['results']['unit'], 'mg/dL')

        r = self.client.patch(f'/api/lab-tests/{tid}/status', {'status': 'pending'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        r = self.client.get('/api/lab-tests', {'status': 'completed'})
        self.assertEqual([t['id'] for t in r.data], [tid])

    def test_results_need_a_collected_sample(self):
        cat = LabTestCatalog.objects.create(name='ECG', code='ECG', price=Decimal('200'))
        order = self.client.post('/api/lab-tests', {'patientId': str(self.jane.id), 'testCatalogId': str(cat.id)},
                                 format='json').data
        r = self.client.patch(f"/api/lab-tests/{order['id']}/results", {'value': '72'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    # ------------------------------------------------------------------
    # wards & beds
    # ------------------------------------------------------------------
    def test_wards_and_beds(self):
        w = self.client.post('/api/wards', {'name': 'ICU', 'type': 'icu', 'floor': 2, 'capacity': 2,
                                            'chargePerDay': '2500'}, format='json')
        self.assertEqual(w.status_code, status.HTTP_201_CREATED)
        wid = w.data['id']
        for number in ('ICU-01', 'ICU-02'):
            r = self.client.post('/api/beds', {'wardId': wid, 'bedNumber': number}, format='json')
            self.assertEqual(r.status_code, status.HTTP_201_CREATED)
            self.assertEqual(r.data['status'], 'available')
        r = self.client.post('/api/beds', {'wardId': wid, 'bedNumber': 'ICU-03'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)

        r = self.client.get('/api/wards')
        self.assertEqual(r.data[0]['totalBeds'], 2)
        self.assertEqual(r.data[0]['availableBeds'], 2)

        bed = Bed.objects.get(bed_number='ICU-01')
        r = self.client.patch(f'/api/beds/{bed.id}/status', {'status': 'maintenance'}, format='json')
        self.assertEqual(r.data['status'], 'maintenance')
        r = self.client.patch(f'/api/beds/{bed.id}/status', {'status': 'occupied'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        r = self.client.get('/api/beds', {'wardId': wid})
        self.assertEqual([b['bedNumber'] for b in r.data], ['ICU-01', 'ICU-02'])

    def test_duplicate_bed_number_conflicts(self):
        ward = Ward.objects.create(name='A', type='general', capacity=5, charge_per_day=Decimal('500'))
        Bed.objects.create(ward=ward, bed_number='A-01')
        r = self.client.post('/api/beds', {'wardId': str(ward.id), 'bedNumber': 'A-01'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)

    # ------------------------------------------------------------------
    # dashboard & users
    # ------------------------------------------------------------------
    def test_dashboard_stats(self):
        ward = Ward.objects.create(name='A', type='general', capacity=5, charge_per_day=Decimal('500'))
        Bed.objects.create(ward=ward, bed_number='A-01')
        Bed.objects.create(ward=ward, bed_number='A-02', status='maintenance')
        self._book(self.jane)
        bill = self.client.post('/api/bills', {
            'patientId': str(self.jane.id), 'items': [{'description': 'Consultation', 'quantity': 1, 'rate': '500'}],
        }, format='json').data
        self.client.post(f"/api/bills/{bill['id']}/payment", {'amount': '200', 'paymentMethod': 'upi'}, format='json')

        r = self.client.get('/api/dashboard/stats')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data, {
            'totalPatients': 2,
            'todayAppointments': 1,
            'availableBeds': 1,
            'monthlyRevenue': '200.00',
        })

    def test_current_user(self):
        r = self.client.get('/api/auth/user')
        self.assertEqual(r.data['id'], str(self.admin.id))
        self.assertEqual(r.data['role'], 'admin')

    def test_role_change_requires_admin(self):
        nurse_client = APIClient()
        nurse_client.force_authenticate(self.nurse)
        r = nurse_client.patch(f'/api/users/{self.nurse.id}/role', {'role': 'admin'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        self.nurse.refresh_from_db()
        self.assertEqual(self.nurse.role, 'nurse')
        self.assertEqual(nurse_client.get('/api/users').status_code, status.HTTP_403_FORBIDDEN)

        r = self.client.patch(f'/api/users/{self.nurse.id}/role', {'role': 'lab_staff'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['role'], 'lab_staff')
        r = self.client.patch(f'/api/users/{self.nurse.id}/role', {'role': 'janitor'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
