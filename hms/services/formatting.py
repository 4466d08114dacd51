"""
JSON shapes returned by the API.

Keys are camelCase and money is a two-decimal string.  Related records
are embedded only where the list screens need them.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from hms.models import (
    Admission, Appointment, Bed, Bill, Department, Doctor, LabTest, LabTestCatalog, Patient, User, Ward,
)


def money_str(value) -> Optional[str]:
    if value is None:
        return None
    return str(Decimal(str(value)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def _id(value) -> Optional[str]:
    return str(value) if value else None


def format_user(u: User) -> dict:
    return {
        'id': str(u.id),
        'email': u.email or None,
        'firstName': u.first_name,
        'lastName': u.last_name,
        'profileImageUrl': u.profile_image_url or None,
        'role': u.role,
        'phone': u.phone,
        'createdAt': _iso(u.date_joined),
        'updatedAt': _iso(u.updated_at),
    }


def format_patient(p: Patient) -> dict:
    return {
        'id': str(p.id),
        'patientId': p.patient_code,
        'userId': _id(p.user_id),
        'firstName': p.first_name,
        'lastName': p.last_name,
        'dateOfBirth': _iso(p.date_of_birth),
        'gender': p.gender or None,
        'bloodGroup': p.blood_group or None,
        'phone': p.phone,
        'email': p.email or None,
        'address': p.address,
        'emergencyContactName': p.emergency_contact_name,
        'emergencyContactPhone': p.emergency_contact_phone,
        'medicalHistory': p.medical_history,
        'createdAt': _iso(p.created_at),
        'updatedAt': _iso(p.updated_at),
    }


def format_department(d: Department) -> dict:
    return {
        'id': str(d.id),
        'name': d.name,
        'description': d.description,
        'headDoctorId': _id(d.head_doctor_id),
        'createdAt': _iso(d.created_at),
    }


def format_doctor(d: Doctor) -> dict:
    return {
        'id': str(d.id),
        'userId': str(d.user_id),
        'departmentId': _id(d.department_id),
        'specialization': d.specialization,
        'qualifications': d.qualifications,
        'consultationFee': money_str(d.consultation_fee),
        'schedule': d.schedule,
        'isAvailable': d.is_available,
        'createdAt': _iso(d.created_at),
        'user': format_user(d.user),
        'department': format_department(d.department) if d.department_id else None,
    }


def format_appointment(a: Appointment) -> dict:
    return {
        'id': str(a.id),
        'patientId': str(a.patient_id),
        'doctorId': str(a.doctor_id),
        'departmentId': _id(a.department_id),
        'appointmentDate': _iso(a.appointment_date),
        'appointmentTime': a.appointment_time.strftime('%H:%M') if a.appointment_time else None,
        'status': a.status,
        'type': a.type,
        'notes': a.notes,
        'diagnosis': a.diagnosis,
        'prescription': a.prescription,
        'createdAt': _iso(a.created_at),
        'updatedAt': _iso(a.updated_at),
        'patient': format_patient(a.patient),
        'doctor': format_doctor(a.doctor),
    }


def format_catalog_entry(c: LabTestCatalog) -> dict:
    return {
        'id': str(c.id),
        'name': c.name,
        'code': c.code,
        'description': c.description,
        'normalRange': c.normal_range,
        'unit': c.unit,
        'sampleType': c.sample_type,
        'price': money_str(c.price),
        'turnaroundTime': c.turnaround_time,
    }


def format_lab_test(t: LabTest) -> dict:
    return {
        'id': str(t.id),
        'patientId': str(t.patient_id),
        'doctorId': _id(t.doctor_id),
        'appointmentId': _id(t.appointment_id),
        'testCatalogId': str(t.test_catalog_id),
        'status': t.status,
        'results': t.results,
        'collectedAt': _iso(t.collected_at),
        'completedAt': _iso(t.completed_at),
        'notes': t.notes,
        'createdAt': _iso(t.created_at),
        'patient': format_patient(t.patient),
        'doctor': format_doctor(t.doctor) if t.doctor_id else None,
        'testCatalog': format_catalog_entry(t.test_catalog),
    }


def format_ward(w: Ward, *, bed_count: Optional[int] = None, available_beds: Optional[int] = None) -> dict:
    data = {
        'id': str(w.id),
        'name': w.name,
        'type': w.type,
        'floor': w.floor,
        'capacity': w.capacity,
        'chargePerDay': money_str(w.charge_per_day),
        'description': w.description,
    }
    if bed_count is not None:
        data['totalBeds'] = bed_count
        data['availableBeds'] = available_beds or 0
    return data


def format_bed(b: Bed, *, with_admission: bool = False) -> dict:
    data = {
        'id': str(b.id),
        'wardId': str(b.ward_id),
        'bedNumber': b.bed_number,
        'status': b.status,
        'ward': format_ward(b.ward),
    }
    if with_admission:
        active = getattr(b, 'active_admissions', None) or []
        data['currentAdmission'] = format_admission(active[0], embed_bed=False) if active else None
    return data


def format_admission(a: Admission, *, embed_bed: bool = True) -> dict:
    data = {
        'id': str(a.id),
        'patientId': str(a.patient_id),
        'bedId': str(a.bed_id),
        'doctorId': _id(a.doctor_id),
        'admissionDate': _iso(a.admission_date),
        'dischargeDate': _iso(a.discharge_date),
        'diagnosis': a.diagnosis,
        'notes': a.notes,
        'status': a.status,
        'patient': format_patient(a.patient),
    }
    if embed_bed:
        data['bed'] = format_bed(a.bed)
    return data


def format_bill(b: Bill) -> dict:
    items = [
        {
            'description': item.get('description'),
            'quantity': item.get('quantity'),
            'rate': money_str(item.get('rate')),
            'amount': money_str(item.get('amount')),
        }
        for item in (b.items or [])
    ]
    return {
        'id': str(b.id),
        'billNumber': b.bill_number,
        'patientId': str(b.patient_id),
        'appointmentId': _id(b.appointment_id),
        'admissionId': _id(b.admission_id),
        'items': items,
        'subtotal': money_str(b.subtotal),
        'discount': money_str(b.discount),
        'tax': money_str(b.tax),
        'total': money_str(b.total),
        'paidAmount': money_str(b.paid_amount),
        'balance': money_str(max(b.total - b.paid_amount, Decimal('0'))),
        'paymentStatus': b.payment_status,
        'paymentMethod': b.payment_method or None,
        'insuranceClaim': b.insurance_claim,
        'notes': b.notes,
        'createdAt': _iso(b.created_at),
        'updatedAt': _iso(b.updated_at),
        'patient': format_patient(b.patient),
    }
