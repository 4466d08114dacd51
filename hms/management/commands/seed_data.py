"""
Management command to load reference data: departments, wards with
their beds and the lab test catalog.  With ``--demo`` a handful of
doctors and patients are added as well.  Safe to run repeatedly.
"""
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from hms.models import Bed, Department, Doctor, LabTestCatalog, Patient, User, Ward
from hms.services.doctors import create_doctor
from hms.services.patients import create_patient

DEPARTMENTS = [
    ('General Medicine', 'Primary care and internal medicine'),
    ('Cardiology', 'Heart and cardiovascular system'),
    ('Orthopedics', 'Bone, joint, and muscle disorders'),
    ('Neurology', 'Brain and nervous system'),
    ('Pediatrics', "Children's health care"),
    ('Dermatology', 'Skin conditions and diseases'),
    ('Ophthalmology', 'Eye care and vision'),
    ('ENT', 'Ear, nose, and throat'),
    ('Radiology', 'Medical imaging'),
    ('Pathology', 'Laboratory diagnostics'),
]

# name, type, floor, capacity, charge per day, bed prefix
WARDS = [
    ('General Ward A', 'general', 1, 20, '500', 'GA'),
    ('General Ward B', 'general', 1, 20, '500', 'GB'),
    ('ICU', 'icu', 2, 10, '2500', 'ICU'),
    ('Private Room - Premium', 'private', 3, 10, '1500', 'PVT'),
    ('Semi-Private Ward', 'semi_private', 2, 15, '800', 'SP'),
]
BEDS_PER_WARD = 10

LAB_TESTS = [
    ('Complete Blood Count', 'CBC', '150', 'Blood', '4 hours', 'Varies', 'cells/mcL'),
    ('Blood Glucose Fasting', 'BGF', '80', 'Blood', '2 hours', '70-100 mg/dL', 'mg/dL'),
    ('Lipid Profile', 'LP', '350', 'Blood', '6 hours', '<200 mg/dL total', 'mg/dL'),
    ('Liver Function Test', 'LFT', '450', 'Blood', '8 hours', 'Varies', 'U/L'),
    ('Kidney Function Test', 'KFT', '400', 'Blood', '6 hours', '0.7-1.3 mg/dL Creatinine', 'mg/dL'),
    ('Thyroid Profile', 'THY', '550', 'Blood', '12 hours', '0.4-4.0 mIU/L TSH', 'mIU/L'),
    ('Urinalysis', 'UA', '100', 'Urine', '2 hours', 'Varies', 'varies'),
    ('Chest X-Ray', 'CXR', '300', 'Imaging', '1 hour', 'N/A', 'N/A'),
    ('ECG', 'ECG', '200', 'Electrical', '30 mins', '60-100 bpm', 'bpm'),
    ('COVID-19 RT-PCR', 'COVID', '500', 'Nasal Swab', '24 hours', 'Negative', 'N/A'),
]

DEMO_DOCTORS = [
    ('Robert', 'Chen', 'dr.chen@medicare.hospital', 'Cardiology'),
    ('Amanda', 'Wilson', 'dr.wilson@medicare.hospital', 'Neurology'),
    ('James', 'Taylor', 'dr.taylor@medicare.hospital', 'Orthopedics'),
    ('Lisa', 'Anderson', 'dr.anderson@medicare.hospital', 'Pediatrics'),
    ('Mark', 'Thompson', 'dr.thompson@medicare.hospital', 'General Medicine'),
]

DEMO_PATIENTS = [
    ('John', 'Smith', '+1 555-0101', 'male', 'A+', 'john.smith@email.com'),
    ('Sarah', 'Johnson', '+1 555-0102', 'female', 'B+', 'sarah.j@email.com'),
    ('Michael', 'Williams', '+1 555-0103', 'male', 'O+', 'm.williams@email.com'),
    ('Emily', 'Brown', '+1 555-0104', 'female', 'AB-', 'emily.b@email.com'),
    ('David', 'Davis', '+1 555-0105', 'male', 'O-', 'david.d@email.com'),
]


class Command(BaseCommand):
    help = 'Load departments, wards/beds and the lab catalog (idempotent)'

    def add_arguments(self, parser):
        parser.add_argument('--demo', action='store_true', help='also create sample doctors and patients')

    @transaction.atomic
    def handle(self, *args, **options):
        for name, description in DEPARTMENTS:
            Department.objects.get_or_create(name=name, defaults={'description': description})
        self.stdout.write('departments ok')

        for name, kind, floor, capacity, charge, prefix in WARDS:
            ward, _ = Ward.objects.get_or_create(
                name=name,
                defaults={'type': kind, 'floor': floor, 'capacity': capacity, 'charge_per_day': Decimal(charge)},
            )
            # new beds start available; existing beds keep their state
            for i in range(1, min(ward.capacity, BEDS_PER_WARD) + 1):
                Bed.objects.get_or_create(ward=ward, bed_number=f'{prefix}-{i:02d}')
        self.stdout.write('wards and beds ok')

        for name, code, price, sample, turnaround, normal_range, unit in LAB_TESTS:
            LabTestCatalog.objects.get_or_create(code=code, defaults={
                'name': name, 'price': Decimal(price), 'sample_type': sample,
                'turnaround_time': turnaround, 'normal_range': normal_range, 'unit': unit,
            })
        self.stdout.write('lab catalog ok')

        if options['demo']:
            self._demo()
        self.stdout.write(self.style.SUCCESS('Seed data loaded.'))

    def _demo(self):
        for first, last, email, specialization in DEMO_DOCTORS:
            if Doctor.objects.filter(user__email__iexact=email).exists() or User.objects.filter(email__iexact=email).exists():
                continue
            dept = Department.objects.filter(name=specialization).first()
            create_doctor(
                first_name=first, last_name=last, email=email,
                department_id=dept.id if dept else None, specialization=specialization,
            )
        for first, last, phone, gender, blood, email in DEMO_PATIENTS:
            if Patient.objects.filter(phone=phone).exists():
                continue
            create_patient(first_name=first, last_name=last, phone=phone, gender=gender, blood_group=blood, email=email)
        self.stdout.write('demo doctors and patients ok')
