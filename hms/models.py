"""
Database models for the hospital administration backend.

These models capture patients, staff directories, appointments, the lab
catalog and lab orders, wards/beds/admissions and bills.  Every record is
keyed by an opaque UUID.  Status columns use closed choice sets; the
rules for moving between statuses live in :mod:`hms.services`.
"""
from __future__ import annotations

import uuid
from decimal import Decimal

from django.contrib.auth.models import AbstractUser
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.db.models import Q
from django.utils import timezone


def _medical_history_default() -> dict:
    return {'allergies': [], 'conditions': [], 'medications': []}


class User(AbstractUser):
    """Identity record created or refreshed by the OIDC login callback.

    ``subject`` holds the identity provider's ``sub`` claim.  Staff
    accounts pre-created by an administrator (e.g. doctors) have no
    subject until their first login links them by email.  The role only
    drives which menus the client shows.
    """
    ROLE_ADMIN = 'admin'
    ROLE_DOCTOR = 'doctor'
    ROLE_NURSE = 'nurse'
    ROLE_LAB_STAFF = 'lab_staff'
    ROLE_RECEPTIONIST = 'receptionist'
    ROLE_PATIENT = 'patient'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_NURSE, 'Nurse'),
        (ROLE_LAB_STAFF, 'Lab staff'),
        (ROLE_RECEPTIONIST, 'Receptionist'),
        (ROLE_PATIENT, 'Patient'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    subject = models.CharField(max_length=255, unique=True, null=True, blank=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)
    phone = models.CharField(max_length=32, blank=True)
    profile_image_url = models.URLField(max_length=1024, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.get_full_name() or self.username} ({self.role})"


class Sequence(models.Model):
    """Named counter behind generated codes such as ``PAT-00001``."""
    name = models.CharField(max_length=32, primary_key=True)
    value = models.PositiveBigIntegerField(default=0)

    def __str__(self) -> str:
        return f"{self.name}={self.value}"


class Department(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    head_doctor = models.ForeignKey(
        'Doctor', null=True, blank=True, on_delete=models.SET_NULL, related_name='headed_departments'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:
        return self.name


class Doctor(models.Model):
    """A doctor's professional profile, linked 1:1 to a ``doctor`` user."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='doctor_profile')
    department = models.ForeignKey(
        Department, null=True, blank=True, on_delete=models.SET_NULL, related_name='doctors'
    )
    specialization = models.CharField(max_length=255)
    qualifications = models.TextField(blank=True)
    consultation_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('500.00'))
    # {"monday": {"start": "09:00", "end": "17:00"}, ...}
    schedule = models.JSONField(default=dict, blank=True)
    is_available = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"Dr. {self.user.get_full_name() or self.user.username} ({self.specialization})"


class Patient(models.Model):
    GENDER_CHOICES = [
        ('male', 'Male'),
        ('female', 'Female'),
        ('other', 'Other'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    # Human readable code, e.g. PAT-00001
    patient_code = models.CharField(max_length=20, unique=True)
    user = models.OneToOneField(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='patient_profile'
    )
    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, blank=True)
    blood_group = models.CharField(max_length=5, blank=True)
    phone = models.CharField(max_length=32)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    emergency_contact_name = models.CharField(max_length=255, blank=True)
    emergency_contact_phone = models.CharField(max_length=32, blank=True)
    medical_history = models.JSONField(default=_medical_history_default, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['last_name', 'first_name'], name='hms_patient_name_idx'),
            models.Index(fields=['phone'], name='hms_patient_phone_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name} ({self.patient_code})"


class Appointment(models.Model):
    STATUS_SCHEDULED = 'scheduled'
    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_NO_SHOW = 'no_show'
    STATUS_CHOICES = [
        (STATUS_SCHEDULED, 'Scheduled'),
        (STATUS_IN_PROGRESS, 'In progress'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_NO_SHOW, 'No show'),
    ]
    TYPE_CHOICES = [
        ('consultation', 'Consultation'),
        ('follow_up', 'Follow up'),
        ('emergency', 'Emergency'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='appointments')
    doctor = models.ForeignKey(Doctor, on_delete=models.PROTECT, related_name='appointments')
    department = models.ForeignKey(
        Department, null=True, blank=True, on_delete=models.SET_NULL, related_name='appointments'
    )
    appointment_date = models.DateField()
    appointment_time = models.TimeField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_SCHEDULED, db_index=True)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='consultation')
    notes = models.TextField(blank=True)
    diagnosis = models.TextField(blank=True)
    # {"medications": [{"name", "dosage", "frequency", "duration"}]}
    prescription = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=['appointment_date', 'appointment_time'], name='hms_appointment_slot_idx')]

    def __str__(self) -> str:
        return f"{self.patient_id} with {self.doctor_id} on {self.appointment_date} {self.appointment_time}"


class LabTestCatalog(models.Model):
    """An orderable type of laboratory test."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True)
    normal_range = models.CharField(max_length=255, blank=True)
    unit = models.CharField(max_length=50, blank=True)
    sample_type = models.CharField(max_length=100, blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    turnaround_time = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


class LabTest(models.Model):
    """An ordered instance of a catalog test for one patient."""
    STATUS_PENDING = 'pending'
    STATUS_SAMPLE_COLLECTED = 'sample_collected'
    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_SAMPLE_COLLECTED, 'Sample collected'),
        (STATUS_IN_PROGRESS, 'In progress'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='lab_tests')
    doctor = models.ForeignKey(Doctor, null=True, blank=True, on_delete=models.SET_NULL, related_name='lab_tests')
    appointment = models.ForeignKey(
        Appointment, null=True, blank=True, on_delete=models.SET_NULL, related_name='lab_tests'
    )
    test_catalog = models.ForeignKey(LabTestCatalog, on_delete=models.PROTECT, related_name='orders')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    # {"value", "unit", "normalRange", "interpretation"}; set on completion only
    results = models.JSONField(null=True, blank=True)
    collected_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.test_catalog_id} for {self.patient_id} ({self.status})"


class Ward(models.Model):
    TYPE_CHOICES = [
        ('general', 'General'),
        ('icu', 'ICU'),
        ('private', 'Private'),
        ('semi_private', 'Semi private'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    floor = models.IntegerField(null=True, blank=True)
    capacity = models.PositiveIntegerField()
    charge_per_day = models.DecimalField(max_digits=10, decimal_places=2)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.name


class Bed(models.Model):
    """A bed in a ward.

    ``occupied`` is never set directly: it mirrors the existence of an
    ``admitted`` :class:`Admission` referencing the bed and is maintained
    by :mod:`hms.services.admissions`.
    """
    STATUS_AVAILABLE = 'available'
    STATUS_OCCUPIED = 'occupied'
    STATUS_MAINTENANCE = 'maintenance'
    STATUS_RESERVED = 'reserved'
    STATUS_CHOICES = [
        (STATUS_AVAILABLE, 'Available'),
        (STATUS_OCCUPIED, 'Occupied'),
        (STATUS_MAINTENANCE, 'Maintenance'),
        (STATUS_RESERVED, 'Reserved'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    ward = models.ForeignKey(Ward, on_delete=models.PROTECT, related_name='beds')
    bed_number = models.CharField(max_length=50)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_AVAILABLE, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['ward', 'bed_number'], name='unique_bed_number_per_ward'),
        ]

    def __str__(self) -> str:
        return f"{self.ward.name} - {self.bed_number}"


class Admission(models.Model):
    STATUS_ADMITTED = 'admitted'
    STATUS_DISCHARGED = 'discharged'
    STATUS_CHOICES = [
        (STATUS_ADMITTED, 'Admitted'),
        (STATUS_DISCHARGED, 'Discharged'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='admissions')
    bed = models.ForeignKey(Bed, on_delete=models.PROTECT, related_name='admissions')
    doctor = models.ForeignKey(Doctor, null=True, blank=True, on_delete=models.SET_NULL, related_name='admissions')
    admission_date = models.DateTimeField(default=timezone.now)
    discharge_date = models.DateTimeField(null=True, blank=True)
    diagnosis = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ADMITTED, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            # A bed holds at most one current admission
            models.UniqueConstraint(
                fields=['bed'],
                condition=Q(status='admitted'),
                name='one_active_admission_per_bed',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.patient_id} in {self.bed_id} ({self.status})"


class Bill(models.Model):
    STATUS_PAID = 'paid'
    STATUS_PARTIAL = 'partial'
    STATUS_PENDING = 'pending'
    STATUS_CANCELLED = 'cancelled'
    PAYMENT_STATUS_CHOICES = [
        (STATUS_PAID, 'Paid'),
        (STATUS_PARTIAL, 'Partial'),
        (STATUS_PENDING, 'Pending'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]
    PAYMENT_METHOD_CHOICES = [
        ('cash', 'Cash'),
        ('card', 'Card'),
        ('insurance', 'Insurance'),
        ('upi', 'UPI'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    # Human readable invoice number, e.g. INV-000001
    bill_number = models.CharField(max_length=20, unique=True)
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='bills')
    appointment = models.ForeignKey(
        Appointment, null=True, blank=True, on_delete=models.SET_NULL, related_name='bills'
    )
    admission = models.ForeignKey(
        Admission, null=True, blank=True, on_delete=models.SET_NULL, related_name='bills'
    )
    # [{"description", "quantity", "rate", "amount"}], amounts computed server side
    items = models.JSONField(default=list, encoder=DjangoJSONEncoder)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=12, decimal_places=2)
    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    payment_status = models.CharField(
        max_length=20, choices=PAYMENT_STATUS_CHOICES, default=STATUS_PENDING, db_index=True
    )
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, blank=True)
    insurance_claim = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.bill_number} ({self.payment_status})"
