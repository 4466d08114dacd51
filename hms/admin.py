"""
Django admin registrations.

The admin is also the manual repair path for operational data, so bed
and admission records are editable here.  Changing a bed's status in
the admin bypasses the admission rules; prefer discharging through the
API.
"""

from django.contrib import admin

from .models import (
    Admission,
    Appointment,
    Bed,
    Bill,
    Department,
    Doctor,
    LabTest,
    LabTestCatalog,
    Patient,
    Sequence,
    User,
    Ward,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'email', 'role', 'subject', 'is_staff', 'is_superuser')
    list_filter = ('role',)
    search_fields = ('username', 'email', 'first_name', 'last_name', 'subject')


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ('name', 'head_doctor', 'created_at')
    search_fields = ('name',)


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ('user', 'specialization', 'department', 'consultation_fee', 'is_available')
    list_filter = ('department', 'is_available')
    search_fields = ('user__first_name', 'user__last_name', 'specialization')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('patient_code', 'first_name', 'last_name', 'phone', 'gender', 'created_at')
    list_filter = ('gender',)
    search_fields = ('patient_code', 'first_name', 'last_name', 'phone')
    readonly_fields = ('patient_code',)


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('patient', 'doctor', 'appointment_date', 'appointment_time', 'status', 'type')
    list_filter = ('status', 'type', 'appointment_date')


@admin.register(LabTestCatalog)
class LabTestCatalogAdmin(admin.ModelAdmin):
    list_display = ('code', 'name', 'price', 'sample_type')
    search_fields = ('code', 'name')


@admin.register(LabTest)
class LabTestAdmin(admin.ModelAdmin):
    list_display = ('patient', 'test_catalog', 'status', 'collected_at', 'completed_at')
    list_filter = ('status',)


@admin.register(Ward)
class WardAdmin(admin.ModelAdmin):
    list_display = ('name', 'type', 'floor', 'capacity', 'charge_per_day')
    list_filter = ('type',)


@admin.register(Bed)
class BedAdmin(admin.ModelAdmin):
    list_display = ('bed_number', 'ward', 'status')
    list_filter = ('ward', 'status')


@admin.register(Admission)
class AdmissionAdmin(admin.ModelAdmin):
    list_display = ('patient', 'bed', 'status', 'admission_date', 'discharge_date')
    list_filter = ('status',)


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = ('bill_number', 'patient', 'total', 'paid_amount', 'payment_status', 'created_at')
    list_filter = ('payment_status', 'payment_method')
    search_fields = ('bill_number', 'patient__patient_code')
    readonly_fields = ('bill_number', 'paid_amount')


@admin.register(Sequence)
class SequenceAdmin(admin.ModelAdmin):
    list_display = ('name', 'value')
