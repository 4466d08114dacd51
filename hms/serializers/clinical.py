from rest_framework import serializers

from hms.models import Appointment, LabTest

from .fields import CleanCharField, status_filter

APPOINTMENT_STATUSES = [c for c, _ in Appointment.STATUS_CHOICES]
LAB_TEST_STATUSES = [c for c, _ in LabTest.STATUS_CHOICES]


class MedicationSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    dosage = CleanCharField(max_length=100, required=False, allow_blank=True)
    frequency = CleanCharField(max_length=100, required=False, allow_blank=True)
    duration = CleanCharField(max_length=100, required=False, allow_blank=True)


class PrescriptionSerializer(serializers.Serializer):
    medications = MedicationSerializer(many=True)


class AppointmentWriteSerializer(serializers.Serializer):
    patientId = serializers.UUIDField(source='patient_id')
    doctorId = serializers.UUIDField(source='doctor_id')
    departmentId = serializers.UUIDField(source='department_id', required=False, allow_null=True)
    appointmentDate = serializers.DateField(source='appointment_date')
    appointmentTime = serializers.TimeField(source='appointment_time')
    type = serializers.ChoiceField(choices=[c for c, _ in Appointment.TYPE_CHOICES], required=False)
    notes = CleanCharField(required=False, allow_blank=True)
    diagnosis = CleanCharField(required=False, allow_blank=True)
    prescription = PrescriptionSerializer(required=False, allow_null=True)


class AppointmentUpdateSerializer(AppointmentWriteSerializer):
    # an appointment keeps its patient; rebook by creating a new one
    patientId = None


class AppointmentListQuerySerializer(serializers.Serializer):
    status = status_filter(APPOINTMENT_STATUSES)


class AppointmentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=APPOINTMENT_STATUSES)


class LabCatalogSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    code = CleanCharField(max_length=50)
    description = CleanCharField(required=False, allow_blank=True)
    normalRange = CleanCharField(source='normal_range', max_length=255, required=False, allow_blank=True)
    unit = CleanCharField(max_length=50, required=False, allow_blank=True)
    sampleType = CleanCharField(source='sample_type', max_length=100, required=False, allow_blank=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    turnaroundTime = CleanCharField(source='turnaround_time', max_length=100, required=False, allow_blank=True)


class LabTestOrderSerializer(serializers.Serializer):
    patientId = serializers.UUIDField(source='patient_id')
    testCatalogId = serializers.UUIDField(source='test_catalog_id')
    doctorId = serializers.UUIDField(source='doctor_id', required=False, allow_null=True)
    appointmentId = serializers.UUIDField(source='appointment_id', required=False, allow_null=True)
    notes = CleanCharField(required=False, allow_blank=True)


class LabTestListQuerySerializer(serializers.Serializer):
    status = status_filter(LAB_TEST_STATUSES)


class LabTestStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=LAB_TEST_STATUSES)


class LabResultsSerializer(serializers.Serializer):
    value = CleanCharField(max_length=255)
    unit = CleanCharField(max_length=50, required=False, allow_blank=True)
    normalRange = CleanCharField(max_length=255, required=False, allow_blank=True)
    interpretation = CleanCharField(required=False, allow_blank=True)
