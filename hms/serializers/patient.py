from rest_framework import serializers

from hms.models import Patient

from .fields import CleanCharField


class MedicalHistorySerializer(serializers.Serializer):
    allergies = serializers.ListField(child=CleanCharField(max_length=255), required=False, default=list)
    conditions = serializers.ListField(child=CleanCharField(max_length=255), required=False, default=list)
    medications = serializers.ListField(child=CleanCharField(max_length=255), required=False, default=list)


class PatientWriteSerializer(serializers.Serializer):
    firstName = CleanCharField(source='first_name', max_length=150)
    lastName = CleanCharField(source='last_name', max_length=150)
    dateOfBirth = serializers.DateField(source='date_of_birth', required=False, allow_null=True)
    gender = serializers.ChoiceField(choices=[c for c, _ in Patient.GENDER_CHOICES], required=False, allow_blank=True)
    bloodGroup = CleanCharField(source='blood_group', max_length=5, required=False, allow_blank=True)
    phone = CleanCharField(max_length=32)
    email = serializers.EmailField(required=False, allow_blank=True)
    address = CleanCharField(required=False, allow_blank=True)
    emergencyContactName = CleanCharField(source='emergency_contact_name', max_length=255, required=False, allow_blank=True)
    emergencyContactPhone = CleanCharField(source='emergency_contact_phone', max_length=32, required=False, allow_blank=True)
    medicalHistory = MedicalHistorySerializer(source='medical_history', required=False)

    def validate_firstName(self, v):
        if not v:
            raise serializers.ValidationError('first name cannot be blank')
        return v

    def validate_phone(self, v):
        if not v:
            raise serializers.ValidationError('phone cannot be blank')
        return v


class PatientListQuerySerializer(serializers.Serializer):
    search = serializers.CharField(max_length=100, required=False, allow_blank=True)
    page = serializers.IntegerField(required=False, min_value=1)
    pageSize = serializers.IntegerField(required=False, min_value=1, max_value=200)
