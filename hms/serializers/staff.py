from rest_framework import serializers

from hms.models import User

from .fields import CleanCharField


class DepartmentSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    description = CleanCharField(required=False, allow_blank=True)
    headDoctorId = serializers.UUIDField(source='head_doctor_id', required=False, allow_null=True)


class ScheduleSlotSerializer(serializers.Serializer):
    start = serializers.RegexField(r'^\d{2}:\d{2}$')
    end = serializers.RegexField(r'^\d{2}:\d{2}$')


WEEKDAYS = ['monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday']


class DoctorWriteSerializer(serializers.Serializer):
    # account fields
    firstName = CleanCharField(source='first_name', max_length=150)
    lastName = CleanCharField(source='last_name', max_length=150)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = CleanCharField(max_length=32, required=False, allow_blank=True)
    # profile fields
    departmentId = serializers.UUIDField(source='department_id', required=False, allow_null=True)
    specialization = CleanCharField(max_length=255)
    qualifications = CleanCharField(required=False, allow_blank=True)
    consultationFee = serializers.DecimalField(
        source='consultation_fee', max_digits=10, decimal_places=2, min_value=0, required=False
    )
    schedule = serializers.DictField(child=ScheduleSlotSerializer(), required=False)
    isAvailable = serializers.BooleanField(source='is_available', required=False)

    USER_FIELDS = ('first_name', 'last_name', 'email', 'phone')

    def validate_schedule(self, v):
        unknown = sorted(set(v) - set(WEEKDAYS))
        if unknown:
            raise serializers.ValidationError(f"unknown weekday(s): {', '.join(unknown)}")
        return v

    def split(self) -> tuple[dict, dict]:
        """Validated data divided into (user fields, doctor profile fields)."""
        data = dict(self.validated_data)
        user_fields = {k: data.pop(k) for k in self.USER_FIELDS if k in data}
        return user_fields, data


class DoctorListQuerySerializer(serializers.Serializer):
    departmentId = serializers.UUIDField(required=False)
    available = serializers.BooleanField(required=False)


class RoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=[c for c, _ in User.ROLE_CHOICES])
