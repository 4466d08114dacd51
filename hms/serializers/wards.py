from rest_framework import serializers

from hms.models import Admission, Bed, Ward

from .fields import CleanCharField, status_filter


class WardSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    type = serializers.ChoiceField(choices=[c for c, _ in Ward.TYPE_CHOICES])
    floor = serializers.IntegerField(required=False, allow_null=True)
    capacity = serializers.IntegerField(min_value=1)
    chargePerDay = serializers.DecimalField(source='charge_per_day', max_digits=10, decimal_places=2, min_value=0)
    description = CleanCharField(required=False, allow_blank=True)


class BedCreateSerializer(serializers.Serializer):
    wardId = serializers.UUIDField(source='ward_id')
    bedNumber = CleanCharField(source='bed_number', max_length=50)


class BedListQuerySerializer(serializers.Serializer):
    wardId = serializers.UUIDField(required=False)


class BedStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c, _ in Bed.STATUS_CHOICES])


class AdmissionCreateSerializer(serializers.Serializer):
    patientId = serializers.UUIDField()
    bedId = serializers.UUIDField()
    doctorId = serializers.UUIDField(required=False, allow_null=True)
    diagnosis = CleanCharField(required=False, allow_blank=True, default='')
    notes = CleanCharField(required=False, allow_blank=True, default='')


class AdmissionListQuerySerializer(serializers.Serializer):
    status = status_filter([c for c, _ in Admission.STATUS_CHOICES])
