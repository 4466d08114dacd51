from decimal import Decimal

from rest_framework import serializers

from hms.models import Bill

from .fields import CleanCharField, status_filter


class LineItemSerializer(serializers.Serializer):
    description = CleanCharField(max_length=255)
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2)
    rate = serializers.DecimalField(max_digits=12, decimal_places=2)
    # optional; checked against quantity x rate by the billing service
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)


class BillCreateSerializer(serializers.Serializer):
    patientId = serializers.UUIDField()
    appointmentId = serializers.UUIDField(required=False, allow_null=True)
    admissionId = serializers.UUIDField(required=False, allow_null=True)
    items = LineItemSerializer(many=True, allow_empty=False)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, default=Decimal('0.00'))
    tax = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, default=Decimal('0.00'))
    notes = CleanCharField(required=False, allow_blank=True, default='')
    insuranceClaim = CleanCharField(max_length=255, required=False, allow_blank=True, default='')


class PaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    paymentMethod = serializers.ChoiceField(choices=[c for c, _ in Bill.PAYMENT_METHOD_CHOICES])

    def validate_amount(self, v):
        if v <= 0:
            raise serializers.ValidationError('payment amount must be greater than zero')
        return v


class BillListQuerySerializer(serializers.Serializer):
    status = status_filter([c for c, _ in Bill.PAYMENT_STATUS_CHOICES])
    patientId = serializers.UUIDField(required=False)
