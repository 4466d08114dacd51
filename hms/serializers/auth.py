from rest_framework import serializers


class CallbackQuerySerializer(serializers.Serializer):
    code = serializers.CharField(required=False)
    state = serializers.CharField(required=False)
    error = serializers.CharField(required=False)
    error_description = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs.get('error') and not (attrs.get('code') and attrs.get('state')):
            raise serializers.ValidationError('code and state are required')
        return attrs
