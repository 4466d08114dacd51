import bleach
from rest_framework import serializers


class CleanCharField(serializers.CharField):
    """CharField that strips any markup from the submitted text."""

    def to_internal_value(self, data):
        v = super().to_internal_value(data)
        return bleach.clean(v, tags=[], strip=True).strip()


def status_filter(choices):
    """Optional ``status`` query parameter: one of ``choices`` or ``all``."""
    return serializers.ChoiceField(choices=['all', *choices], required=False, allow_blank=True)
