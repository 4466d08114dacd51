"""
Generated human readable identifiers.

Codes come from a named counter row that is incremented inside the
caller's transaction, so two concurrent creations can never receive the
same value and deleted rows never cause a code to be handed out twice.
"""
from django.db import transaction
from django.db.models import F

from hms.models import Sequence

PATIENT_SEQUENCE = ('patient', 'PAT', 5)
BILL_SEQUENCE = ('bill', 'INV', 6)


def next_value(name: str) -> int:
    with transaction.atomic():
        Sequence.objects.select_for_update().get_or_create(name=name)
        Sequence.objects.filter(name=name).update(value=F('value') + 1)
        return Sequence.objects.values_list('value', flat=True).get(name=name)


def next_code(name: str, prefix: str, width: int) -> str:
    return f"{prefix}-{next_value(name):0{width}d}"


def next_patient_code() -> str:
    return next_code(*PATIENT_SEQUENCE)


def next_bill_number() -> str:
    return next_code(*BILL_SEQUENCE)
