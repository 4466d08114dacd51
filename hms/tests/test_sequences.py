import re

import pytest

from hms.models import Patient
from hms.services.patients import create_patient
from hms.services.sequences import next_bill_number, next_code, next_patient_code

pytestmark = pytest.mark.django_db


def test_code_formats():
    assert re.fullmatch(r'PAT-\d{5}', next_patient_code())
    assert re.fullmatch(r'INV-\d{6}', next_bill_number())


def test_codes_are_monotonic():
    codes = [next_code('test', 'T', 3) for _ in range(5)]
    assert codes == ['T-001', 'T-002', 'T-003', 'T-004', 'T-005']


def test_sequences_are_independent():
    first_patient = next_patient_code()
    next_bill_number()
    next_bill_number()
    assert int(next_patient_code()[4:]) == int(first_patient[4:]) + 1


def test_codes_not_reused_after_delete():
    a = create_patient(first_name='A', last_name='One', phone='1')
    b = create_patient(first_name='B', last_name='Two', phone='2')
    b.delete()
    c = create_patient(first_name='C', last_name='Three', phone='3')
    assert c.patient_code not in {a.patient_code, b.patient_code}
    assert c.patient_code > b.patient_code
    assert Patient.objects.filter(patient_code=c.patient_code).count() == 1
