import re
import uuid
from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError

from hms.exceptions import Conflict
from hms.models import Bill
from hms.services import billing

pytestmark = pytest.mark.django_db


def _bill(api, patient, items=None, **extra):
    payload = {
        'patientId': str(patient.id),
        'items': items or [{'description': 'Consultation', 'quantity': 1, 'rate': '1000.00'}],
        **extra,
    }
    r = api.post('/api/bills', payload, format='json')
    assert r.status_code == 201, r.data
    return r.data


def _pay(api, bill_id, amount, method='cash'):
    return api.post(f'/api/bills/{bill_id}/payment', {'amount': amount, 'paymentMethod': method}, format='json')


def test_payments_accumulate_to_paid(api, patient):
    bill = _bill(api, patient)
    assert re.fullmatch(r'INV-\d{6}', bill['billNumber'])
    assert bill['total'] == '1000.00'
    assert bill['paymentStatus'] == 'pending'

    r = _pay(api, bill['id'], '400')
    assert r.status_code == 200
    assert r.data['paidAmount'] == '400.00'
    assert r.data['paymentStatus'] == 'partial'
    assert r.data['balance'] == '600.00'

    r = _pay(api, bill['id'], '600', method='card')
    assert r.data['paidAmount'] == '1000.00'
    assert r.data['paymentStatus'] == 'paid'
    assert r.data['paymentMethod'] == 'card'


def test_overpayment_rejected_by_default(api, patient):
    bill = _bill(api, patient)
    _pay(api, bill['id'], '400')
    r = _pay(api, bill['id'], '700')
    assert r.status_code == 400
    assert r.data['error'] == 'invalid request'
    assert Bill.objects.get(pk=bill['id']).paid_amount == Decimal('400.00')


def test_overpayment_accepted_when_enabled(api, patient, settings):
    settings.BILLING_ALLOW_OVERPAYMENT = True
    bill = _bill(api, patient)
    r = _pay(api, bill['id'], '1200')
    assert r.status_code == 200
    assert r.data['paidAmount'] == '1200.00'
    assert r.data['paymentStatus'] == 'paid'


def test_non_positive_payment_rejected(api, patient):
    bill = _bill(api, patient)
    assert _pay(api, bill['id'], '0').status_code == 400
    assert _pay(api, bill['id'], '-5').status_code == 400


def test_payment_on_unknown_bill(api):
    assert _pay(api, uuid.uuid4(), '10').status_code == 404


def test_line_amounts_computed_server_side(api, patient):
    bill = _bill(api, patient, items=[
        {'description': 'Room charge', 'quantity': 3, 'rate': '500'},
        {'description': 'CBC', 'quantity': 1, 'rate': '150', 'amount': '150.00'},
    ], discount='100', tax='18.50')
    assert [i['amount'] for i in bill['items']] == ['1500.00', '150.00']
    assert bill['subtotal'] == '1650.00'
    assert bill['total'] == '1568.50'


def test_mismatched_amount_is_rejected(api, patient):
    r = api.post('/api/bills', {
        'patientId': str(patient.id),
        'items': [{'description': 'Room charge', 'quantity': 2, 'rate': '500', 'amount': '2000'}],
    }, format='json')
    assert r.status_code == 400
    assert not Bill.objects.exists()


def test_bill_needs_items_and_known_patient(api, patient):
    r = api.post('/api/bills', {'patientId': str(patient.id), 'items': []}, format='json')
    assert r.status_code == 400
    r = api.post('/api/bills', {'patientId': str(uuid.uuid4()),
                                'items': [{'description': 'x', 'quantity': 1, 'rate': '1'}]}, format='json')
    assert r.status_code == 404


def test_discount_cannot_exceed_subtotal(patient):
    with pytest.raises(ValidationError):
        billing.create_bill(patient.id, [{'description': 'x', 'quantity': 1, 'rate': '10'}], discount='20')


def test_cancel_only_unpaid_bills(api, patient):
    unpaid = _bill(api, patient)
    r = api.patch(f"/api/bills/{unpaid['id']}/cancel")
    assert r.status_code == 200
    assert r.data['paymentStatus'] == 'cancelled'
    assert _pay(api, unpaid['id'], '10').status_code == 409

    paid = _bill(api, patient)
    _pay(api, paid['id'], '10')
    assert api.patch(f"/api/bills/{paid['id']}/cancel").status_code == 409


def test_derive_payment_status():
    assert billing.derive_payment_status(Decimal('0'), Decimal('10')) == 'pending'
    assert billing.derive_payment_status(Decimal('5'), Decimal('10')) == 'partial'
    assert billing.derive_payment_status(Decimal('10'), Decimal('10')) == 'paid'


def test_record_payment_checks_method(patient):
    bill = billing.create_bill(patient.id, [{'description': 'x', 'quantity': 1, 'rate': '10'}])
    with pytest.raises(ValidationError):
        billing.record_payment(bill.id, '5', 'cheque')
    billing.cancel_bill(bill.id)
    with pytest.raises(Conflict):
        billing.record_payment(bill.id, '5', 'cash')


def test_bill_list_filters_by_payment_status(api, patient):
    a = _bill(api, patient)
    b = _bill(api, patient)
    _pay(api, b['id'], '1000')
    r = api.get('/api/bills', {'status': 'paid'})
    assert [x['id'] for x in r.data] == [b['id']]
    r = api.get('/api/bills', {'status': 'all'})
    assert {x['id'] for x in r.data} == {a['id'], b['id']}
    assert api.get('/api/bills', {'status': 'bogus'}).status_code == 400


def test_bill_total_must_fit_money_columns(api, patient):
    r = api.post('/api/bills', {
        'patientId': str(patient.id),
        'items': [{'description': 'Implant', 'quantity': '99999999.99', 'rate': '9999999999.99'}],
    }, format='json')
    assert r.status_code == 400
    assert 'items' in r.data['fields']
    assert not Bill.objects.exists()
    assert api.get('/api/bills').status_code == 200


def test_paid_amount_must_fit_money_columns(patient):
    bill = billing.create_bill(patient.id, [{'description': 'Ward stay', 'quantity': 1, 'rate': '1000'}])
    with pytest.raises(ValidationError):
        billing.record_payment(bill.id, '9999999999.99', 'cash', allow_overpayment=True)
    bill.refresh_from_db()
    assert bill.paid_amount == Decimal('0.00')
