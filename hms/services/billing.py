"""
Billing ledger: bill creation and payment accumulation.

Line item amounts are always computed here from quantity and rate; a
client supplied ``amount`` is only checked against the computed value.
Payments are applied with the bill row locked so concurrent payments
accumulate instead of overwriting each other.
"""
from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from hms.exceptions import Conflict
from hms.models import Admission, Appointment, Bill, Patient
from hms.services.sequences import next_bill_number

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
# Largest difference tolerated between a client computed amount and ours
AMOUNT_TOLERANCE = Decimal('0.01')
# Largest value the max_digits=12, decimal_places=2 money columns hold
MAX_AMOUNT = Decimal('9999999999.99')


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def derive_payment_status(paid: Decimal, total: Decimal) -> str:
    if paid >= total:
        return Bill.STATUS_PAID
    if paid > 0:
        return Bill.STATUS_PARTIAL
    return Bill.STATUS_PENDING


def build_line_items(items: Iterable[dict]) -> tuple[list[dict], Decimal]:
    """Normalise line items and return them with their subtotal.

    Each item needs ``description``, ``quantity`` (> 0) and ``rate``
    (>= 0).  ``amount`` is recomputed as quantity x rate; if the caller
    sent one that disagrees, the whole request is rejected.
    """
    normalised: list[dict] = []
    errors: dict[str, list[str]] = {}
    subtotal = Decimal('0.00')
    for index, item in enumerate(items):
        description = (item.get('description') or '').strip()
        quantity = Decimal(str(item.get('quantity', 0)))
        rate = Decimal(str(item.get('rate', 0)))
        problems = []
        if not description:
            problems.append('description is required')
        if quantity <= 0:
            problems.append('quantity must be greater than zero')
        if rate < 0:
            problems.append('rate cannot be negative')
        amount = money(quantity * rate)
        claimed = item.get('amount')
        if claimed is not None and abs(Decimal(str(claimed)) - amount) > AMOUNT_TOLERANCE:
            problems.append(f'amount {claimed} does not match quantity x rate = {amount}')
        if problems:
            errors[f'items[{index}]'] = problems
            continue
        normalised.append({
            'description': description,
            'quantity': int(quantity) if quantity == quantity.to_integral_value() else quantity,
            'rate': money(rate),
            'amount': amount,
        })
        subtotal += amount
    if not normalised and not errors:
        errors['items'] = ['at least one line item is required']
    if errors:
        raise ValidationError(errors)
    return normalised, subtotal


@transaction.atomic
def create_bill(patient_id, items: Iterable[dict], *, appointment_id=None, admission_id=None,
                discount=Decimal('0.00'), tax=Decimal('0.00'), notes: str = '',
                insurance_claim: str = '') -> Bill:
    patient = Patient.objects.filter(pk=patient_id).first()
    if patient is None:
        raise NotFound('patient not found')
    appointment = None
    if appointment_id:
        appointment = Appointment.objects.filter(pk=appointment_id).first()
        if appointment is None:
            raise NotFound('appointment not found')
    admission = None
    if admission_id:
        admission = Admission.objects.filter(pk=admission_id).first()
        if admission is None:
            raise NotFound('admission not found')

    line_items, subtotal = build_line_items(items)
    discount = money(discount)
    tax = money(tax)
    if discount < 0 or tax < 0:
        raise ValidationError({'discount': ['discount and tax cannot be negative']})
    if discount > subtotal:
        raise ValidationError({'discount': ['discount cannot exceed the subtotal']})
    total = subtotal - discount + tax
    if subtotal > MAX_AMOUNT or total > MAX_AMOUNT:
        raise ValidationError({'items': [f'bill total cannot exceed {MAX_AMOUNT}']})

    bill = Bill.objects.create(
        bill_number=next_bill_number(),
        patient=patient,
        appointment=appointment,
        admission=admission,
        items=line_items,
        subtotal=subtotal,
        discount=discount,
        tax=tax,
        total=total,
        paid_amount=Decimal('0.00'),
        payment_status=derive_payment_status(Decimal('0.00'), total),
        notes=notes,
        insurance_claim=insurance_claim,
    )
    logger.info('bill %s created for patient %s, total %s', bill.bill_number, patient.patient_code, total)
    return bill


def _lock_bill(bill_id) -> Bill:
    bill = Bill.objects.select_for_update().filter(pk=bill_id).first()
    if bill is None:
        raise NotFound('bill not found')
    return bill


@transaction.atomic
def record_payment(bill_id, amount, method: str, *, allow_overpayment: Optional[bool] = None) -> Bill:
    if allow_overpayment is None:
        allow_overpayment = settings.BILLING_ALLOW_OVERPAYMENT
    amount = money(amount)
    if amount <= 0:
        raise ValidationError({'amount': ['payment amount must be greater than zero']})
    if method not in dict(Bill.PAYMENT_METHOD_CHOICES):
        raise ValidationError({'paymentMethod': [f'unknown payment method {method!r}']})

    bill = _lock_bill(bill_id)
    if bill.payment_status == Bill.STATUS_CANCELLED:
        raise Conflict('bill is cancelled')

    new_paid = bill.paid_amount + amount
    if new_paid > MAX_AMOUNT:
        raise ValidationError({'amount': [f'paid amount cannot exceed {MAX_AMOUNT}']})
    if new_paid > bill.total and not allow_overpayment:
        outstanding = max(bill.total - bill.paid_amount, Decimal('0.00'))
        logger.warning('payment of %s on %s refused, outstanding %s', amount, bill.bill_number, outstanding)
        raise ValidationError({'amount': [f'payment exceeds the outstanding balance of {outstanding}']})

    bill.paid_amount = new_paid
    bill.payment_status = derive_payment_status(new_paid, bill.total)
    bill.payment_method = method
    bill.updated_at = timezone.now()
    bill.save(update_fields=['paid_amount', 'payment_status', 'payment_method', 'updated_at'])
    logger.info('payment of %s (%s) recorded on %s, now %s', amount, method, bill.bill_number, bill.payment_status)
    return bill


@transaction.atomic
def cancel_bill(bill_id) -> Bill:
    bill = _lock_bill(bill_id)
    if bill.payment_status == Bill.STATUS_CANCELLED:
        return bill
    if bill.paid_amount > 0:
        raise Conflict('a bill with recorded payments cannot be cancelled')
    bill.payment_status = Bill.STATUS_CANCELLED
    bill.save(update_fields=['payment_status', 'updated_at'])
    logger.info('bill %s cancelled', bill.bill_number)
    return bill
