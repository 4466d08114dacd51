import secrets
from typing import Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import QuerySet
from rest_framework.exceptions import NotFound

from hms.exceptions import Conflict
from hms.models import Department, Doctor

User = get_user_model()


def list_doctors(*, department_id=None, available_only: bool = False) -> QuerySet:
    qs = Doctor.objects.select_related('user', 'department').order_by('user__last_name', 'user__first_name')
    if department_id:
        qs = qs.filter(department_id=department_id)
    if available_only:
        qs = qs.filter(is_available=True)
    return qs


def _resolve_department(department_id) -> Optional[Department]:
    if not department_id:
        return None
    department = Department.objects.filter(pk=department_id).first()
    if department is None:
        raise NotFound('department not found')
    return department


@transaction.atomic
def create_doctor(*, first_name: str, last_name: str, email: str = '', phone: str = '',
                  department_id=None, **profile) -> Doctor:
    """Create the ``doctor`` user and the professional profile together.

    The account has no usable password; the doctor signs in through the
    identity provider and is linked to this row by email on first login.
    """
    if email and User.objects.filter(email__iexact=email).exists():
        raise Conflict(f'a user with email {email} already exists')
    user = User(
        username=f"doctor-{secrets.token_hex(6)}",
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=phone,
        role=User.ROLE_DOCTOR,
    )
    user.set_unusable_password()
    user.save()
    return Doctor.objects.create(user=user, department=_resolve_department(department_id), **profile)


@transaction.atomic
def update_doctor(doctor: Doctor, *, user_fields: dict, profile_fields: dict) -> Doctor:
    if 'department_id' in profile_fields:
        profile_fields['department'] = _resolve_department(profile_fields.pop('department_id'))
    for name, value in profile_fields.items():
        setattr(doctor, name, value)
    doctor.save()
    if user_fields:
        for name, value in user_fields.items():
            setattr(doctor.user, name, value)
        doctor.user.save(update_fields=[*user_fields.keys(), 'updated_at'])
    return doctor
