from decimal import Decimal

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from hms.models import Bed, User, Ward
from hms.services.doctors import create_doctor
from hms.services.patients import create_patient


@pytest.fixture(autouse=True)
def _clear_cache():
    # throttle counters and the OIDC discovery document live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(username='admin', email='admin@medicare.hospital', role=User.ROLE_ADMIN)


@pytest.fixture
def api(admin_user):
    client = APIClient()
    client.force_authenticate(admin_user)
    return client


@pytest.fixture
def patient(db):
    return create_patient(first_name='Jane', last_name='Doe', phone='+1 555-0100', gender='female')


@pytest.fixture
def other_patient(db):
    return create_patient(first_name='John', last_name='Smith', phone='+1 555-0101', gender='male')


@pytest.fixture
def doctor(db):
    return create_doctor(first_name='Robert', last_name='Chen', email='dr.chen@medicare.hospital',
                         specialization='Cardiology')


@pytest.fixture
def ward(db):
    return Ward.objects.create(name='General Ward A', type='general', floor=1, capacity=20,
                               charge_per_day=Decimal('500.00'))


@pytest.fixture
def bed(ward):
    return Bed.objects.create(ward=ward, bed_number='GA-01')


@pytest.fixture
def second_bed(ward):
    return Bed.objects.create(ward=ward, bed_number='GA-02')
