"""
URL mappings for the hospital administration API.

Every API path lives under ``/api/`` without a trailing slash, matching
what the web client requests.  All of them require a signed-in session
except login, callback and logout.
"""
from django.urls import include, path

from .auth_views import callback_view, login_view, logout_view
from .views import admissions, appointments, bills, dashboard, departments, doctors, health, labs, patients, users, wards

urlpatterns = [
    # auth
    path('api/login', login_view, name='login'),
    path('api/callback', callback_view, name='oidc-callback'),
    path('api/logout', logout_view, name='logout'),
    path('api/auth/user', users.current_user, name='current-user'),

    path('api/dashboard/stats', dashboard.stats, name='dashboard-stats'),

    # users
    path('api/users', users.list_users, name='users'),
    path('api/users/<uuid:pk>/role', users.change_role, name='user-role'),

    # patients
    path('api/patients', patients.patients, name='patients'),
    path('api/patients/list', patients.patient_picker, name='patient-picker'),
    path('api/patients/<uuid:pk>', patients.patient_detail, name='patient-detail'),

    # staff
    path('api/doctors', doctors.doctors, name='doctors'),
    path('api/doctors/list', doctors.doctor_picker, name='doctor-picker'),
    path('api/doctors/<uuid:pk>', doctors.doctor_detail, name='doctor-detail'),
    path('api/departments', departments.departments, name='departments'),
    path('api/departments/<uuid:pk>', departments.department_detail, name='department-detail'),

    # appointments
    path('api/appointments', appointments.appointments, name='appointments'),
    path('api/appointments/<uuid:pk>', appointments.appointment_detail, name='appointment-detail'),
    path('api/appointments/<uuid:pk>/status', appointments.appointment_status, name='appointment-status'),

    # laboratory
    path('api/lab-catalog', labs.lab_catalog, name='lab-catalog'),
    path('api/lab-tests', labs.lab_tests, name='lab-tests'),
    path('api/lab-tests/<uuid:pk>/status', labs.lab_test_status, name='lab-test-status'),
    path('api/lab-tests/<uuid:pk>/results', labs.lab_test_results, name='lab-test-results'),

    # wards, beds, admissions
    path('api/wards', wards.wards, name='wards'),
    path('api/beds', wards.beds, name='beds'),
    path('api/beds/<uuid:pk>/status', wards.bed_status, name='bed-status'),
    path('api/admissions', admissions.admissions, name='admissions'),
    path('api/admissions/<uuid:pk>/discharge', admissions.discharge, name='admission-discharge'),

    # billing
    path('api/bills', bills.bills, name='bills'),
    path('api/bills/<uuid:pk>', bills.bill_detail, name='bill-detail'),
    path('api/bills/<uuid:pk>/payment', bills.bill_payment, name='bill-payment'),
    path('api/bills/<uuid:pk>/cancel', bills.bill_cancel, name='bill-cancel'),

    # ops
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
]
