from decimal import Decimal

from django.db.models import Sum
from django.utils import timezone

from hms.models import Appointment, Bed, Bill, Patient


def dashboard_stats(now=None) -> dict:
    now = timezone.localtime(now or timezone.now())
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    revenue = (
        Bill.objects.filter(created_at__gte=month_start)
        .exclude(payment_status=Bill.STATUS_CANCELLED)
        .aggregate(total=Sum('paid_amount'))['total']
    )
    return {
        'totalPatients': Patient.objects.count(),
        'todayAppointments': Appointment.objects.filter(appointment_date=now.date()).count(),
        'availableBeds': Bed.objects.filter(status=Bed.STATUS_AVAILABLE).count(),
        'monthlyRevenue': revenue or Decimal('0.00'),
    }
