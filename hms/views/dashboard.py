"""
Dashboard overview endpoint.

Plain counts straight from the entity store; no trend or chart data.
"""
from __future__ import annotations

from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..services.dashboard import dashboard_stats
from ..services.formatting import money_str


@api_view(['GET'])
def stats(request):
    data = dashboard_stats()
    data['monthlyRevenue'] = money_str(data['monthlyRevenue'])
    return Response(data)
