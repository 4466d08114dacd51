import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import User
from ..permissions import IsAdminRole
from ..serializers.staff import RoleSerializer
from ..services.formatting import format_user

logger = logging.getLogger(__name__)


@api_view(['GET'])
def current_user(request):
    return Response(format_user(request.user))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def list_users(request):
    return Response([format_user(u) for u in User.objects.order_by('-date_joined')])


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsAdminRole])
def change_role(request, pk):
    s = RoleSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = User.objects.filter(pk=pk).first()
    if not user:
        raise NotFound('user not found')
    old_role = user.role
    user.role = s.validated_data['role']
    user.save(update_fields=['role', 'updated_at'])
    logger.info('user %s role %s -> %s by %s', user.pk, old_role, user.role, request.user.pk)
    return Response(format_user(user))
