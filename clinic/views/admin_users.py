"""
Staff account administration (admin only).
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import User
from clinic.permissions import IsAdminRole
from clinic.serializers.users import StaffCreateSerializer, UserTargetSerializer
from clinic.services import users as svc


def _target(request) -> User:
    s = UserTargetSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    target = User.objects.filter(id=s.validated_data['userId']).first()
    if not target:
        raise NotFound('user not found')
    return target


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_list(request):
    return Response([svc.format_user(u) for u in svc.list_users()])


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_create(request):
    s = StaffCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = svc.create_user(request.user, **s.validated_data)
    return Response({'ok': True, 'user': svc.format_user(user)}, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_toggle(request):
    user = svc.toggle_active(request.user, _target(request))
    return Response({'ok': True, 'user': svc.format_user(user)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_terminate(request):
    target = _target(request)
    target_id = target.id
    svc.terminate(request.user, target)
    return Response({'ok': True, 'id': target_id})
