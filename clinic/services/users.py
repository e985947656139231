import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.db import transaction
from rest_framework.authtoken.models import Token
from rest_framework.exceptions import PermissionDenied, ValidationError as DRFValidation
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken

from clinic.services.audit import log_action

User = get_user_model()
logger = logging.getLogger(__name__)


def format_user(u) -> dict:
    return {
        'id': u.id,
        'username': u.username,
        'email': u.email,
        'fullName': u.display_name(),
        'role': u.role,
        'isActive': u.is_active,
        'createdAt': u.created_at.isoformat() if u.created_at else None,
    }


def list_users():
    return User.objects.order_by('-created_at', '-id')


def _ensure_not_self(admin, target, op: str):
    if admin.id == target.id:
        logger.warning("admin %s tried to %s own account", admin.username, op)
        raise PermissionDenied(f'cannot {op} your own account')


def revoke_sessions(user) -> int:
    """Drop the legacy token and blacklist outstanding refresh tokens."""
    Token.objects.filter(user=user).delete()
    count = 0
    for token in OutstandingToken.objects.filter(user=user):
        _, created = BlacklistedToken.objects.get_or_create(token=token)
        count += int(created)
    return count


def create_user(admin, *, email: str, password: str, full_name: str, role: str):
    email = email.strip().lower()
    if User.objects.filter(username__iexact=email).exists() or User.objects.filter(email__iexact=email).exists():
        raise DRFValidation({'email': ['a user with this email already exists']})
    candidate = User(username=email, email=email, full_name=full_name, role=role)
    try:
        validate_password(password, user=candidate)
    except ValidationError as e:
        raise DRFValidation({'password': e.messages})
    with transaction.atomic():
        candidate.set_password(password)
        candidate.is_active = True
        candidate.save()
        log_action(user=admin, action='user_create', object_type='user', object_id=candidate.id,
                   detail={'role': role, 'email': email})
    logger.info("admin %s created %s account %s", admin.username, role, candidate.id)
    return candidate


def toggle_active(admin, target):
    _ensure_not_self(admin, target, 'suspend')
    with transaction.atomic():
        target.is_active = not target.is_active
        target.save(update_fields=['is_active'])
        if not target.is_active:
            revoke_sessions(target)
        log_action(user=admin, action='user_toggle', object_type='user', object_id=target.id,
                   detail={'isActive': target.is_active})
    logger.info("admin %s set account %s active=%s", admin.username, target.id, target.is_active)
    return target


def terminate(admin, target) -> None:
    _ensure_not_self(admin, target, 'terminate')
    target_id, username = target.id, target.username
    with transaction.atomic():
        log_action(user=admin, action='user_terminate', object_type='user', object_id=target_id,
                   detail={'username': username, 'role': target.role})
        target.delete()
    logger.info("admin %s terminated account %s (%s)", admin.username, target_id, username)
