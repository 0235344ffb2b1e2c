"""Audit trail helpers shared by every app"""
import logging

from .models import AuditLog

logger = logging.getLogger(__name__)

# Bookkeeping fields left out of change diffs
DIFF_IGNORED_FIELDS = ('created_at', 'updated_at')


def get_client_ip(request):
    """Extract client IP address from request"""
    meta = getattr(request, 'META', None)
    if not meta:
        return None
    forwarded = meta.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip() or None
    return meta.get('REMOTE_ADDR') or None


def diff_changes(before, after, fields=None):
    """
    ``{field: {"old": ..., "new": ...}}`` for every field whose serialized
    value differs. ``fields`` restricts the comparison; by default every key of
    ``after`` except the bookkeeping timestamps is compared.
    """
    if fields is None:
        fields = [field for field in after if field not in DIFF_IGNORED_FIELDS]
    return {
        field: {'old': before.get(field), 'new': after.get(field)}
        for field in fields
        if before.get(field) != after.get(field)
    }


def _audit_user(request, user):
    candidate = user or getattr(request, 'user', None)
    if candidate is not None and candidate.is_authenticated:
        return candidate
    return None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, description=''):
    """
    Record one audit entry and return it.

    ``action`` is one of ``AuditLog.ACTION_CHOICES`` (create, update, delete,
    status_change, price_change, setting_change, export, ...). The acting user
    is ``user`` or ``request.user``; anonymous users are stored as ``None``.
    Entries missing an action, model name or object id are skipped, and a
    failing insert is logged without breaking the caller; both return ``None``.
    """
    if not action or not model_name or object_id is None:
        logger.warning(
            f"Audit log skipped: missing required fields "
            f"(action={action}, model_name={model_name}, object_id={object_id})"
        )
        return None

    try:
        return AuditLog.objects.create(
            user=_audit_user(request, user),
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            description=description or '',
            changes=changes or {},
            ip_address=get_client_ip(request),
        )
    except Exception as e:
        logger.error(f"Failed to create audit log for {model_name} {object_id}: {str(e)}")
        return None
