"""
Audit logging service for tracking mutating actions.

Best-effort: the triggering business change is committed before the audit
row is written, and any failure here is logged and swallowed.
"""
import json
import logging

from flask import has_request_context, request

from tenantboard.blueprints.metrics import audit_write_failures_total
from tenantboard.models.audit_log import AuditLog, AuditAction
from tenantboard.utils.responses import paginate

logger = logging.getLogger(__name__)


def _request_ip():
    if not has_request_context():
        return None
    return request.remote_addr


def log_action(
    session,
    action: AuditAction,
    tenant_id: str = None,
    user_id: str = None,
    entity_type: str = None,
    entity_id: str = None,
    metadata: dict = None,
    ip_address: str = None,
):
    """
    Append an audit entry and commit it.

    Args:
        session: Database session (business changes already committed)
        action: AuditAction enum value
        tenant_id: Owning tenant, None for system-wide events
        user_id: Acting user, None for anonymous events
        entity_type: Type of entity affected (e.g., 'project', 'task')
        entity_id: ID of the affected entity
        metadata: Dict with additional details (will be JSON encoded)
        ip_address: Caller address, defaults to the current request's

    Returns:
        The AuditLog entry, or None when the write failed
    """
    try:
        details_json = None
        if metadata:
            try:
                details_json = json.dumps(metadata, default=str)
            except (TypeError, ValueError) as e:
                logger.warning(f"Failed to serialize audit metadata: {e}")
                details_json = str(metadata)

        audit_entry = AuditLog(
            tenant_id=tenant_id,
            user_id=user_id,
            action=action.value if isinstance(action, AuditAction) else action,
            entity_type=entity_type,
            entity_id=entity_id,
            ip_address=ip_address or _request_ip(),
            details=details_json,
        )
        session.add(audit_entry)
        session.commit()

        logger.info(f"Audit log created: {audit_entry.action} by user {user_id} on {entity_type} {entity_id}")
        return audit_entry

    except Exception as e:
        session.rollback()
        audit_write_failures_total.inc()
        logger.error(f"Failed to create audit log for {action}: {e}")
        # Don't raise exception - audit failures should not break business logic
        return None


def get_audit_logs(
    session,
    tenant_id: str,
    page: int = 1,
    limit: int = 50,
    action_filter: str = None,
    user_id_filter: str = None,
    entity_type_filter: str = None,
):
    """
    Retrieve audit logs for a tenant with optional filters, newest first.

    Returns:
        Dict with auditLogs, pagination and total
    """
    query = session.query(AuditLog).filter(AuditLog.tenant_id == tenant_id)

    if action_filter:
        query = query.filter(AuditLog.action == action_filter)

    if user_id_filter:
        query = query.filter(AuditLog.user_id == user_id_filter)

    if entity_type_filter:
        query = query.filter(AuditLog.entity_type == entity_type_filter)

    query = query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
    entries, total, pagination = paginate(query, page, limit)

    return {
        'auditLogs': [entry.to_dict() for entry in entries],
        'pagination': pagination,
        'total': total,
    }
