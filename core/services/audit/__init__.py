from core.services.audit.helpers import preview_audit_action, preview_audit_details, record_audit
from core.services.audit.service import AuditService

__all__ = ["AuditService", "record_audit", "preview_audit_action", "preview_audit_details"]
