"""Audit trail adapters."""

from authcore.infrastructure.audit.logger_audit_adapter import LoggerAuditAdapter

__all__ = ["LoggerAuditAdapter"]
