"""Audit app package.

Keeps an append-only trail of who changed what (``AuditLog``) and who
looked at financial, owner or contact data (``SensitiveDataAccess``).
Other apps write to it through :mod:`apps.audit.services`.
"""
