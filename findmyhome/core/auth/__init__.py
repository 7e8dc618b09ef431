# findmyhome/core/auth/__init__.py
from .flow import ApprovalStatus, AuthFlow, AuthPanel, Status, resolve_start_route

__all__ = ["AuthFlow", "AuthPanel", "ApprovalStatus", "Status", "resolve_start_route"]
