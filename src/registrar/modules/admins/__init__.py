"""
Admins module - Registrar staff accounts.
"""

from registrar.modules.admins.models import Admin, AdminRole
from registrar.modules.admins.repository import AdminRepository

__all__ = ["Admin", "AdminRole", "AdminRepository"]
