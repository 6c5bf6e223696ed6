"""
Services layer: the department facade, role resolution and the
SQL-backed entity store.
"""

from gp_services.department_operations import DepartmentOperations
from gp_services.role_authority import RoleAuthority, StoreRoleAuthority

__all__ = [
    "DepartmentOperations",
    "RoleAuthority",
    "StoreRoleAuthority",
]
