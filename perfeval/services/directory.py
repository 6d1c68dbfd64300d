"""
Employee directory lookups (employee -> manager -> login account).
"""

from typing import Any, Dict, Optional

from perfeval.crud.persistence import Persistence


class DirectoryService:
    def __init__(self, persistence: Persistence):
        self.persistence = persistence

    def resolve_employee(self, employee_id: int) -> Optional[Dict[str, Any]]:
        """
        Look up an employee.

        Returns:
            Employee row with an added ``display_name``, or None
        """
        employee = self.persistence.fetch_one(
            """
            SELECT employee_id, user_id, first_name, last_name, email, manager_id
            FROM employees
            WHERE employee_id = :employee_id
            """,
            {"employee_id": employee_id},
        )
        if employee is None:
            return None
        employee["display_name"] = f"{employee['first_name']} {employee['last_name']}".strip()
        return employee

    def resolve_manager_account(self, manager_employee_id: int) -> Optional[int]:
        """Return the login account (user_id) linked to a manager, if any."""
        row = self.persistence.fetch_one(
            "SELECT user_id FROM employees WHERE employee_id = :employee_id",
            {"employee_id": manager_employee_id},
        )
        if row is None:
            return None
        return row["user_id"]
