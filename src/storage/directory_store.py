"""
SQLite-backed reference data: policies, employees and HR staff.

The claims core only reads from here (plus the active HR roster used for
assignment). The write methods exist for seeding and administration.
"""

import sqlite3
from typing import Optional

from ..claims.schema import Employee, Hr, Policy
from .database import Database


class DirectoryStore:
    """
    Policy catalog, employee directory and HR roster.

    Usage:
        directory = DirectoryStore(db)
        policy = directory.add_policy(Policy(policy_name="Health", coverage_amount=5000))
        roster = directory.list_active_hrs()
    """

    def __init__(self, db: Database):
        self.db = db

    # ------------------------------------------------------------------
    # Policies
    # ------------------------------------------------------------------

    def add_policy(self, policy: Policy) -> Policy:
        with self.db.connection() as conn:
            cursor = conn.execute(
                "INSERT INTO policies (policy_name, coverage_amount) VALUES (?, ?)",
                (policy.policy_name, policy.coverage_amount),
            )
            conn.commit()
            new_id = cursor.lastrowid
        return policy.model_copy(update={"id": new_id})

    def get_policy(self, policy_id: int) -> Optional[Policy]:
        with self.db.connection() as conn:
            row = conn.execute("SELECT * FROM policies WHERE id = ?", (policy_id,)).fetchone()
        return _row_to_policy(row) if row else None

    def list_policies(self) -> list[Policy]:
        with self.db.connection() as conn:
            rows = conn.execute("SELECT * FROM policies ORDER BY id").fetchall()
        return [_row_to_policy(row) for row in rows]

    # ------------------------------------------------------------------
    # Employees
    # ------------------------------------------------------------------

    def add_employee(self, employee: Employee) -> Employee:
        with self.db.connection() as conn:
            cursor = conn.execute(
                "INSERT INTO employees (employee_id, name, email) VALUES (?, ?, ?)",
                (employee.employee_id, employee.name, employee.email),
            )
            conn.commit()
            new_id = cursor.lastrowid
        return employee.model_copy(update={"id": new_id})

    def get_employee(self, employee_pk: int) -> Optional[Employee]:
        with self.db.connection() as conn:
            row = conn.execute("SELECT * FROM employees WHERE id = ?", (employee_pk,)).fetchone()
        return _row_to_employee(row) if row else None

    def get_employee_by_code(self, employee_id: str) -> Optional[Employee]:
        """Look up an employee by external employee id."""
        with self.db.connection() as conn:
            row = conn.execute(
                "SELECT * FROM employees WHERE employee_id = ?", (employee_id,)
            ).fetchone()
        return _row_to_employee(row) if row else None

    # ------------------------------------------------------------------
    # HR roster
    # ------------------------------------------------------------------

    def add_hr(self, hr: Hr) -> Hr:
        with self.db.connection() as conn:
            cursor = conn.execute(
                "INSERT INTO hrs (name, email, active) VALUES (?, ?, ?)",
                (hr.name, hr.email, int(hr.active)),
            )
            conn.commit()
            new_id = cursor.lastrowid
        return hr.model_copy(update={"id": new_id})

    def get_hr(self, hr_id: int) -> Optional[Hr]:
        with self.db.connection() as conn:
            row = conn.execute("SELECT * FROM hrs WHERE id = ?", (hr_id,)).fetchone()
        return _row_to_hr(row) if row else None

    def set_hr_active(self, hr_id: int, active: bool) -> bool:
        """
        Enable or disable an HR for new assignments.

        Returns:
            True if updated, False if the HR was not found
        """
        with self.db.connection() as conn:
            result = conn.execute(
                "UPDATE hrs SET active = ? WHERE id = ?", (int(active), hr_id)
            )
            conn.commit()
            return result.rowcount > 0

    def list_hrs(self) -> list[Hr]:
        with self.db.connection() as conn:
            rows = conn.execute("SELECT * FROM hrs ORDER BY id").fetchall()
        return [_row_to_hr(row) for row in rows]

    def list_active_hrs(self) -> list[Hr]:
        """HR staff eligible for new claim assignments, in roster order."""
        with self.db.connection() as conn:
            rows = conn.execute("SELECT * FROM hrs WHERE active = 1 ORDER BY id").fetchall()
        return [_row_to_hr(row) for row in rows]


def _row_to_policy(row: sqlite3.Row) -> Policy:
    return Policy(
        id=row["id"],
        policy_name=row["policy_name"],
        coverage_amount=row["coverage_amount"],
    )


def _row_to_employee(row: sqlite3.Row) -> Employee:
    return Employee(
        id=row["id"],
        employee_id=row["employee_id"],
        name=row["name"],
        email=row["email"],
    )


def _row_to_hr(row: sqlite3.Row) -> Hr:
    return Hr(id=row["id"], name=row["name"], email=row["email"], active=bool(row["active"]))
