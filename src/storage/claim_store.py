"""
SQLite-based claim storage.

Every read joins the claim with its policy, employee and assigned HR in a
single query and attaches the documents, so the returned Claim objects are
complete and safe to use after the connection is closed.
"""

import sqlite3
from functools import lru_cache
from typing import Iterable, Optional, Sequence

from ..claims.schema import Claim, ClaimDocument, ClaimStatus, Employee, Hr, Policy
from .database import Database, from_iso, get_database, to_iso


_CLAIM_SELECT = """
    SELECT
        c.*,
        p.policy_name AS policy_name,
        p.coverage_amount AS policy_coverage_amount,
        e.employee_id AS employee_code,
        e.name AS employee_name,
        e.email AS employee_email,
        h.name AS hr_name,
        h.email AS hr_email,
        h.active AS hr_active
    FROM claims c
    JOIN policies p ON p.id = c.policy_id
    JOIN employees e ON e.id = c.employee_id
    LEFT JOIN hrs h ON h.id = c.assigned_hr_id
"""


class ClaimStore:
    """
    SQLite-based storage for claims and their attachments.

    Usage:
        store = ClaimStore(db)

        # Save a claim (insert when claim.id is None, update otherwise)
        saved = store.save(claim)

        # Retrieve
        claim = store.get(saved.id)

        # Query
        pending = store.list_by_status(ClaimStatus.PENDING)
        load = store.count_by_assigned_hr_and_status(hr_id, ClaimStatus.PENDING)
    """

    def __init__(self, db: Database):
        self.db = db

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save(self, claim: Claim) -> Optional[Claim]:
        """
        Insert or update a claim together with its documents.

        Returns:
            The stored claim re-read from the database, or None when an
            update targets a claim id that does not exist
        """
        with self.db.connection() as conn:
            claim_id = self._write(conn, claim)
            if claim_id is None:
                return None
            conn.commit()
            return self._fetch_one(conn, claim_id)

    def save_all(self, claims: Iterable[Claim]) -> list[Claim]:
        """Save several claims in one transaction. Unknown ids are skipped."""
        saved_ids = []
        with self.db.connection() as conn:
            for claim in claims:
                claim_id = self._write(conn, claim)
                if claim_id is not None:
                    saved_ids.append(claim_id)
            conn.commit()
            return self._fetch(conn, f"WHERE c.id IN ({_placeholders(saved_ids)})", saved_ids)

    def _write(self, conn: sqlite3.Connection, claim: Claim) -> Optional[int]:
        if claim.policy.id is None or claim.employee.id is None:
            raise ValueError("Claim policy and employee must be persisted before the claim")

        values = (
            claim.amount,
            claim.status.value,
            claim.description,
            claim.remarks,
            to_iso(claim.claim_date),
            to_iso(claim.created_at),
            to_iso(claim.updated_at),
            int(claim.fraud_flag),
            claim.fraud_reason,
            claim.policy.id,
            claim.employee.id,
            claim.assigned_hr.id if claim.assigned_hr else None,
        )

        if claim.id is None:
            cursor = conn.execute("""
                INSERT INTO claims (
                    amount, status, description, remarks,
                    claim_date, created_at, updated_at,
                    fraud_flag, fraud_reason,
                    policy_id, employee_id, assigned_hr_id
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, values)
            claim_id = cursor.lastrowid
        else:
            result = conn.execute("""
                UPDATE claims SET
                    amount = ?, status = ?, description = ?, remarks = ?,
                    claim_date = ?, created_at = ?, updated_at = ?,
                    fraud_flag = ?, fraud_reason = ?,
                    policy_id = ?, employee_id = ?, assigned_hr_id = ?
                WHERE id = ?
            """, values + (claim.id,))
            if result.rowcount == 0:
                return None
            claim_id = claim.id
            conn.execute("DELETE FROM claim_documents WHERE claim_id = ?", (claim_id,))

        for position, document in enumerate(claim.documents):
            conn.execute("""
                INSERT INTO claim_documents (id, claim_id, position, file_name, file_url, uploaded_at)
                VALUES (?, ?, ?, ?, ?, ?)
            """, (
                document.id,
                claim_id,
                position,
                document.file_name,
                document.file_url,
                to_iso(document.uploaded_at),
            ))

        return claim_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, claim_id: int) -> Optional[Claim]:
        """
        Retrieve a claim with employee, policy, assigned HR and documents.

        Returns:
            Claim or None if not found
        """
        with self.db.connection() as conn:
            return self._fetch_one(conn, claim_id)

    def get_many(self, claim_ids: Sequence[int]) -> list[Claim]:
        if not claim_ids:
            return []
        return self._query(f"WHERE c.id IN ({_placeholders(claim_ids)})", list(claim_ids))

    def list_all(self, limit: Optional[int] = None, offset: int = 0) -> list[Claim]:
        """
        List all claims in submission order.

        Args:
            limit: Max results (None for everything)
            offset: Pagination offset
        """
        if limit is None:
            return self._query("", [])
        return self._query("LIMIT ? OFFSET ?", [limit, offset])

    def list_by_employee(self, employee_pk: int) -> list[Claim]:
        return self._query("WHERE c.employee_id = ?", [employee_pk])

    def list_by_employee_code(self, employee_id: str) -> list[Claim]:
        """Claims for an employee looked up by external employee id."""
        return self._query("WHERE e.employee_id = ?", [employee_id])

    def list_by_employee_and_status(self, employee_pk: int, status: ClaimStatus) -> list[Claim]:
        return self._query("WHERE c.employee_id = ? AND c.status = ?", [employee_pk, status.value])

    def list_by_employee_code_and_status(self, employee_id: str, status: ClaimStatus) -> list[Claim]:
        return self._query("WHERE e.employee_id = ? AND c.status = ?", [employee_id, status.value])

    def list_by_assigned_hr(self, hr_id: int) -> list[Claim]:
        return self._query("WHERE c.assigned_hr_id = ?", [hr_id])

    def list_fraud_by_assigned_hr(self, hr_id: int) -> list[Claim]:
        return self._query("WHERE c.assigned_hr_id = ? AND c.fraud_flag = 1", [hr_id])

    def list_by_status(self, status: ClaimStatus) -> list[Claim]:
        return self._query("WHERE c.status = ?", [status.value])

    def count_by_assigned_hr_and_status(self, hr_id: int, status: ClaimStatus) -> int:
        """Count claims assigned to an HR with the given status (no rows are loaded)."""
        with self.db.connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM claims WHERE assigned_hr_id = ? AND status = ?",
                (hr_id, status.value),
            ).fetchone()
            return row[0]

    def count(self, status: Optional[ClaimStatus] = None) -> int:
        """Count claims, optionally by status."""
        with self.db.connection() as conn:
            if status:
                row = conn.execute(
                    "SELECT COUNT(*) FROM claims WHERE status = ?",
                    (status.value,)
                ).fetchone()
            else:
                row = conn.execute("SELECT COUNT(*) FROM claims").fetchone()
            return row[0]

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    def _query(self, clause: str, params: list) -> list[Claim]:
        with self.db.connection() as conn:
            return self._fetch(conn, clause, params)

    def _fetch_one(self, conn: sqlite3.Connection, claim_id: int) -> Optional[Claim]:
        claims = self._fetch(conn, "WHERE c.id = ?", [claim_id])
        return claims[0] if claims else None

    def _fetch(self, conn: sqlite3.Connection, clause: str, params: list) -> list[Claim]:
        # LIMIT/OFFSET must follow ORDER BY
        if clause.startswith("LIMIT"):
            query = f"{_CLAIM_SELECT} ORDER BY c.id {clause}"
        else:
            query = f"{_CLAIM_SELECT} {clause} ORDER BY c.id"
        rows = conn.execute(query, params).fetchall()
        if not rows:
            return []

        claim_ids = [row["id"] for row in rows]
        documents: dict[int, list[ClaimDocument]] = {claim_id: [] for claim_id in claim_ids}
        doc_rows = conn.execute(
            f"SELECT * FROM claim_documents WHERE claim_id IN ({_placeholders(claim_ids)}) "
            "ORDER BY claim_id, position",
            claim_ids,
        ).fetchall()
        for doc in doc_rows:
            documents[doc["claim_id"]].append(ClaimDocument(
                id=doc["id"],
                file_name=doc["file_name"],
                file_url=doc["file_url"],
                uploaded_at=from_iso(doc["uploaded_at"]),
            ))

        return [_row_to_claim(row, documents[row["id"]]) for row in rows]


def _placeholders(values: Sequence) -> str:
    return ", ".join("?" for _ in values) or "NULL"


def _row_to_claim(row: sqlite3.Row, documents: list[ClaimDocument]) -> Claim:
    """Convert a joined database row to a Claim."""
    assigned_hr = None
    if row["assigned_hr_id"] is not None:
        assigned_hr = Hr(
            id=row["assigned_hr_id"],
            name=row["hr_name"],
            email=row["hr_email"],
            active=bool(row["hr_active"]),
        )

    return Claim(
        id=row["id"],
        amount=row["amount"],
        status=ClaimStatus(row["status"]),
        description=row["description"],
        remarks=row["remarks"],
        claim_date=from_iso(row["claim_date"]),
        created_at=from_iso(row["created_at"]),
        updated_at=from_iso(row["updated_at"]),
        fraud_flag=bool(row["fraud_flag"]),
        fraud_reason=row["fraud_reason"],
        documents=documents,
        policy=Policy(
            id=row["policy_id"],
            policy_name=row["policy_name"],
            coverage_amount=row["policy_coverage_amount"],
        ),
        employee=Employee(
            id=row["employee_id"],
            employee_id=row["employee_code"],
            name=row["employee_name"],
            email=row["employee_email"],
        ),
        assigned_hr=assigned_hr,
    )


# =============================================================================
# Convenience Functions
# =============================================================================

@lru_cache
def get_claim_store() -> ClaimStore:
    """Get the default claim store (singleton)."""
    return ClaimStore(get_database())
