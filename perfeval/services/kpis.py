"""
Company KPI directory: CRUD with soft delete, template usage, scoring,
statistics and CSV import/export.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from perfeval.core.exceptions import NotFoundError, PerformanceError, ValidationError
from perfeval.crud.persistence import Persistence
from perfeval.models.kpi import TargetPolicy
from perfeval.models.lifecycle import LifecycleState
from perfeval.services import catalog, csv_io, statistics
from perfeval.services.audit import AuditRecorder
from perfeval.services.scoring import normalize_target_policy, score_from_target, to_number
from perfeval.services.validation import optional_text, require_positive_id, require_text

logger = logging.getLogger(__name__)

TABLE = "company_kpis"
TARGET_POLICIES = {policy.value for policy in TargetPolicy}

# Accepted header spellings per field, first match wins
IMPORT_COLUMN_ALIASES = {
    "kpi_name": ["kpi name", "kpi_name", "name", "kpi"],
    "kpi_description": ["description", "kpi description", "kpi_description", "details"],
    "measurement_unit": ["measurement unit", "measurement_unit", "unit", "uom"],
    "category": ["category", "kpi category", "kpi_category"],
    "target_type": ["target type", "target_type", "target", "direction"],
}
EXPORT_HEADER = ["KPI Name", "Description", "Measurement Unit", "Category", "Target Type", "Created By", "Created At"]


class KPIService:
    def __init__(self, persistence: Persistence, audit: Optional[AuditRecorder] = None):
        self.persistence = persistence
        self.audit = audit or AuditRecorder(persistence)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_kpis(self, category: Optional[str] = None) -> List[Dict[str, Any]]:
        query = f"SELECT * FROM {TABLE} WHERE lifecycle_state = :active"
        params: Dict[str, Any] = {"active": LifecycleState.ACTIVE.value}
        if category:
            query += " AND category = :category"
            params["category"] = category
        query += " ORDER BY category, kpi_name"
        return self.persistence.fetch_all(query, params)

    def get_kpi(self, kpi_id: Any) -> Dict[str, Any]:
        """
        Raises:
            NotFoundError: If the KPI does not exist or was archived
        """
        kpi_id = require_positive_id(kpi_id, "kpi_id")
        kpi = self.persistence.fetch_one(
            f"SELECT * FROM {TABLE} WHERE id = :kpi_id AND lifecycle_state = :active",
            {"kpi_id": kpi_id, "active": LifecycleState.ACTIVE.value},
        )
        if kpi is None:
            raise NotFoundError("KPI", kpi_id)
        return kpi

    def get_categories(self) -> List[str]:
        rows = self.persistence.fetch_all(
            f"""
            SELECT DISTINCT category FROM {TABLE}
            WHERE lifecycle_state = :active AND category IS NOT NULL
            ORDER BY category
            """,
            {"active": LifecycleState.ACTIVE.value},
        )
        return [row["category"] for row in rows]

    def get_measurement_units(self) -> List[str]:
        rows = self.persistence.fetch_all(
            f"""
            SELECT DISTINCT measurement_unit FROM {TABLE}
            WHERE lifecycle_state = :active AND measurement_unit IS NOT NULL AND measurement_unit != ''
            ORDER BY measurement_unit
            """,
            {"active": LifecycleState.ACTIVE.value},
        )
        return [row["measurement_unit"] for row in rows]

    def get_kpi_usage(self, kpi_id: Any) -> List[Dict[str, Any]]:
        """Active job templates that reference the KPI."""
        kpi = self.get_kpi(kpi_id)
        return self.persistence.fetch_all(
            """
            SELECT jpt.position_title, jpt.department, jtk.target_value, jtk.weight_percentage
            FROM job_template_kpis jtk
            JOIN job_position_templates jpt ON jtk.job_template_id = jpt.id
            WHERE jtk.kpi_id = :kpi_id AND jpt.is_active = :is_active
            ORDER BY jpt.position_title
            """,
            {"kpi_id": kpi["id"], "is_active": True},
        )

    def get_kpi_statistics(self, kpi_id: Any, period_start: Any = None, period_end: Any = None) -> Dict[str, Any]:
        """
        Score and achieved-value statistics for a KPI.

        The period filter on the evaluation's creation time applies only when
        both bounds are given.
        """
        kpi = self.get_kpi(kpi_id)
        condition, params = statistics.window_condition("e.created_at", period_start, period_end)
        rows = self.persistence.fetch_all(
            f"""
            SELECT ekr.score, ekr.achieved_value, e.created_at
            FROM evaluation_kpi_results ekr
            JOIN evaluations e ON ekr.evaluation_id = e.id
            WHERE ekr.kpi_id = :kpi_id{condition}
            """,
            {"kpi_id": kpi["id"], **params},
        )
        return statistics.kpi_statistics(rows, period_start, period_end)

    def get_starter_catalog(self, category: Optional[str] = None) -> List[Dict[str, str]]:
        return catalog.starter_kpis(category)

    @staticmethod
    def calculate_kpi_score(target_value: Any, achieved_value: Any, target_type: str = TargetPolicy.HIGHER_BETTER.value) -> float:
        target = to_number(target_value)
        achieved = to_number(achieved_value)
        if target is None:
            raise ValidationError("target_value must be numeric", field="target_value")
        if achieved is None:
            raise ValidationError("achieved_value must be numeric", field="achieved_value")
        return score_from_target(target, achieved, target_type)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @staticmethod
    def _clean(data: Mapping[str, Any]) -> Dict[str, Any]:
        target_type = data.get("target_type") or TargetPolicy.HIGHER_BETTER.value
        if isinstance(target_type, TargetPolicy):
            target_type = target_type.value
        if target_type not in TARGET_POLICIES:
            raise ValidationError(
                f"Invalid target_type '{target_type}'; expected one of {', '.join(sorted(TARGET_POLICIES))}",
                field="target_type",
            )
        return {
            "kpi_name": require_text(data.get("kpi_name"), "kpi_name", max_length=255),
            "kpi_description": optional_text(data.get("kpi_description")),
            "measurement_unit": optional_text(data.get("measurement_unit")),
            "category": require_text(data.get("category"), "category", max_length=100),
            "target_type": target_type,
        }

    def _insert(self, fields: Dict[str, Any], actor: Optional[int]) -> int:
        return self.persistence.insert_record(
            f"""
            INSERT INTO {TABLE}
                (kpi_name, kpi_description, measurement_unit, category, target_type,
                 lifecycle_state, created_by, created_at)
            VALUES
                (:kpi_name, :kpi_description, :measurement_unit, :category, :target_type,
                 :lifecycle_state, :created_by, CURRENT_TIMESTAMP)
            RETURNING id
            """,
            {**fields, "lifecycle_state": LifecycleState.ACTIVE.value, "created_by": actor},
        )

    def _update(self, kpi_id: int, fields: Dict[str, Any]) -> int:
        return self.persistence.update_record(
            f"""
            UPDATE {TABLE}
            SET kpi_name = :kpi_name, kpi_description = :kpi_description,
                measurement_unit = :measurement_unit, category = :category,
                target_type = :target_type, updated_at = CURRENT_TIMESTAMP
            WHERE id = :kpi_id AND lifecycle_state = :active
            """,
            {**fields, "kpi_id": kpi_id, "active": LifecycleState.ACTIVE.value},
        )

    def create_kpi(self, data: Mapping[str, Any], actor: Optional[int] = None) -> int:
        fields = self._clean(data)
        with self.persistence.unit_of_work():
            kpi_id = self._insert(fields, actor)
            self.audit.record(actor, "kpi_created", TABLE, kpi_id, None, fields)
        logger.info(f"Created KPI {kpi_id}: {fields['kpi_name']}")
        return kpi_id

    def update_kpi(self, kpi_id: Any, data: Mapping[str, Any], actor: Optional[int] = None) -> int:
        current = self.get_kpi(kpi_id)
        fields = self._clean(data)
        with self.persistence.unit_of_work():
            affected = self._update(current["id"], fields)
            if affected == 0:
                raise NotFoundError("KPI", current["id"])
            self.audit.record(actor, "kpi_updated", TABLE, current["id"], current, fields)
        logger.info(f"Updated KPI {current['id']}")
        return affected

    def delete_kpi(self, kpi_id: Any, actor: Optional[int] = None) -> int:
        """Archive the KPI; templates and historical results keep their references."""
        current = self.get_kpi(kpi_id)
        with self.persistence.unit_of_work():
            affected = self.persistence.update_record(
                f"""
                UPDATE {TABLE} SET lifecycle_state = :archived, updated_at = CURRENT_TIMESTAMP
                WHERE id = :kpi_id AND lifecycle_state = :active
                """,
                {"archived": LifecycleState.ARCHIVED.value, "active": LifecycleState.ACTIVE.value, "kpi_id": current["id"]},
            )
            if affected == 0:
                raise NotFoundError("KPI", current["id"])
            self.audit.record(actor, "kpi_archived", TABLE, current["id"], current,
                              {"lifecycle_state": LifecycleState.ARCHIVED.value})
        logger.info(f"Archived KPI {current['id']}")
        return affected

    # ------------------------------------------------------------------
    # CSV
    # ------------------------------------------------------------------

    def _find_by_name_and_category(self, kpi_name: str, category: str) -> Optional[int]:
        existing = self.persistence.fetch_one(
            f"""
            SELECT id FROM {TABLE}
            WHERE LOWER(kpi_name) = LOWER(:kpi_name)
              AND LOWER(COALESCE(category, '')) = LOWER(:category)
              AND lifecycle_state = :active
            LIMIT 1
            """,
            {"kpi_name": kpi_name, "category": category or "", "active": LifecycleState.ACTIVE.value},
        )
        return existing["id"] if existing else None

    def import_kpis_from_csv(self, source: csv_io.CsvSource, actor: Optional[int] = None) -> Dict[str, Any]:
        """
        Import KPIs from CSV, updating rows that match an active KPI by name
        and category (case-insensitive) and creating the rest.

        Returns:
            dict with imported/updated/skipped counts and per-row errors
        """
        results: Dict[str, Any] = {"imported": 0, "updated": 0, "skipped": 0, "errors": []}

        rows = csv_io.read_rows(source)
        if not rows:
            results["errors"].append("CSV file does not contain a header row.")
            return results

        header = {}
        for index, label in enumerate(rows[0]):
            normalized = (label or "").strip().lower()
            if normalized and normalized not in header:
                header[normalized] = index

        columns = {}
        for field, aliases in IMPORT_COLUMN_ALIASES.items():
            for alias in aliases:
                if alias in header:
                    columns[field] = header[alias]
                    break

        missing = [label for field, label in (("kpi_name", "KPI Name"), ("category", "Category")) if field not in columns]
        if missing:
            results["errors"].append(f"Missing required columns: {', '.join(missing)}")
            return results

        def cell(row: List[str], field: str) -> str:
            index = columns.get(field)
            if index is None or index >= len(row):
                return ""
            return (row[index] or "").strip()

        for row_number, row in enumerate(rows[1:], start=2):
            if csv_io.is_blank(row):
                results["skipped"] += 1
                continue

            if not cell(row, "kpi_name") or not cell(row, "category"):
                results["errors"].append(f"Row {row_number}: KPI Name and Category are required.")
                results["skipped"] += 1
                continue

            try:
                fields = self._clean({
                    "kpi_name": cell(row, "kpi_name"),
                    "kpi_description": cell(row, "kpi_description"),
                    "measurement_unit": cell(row, "measurement_unit") or "count",
                    "category": cell(row, "category"),
                    "target_type": normalize_target_policy(cell(row, "target_type")),
                })
                with self.persistence.unit_of_work():
                    existing_id = self._find_by_name_and_category(fields["kpi_name"], fields["category"])
                    if existing_id:
                        self._update(existing_id, fields)
                        self.audit.record(actor, "kpi_updated", TABLE, existing_id, None, fields)
                        results["updated"] += 1
                    else:
                        kpi_id = self._insert(fields, actor)
                        self.audit.record(actor, "kpi_created", TABLE, kpi_id, None, fields)
                        results["imported"] += 1
            except PerformanceError as e:
                results["errors"].append(f"Row {row_number}: {e.message}")
                results["skipped"] += 1

        logger.info(
            f"KPI import finished: {results['imported']} imported, {results['updated']} updated, "
            f"{results['skipped']} skipped"
        )
        return results

    def export_kpis_to_csv(self, category: Optional[str] = None) -> str:
        return csv_io.write_rows(
            EXPORT_HEADER,
            (
                [kpi["kpi_name"], kpi["kpi_description"], kpi["measurement_unit"], kpi["category"],
                 kpi["target_type"], kpi["created_by"], kpi["created_at"]]
                for kpi in self.list_kpis(category)
            ),
        )
