"""
Company value directory: CRUD with soft delete, display ordering, behavior
scoring, statistics and CSV import/export.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from perfeval.core.exceptions import NotFoundError, PerformanceError, ValidationError
from perfeval.crud.persistence import Persistence
from perfeval.models.lifecycle import LifecycleState
from perfeval.services import catalog, csv_io, statistics
from perfeval.services.audit import AuditRecorder
from perfeval.services.scoring import score_from_behaviors
from perfeval.services.validation import optional_text, require_positive_id, require_text

logger = logging.getLogger(__name__)

TABLE = "company_values"
EXPORT_HEADER = ["Value Name", "Description", "Sort Order", "Created By", "Created At"]


def _sort_order(value: Any) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise ValidationError("sort_order must be a non-negative integer", field="sort_order")
    try:
        number = int(str(value).strip())
    except ValueError:
        raise ValidationError("sort_order must be a non-negative integer", field="sort_order")
    if number < 0:
        raise ValidationError("sort_order must be a non-negative integer", field="sort_order")
    return number


class ValueService:
    def __init__(self, persistence: Persistence, audit: Optional[AuditRecorder] = None):
        self.persistence = persistence
        self.audit = audit or AuditRecorder(persistence)

    def list_values(self) -> List[Dict[str, Any]]:
        """Active values in display order."""
        return self.persistence.fetch_all(
            f"SELECT * FROM {TABLE} WHERE lifecycle_state = :active ORDER BY sort_order, value_name",
            {"active": LifecycleState.ACTIVE.value},
        )

    def get_value(self, value_id: Any) -> Dict[str, Any]:
        value_id = require_positive_id(value_id, "value_id")
        value = self.persistence.fetch_one(
            f"SELECT * FROM {TABLE} WHERE id = :value_id AND lifecycle_state = :active",
            {"value_id": value_id, "active": LifecycleState.ACTIVE.value},
        )
        if value is None:
            raise NotFoundError("Company value", value_id)
        return value

    @staticmethod
    def _clean(data: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "value_name": require_text(data.get("value_name"), "value_name", max_length=255),
            "description": optional_text(data.get("description")),
            "sort_order": _sort_order(data.get("sort_order")),
        }

    def _insert(self, fields: Dict[str, Any], actor: Optional[int]) -> int:
        return self.persistence.insert_record(
            f"""
            INSERT INTO {TABLE} (value_name, description, sort_order, lifecycle_state, created_by, created_at)
            VALUES (:value_name, :description, :sort_order, :lifecycle_state, :created_by, CURRENT_TIMESTAMP)
            RETURNING id
            """,
            {**fields, "lifecycle_state": LifecycleState.ACTIVE.value, "created_by": actor},
        )

    def create_value(self, data: Mapping[str, Any], actor: Optional[int] = None) -> int:
        fields = self._clean(data)
        with self.persistence.unit_of_work():
            value_id = self._insert(fields, actor)
            self.audit.record(actor, "value_created", TABLE, value_id, None, fields)
        logger.info(f"Created company value {value_id}: {fields['value_name']}")
        return value_id

    def update_value(self, value_id: Any, data: Mapping[str, Any], actor: Optional[int] = None) -> int:
        current = self.get_value(value_id)
        fields = self._clean(data)
        with self.persistence.unit_of_work():
            affected = self.persistence.update_record(
                f"""
                UPDATE {TABLE}
                SET value_name = :value_name, description = :description,
                    sort_order = :sort_order, updated_at = CURRENT_TIMESTAMP
                WHERE id = :value_id AND lifecycle_state = :active
                """,
                {**fields, "value_id": current["id"], "active": LifecycleState.ACTIVE.value},
            )
            if affected == 0:
                raise NotFoundError("Company value", current["id"])
            self.audit.record(actor, "value_updated", TABLE, current["id"], current, fields)
        logger.info(f"Updated company value {current['id']}")
        return affected

    def delete_value(self, value_id: Any, actor: Optional[int] = None) -> int:
        """Archive the value; historical results keep their references."""
        current = self.get_value(value_id)
        with self.persistence.unit_of_work():
            affected = self.persistence.update_record(
                f"""
                UPDATE {TABLE} SET lifecycle_state = :archived, updated_at = CURRENT_TIMESTAMP
                WHERE id = :value_id AND lifecycle_state = :active
                """,
                {"archived": LifecycleState.ARCHIVED.value, "active": LifecycleState.ACTIVE.value,
                 "value_id": current["id"]},
            )
            if affected == 0:
                raise NotFoundError("Company value", current["id"])
            self.audit.record(actor, "value_archived", TABLE, current["id"], current,
                              {"lifecycle_state": LifecycleState.ARCHIVED.value})
        logger.info(f"Archived company value {current['id']}")
        return affected

    def reorder_values(self, value_ids: Iterable[Any], actor: Optional[int] = None) -> int:
        """
        Assign sort_order 1..n following the given order.

        All ids must name active values; either every position is written or
        none is.

        Returns:
            Number of values reordered
        """
        ids = [require_positive_id(value_id, "value_ids") for value_id in value_ids]
        if not ids:
            raise ValidationError("value_ids must not be empty", field="value_ids")
        if len(set(ids)) != len(ids):
            raise ValidationError("value_ids must not contain duplicates", field="value_ids")

        with self.persistence.unit_of_work():
            for position, value_id in enumerate(ids, start=1):
                affected = self.persistence.update_record(
                    f"""
                    UPDATE {TABLE} SET sort_order = :sort_order, updated_at = CURRENT_TIMESTAMP
                    WHERE id = :value_id AND lifecycle_state = :active
                    """,
                    {"sort_order": position, "value_id": value_id, "active": LifecycleState.ACTIVE.value},
                )
                if affected == 0:
                    raise NotFoundError("Company value", value_id)
            self.audit.record(actor, "values_reordered", TABLE, None, None, {"value_ids": ids})

        logger.info(f"Reordered {len(ids)} company values")
        return len(ids)

    def get_value_usage(self, value_id: Any) -> List[Dict[str, Any]]:
        value = self.get_value(value_id)
        return self.persistence.fetch_all(
            """
            SELECT jpt.position_title, jpt.department, jtv.weight_percentage
            FROM job_template_values jtv
            JOIN job_position_templates jpt ON jtv.job_template_id = jpt.id
            WHERE jtv.value_id = :value_id AND jpt.is_active = :is_active
            ORDER BY jpt.position_title
            """,
            {"value_id": value["id"], "is_active": True},
        )

    def get_value_statistics(self, value_id: Any, period_start: Any = None, period_end: Any = None) -> Dict[str, Any]:
        value = self.get_value(value_id)
        condition, params = statistics.window_condition("e.created_at", period_start, period_end)
        rows = self.persistence.fetch_all(
            f"""
            SELECT evr.score, e.created_at
            FROM evaluation_value_results evr
            JOIN evaluations e ON evr.evaluation_id = e.id
            WHERE evr.value_id = :value_id{condition}
            """,
            {"value_id": value["id"], **params},
        )
        return statistics.value_statistics(rows, period_start, period_end)

    def get_all_values_statistics(self, period_start: Any = None, period_end: Any = None) -> List[Dict[str, Any]]:
        """Summary row for every active value, including values never scored."""
        condition, params = statistics.window_condition("e.created_at", period_start, period_end)
        rows = self.persistence.fetch_all(
            f"""
            SELECT evr.value_id, evr.score, e.created_at
            FROM evaluation_value_results evr
            JOIN evaluations e ON evr.evaluation_id = e.id
            JOIN {TABLE} cv ON evr.value_id = cv.id
            WHERE cv.lifecycle_state = :active{condition}
            """,
            {"active": LifecycleState.ACTIVE.value, **params},
        )
        return statistics.all_values_statistics(self.list_values(), rows, period_start, period_end)

    @staticmethod
    def calculate_value_score(ratings: Optional[Iterable[Any]]) -> float:
        return score_from_behaviors(ratings)

    def get_value_behaviors(self, value_id: Any) -> List[str]:
        return catalog.behaviors_for(self.get_value(value_id)["value_name"])

    def import_values_from_csv(self, source: csv_io.CsvSource, actor: Optional[int] = None) -> Dict[str, Any]:
        """
        Import values from CSV columns: Value Name, Description, Sort Order.

        A header row is recognized by its first cell and skipped. Rows whose
        name matches an existing active value are skipped.
        """
        results: Dict[str, Any] = {"imported": 0, "skipped": 0, "errors": []}

        rows = csv_io.read_rows(source)
        if rows and (rows[0][0] if rows[0] else "").strip().lower() in ("value name", "value_name", "name"):
            rows = rows[1:]
            first_row_number = 2
        else:
            first_row_number = 1

        for row_number, row in enumerate(rows, start=first_row_number):
            if csv_io.is_blank(row):
                results["skipped"] += 1
                continue

            padded = list(row) + [""] * 3
            try:
                fields = self._clean({"value_name": padded[0], "description": padded[1], "sort_order": padded[2]})
                with self.persistence.unit_of_work():
                    existing = self.persistence.fetch_one(
                        f"""
                        SELECT id FROM {TABLE}
                        WHERE LOWER(value_name) = LOWER(:value_name) AND lifecycle_state = :active
                        LIMIT 1
                        """,
                        {"value_name": fields["value_name"], "active": LifecycleState.ACTIVE.value},
                    )
                    if existing:
                        results["errors"].append(f"Row {row_number}: value '{fields['value_name']}' already exists")
                        results["skipped"] += 1
                        continue
                    value_id = self._insert(fields, actor)
                    self.audit.record(actor, "value_created", TABLE, value_id, None, fields)
                    results["imported"] += 1
            except PerformanceError as e:
                results["errors"].append(f"Row {row_number}: {e.message}")
                results["skipped"] += 1

        logger.info(f"Value import finished: {results['imported']} imported, {results['skipped']} skipped")
        return results

    def export_values_to_csv(self) -> str:
        return csv_io.write_rows(
            EXPORT_HEADER,
            (
                [value["value_name"], value["description"], value["sort_order"], value["created_by"], value["created_at"]]
                for value in self.list_values()
            ),
        )
