"""SQL-backed transformation definitions.

Implements the TransformationSource protocol for the orchestrator and the
write side used by whatever edits definitions. Saving a transformation
replaces its whole step list; runs never reference step rows, so past runs
stay intact when a definition changes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

from sqlalchemy import Connection, select

from textchain.contracts.definitions import RewriteStep, Step, SubstitutionStep, Transformation, UnsupportedStep
from textchain.contracts.enums import StepType
from textchain.core.ledger._database_ops import DatabaseOps
from textchain.core.ledger._helpers import now
from textchain.core.ledger.repositories import StepRepository
from textchain.core.ledger.schema import transformation_steps_table, transformations_table

if TYPE_CHECKING:
    from textchain.core.ledger.database import LedgerDB


class TransformationStore:
    """Read/write access to transformation definitions."""

    def __init__(self, db: LedgerDB) -> None:
        self._db = db
        self._ops = DatabaseOps(db)
        self._step_repo = StepRepository()

    def save_transformation(self, transformation: Transformation) -> None:
        """Insert or replace a transformation and its steps."""
        timestamp = now()

        def work(conn: Connection) -> None:
            exists = conn.execute(
                select(transformations_table.c.transformation_id).where(
                    transformations_table.c.transformation_id == transformation.transformation_id
                )
            ).first()

            if exists is None:
                conn.execute(
                    transformations_table.insert().values(
                        transformation_id=transformation.transformation_id,
                        title=transformation.title,
                        description=transformation.description,
                        created_at=timestamp,
                        updated_at=timestamp,
                    )
                )
            else:
                conn.execute(
                    transformations_table.update()
                    .where(transformations_table.c.transformation_id == transformation.transformation_id)
                    .values(
                        title=transformation.title,
                        description=transformation.description,
                        updated_at=timestamp,
                    )
                )
                conn.execute(
                    transformation_steps_table.delete().where(
                        transformation_steps_table.c.transformation_id == transformation.transformation_id
                    )
                )

            for position, step in enumerate(transformation.steps):
                conn.execute(
                    transformation_steps_table.insert().values(
                        transformation_id=transformation.transformation_id,
                        position=position,
                        **_step_columns(step),
                    )
                )

        self._ops.execute_in_transaction(work)

    def get_transformation(self, transformation_id: str) -> Transformation | None:
        """Load a transformation with its steps in order.

        Returns:
            Transformation or None if not found
        """
        header = self._ops.execute_fetchone(
            select(transformations_table).where(transformations_table.c.transformation_id == transformation_id)
        )
        if header is None:
            return None

        step_rows = self._ops.execute_fetchall(
            select(transformation_steps_table)
            .where(transformation_steps_table.c.transformation_id == transformation_id)
            .order_by(transformation_steps_table.c.position)
        )
        return Transformation(
            transformation_id=header.transformation_id,
            title=header.title,
            description=header.description,
            steps=tuple(self._step_repo.load(row) for row in step_rows),
        )

    def list_transformations(self) -> list[Transformation]:
        """All transformations, oldest first."""
        ids = self._ops.execute_fetchall(
            select(transformations_table.c.transformation_id).order_by(
                transformations_table.c.created_at,
                transformations_table.c.transformation_id,
            )
        )
        result: list[Transformation] = []
        for row in ids:
            transformation = self.get_transformation(row.transformation_id)
            if transformation is not None:
                result.append(transformation)
        return result


def _step_columns(step: Step) -> dict[str, object]:
    match step:
        case SubstitutionStep():
            return {
                "step_id": step.step_id,
                "step_type": StepType.FIND_REPLACE.value,
                "find_text": step.find_text,
                "replace_text": step.replace_text,
                "use_regex": step.use_regex,
            }
        case RewriteStep():
            return {
                "step_id": step.step_id,
                "step_type": StepType.PROMPT_TRANSFORM.value,
                "provider": step.provider,
                "model_id": step.model_id,
                "system_prompt_template": step.system_prompt_template,
                "user_prompt_template": step.user_prompt_template,
            }
        case UnsupportedStep():
            return {"step_id": step.step_id, "step_type": step.step_type}
        case _:
            assert_never(step)
