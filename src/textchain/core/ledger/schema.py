"""SQLAlchemy table definitions for the run ledger.

Uses SQLAlchemy Core (not ORM) for explicit control over queries
and compatibility with multiple database backends.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)

# Shared metadata for all tables
metadata = MetaData()

_STATUS_VALUES = "('running', 'completed', 'failed')"

# === Transformation definitions ===

transformations_table = Table(
    "transformations",
    metadata,
    Column("transformation_id", String(64), primary_key=True),
    Column("title", String(256), nullable=False),
    Column("description", Text, nullable=False, default=""),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

transformation_steps_table = Table(
    "transformation_steps",
    metadata,
    Column("step_id", String(64), primary_key=True),
    Column("transformation_id", String(64), ForeignKey("transformations.transformation_id"), nullable=False),
    Column("position", Integer, nullable=False),
    # Stored verbatim; unknown values load as UnsupportedStep
    Column("step_type", String(64), nullable=False),
    # find_replace fields
    Column("find_text", Text),
    Column("replace_text", Text),
    Column("use_regex", Boolean),
    # prompt_transform fields
    Column("provider", String(64)),
    Column("model_id", String(256)),
    Column("system_prompt_template", Text),
    Column("user_prompt_template", Text),
    UniqueConstraint("transformation_id", "position"),
)

# === Runs ===

transformation_runs_table = Table(
    "transformation_runs",
    metadata,
    Column("run_id", String(64), primary_key=True),
    # No FK to transformations: definitions may be edited or deleted, runs are kept
    Column("transformation_id", String(64), nullable=False),
    Column("recording_id", String(64)),
    Column("input", Text, nullable=False),
    Column("output", Text),
    Column("error", Text),
    Column("status", String(16), nullable=False),
    Column("started_at", DateTime(timezone=True), nullable=False),
    Column("completed_at", DateTime(timezone=True)),
    CheckConstraint(f"status IN {_STATUS_VALUES}", name="ck_transformation_runs_status"),
    Index("ix_transformation_runs_transformation_id", "transformation_id"),
    Index("ix_transformation_runs_recording_id", "recording_id"),
)

transformation_step_runs_table = Table(
    "transformation_step_runs",
    metadata,
    Column("step_run_id", String(64), primary_key=True),
    Column("run_id", String(64), ForeignKey("transformation_runs.run_id"), nullable=False),
    Column("step_id", String(64), nullable=False),
    Column("step_index", Integer, nullable=False),
    Column("input", Text, nullable=False),
    Column("input_hash", String(64), nullable=False),
    Column("output", Text),
    Column("output_hash", String(64)),
    Column("status", String(16), nullable=False),
    Column("error", Text),
    Column("error_code", String(64)),
    Column("started_at", DateTime(timezone=True), nullable=False),
    Column("completed_at", DateTime(timezone=True)),
    UniqueConstraint("run_id", "step_index"),
    CheckConstraint(f"status IN {_STATUS_VALUES}", name="ck_transformation_step_runs_status"),
)
