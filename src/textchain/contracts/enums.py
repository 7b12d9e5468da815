"""Status codes, step kinds and provider identifiers used across subsystem boundaries."""

from enum import StrEnum


class RunStatus(StrEnum):
    """Status of a transformation run.

    Stored in the database (transformation_runs.status).
    """

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class StepRunStatus(StrEnum):
    """Status of a single step run.

    Stored in the database (transformation_step_runs.status).
    """

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class StepType(StrEnum):
    """Type tag of a stored transformation step.

    Stored in the database (transformation_steps.step_type).
    """

    FIND_REPLACE = "find_replace"
    PROMPT_TRANSFORM = "prompt_transform"


class Provider(StrEnum):
    """Remote rewrite backends.

    Each member has its own wire protocol:
        OPENAI: chat-completions, bearer token
        GROQ: chat-completions (OpenAI-compatible), bearer token
        ANTHROPIC: messages API, x-api-key header
        GOOGLE: managed SDK client, key at construction
    """

    OPENAI = "openai"
    GROQ = "groq"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
