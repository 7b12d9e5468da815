# src/textchain/engine/executor.py
"""StepExecutor - dispatches one step to its backend."""

from __future__ import annotations

from collections.abc import Mapping
from typing import assert_never

import structlog

from textchain.contracts.definitions import RewriteStep, Step, SubstitutionStep, UnsupportedStep
from textchain.contracts.enums import Provider
from textchain.contracts.errors import StepError, StepErrorCode
from textchain.contracts.results import StepResult
from textchain.core.config import ProviderCredentials
from textchain.plugins.backends.base import RewriteBackend, render_prompt
from textchain.plugins.backends.substitution import substitute

slog = structlog.get_logger(__name__)


class StepExecutor:
    """Executes a single step against the current pipeline text.

    Exactly one outcome per call: the complete replacement text or one
    StepError. The executor performs no ledger writes; the orchestrator
    records around it.

    Example:
        executor = StepExecutor(backends={Provider.OPENAI: openai_backend, ...})
        result = executor.execute("hello", step, credentials)
    """

    def __init__(self, backends: Mapping[Provider, RewriteBackend]) -> None:
        """Initialize executor.

        Args:
            backends: Rewrite backend for each supported provider. A provider
                without a backend fails its steps with UNSUPPORTED_PROVIDER.
        """
        self._backends = dict(backends)

    def execute(self, text: str, step: Step, credentials: ProviderCredentials) -> StepResult:
        match step:
            case SubstitutionStep():
                return substitute(text, step.find_text, step.replace_text, step.use_regex)
            case RewriteStep():
                return self._rewrite(text, step, credentials)
            case UnsupportedStep():
                return StepResult.failure(
                    StepError(
                        code=StepErrorCode.UNSUPPORTED_STEP_TYPE,
                        message=f"Unsupported step type: {step.step_type}",
                    )
                )
            case _:
                assert_never(step)

    def _rewrite(self, text: str, step: RewriteStep, credentials: ProviderCredentials) -> StepResult:
        try:
            provider = Provider(step.provider)
        except ValueError:
            return _unsupported_provider(step.provider)

        backend = self._backends.get(provider)
        if backend is None:
            return _unsupported_provider(step.provider)

        system_prompt = render_prompt(step.system_prompt_template, text)
        user_prompt = render_prompt(step.user_prompt_template, text)

        result = backend.rewrite(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            model_id=step.model_id,
            api_key=credentials.api_key_for(provider),
        )
        if not result.ok and result.error is not None:
            slog.info(
                "rewrite_failed",
                step_id=step.step_id,
                provider=provider.value,
                model=step.model_id,
                error_code=result.error.code.value,
                status_code=result.error.status_code,
            )
        return result


def _unsupported_provider(provider: str) -> StepResult:
    return StepResult.failure(
        StepError(
            code=StepErrorCode.UNSUPPORTED_PROVIDER,
            message=f"Unsupported provider: {provider}",
        )
    )
