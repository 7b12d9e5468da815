# src/textchain/engine/entrypoints.py
"""TransformationService - the three ways to start a pipeline.

- transform_input: text supplied directly; blank text is rejected
- transform_clipboard: text read from the clipboard; blank text is rejected
- transform_recording: a recording's transcript, used as-is (even if empty)

All three hand off to the same PipelineOrchestrator.run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from textchain.contracts.collaborators import ClipboardReader, RecordingLookup
from textchain.contracts.enums import Provider
from textchain.contracts.errors import CollaboratorError, TransformError, TransformErrorCode
from textchain.contracts.results import PipelineResult
from textchain.core.config import ProviderCredentials, resolve_config
from textchain.core.logging import configure_logging
from textchain.engine.orchestrator import PipelineOrchestrator

if TYPE_CHECKING:
    from textchain.core.config import TextchainSettings
    from textchain.core.ledger.database import LedgerDB
    from textchain.plugins.clients.http import JsonHttpClient

slog = structlog.get_logger(__name__)


class TransformationService:
    """Entry points for running transformations.

    Example:
        service = TransformationService.from_settings(settings, clipboard=clipboard, recordings=recordings)
        result = service.transform_input("hello world", "tr-1")
    """

    def __init__(
        self,
        *,
        orchestrator: PipelineOrchestrator,
        credentials: ProviderCredentials,
        clipboard: ClipboardReader | None = None,
        recordings: RecordingLookup | None = None,
    ) -> None:
        """Initialize service.

        Args:
            orchestrator: Runs the pipeline
            credentials: Default provider credentials for every invocation
            clipboard: Clipboard collaborator; required for transform_clipboard
            recordings: Recordings collaborator; required for transform_recording
        """
        self._orchestrator = orchestrator
        self._credentials = credentials
        self._clipboard = clipboard
        self._recordings = recordings
        self._resources: list[LedgerDB | JsonHttpClient] = []

    @classmethod
    def from_settings(
        cls,
        settings: TextchainSettings,
        *,
        clipboard: ClipboardReader | None = None,
        recordings: RecordingLookup | None = None,
    ) -> TransformationService:
        """Wire the full stack from settings.

        Applies the logging settings, then opens the ledger database and one
        shared HTTP client; close() releases both.
        """
        from textchain.core.ledger.database import LedgerDB
        from textchain.core.ledger.definitions import TransformationStore
        from textchain.core.ledger.recorder import RunRecorder
        from textchain.engine.executor import StepExecutor
        from textchain.engine.spans import SpanFactory
        from textchain.engine.tracker import RunTracker
        from textchain.plugins.backends.anthropic import AnthropicBackend
        from textchain.plugins.backends.chat_completions import ChatCompletionsBackend
        from textchain.plugins.backends.google import GoogleBackend
        from textchain.plugins.clients.http import JsonHttpClient

        configure_logging(json_output=settings.logging.json_output, level=settings.logging.level)
        slog.info("service_configured", config=resolve_config(settings))

        db = LedgerDB.from_url(settings.ledger.url)
        http = JsonHttpClient(timeout=settings.http.timeout_seconds)
        providers = settings.providers

        executor = StepExecutor(
            backends={
                Provider.OPENAI: ChatCompletionsBackend(label="OpenAI", url=providers.openai_url, http=http),
                Provider.GROQ: ChatCompletionsBackend(label="Groq", url=providers.groq_url, http=http),
                Provider.ANTHROPIC: AnthropicBackend(
                    url=providers.anthropic_url,
                    http=http,
                    api_version=providers.anthropic_version,
                    max_tokens=providers.anthropic_max_tokens,
                ),
                Provider.GOOGLE: GoogleBackend(temperature=providers.google_temperature),
            }
        )
        orchestrator = PipelineOrchestrator(
            definitions=TransformationStore(db),
            executor=executor,
            tracker=RunTracker(RunRecorder(db)),
            span_factory=SpanFactory.from_global(settings.tracing.enabled),
        )

        service = cls(
            orchestrator=orchestrator,
            credentials=settings.credentials,
            clipboard=clipboard,
            recordings=recordings,
        )
        service._resources = [http, db]
        return service

    def transform_input(
        self,
        input_text: str,
        transformation_id: str,
        *,
        credentials: ProviderCredentials | None = None,
    ) -> PipelineResult:
        if not input_text.strip():
            return PipelineResult.failure(TransformError(code=TransformErrorCode.NO_INPUT))
        return self._run(transformation_id, input_text, None, credentials)

    def transform_clipboard(
        self,
        transformation_id: str,
        *,
        credentials: ProviderCredentials | None = None,
    ) -> PipelineResult:
        if self._clipboard is None:
            raise RuntimeError("transform_clipboard requires a ClipboardReader")

        try:
            text = self._clipboard.read_text()
        except CollaboratorError as e:
            slog.warning("clipboard_read_failed", error_type=type(e).__name__)
            return PipelineResult.failure(TransformError(code=TransformErrorCode.FAILED_TO_GET_CLIPBOARD_TEXT, detail=str(e)))

        if not text.strip():
            return PipelineResult.failure(TransformError(code=TransformErrorCode.NO_INPUT))
        return self._run(transformation_id, text, None, credentials)

    def transform_recording(
        self,
        transformation_id: str,
        recording_id: str,
        *,
        credentials: ProviderCredentials | None = None,
    ) -> PipelineResult:
        """Run a transformation over a recording's transcript.

        The transcript is not checked for emptiness: an empty transcript is
        a legitimate (if unhelpful) input and still produces a run.
        """
        if self._recordings is None:
            raise RuntimeError("transform_recording requires a RecordingLookup")

        try:
            recording = self._recordings.get_recording(recording_id)
        except CollaboratorError as e:
            slog.warning("recording_lookup_failed", recording_id=recording_id, error_type=type(e).__name__)
            return PipelineResult.failure(TransformError(code=TransformErrorCode.RECORDING_NOT_FOUND, detail=str(e)))

        if recording is None:
            return PipelineResult.failure(TransformError(code=TransformErrorCode.RECORDING_NOT_FOUND))
        return self._run(transformation_id, recording.transcribed_text, recording.recording_id, credentials)

    def close(self) -> None:
        """Release resources opened by from_settings()."""
        for resource in self._resources:
            resource.close()
        self._resources = []

    def __enter__(self) -> TransformationService:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _run(
        self,
        transformation_id: str,
        input_text: str,
        recording_id: str | None,
        credentials: ProviderCredentials | None,
    ) -> PipelineResult:
        return self._orchestrator.run(
            transformation_id,
            input_text,
            recording_id,
            credentials if credentials is not None else self._credentials,
        )
