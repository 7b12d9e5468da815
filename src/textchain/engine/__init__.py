# src/textchain/engine/__init__.py
"""Pipeline engine: state machine, step execution, run tracking and entry points.

Example:
    from textchain.engine import TransformationService

    service = TransformationService.from_settings(settings)
    result = service.transform_input("some text", "tr-1")
    if result.ok:
        print(result.run.output)
"""

from textchain.engine.entrypoints import TransformationService
from textchain.engine.executor import StepExecutor
from textchain.engine.orchestrator import PipelineOrchestrator
from textchain.engine.spans import SpanFactory
from textchain.engine.state import PipelineState, RunState
from textchain.engine.tracker import RunTracker

__all__ = [
    "PipelineOrchestrator",
    "PipelineState",
    "RunState",
    "RunTracker",
    "SpanFactory",
    "StepExecutor",
    "TransformationService",
]
