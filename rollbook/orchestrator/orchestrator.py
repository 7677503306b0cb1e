"""Pipeline orchestrator for the upload flow."""
from __future__ import annotations

from typing import Iterable, List, Protocol

from rollbook.normalize.schema import SourceDocument


class PipelineStage(Protocol):
    """Protocol for individual pipeline stages."""

    def run(self, batch: list[SourceDocument]) -> list[SourceDocument]:
        """Process a batch of documents and return the updated batch."""


class PipelineOrchestrator:
    """Coordinates the load → records → persist pipeline."""

    def __init__(self, stages: Iterable[PipelineStage]) -> None:
        self._stages: List[PipelineStage] = list(stages)

    def run(self, initial_batch: list[SourceDocument]) -> list[SourceDocument]:
        """Run the configured stages in order over the provided batch."""

        batch = initial_batch
        for stage in self._stages:
            batch = stage.run(batch)
        return batch

    @property
    def stages(self) -> List[PipelineStage]:
        return list(self._stages)
