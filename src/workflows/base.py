"""
Contains base class for report pipelines
"""
from abc import ABC, abstractmethod

from core.entities import AggregateReport


class ReportPipeline(ABC):
    """
    Orchestrates extraction → classification → report assembly.
    """

    name: str

    @abstractmethod
    async def run(self) -> AggregateReport:
        """
        Execute the pipeline and return a fresh report.
        Must never raise uncaught exceptions.
        """
        raise NotImplementedError
