"""
Analysis strategies.

A strategy turns raw CV text into a CVAnalysisResult or raises. The
orchestrator runs them in order and keeps the first success.
"""
from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, Sequence

from cv_analysis.api.schemas.cv_analysis import CVAnalysisResult
from cv_analysis.core.fallback_parser import analyze_text
from cv_analysis.core.suggestions import AnyCustomField


class AnalysisStrategy(ABC):
    """Abstract analysis strategy"""

    name: str = "strategy"

    @abstractmethod
    async def analyze(
        self,
        cv_text: str,
        job_title: str,
        custom_fields: Sequence[AnyCustomField],
        now: Optional[date] = None
    ) -> CVAnalysisResult:
        """Analyze CV text; raise on failure"""
        pass


class HeuristicAnalysisStrategy(AnalysisStrategy):
    """Offline rule-based parser. The job title is not used."""

    name = "heuristic"

    async def analyze(
        self,
        cv_text: str,
        job_title: str,
        custom_fields: Sequence[AnyCustomField],
        now: Optional[date] = None
    ) -> CVAnalysisResult:
        return analyze_text(cv_text, custom_fields, now=now)
