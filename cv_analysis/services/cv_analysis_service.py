"""
CV analysis orchestration.

acquire text -> run strategies in order (AI, then rule-based) -> first success
wins -> diagnostic result if every strategy failed. Text that is only a
download or extraction diagnostic skips the strategies and gives the
diagnostic result directly. Never raises.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Union

from cv_analysis.api.schemas.cv_analysis import CVAnalysisResult, parse_custom_fields
from cv_analysis.infrastructure.storage import StorageBackend, get_storage_backend
from cv_analysis.services.ai_analysis_service import AIAnalysisStrategy
from cv_analysis.services.llm_provider import LLMProvider, get_llm_provider
from cv_analysis.services.strategies import AnalysisStrategy, HeuristicAnalysisStrategy
from cv_analysis.services.text_extraction_service import DocumentTextExtractor
from cv_analysis.utils.config import settings
from cv_analysis.utils.exceptions import AnalysisFailedError
from cv_analysis.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class StrategyAttempt:
    """Outcome of running one strategy"""
    name: str
    result: Optional[CVAnalysisResult] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.result is not None


@dataclass
class AnalysisReport:
    """Final result plus the trail of strategy attempts that produced it"""
    result: CVAnalysisResult
    strategy: Optional[str]
    attempts: List[StrategyAttempt] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return self.strategy is None


def diagnostic_suggestions(raw_fields: Optional[Sequence[Any]]) -> Dict[str, str]:
    """First option for single-choice fields, empty string otherwise"""
    suggestions: Dict[str, str] = {}
    for raw in raw_fields or []:
        data = raw if isinstance(raw, dict) else getattr(raw, "__dict__", {})
        name = data.get("field_name")
        if not isinstance(name, str) or not name:
            continue
        options = data.get("field_options") or []
        if data.get("field_type") == "select_one" and isinstance(options, list) and options:
            suggestions[name] = str(options[0])
        else:
            suggestions[name] = ""
    return suggestions


def diagnostic_result(error: Union[Exception, str], raw_fields: Optional[Sequence[Any]] = None) -> CVAnalysisResult:
    """Structurally complete result whose summary explains what went wrong"""
    if isinstance(error, str):
        message = error or "Unknown error"
    else:
        message = getattr(error, "message", None) or str(error) or "Unknown error"
    return CVAnalysisResult(
        summary=(
            f"CV analysis encountered an issue: {message}. Please try uploading the CV "
            "again or contact support if the problem persists."
        ),
        custom_fields_suggestions=diagnostic_suggestions(raw_fields),
    )


class CVAnalysisService:
    """
    Turns a stored CV into a CVAnalysisResult.

    The strategy order is the fallback policy: by default the Gemini analysis
    runs first and the rule-based parser second.
    """

    def __init__(
        self,
        storage: Optional[StorageBackend] = None,
        llm: Optional[LLMProvider] = None,
        strategies: Optional[Sequence[AnalysisStrategy]] = None
    ):
        self.storage = storage or get_storage_backend()
        self.llm = llm or get_llm_provider()
        self.extractor = DocumentTextExtractor(self.storage, self.llm)
        self.strategies: List[AnalysisStrategy] = list(strategies) if strategies is not None else [
            AIAnalysisStrategy(self.llm),
            HeuristicAnalysisStrategy(),
        ]

    async def run_strategies(
        self,
        cv_text: str,
        job_title: str,
        custom_fields: Sequence[Any],
        now: Optional[date] = None
    ) -> AnalysisReport:
        """
        Run the strategy chain over already acquired text

        Raises:
            AnalysisFailedError: If every strategy failed (carries the attempts)
        """
        attempts: List[StrategyAttempt] = []
        for strategy in self.strategies:
            try:
                result = await strategy.analyze(cv_text, job_title, custom_fields, now=now)
            except Exception as e:
                logger.warning(f"Analysis strategy '{strategy.name}' failed: {e}")
                attempts.append(StrategyAttempt(name=strategy.name, error=str(e) or type(e).__name__))
                continue
            attempts.append(StrategyAttempt(name=strategy.name, result=result))
            logger.info(f"Analysis strategy '{strategy.name}' succeeded")
            return AnalysisReport(result=result, strategy=strategy.name, attempts=attempts)

        raise AnalysisFailedError(
            "All analysis strategies failed",
            details={"attempts": [{"name": a.name, "error": a.error} for a in attempts]}
        )

    async def analyze(
        self,
        file_url: str,
        job_title: Optional[str] = None,
        custom_fields: Optional[Sequence[Any]] = None,
        now: Optional[date] = None
    ) -> AnalysisReport:
        """
        Analyze a stored CV and report which strategy produced the result

        Args:
            file_url: Storage path of the CV
            job_title: Job applied for (DEFAULT_JOB_TITLE if empty)
            custom_fields: Raw or validated custom field definitions
            now: Reference date for ongoing positions (defaults to today)

        Returns:
            AnalysisReport; never raises
        """
        job_title = job_title or settings.DEFAULT_JOB_TITLE
        logger.info(f"Starting CV analysis for file: {file_url}")

        try:
            fields = parse_custom_fields(custom_fields)
            extracted = await self.extractor.acquire(file_url)
            if extracted.degraded:
                logger.warning(f"No CV text to analyze: {extracted.issue}")
                return AnalysisReport(result=diagnostic_result(extracted.issue, custom_fields), strategy=None)
            logger.info(f"Text extracted, length: {len(extracted.text)}")
            return await self.run_strategies(extracted.text, job_title, fields, now=now)
        except AnalysisFailedError as e:
            logger.error(f"CV analysis failed: {e.message}", extra={"details": e.details})
            return AnalysisReport(result=diagnostic_result(e, custom_fields), strategy=None)
        except Exception as e:
            logger.error(f"Error analyzing CV: {e}", exc_info=True)
            return AnalysisReport(result=diagnostic_result(e, custom_fields), strategy=None)

    async def analyze_cv(
        self,
        file_url: str,
        job_title: Optional[str] = None,
        custom_fields: Optional[Sequence[Any]] = None,
        now: Optional[date] = None
    ) -> CVAnalysisResult:
        """Analyze a stored CV; never raises"""
        report = await self.analyze(file_url, job_title, custom_fields, now=now)
        return report.result


async def analyze_cv(
    file_url: str,
    job_title: Optional[str],
    custom_fields: Optional[Sequence[Any]],
    storage: StorageBackend,
    llm: Optional[LLMProvider] = None
) -> CVAnalysisResult:
    """
    Analyze a stored CV with an explicit storage backend

    Args:
        file_url: Storage path of the CV
        job_title: Job applied for
        custom_fields: Custom field definitions ``{field_name, field_type, field_label, field_options?}``
        storage: Backend to download the CV from
        llm: Gemini provider (shared instance if None)

    Returns:
        CVAnalysisResult; never raises
    """
    service = CVAnalysisService(storage=storage, llm=llm)
    return await service.analyze_cv(file_url, job_title, custom_fields)


# Singleton instance
_cv_analysis_service: Optional[CVAnalysisService] = None


def get_cv_analysis_service() -> CVAnalysisService:
    """Get or create singleton CV analysis service"""
    global _cv_analysis_service
    if _cv_analysis_service is None:
        _cv_analysis_service = CVAnalysisService()
    return _cv_analysis_service
