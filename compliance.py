import time
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Union

from langgraph.graph import StateGraph, END
from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from compliance_ai import analyze_compliance_with_ai
from compliance_rules import COUNTRY_RULES, INDUSTRY_RULES, PLATFORM_RULES, serialize_rules
from compliance_states import (
    CompareRequest,
    CompareResult,
    CompareSummary,
    ComplianceCheckRequest,
    ComplianceCheckResult,
    ComplianceMetadata,
    ComplianceReport,
    ComplianceState,
)
from compliance_validator import (
    calculate_compliance_score,
    is_safe_to_publish,
    validate_compliance,
)
from error_handler import RequestValidationError, handle_validation_error, log_error
from gemini_client import GeminiClient, StructuredGenerator
from settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

RequestLike = Union[ComplianceCheckRequest, Dict[str, Any]]


def _coerce_request(request: RequestLike) -> ComplianceCheckRequest:
    if isinstance(request, ComplianceCheckRequest):
        return request
    try:
        return ComplianceCheckRequest.model_validate(request)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in err['loc']) or 'request'}: {err['msg']}"
            for err in e.errors()
        ]
        raise handle_validation_error(errors, "compliance check request") from e


def _echo_request(request: RequestLike) -> ComplianceCheckRequest:
    """Best-effort copy of a failed request's fields for its degraded result."""
    try:
        return _coerce_request(request)
    except RequestValidationError:
        fields = request if isinstance(request, dict) else {}
        return ComplianceCheckRequest(
            **{
                name: value
                for name in ("ad_copy", "locale", "platform", "industry")
                for value in [fields.get(name, fields.get(to_camel(name)))]
                if isinstance(value, str)
            }
        )


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def validate_compliance_request(request: ComplianceCheckRequest, max_length: int = 5000) -> None:
    """Collect every violated constraint before failing."""
    errors: List[str] = []

    if not request.ad_copy or not request.ad_copy.strip():
        errors.append("Ad copy is required")
    if request.ad_copy and len(request.ad_copy) > max_length:
        errors.append(f"Ad copy must not exceed {max_length} characters")
    if not request.locale or not request.locale.strip():
        errors.append("Locale is required")
    if not request.platform or not request.platform.strip():
        errors.append("Platform is required")
    if not request.industry or not request.industry.strip():
        errors.append("Industry is required")

    if errors:
        raise handle_validation_error(errors, "compliance check request")


def risk_from_average_score(average: Optional[float]) -> str:
    # Independent of calculate_overall_severity; see DESIGN.md.
    if average is None:
        return "high"
    if average > 80:
        return "low"
    if average > 60:
        return "medium"
    return "high"


class ComplianceService:
    """
    Pattern matching followed by AI review, merged into one result.

    The structured-generation client is injected; the service closes it on
    aclose() only when it created the client itself.
    """

    def __init__(
        self,
        llm: StructuredGenerator,
        config: Optional[Settings] = None,
        sleep=None,
    ):
        self.llm = llm
        self.settings = config or default_settings
        self._sleep = sleep
        self._owns_llm = False
        self.graph = self._build_graph()

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "ComplianceService":
        config = config or default_settings
        client = GeminiClient(
            api_key=config.GOOGLE_API_KEY,
            model=config.MODEL_ID,
            temperature=config.AI_TEMPERATURE,
        )
        client.open()
        service = cls(client, config)
        service._owns_llm = True
        return service

    async def aclose(self) -> None:
        if self._owns_llm and isinstance(self.llm, GeminiClient):
            await self.llm.aclose()

    async def __aenter__(self) -> "ComplianceService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # --- PIPELINE NODES ---

    def node_match_patterns(self, state: ComplianceState):
        request = state["request"]
        validation = validate_compliance(
            request.ad_copy,
            request.locale,
            request.platform,
            request.industry,
            request.strict_mode,
        )
        coverage = validation.rules_coverage
        logger.info(
            f"[PATTERNS] {request.platform}/{request.locale}/{request.industry}: "
            f"{len(validation.issues)} issue(s), severity {validation.overall_severity}, "
            f"rules checked {coverage.platform}/{coverage.country}/{coverage.industry}, "
            f"strict review: {validation.strict_review}"
        )
        return {"validation": validation, "pattern_matched_issues": validation.issues}

    async def node_analyze_with_ai(self, state: ComplianceState):
        request = state["request"]
        report = await analyze_compliance_with_ai(
            self.llm,
            ad_copy=request.ad_copy,
            locale=request.locale,
            platform=request.platform,
            industry=request.industry,
            pattern_matched_issues=state["pattern_matched_issues"],
            strict_mode=request.strict_mode,
            max_retries=self.settings.AI_MAX_RETRIES,
            initial_delay=self.settings.AI_INITIAL_RETRY_DELAY,
            sleep=self._sleep,
        )
        return {"ai_analysis": report}

    def node_merge_results(self, state: ComplianceState):
        request = state["request"]
        pattern_issues = state["pattern_matched_issues"]
        ai_analysis = state["ai_analysis"]

        # Both pools are counted independently; overlaps are not deduplicated.
        all_issues = list(pattern_issues) + list(ai_analysis.issues)
        metadata = ComplianceMetadata(
            total_issues=len(pattern_issues) + len(ai_analysis.issues),
            critical_issues=sum(1 for issue in all_issues if issue.severity == "high"),
            processing_time_ms=int((time.perf_counter() - state["started_at"]) * 1000),
            compliance_score=calculate_compliance_score(pattern_issues),
            publish_status=is_safe_to_publish(pattern_issues, allow_medium_risk=not request.strict_mode),
        )
        logger.info(
            f"[MERGE] {metadata.total_issues} total issue(s), {metadata.critical_issues} critical, "
            f"{metadata.processing_time_ms}ms"
        )
        result = ComplianceCheckResult(
            success=True,
            ad_copy=request.ad_copy,
            locale=request.locale,
            platform=request.platform,
            industry=request.industry,
            pattern_matched_issues=pattern_issues,
            ai_analysis=ai_analysis,
            timestamp=_utc_timestamp(),
            metadata=metadata,
        )
        return {"result": result}

    def _build_graph(self):
        workflow = StateGraph(ComplianceState)
        workflow.add_node("patterns", self.node_match_patterns)
        workflow.add_node("analyze", self.node_analyze_with_ai)
        workflow.add_node("merge", self.node_merge_results)

        workflow.set_entry_point("patterns")
        workflow.add_edge("patterns", "analyze")
        workflow.add_edge("analyze", "merge")
        workflow.add_edge("merge", END)
        return workflow.compile()

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    async def check_compliance(self, request: RequestLike) -> ComplianceCheckResult:
        """
        Full compliance check of one ad copy.

        Raises RequestValidationError listing every invalid field, or
        GenerationFailedError when the AI stage gives up.
        """
        request = _coerce_request(request)
        validate_compliance_request(request, self.settings.MAX_AD_COPY_LENGTH)

        try:
            final_state = await self.graph.ainvoke(
                {"request": request, "started_at": time.perf_counter()}
            )
        except Exception as e:
            log_error(e, "check_compliance")
            raise
        return final_state["result"]

    async def batch_check_compliance(self, requests: Sequence[RequestLike]) -> List[ComplianceCheckResult]:
        """Run checks concurrently; a failing member becomes a degraded entry, results keep input order."""
        logger.info(f"[BATCH] Running {len(requests)} compliance check(s)")
        return list(await asyncio.gather(*(self._check_or_degrade(r) for r in requests)))

    async def _check_or_degrade(self, request: RequestLike) -> ComplianceCheckResult:
        try:
            return await self.check_compliance(request)
        except Exception as e:
            coerced = _echo_request(request)
            logger.warning(f"[BATCH] Degraded result for {coerced.platform} in {coerced.locale}: {type(e).__name__}")
            return ComplianceCheckResult(
                success=False,
                ad_copy=coerced.ad_copy,
                locale=coerced.locale,
                platform=coerced.platform,
                industry=coerced.industry,
                pattern_matched_issues=[],
                ai_analysis=ComplianceReport(
                    issues=[],
                    overall_risk="high",
                    auto_fixed_copy=coerced.ad_copy,
                    explanation=f"Error processing compliance check: {e}",
                ),
                timestamp=_utc_timestamp(),
            )

    async def compare_compliance(self, request: Union[CompareRequest, Dict[str, Any]]) -> CompareResult:
        """
        Check every locale x platform combination and rank them.

        Ranking uses pattern-matched issues only.
        """
        if not isinstance(request, CompareRequest):
            request = CompareRequest.model_validate(request)

        requests = [
            ComplianceCheckRequest(
                ad_copy=request.ad_copy,
                locale=locale,
                platform=platform,
                industry=request.industry,
            )
            for locale in request.locales
            for platform in request.platforms
        ]
        logger.info(f"[COMPARE] {len(request.locales)} locale(s) x {len(request.platforms)} platform(s)")
        results = await self.batch_check_compliance(requests)

        locale_scores: Dict[str, int] = {}
        platform_scores: Dict[str, int] = {}
        total = 0
        for result in results:
            score = calculate_compliance_score(result.pattern_matched_issues)
            locale_scores[result.locale] = locale_scores.get(result.locale, 0) + score
            platform_scores[result.platform] = platform_scores.get(result.platform, 0) + score
            total += score

        # max() keeps the first of equal scores, i.e. request order breaks ties
        safest_locale = max(locale_scores, key=locale_scores.get) if locale_scores else "unknown"
        safest_platform = max(platform_scores, key=platform_scores.get) if platform_scores else "unknown"
        average = total / len(results) if results else None

        return CompareResult(
            results=results,
            summary=CompareSummary(
                safest_locale=safest_locale,
                safest_platform=safest_platform,
                overall_risk=risk_from_average_score(average),
            ),
        )


def get_compliance_rules(
    locale: Optional[str] = None,
    platform: Optional[str] = None,
    industry: Optional[str] = None,
) -> Dict[str, Any]:
    """Read-only view of the rule corpus, optionally narrowed to one key per namespace."""
    if platform:
        platform_view: Any = serialize_rules(PLATFORM_RULES.get(platform, ()))
    else:
        platform_view = {key: serialize_rules(rules) for key, rules in PLATFORM_RULES.items()}

    if locale:
        rule_set = COUNTRY_RULES.get(locale)
        country_view: Any = rule_set.to_dict() if rule_set else None
    else:
        country_view = {key: rule_set.to_dict() for key, rule_set in COUNTRY_RULES.items()}

    if industry:
        industry_view: Any = serialize_rules(INDUSTRY_RULES.get(industry, ()))
    else:
        industry_view = {key: serialize_rules(rules) for key, rules in INDUSTRY_RULES.items()}

    return {"platform": platform_view, "country": country_view, "industry": industry_view}
