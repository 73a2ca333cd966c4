"""
AI-powered compliance analysis.

Deep semantic review of ad copy on top of the pattern-matching pass, plus a
cheap heuristic pre-check that does not call the model.
"""
import re
import logging
from typing import List, Optional

from compliance_states import ComplianceReport, PatternMatchIssue, QuickCheckResult
from error_handler import handle_generation_error, retry_with_backoff
from gemini_client import StructuredGenerator
from prompt import build_compliance_prompt, compliance_system_instruction
from settings import settings

logger = logging.getLogger(__name__)

# Coarse red flags for the quick check; independent of the rule corpus.
RED_FLAG_PATTERNS = [
    re.compile(r"guaranteed?|100%|risk[- ]?free", re.IGNORECASE),
    re.compile(r"cure|treat|diagnose", re.IGNORECASE),
    re.compile(r"click\s+here", re.IGNORECASE),
    re.compile(r"miracle|magic|instant", re.IGNORECASE),
]


async def analyze_compliance_with_ai(
    llm: StructuredGenerator,
    ad_copy: str,
    locale: str,
    platform: str,
    industry: str,
    pattern_matched_issues: List[PatternMatchIssue],
    strict_mode: bool = False,
    max_retries: Optional[int] = None,
    initial_delay: Optional[float] = None,
    sleep=None,
) -> ComplianceReport:
    """
    Run the model review and return its structured report.

    Transient failures are retried with exponential backoff; anything left
    after the retry budget is raised as GenerationFailedError naming the
    platform and locale.
    """
    prompt = build_compliance_prompt(
        ad_copy=ad_copy,
        locale=locale,
        platform=platform,
        industry=industry,
        pattern_matched_issues=pattern_matched_issues,
        strict_mode=strict_mode,
    )

    async def call_model() -> ComplianceReport:
        return await llm.generate_structured(
            prompt,
            ComplianceReport,
            system_instruction=compliance_system_instruction,
        )

    retry_kwargs = {}
    if sleep is not None:
        retry_kwargs["sleep"] = sleep

    stage = f"AI compliance analysis for {platform} in {locale}"
    logger.info(f"[AI] Starting {stage} (strict={strict_mode}, pattern issues={len(pattern_matched_issues)})")
    try:
        report = await retry_with_backoff(
            call_model,
            settings.AI_MAX_RETRIES if max_retries is None else max_retries,
            settings.AI_INITIAL_RETRY_DELAY if initial_delay is None else initial_delay,
            **retry_kwargs,
        )
    except Exception as e:
        raise handle_generation_error(e, stage) from e

    logger.info(f"[AI] {stage} completed - risk: {report.overall_risk}, issues: {len(report.issues)}")
    return report


def quick_compliance_check(ad_copy: str, locale: str = "", platform: str = "") -> QuickCheckResult:
    concerns = [
        f"Potential issue detected: {pattern.pattern}"
        for pattern in RED_FLAG_PATTERNS
        if pattern.search(ad_copy)
    ]
    return QuickCheckResult(
        safe=not concerns,
        concerns=concerns,
        confidence=max(0, 100 - len(concerns) * 20),
    )
