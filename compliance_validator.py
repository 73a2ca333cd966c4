"""
Pattern-based compliance validation.

Deterministic first pass over the rule corpus, plus the severity and
publish-safety policies applied to its findings. Nothing here raises: the
rule corpus is trusted static data and missing rule lists mean "no issues".
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from compliance_rules import (
    InformationalRule,
    KeywordRule,
    PatternRule,
    Rule,
    get_country_rules,
    get_industry_rules,
    get_platform_rules,
    requires_strict_compliance,
)
from compliance_states import (
    FixSuggestion,
    PatternMatchIssue,
    PublishDecision,
    RulesCoverage,
    ValidationOutcome,
)

logger = logging.getLogger(__name__)

SEVERITY_PENALTIES = {"high": 20, "medium": 10, "low": 5}
DEFAULT_FIX_SUGGESTION = "Review and adjust content to meet this guideline"


def check_rules(
    ad_copy: str,
    rules: Optional[Iterable[Rule]],
    source: str,
    metadata: Optional[Dict[str, str]] = None,
) -> List[PatternMatchIssue]:
    """Evaluate ad copy against one rule list; each rule contributes at most one issue."""
    if not rules:
        return []

    authority = (metadata or {}).get("authority")
    lowered = ad_copy.lower()
    issues: List[PatternMatchIssue] = []

    for rule in rules:
        if isinstance(rule, PatternRule):
            found = rule.pattern.search(ad_copy)
            if found:
                issues.append(_issue_from_rule(rule, found.group(0), authority))
        elif isinstance(rule, KeywordRule):
            for keyword in rule.keywords:
                if keyword.lower() in lowered:
                    issues.append(_issue_from_rule(rule, keyword, authority))
                    break
        elif isinstance(rule, InformationalRule):
            # left to the AI review
            continue

    if issues:
        logger.debug(f"[PATTERNS] {source}: {len(issues)} issue(s) matched")
    return issues


def _issue_from_rule(rule: Rule, match: str, authority: Optional[str]) -> PatternMatchIssue:
    return PatternMatchIssue(
        id=rule.id,
        rule=rule.rule,
        severity=rule.severity,
        match=match,
        fix=rule.fix,
        authority=authority,
    )


def validate_compliance(
    ad_copy: str,
    locale: str,
    platform: str,
    industry: str,
    strict_mode: bool = False,
) -> ValidationOutcome:
    platform_rules = get_platform_rules(platform)
    country_rule_set = get_country_rules(locale)
    industry_rules = get_industry_rules(industry)

    issues: List[PatternMatchIssue] = []
    issues.extend(check_rules(ad_copy, platform_rules, "platform"))
    if country_rule_set is not None:
        issues.extend(
            check_rules(
                ad_copy,
                country_rule_set.rules,
                "country",
                {"authority": country_rule_set.authority},
            )
        )
    issues.extend(check_rules(ad_copy, industry_rules, "industry"))

    return ValidationOutcome(
        issues=issues,
        overall_severity=calculate_overall_severity(issues),
        rules_coverage=RulesCoverage(
            platform=len(platform_rules),
            country=len(country_rule_set.rules) if country_rule_set else 0,
            industry=len(industry_rules),
        ),
        strict_review=strict_mode or requires_strict_compliance(industry, locale),
    )


def calculate_overall_severity(issues: Sequence) -> str:
    """
    Reduce issues to a single risk tier.

    Not a plain maximum: two medium findings escalate to high.
    """
    if not issues:
        return "low"
    if any(issue.severity == "high" for issue in issues):
        return "high"
    medium_count = sum(1 for issue in issues if issue.severity == "medium")
    if medium_count >= 2:
        return "high"
    if medium_count >= 1:
        return "medium"
    return "low"


def calculate_compliance_score(issues: Sequence) -> int:
    score = 100
    for issue in issues:
        score -= SEVERITY_PENALTIES.get(issue.severity, 0)
    return max(0, score)


def group_issues_by_severity(issues: Sequence) -> Dict[str, list]:
    grouped: Dict[str, list] = {"high": [], "medium": [], "low": []}
    for issue in issues:
        if issue.severity in grouped:
            grouped[issue.severity].append(issue)
    return grouped


def generate_compliance_summary(
    issues: Sequence[PatternMatchIssue],
    locale: str,
    platform: str,
    industry: str,
) -> str:
    if not issues:
        return f"✅ No compliance issues detected for {platform} ads in {locale} ({industry} industry)"

    grouped = group_issues_by_severity(issues)
    parts = []
    if grouped["high"]:
        parts.append(f"⚠️ {len(grouped['high'])} high-severity issue(s)")
    if grouped["medium"]:
        parts.append(f"⚡ {len(grouped['medium'])} medium-severity issue(s)")
    if grouped["low"]:
        parts.append(f"ℹ️ {len(grouped['low'])} low-severity issue(s)")
    return f"Compliance check for {platform} in {locale} ({industry}): {', '.join(parts)}"


def is_safe_to_publish(issues: Sequence, allow_medium_risk: bool = False) -> PublishDecision:
    grouped = group_issues_by_severity(issues)
    high = len(grouped["high"])
    medium = len(grouped["medium"])

    if high > 0:
        return PublishDecision(
            safe=False,
            reason=f"{high} high-severity compliance issue(s) detected",
            recommendation="Review and fix all high-severity issues before publishing",
        )

    if medium > 2 and not allow_medium_risk:
        return PublishDecision(
            safe=False,
            reason=f"{medium} medium-severity issues detected",
            recommendation="Address medium-severity issues to reduce risk",
        )

    if medium > 0:
        return PublishDecision(
            safe=allow_medium_risk,
            reason="Some medium-severity issues detected",
            recommendation="Review medium-severity issues and consider fixes",
        )

    if grouped["low"]:
        recommendation = "Consider addressing low-severity issues for optimization"
    else:
        recommendation = "Ad copy meets compliance standards"
    return PublishDecision(safe=True, recommendation=recommendation)


def generate_fix_suggestions(issues: Sequence[PatternMatchIssue]) -> List[FixSuggestion]:
    return [
        FixSuggestion(
            issue=issue.rule,
            suggestion=issue.fix or DEFAULT_FIX_SUGGESTION,
            priority=issue.severity,
        )
        for issue in issues
    ]
