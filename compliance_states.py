# --- IMPORTS ---
from typing import TypedDict, Optional, List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

SeverityLevel = Literal["high", "medium", "low"]
RiskLevel = Literal["high", "medium", "low"]


class CamelModel(BaseModel):
    """Python attributes in snake_case, JSON in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# --- 1. DETERMINISTIC MATCHES ---

class PatternMatchIssue(CamelModel):
    id: str
    rule: str
    severity: SeverityLevel
    match: Optional[str] = None
    fix: Optional[str] = None
    authority: Optional[str] = None


class RulesCoverage(CamelModel):
    platform: int = 0
    country: int = 0
    industry: int = 0


class ValidationOutcome(CamelModel):
    issues: List[PatternMatchIssue]
    overall_severity: SeverityLevel
    rules_coverage: RulesCoverage
    strict_review: bool = False


class PublishDecision(CamelModel):
    safe: bool
    reason: Optional[str] = None
    recommendation: str


class FixSuggestion(CamelModel):
    issue: str
    suggestion: str
    priority: SeverityLevel


# --- 2. AI REPORT (model response schema) ---

class IssueLocation(CamelModel):
    start: int
    end: int


class ComplianceIssue(CamelModel):
    issue: str
    severity: SeverityLevel
    rule: str
    suggested_fix: str
    match: Optional[str] = None
    authority: Optional[str] = None
    location: Optional[IssueLocation] = None


class ComplianceReport(CamelModel):
    issues: List[ComplianceIssue]
    overall_risk: RiskLevel
    auto_fixed_copy: str
    explanation: str
    risk_score: Optional[float] = Field(default=None, ge=0, le=100)
    recommendations: Optional[List[str]] = None


class QuickCheckResult(CamelModel):
    safe: bool
    concerns: List[str]
    confidence: int


# --- 3. REQUESTS & RESULTS ---

class ComplianceCheckRequest(CamelModel):
    # Field constraints are enforced by the orchestrator so that every
    # violation can be reported together.
    ad_copy: str = ""
    locale: str = ""
    platform: str = ""
    industry: str = ""
    strict_mode: bool = False

    @field_validator("ad_copy", "locale", "platform", "industry", mode="before")
    @classmethod
    def _missing_as_empty(cls, value):
        # null is reported as "required" by the orchestrator, not as a type error
        return "" if value is None else value


class ComplianceMetadata(CamelModel):
    total_issues: int
    critical_issues: int
    processing_time_ms: int
    compliance_score: Optional[int] = None
    publish_status: Optional[PublishDecision] = None


class ComplianceCheckResult(CamelModel):
    success: bool = True
    ad_copy: str
    locale: str
    platform: str
    industry: str
    pattern_matched_issues: List[PatternMatchIssue]
    ai_analysis: ComplianceReport
    timestamp: str
    metadata: Optional[ComplianceMetadata] = None


class CompareRequest(CamelModel):
    ad_copy: str
    locales: List[str]
    platforms: List[str]
    industry: str


class CompareSummary(CamelModel):
    safest_locale: str
    safest_platform: str
    overall_risk: RiskLevel


class CompareResult(CamelModel):
    results: List[ComplianceCheckResult]
    summary: CompareSummary


# --- 4. PIPELINE STATE ---

class ComplianceState(TypedDict, total=False):
    request: ComplianceCheckRequest
    started_at: float
    validation: ValidationOutcome
    pattern_matched_issues: List[PatternMatchIssue]
    ai_analysis: ComplianceReport
    result: ComplianceCheckResult
