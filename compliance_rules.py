"""
Advertising compliance rule corpus.

Three independent namespaces are consulted for every check: platform rules,
country rules (with the legal authority behind them) and industry rules.
Unknown keys yield no rules rather than an error, so custom or unlisted
industries still go through the platform/country checks and the AI review.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Pattern, Tuple, Union

SEVERITIES = ("high", "medium", "low")


@dataclass(frozen=True)
class PatternRule:
    """Detected by a regular expression; the first match is reported."""

    id: str
    rule: str
    severity: str
    pattern: Pattern[str]
    fix: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        flags = "i" if self.pattern.flags & re.IGNORECASE else ""
        return {
            "id": self.id,
            "rule": self.rule,
            "severity": self.severity,
            "pattern": self.pattern.pattern,
            "flags": flags,
            "fix": self.fix,
        }


@dataclass(frozen=True)
class KeywordRule:
    """Detected by case-insensitive substring search; fires at most once per check."""

    id: str
    rule: str
    severity: str
    keywords: Tuple[str, ...]
    fix: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "rule": self.rule,
            "severity": self.severity,
            "keywords": list(self.keywords),
            "fix": self.fix,
        }


@dataclass(frozen=True)
class InformationalRule:
    """No deterministic detection; judged by the AI review only."""

    id: str
    rule: str
    severity: str
    fix: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "rule": self.rule, "severity": self.severity, "fix": self.fix}


Rule = Union[PatternRule, KeywordRule, InformationalRule]


@dataclass(frozen=True)
class CountryRuleSet:
    authority: str
    rules: Tuple[Rule, ...]
    additional_guidelines: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "authority": self.authority,
            "rules": [rule.to_dict() for rule in self.rules],
            "additionalGuidelines": list(self.additional_guidelines),
        }


def _re(pattern: str, ignore_case: bool = True) -> Pattern[str]:
    return re.compile(pattern, re.IGNORECASE if ignore_case else 0)


# ───────────────────────────────────────────────────────────────────────────────
# Platform content policies
# ───────────────────────────────────────────────────────────────────────────────
PLATFORM_RULES: Dict[str, Tuple[Rule, ...]] = {
    "google": (
        PatternRule(
            id="google-1",
            rule='No "Click here" phrases - use descriptive CTAs',
            pattern=_re(r"click\s+here"),
            severity="high",
            fix='Use descriptive calls-to-action like "Learn More" or "Get Started"',
        ),
        PatternRule(
            id="google-2",
            rule="No excessive capitalization",
            pattern=_re(r"[A-Z]{4,}", ignore_case=False),
            severity="medium",
            fix="Use proper capitalization - only capitalize proper nouns and first letters",
        ),
        PatternRule(
            id="google-3",
            rule="No excessive punctuation",
            pattern=_re(r"[!?]{2,}", ignore_case=False),
            severity="medium",
            fix="Use single punctuation marks for professional appearance",
        ),
        PatternRule(
            id="google-4",
            rule="No misleading spacing or symbols",
            pattern=_re(r"[^\w\s]{3,}", ignore_case=False),
            severity="high",
            fix="Remove excessive symbols or special characters",
        ),
    ),
    "meta": (
        KeywordRule(
            id="meta-1",
            rule="No sensational claims without evidence",
            keywords=("miracle", "guaranteed results", "instant", "magic", "secret trick", "shocking"),
            severity="high",
            fix="Replace with factual, substantiated claims",
        ),
        KeywordRule(
            id="meta-2",
            rule="No before/after claims without proper disclaimers",
            keywords=("before and after", "results guaranteed", "lose weight fast"),
            severity="high",
            fix="Add disclaimer: 'Results may vary' or remove unverified claims",
        ),
        KeywordRule(
            id="meta-3",
            rule="No personal attributes targeting",
            keywords=("single", "divorced", "poor credit", "medical condition"),
            severity="high",
            fix="Remove references to personal attributes or characteristics",
        ),
        InformationalRule(
            id="meta-4",
            rule="Text in images must not exceed 20% of image area",
            severity="medium",
            fix="Reduce text overlay on images or use text in post copy instead",
        ),
    ),
    "linkedin": (
        InformationalRule(
            id="linkedin-1",
            rule="Professional tone required",
            severity="medium",
            fix="Maintain business-appropriate language and tone",
        ),
        KeywordRule(
            id="linkedin-2",
            rule="No overly casual or unprofessional language",
            keywords=("gonna", "wanna", "ain't", "ya'll", "lol", "omg"),
            severity="medium",
            fix="Use professional language appropriate for business context",
        ),
        KeywordRule(
            id="linkedin-3",
            rule="No misleading job opportunities or fake news",
            keywords=("make money fast", "work from home easy money"),
            severity="high",
            fix="Provide transparent, accurate information about opportunities",
        ),
    ),
    "tiktok": (
        InformationalRule(
            id="tiktok-1",
            rule="Age-appropriate content required",
            severity="high",
            fix="Ensure content is appropriate for users 13+ years old",
        ),
        KeywordRule(
            id="tiktok-2",
            rule="No promotion of alcohol, tobacco, or drugs",
            keywords=("alcohol", "beer", "wine", "cigarette", "vape", "cbd"),
            severity="high",
            fix="Remove references to restricted substances",
        ),
        InformationalRule(
            id="tiktok-3",
            rule="No unrealistic body standards or dangerous challenges",
            severity="high",
            fix="Promote positive, realistic messaging",
        ),
    ),
}

# ───────────────────────────────────────────────────────────────────────────────
# Country regulations, keyed by locale
# ───────────────────────────────────────────────────────────────────────────────
COUNTRY_RULES: Dict[str, CountryRuleSet] = {
    "en-US": CountryRuleSet(
        authority="FTC (Federal Trade Commission)",
        rules=(
            PatternRule(
                id="us-ftc-1",
                rule="No unsubstantiated 'guaranteed results' claims",
                pattern=_re(r"guaranteed?\s+(results?|success|income|money|cure)"),
                severity="high",
                fix='Replace with "potential results" or "may help achieve"',
            ),
            PatternRule(
                id="us-ftc-2",
                rule="No false urgency or scarcity claims",
                pattern=_re(r"last\s+chance|ending\s+soon|limited\s+time|only\s+\d+\s+left"),
                severity="medium",
                fix="Remove or add specific verifiable end date",
            ),
            PatternRule(
                id="us-ftc-3",
                rule="Endorsements must disclose material connections",
                pattern=_re(r"#ad|#sponsored|paid\s+partnership"),
                severity="high",
                fix="Clearly disclose any sponsored or paid relationships",
            ),
            PatternRule(
                id="us-ftc-4",
                rule="Made in USA claims require substantiation",
                pattern=_re(r"made\s+in\s+(usa|america)"),
                severity="high",
                fix="Ensure all or virtually all product components are US-sourced",
            ),
        ),
        additional_guidelines=(
            "Testimonials must reflect typical results",
            "Free trials must clearly state terms and conditions",
            "Negative option marketing requires clear disclosure",
        ),
    ),
    "de-DE": CountryRuleSet(
        authority="UWG (German Competition Law)",
        rules=(
            PatternRule(
                id="de-uwg-1",
                rule='"Free" requires clear disclosure of conditions',
                pattern=_re(r"\b(free|kostenlos|gratis)\b"),
                severity="high",
                fix='Add clear disclaimer: "Conditions apply" or "With purchase"',
            ),
            PatternRule(
                id="de-uwg-2",
                rule="No superlative claims without independent verification",
                pattern=_re(r"\b(best|greatest|number\s+one|#1|führend|beste|größte)\b"),
                severity="high",
                fix="Add specific source citation or remove claim",
            ),
            PatternRule(
                id="de-uwg-3",
                rule="Environmental claims require certification",
                pattern=_re(r"\b(eco|green|sustainable|öko|nachhaltig|umweltfreundlich)\b"),
                severity="high",
                fix="Add certification reference or remove environmental claim",
            ),
            PatternRule(
                id="de-uwg-4",
                rule="Price comparisons must be verifiable",
                pattern=_re(r"\d+%\s+(off|discount|rabatt)"),
                severity="medium",
                fix="Ensure price comparison baseline is clear and verifiable",
            ),
        ),
        additional_guidelines=(
            "Impressum (legal disclosure) required for commercial content",
            "GDPR compliance mandatory for data collection",
            "Clear right of withdrawal for online purchases",
        ),
    ),
    "fr-FR": CountryRuleSet(
        authority="ARPP (Advertising Regulation)",
        rules=(
            PatternRule(
                id="fr-arpp-1",
                rule="No misleading environmental claims (greenwashing)",
                pattern=_re(r"\b(eco|green|sustainable|vert|durable|écologique)\b"),
                severity="high",
                fix="Provide specific certifications or remove claim",
            ),
            InformationalRule(
                id="fr-arpp-2",
                rule="French language mandatory for advertising in France",
                severity="high",
                fix="Ensure all advertising copy is in French or includes French translation",
            ),
            InformationalRule(
                id="fr-arpp-3",
                rule="No discriminatory content or stereotyping",
                severity="high",
                fix="Review content for gender, racial, or other stereotypes",
            ),
            PatternRule(
                id="fr-arpp-4",
                rule="Health claims require scientific evidence",
                pattern=_re(r"\b(cure|treat|heal|soigne|guérit|traite)\b"),
                severity="high",
                fix="Provide clinical evidence or use softer language like 'may support'",
            ),
        ),
        additional_guidelines=(
            "Loi Toubon requires French language primacy",
            "Strong consumer protection laws apply",
            "Environmental claims heavily regulated",
        ),
    ),
    "ja-JP": CountryRuleSet(
        authority="Japanese Consumer Law & JARO",
        rules=(
            PatternRule(
                id="jp-law-1",
                rule="No exaggeration or hyperbole",
                pattern=_re(r"\b(miracle|amazing|incredible|unbelievable|驚くべき|信じられない|奇跡)\b"),
                severity="high",
                fix="Use factual, measured, and modest language",
            ),
            PatternRule(
                id="jp-law-2",
                rule="Comparative advertising requires strict substantiation",
                pattern=_re(r"\b(better than|superior to|より良い|優れた)\b"),
                severity="high",
                fix="Provide objective comparison data or remove claim",
            ),
            PatternRule(
                id="jp-law-3",
                rule="No misleading price displays",
                pattern=_re(r"\d+円\s+(off|discount)"),
                severity="medium",
                fix="Clearly show original and discounted prices",
            ),
            PatternRule(
                id="jp-law-4",
                rule="Special designations require certification",
                pattern=_re(r"\b(organic|natural|天然|有機)\b"),
                severity="high",
                fix="Ensure proper JAS or equivalent certification",
            ),
        ),
        additional_guidelines=(
            "Politeness and respect in all messaging",
            "Avoid direct confrontational comparisons",
            "Cultural sensitivity paramount",
        ),
    ),
    "ar-SA": CountryRuleSet(
        authority="Saudi Advertising Regulations",
        rules=(
            InformationalRule(
                id="sa-law-1",
                rule="Conservative imagery and language required",
                severity="high",
                fix="Ensure culturally appropriate, modest content",
            ),
            InformationalRule(
                id="sa-law-2",
                rule="No content conflicting with Islamic values",
                severity="high",
                fix="Review content for religious and cultural sensitivity",
            ),
            InformationalRule(
                id="sa-law-3",
                rule="Gender-appropriate representation required",
                severity="high",
                fix="Follow local norms for gender representation",
            ),
            PatternRule(
                id="sa-law-4",
                rule="No interest-based financial products (Riba)",
                pattern=_re(r"\b(interest rate|loan interest|apr)\b"),
                severity="high",
                fix="Use Sharia-compliant financial terminology",
            ),
        ),
        additional_guidelines=(
            "No alcohol or pork products",
            "Modest dress in imagery",
            "Family values emphasized",
            "Religious holidays respected",
        ),
    ),
    "hi-IN": CountryRuleSet(
        authority="ASCI (Advertising Standards Council of India)",
        rules=(
            PatternRule(
                id="in-asci-1",
                rule="No misleading health or medicinal claims",
                pattern=_re(r"\b(cure|treat|heal|remedy|इलाज|उपचार)\b"),
                severity="high",
                fix='Replace with "support" or "may help" language',
            ),
            InformationalRule(
                id="in-asci-2",
                rule="Religious sensitivity required",
                severity="high",
                fix="Avoid religious symbols, figures, or references in advertising",
            ),
            InformationalRule(
                id="in-asci-3",
                rule="No exploitation of superstition",
                severity="high",
                fix="Remove superstitious or unscientific claims",
            ),
            PatternRule(
                id="in-asci-4",
                rule="No misleading price comparisons",
                pattern=_re(r"\d+%\s+(off|discount|छूट)"),
                severity="medium",
                fix="Ensure MRP and discount calculations are accurate",
            ),
            KeywordRule(
                id="in-asci-5",
                rule="No promotion of alcohol or tobacco",
                keywords=("alcohol", "beer", "wine", "cigarette", "tobacco"),
                severity="high",
                fix="Remove references to prohibited products",
            ),
        ),
        additional_guidelines=(
            "Cultural diversity sensitivity",
            "No exploitation of children",
            "Gender equality in representation",
            "Consumer education valued",
        ),
    ),
}

# ───────────────────────────────────────────────────────────────────────────────
# Industry regulations (apply regardless of geography)
# ───────────────────────────────────────────────────────────────────────────────
INDUSTRY_RULES: Dict[str, Tuple[Rule, ...]] = {
    "finance": (
        PatternRule(
            id="finance-1",
            rule="No guaranteed returns or profit promises",
            pattern=_re(r"guaranteed?\s+(returns?|profit|gains?|roi)"),
            severity="high",
            fix='Use "potential returns" or "historical performance" with disclaimers',
        ),
        InformationalRule(
            id="finance-2",
            rule="Risk disclosure required",
            severity="high",
            fix='Add: "Investments carry risk. Past performance does not guarantee future results."',
        ),
        PatternRule(
            id="finance-3",
            rule="No misleading investment advice",
            pattern=_re(r"\b(insider tip|hot stock|can't lose)\b"),
            severity="high",
            fix="Remove speculative or misleading investment language",
        ),
        InformationalRule(
            id="finance-4",
            rule="License/registration disclosure required",
            severity="high",
            fix="Include regulatory registration information",
        ),
    ),
    "crypto": (
        PatternRule(
            id="crypto-1",
            rule='No "risk-free" or "guaranteed" claims',
            pattern=_re(r"risk[- ]?free|no\s+risk|guaranteed?\s+profit"),
            severity="high",
            fix="Add clear risk warnings about cryptocurrency volatility",
        ),
        InformationalRule(
            id="crypto-2",
            rule="Volatility warning required",
            severity="high",
            fix='Add: "Cryptocurrency values are highly volatile and may result in significant losses."',
        ),
        PatternRule(
            id="crypto-3",
            rule="No encouragement of excessive risk-taking",
            pattern=_re(r"\b(moon|lambo|to the moon|100x|1000x)\b"),
            severity="high",
            fix="Remove speculative hype language",
        ),
        InformationalRule(
            id="crypto-4",
            rule="Regulatory status disclosure",
            severity="medium",
            fix="Disclose regulatory status and jurisdiction",
        ),
    ),
    "health": (
        PatternRule(
            id="health-1",
            rule="No unverified medical claims",
            pattern=_re(r"cure|diagnose|treat|prevent|therapy"),
            severity="high",
            fix='Use "support" or "may help" with appropriate disclaimers',
        ),
        InformationalRule(
            id="health-2",
            rule="Clinical evidence required for health claims",
            severity="high",
            fix="Provide peer-reviewed study citations or remove claims",
        ),
        InformationalRule(
            id="health-3",
            rule="FDA/medical authority approval required for drug claims",
            severity="high",
            fix="Ensure FDA approval or remove medical device/drug claims",
        ),
        PatternRule(
            id="health-4",
            rule="No fear-based health messaging",
            pattern=_re(r"\b(deadly|fatal|life-threatening|dangerous)\b"),
            severity="high",
            fix="Use factual, non-alarmist language",
        ),
        InformationalRule(
            id="health-5",
            rule="Medical disclaimer required",
            severity="high",
            fix='Add: "Not intended to diagnose, treat, cure, or prevent any disease."',
        ),
    ),
    "weight-loss": (
        PatternRule(
            id="weight-1",
            rule="No rapid weight loss promises",
            pattern=_re(r"lose\s+\d+\s+(lbs?|kg|pounds?|kilos?)\s+in\s+\d+\s+(days?|weeks?)"),
            severity="high",
            fix="Remove specific weight loss timeframes or use realistic claims",
        ),
        InformationalRule(
            id="weight-2",
            rule="Typical results disclaimer required",
            severity="high",
            fix='Add: "Results vary. Typical results may be different from advertised results."',
        ),
        InformationalRule(
            id="weight-3",
            rule="No before/after photos without disclaimers",
            severity="high",
            fix="Add disclaimer about atypical results and individual variation",
        ),
        InformationalRule(
            id="weight-4",
            rule="Exercise and diet acknowledgment required",
            severity="medium",
            fix='Include: "Combined with diet and exercise" where applicable',
        ),
        InformationalRule(
            id="weight-5",
            rule="No body shaming or negative messaging",
            severity="high",
            fix="Focus on positive health outcomes, not body criticism",
        ),
    ),
}

STRICT_INDUSTRIES = {"finance", "crypto", "health", "weight-loss"}
# Markets with stricter advertising regulation
STRICT_LOCALES = {"de-DE", "fr-FR", "ja-JP"}


def get_platform_rules(platform: str) -> Tuple[Rule, ...]:
    return PLATFORM_RULES.get(platform, ())


def get_country_rules(locale: str) -> Optional[CountryRuleSet]:
    return COUNTRY_RULES.get(locale)


def get_industry_rules(industry: str) -> Tuple[Rule, ...]:
    return INDUSTRY_RULES.get(industry, ())


def requires_strict_compliance(industry: str, locale: str) -> bool:
    return industry in STRICT_INDUSTRIES or locale in STRICT_LOCALES


def serialize_rules(rules) -> List[Dict[str, Any]]:
    return [rule.to_dict() for rule in rules]
