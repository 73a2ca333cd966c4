from typing import List

from compliance_rules import get_country_rules
from compliance_states import PatternMatchIssue

DEFAULT_AUTHORITY = "General Advertising Guidelines"

compliance_system_instruction = """
    You are a legal compliance expert specializing in advertising regulations across different markets and platforms.
    You review advertisement copy and return a structured compliance report.
    """

INDUSTRY_CONSIDERATIONS = {
    "finance": """**Finance Industry**:
- No guaranteed returns or profit promises
- Risk disclosures required
- Licensing/registration information
- Past performance disclaimers
- Clear fee disclosures""",
    "crypto": """**Cryptocurrency Industry**:
- Extreme volatility warnings required
- No "risk-free" claims
- Regulatory status disclosure
- No encouragement of excessive risk
- Clear loss potential warnings""",
    "health": """**Health/Medical Industry**:
- No cure or treatment claims without FDA approval
- Clinical evidence required
- Medical disclaimers mandatory
- No fear-based messaging
- Professional consultation recommendations""",
    "weight-loss": """**Weight Loss Industry**:
- No rapid weight loss timeframes
- Typical results disclaimers
- Exercise and diet acknowledgment
- No body shaming
- Realistic expectations""",
    "general": """**General Advertising**:
- Truth in advertising
- Clear and conspicuous disclosures
- No deceptive practices
- Substantiation for claims""",
}

PLATFORM_CONSIDERATIONS = {
    "google": """**Google Ads**:
- No sensationalized language
- Clear destination URLs
- No circumventing review systems
- Professional formatting""",
    "meta": """**Facebook/Instagram**:
- No personal attributes targeting language
- Text in images limits (20% rule for some placements)
- Accurate business representation
- No sensational health claims""",
    "linkedin": """**LinkedIn Ads**:
- Professional B2B tone required
- No misleading job opportunities
- Accurate company representation
- Value-focused messaging""",
    "tiktok": """**TikTok Ads**:
- Age-appropriate content (13+)
- No promotion of restricted substances
- Authentic representation
- Community guidelines adherence""",
}

DEFAULT_PLATFORM_CONSIDERATIONS = "Apply general platform advertising standards"

STRICT_DIRECTIVE = (
    "**STRICT MODE ACTIVE**: Apply zero-tolerance approach. Flag even borderline issues. "
    "Prioritize legal safety over marketing aggressiveness."
)
STANDARD_DIRECTIVE = (
    "**STANDARD MODE**: Apply reasonable business judgment. Balance compliance with marketing "
    "effectiveness. Focus on clear violations."
)


def get_industry_considerations(industry: str) -> str:
    return INDUSTRY_CONSIDERATIONS.get(industry, INDUSTRY_CONSIDERATIONS["general"])


def get_platform_considerations(platform: str) -> str:
    return PLATFORM_CONSIDERATIONS.get(platform, DEFAULT_PLATFORM_CONSIDERATIONS)


def format_pattern_issues(issues: List[PatternMatchIssue]) -> str:
    if not issues:
        return "None detected by pattern matching."

    blocks = []
    for idx, issue in enumerate(issues, 1):
        lines = [
            f"{idx}. **{issue.severity.upper()}**: {issue.rule}",
            f'   - Match: "{issue.match}"',
        ]
        if issue.fix:
            lines.append(f"   - Suggested Fix: {issue.fix}")
        if issue.authority:
            lines.append(f"   - Authority: {issue.authority}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def build_compliance_prompt(
    ad_copy: str,
    locale: str,
    platform: str,
    industry: str,
    pattern_matched_issues: List[PatternMatchIssue],
    strict_mode: bool = False,
) -> str:
    country_rules = get_country_rules(locale)
    authority = country_rules.authority if country_rules else DEFAULT_AUTHORITY
    mode_label = "STRICT (Zero-tolerance)" if strict_mode else "STANDARD (Reasonable risk)"

    guidelines_block = ""
    if country_rules and country_rules.additional_guidelines:
        bullets = "\n".join(f"- {g}" for g in country_rules.additional_guidelines)
        guidelines_block = f"## Additional Guidelines for {locale}\n{bullets}\n"

    return f"""Perform a comprehensive compliance review of this advertisement copy for potential legal and regulatory issues.

## Ad Copy to Review
"{ad_copy}"

## Context
- **Target Market**: {locale}
- **Platform**: {platform}
- **Industry**: {industry}
- **Regulatory Authority**: {authority}
- **Compliance Mode**: {mode_label}

## Issues Already Detected (Pattern Matching)
{format_pattern_issues(pattern_matched_issues)}

{guidelines_block}
## Your Tasks

### 1. Comprehensive Issue Identification
Identify ALL compliance issues, including:
- Confirm and expand on pattern-matched issues
- Find subtle issues missed by pattern matching
- Identify context-dependent violations
- Check for misleading implications
- Review tone and cultural appropriateness
- Assess claims substantiation
- Verify disclosure requirements

### 2. Risk Assessment
Provide an overall risk level:
- **high**: Likely to be rejected or cause legal issues
- **medium**: May face scrutiny or require modification
- **low**: Minor concerns or best practice improvements

### 3. Create Compliant Version
Rewrite the ad copy (autoFixedCopy) to:
- Fix ALL identified issues
- Maintain persuasive power and marketing effectiveness
- Preserve the core message and value proposition
- Keep brand voice while ensuring compliance
- Respect cultural norms for {locale}
- Stay within reasonable length (don't expand unnecessarily)

### 4. Explain Changes
Provide a clear explanation of:
- What issues were found and why they matter
- What changes were made to address them
- How the revised copy maintains effectiveness
- Any remaining considerations or disclaimers needed

## Industry-Specific Considerations

{get_industry_considerations(industry)}

## Platform-Specific Considerations

{get_platform_considerations(platform)}

## Strictness Level
{STRICT_DIRECTIVE if strict_mode else STANDARD_DIRECTIVE}

Be thorough, practical, and actionable in your analysis."""
