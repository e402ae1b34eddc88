"""Instruction builders for each analysis stage.

Every builder is a pure function: it embeds the idea verbatim in quotes,
describes the task, spells out the exact JSON shape with the legal values of
categorical fields, and forbids any text outside the object.
"""

from __future__ import annotations

from textwrap import dedent
from typing import Any, Dict, Iterable, List, Sequence

MAX_COMPETITOR_NAMES = 5
MAX_INSIGHTS_PER_COMPETITOR = 3


# ---------------------------------------------------------------------------
# Stage prompts
# ---------------------------------------------------------------------------


def market_prompt(idea: str) -> str:
    """Competitive landscape: who already builds this and how crowded it is."""

    return dedent(
        """
        Search the web thoroughly for existing products, tools, apps, websites, or services that match or compete with this idea. Look at Product Hunt, app stores, SaaS directories, and general web results.

        Product Idea: "{idea}"

        Return ONLY a valid JSON object with this exact structure:
        {{
          "exists": "fully_exists" | "mostly_exists" | "partially_exists" | "significant_gap" | "blue_ocean",
          "saturation_score": <integer 1-10, where 10 = fully saturated>,
          "competitors": [
            {{
              "name": "Product Name",
              "url": "https://example.com",
              "description": "One sentence about what they do",
              "pricing": "Free / Freemium / Paid $X/mo / Enterprise",
              "founded": "Year or estimated",
              "strengths": ["strength1", "strength2"],
              "weaknesses": ["weakness1", "weakness2"]
            }}
          ],
          "market_summary": "2-3 sentence summary of the competitive landscape",
          "key_differentiators_needed": ["What you would need to stand out"]
        }}

        Include between 4 and 6 competitors. Do not write anything outside the JSON object.
        """
    ).strip().format(idea=idea)


def technical_prompt(idea: str, skill_level: str) -> str:
    """Build difficulty, time estimates and stack, tuned to the requester's skill."""

    return dedent(
        """
        Analyze the technical requirements for building this product. The developer's skill level is: {skill_level}.

        Product: "{idea}"

        Return ONLY a valid JSON object:
        {{
          "difficulty": "no_code" | "beginner" | "intermediate" | "advanced" | "expert",
          "difficulty_score": <integer 1-10>,
          "time_estimates": {{
            "vibe_coder": "X-Y weeks with no-code/AI tools",
            "beginner": "X-Y months",
            "intermediate": "X-Y weeks",
            "senior_dev": "X-Y days"
          }},
          "tech_stack": {{
            "frontend": "Recommended frontend technology",
            "backend": "Recommended backend technology",
            "database": "Recommended database",
            "hosting": "Recommended hosting (e.g. Vercel, Railway, Fly.io)"
          }},
          "required_apis": [
            {{ "name": "API Name", "purpose": "Why it's needed", "cost": "Free" | "Paid" | "Freemium", "url": "https://..." }}
          ],
          "recommended_tools": [
            {{ "name": "Tool Name", "purpose": "What it helps with", "cost": "Free/Paid", "skill_level": "all" | "beginner" | "advanced" }}
          ],
          "no_code_alternatives": [
            {{ "tool": "Bubble / Webflow / etc.", "coverage": "What percent of the idea this covers", "limitations": "What it cannot do" }}
          ],
          "biggest_challenges": ["Challenge 1", "Challenge 2", "Challenge 3"],
          "technical_summary": "2-3 sentence technical overview for a {skill_level}"
        }}

        Do not write anything outside the JSON object.
        """
    ).strip().format(idea=idea, skill_level=skill_level)


def opportunity_prompt(idea: str) -> str:
    return dedent(
        """
        Evaluate the market opportunity for this product idea. Search for market size data, trends, investor activity, and revenue potential.

        Product: "{idea}"

        Return ONLY a valid JSON object:
        {{
          "opportunity_score": <integer 1-10>,
          "opportunity_grade": "A+" | "A" | "A-" | "B+" | "B" | "B-" | "C+" | "C" | "D",
          "opportunity_type": "niche_product" | "growing_market" | "mass_market" | "enterprise_b2b" | "consumer_app" | "developer_tool" | "marketplace" | "platform",
          "market_size": "Estimated TAM with source or reasoning",
          "trend": "rapidly_growing" | "growing" | "stable" | "declining" | "emerging",
          "trend_evidence": "Brief evidence or data point supporting trend",
          "monetization_strategies": [
            {{
              "model": "SaaS Subscription / One-time Purchase / Freemium / Usage-based / Marketplace / Ads",
              "description": "How this would work in practice",
              "revenue_potential": "Low (<$10k MRR)" | "Medium ($10-100k MRR)" | "High (>$100k MRR)",
              "difficulty": "easy" | "medium" | "hard"
            }}
          ],
          "target_audiences": [
            {{ "segment": "Audience description", "size": "Large" | "Medium" | "Niche", "willingness_to_pay": "High" | "Medium" | "Low" }}
          ],
          "improvement_suggestions": [
            {{
              "suggestion": "Specific feature, angle, or pivot to improve the idea",
              "reasoning": "Why this would increase value or reduce competition",
              "priority": "high" | "medium" | "low",
              "effort": "low" | "medium" | "high"
            }}
          ],
          "opportunity_summary": "2-3 sentence executive summary of the opportunity"
        }}

        Do not write anything outside the JSON object.
        """
    ).strip().format(idea=idea)


DEPLOYMENT_PLATFORMS = (
    "web_app",
    "mobile_ios",
    "mobile_android",
    "mobile_cross_platform",
    "chrome_extension",
    "shopify_app",
    "wordpress_plugin",
    "desktop_mac",
    "desktop_windows",
    "desktop_cross_platform",
    "api_service",
    "slack_app",
    "vs_code_extension",
    "notion_integration",
)


def deployment_prompt(idea: str) -> str:
    platforms = " | ".join(f'"{platform}"' for platform in DEPLOYMENT_PLATFORMS)
    return dedent(
        """
        Determine the optimal deployment platform(s) for this product idea. Consider user behavior, monetization, discoverability, and technical tradeoffs.

        Product: "{idea}"

        Return ONLY a valid JSON object:
        {{
          "primary_recommendation": {platforms},
          "confidence_score": <integer 1-10>,
          "deployment_options": [
            {{
              "platform": "Platform Name",
              "recommendation_level": "highly_recommended" | "recommended" | "possible" | "not_recommended",
              "pros": ["pro1", "pro2"],
              "cons": ["con1", "con2"],
              "build_complexity": "low" | "medium" | "high",
              "monetization_potential": "low" | "medium" | "high",
              "time_to_market": "Fast (1-4 weeks)" | "Medium (1-3 months)" | "Slow (3+ months)"
            }}
          ],
          "go_to_market_strategy": "2-3 sentence GTM recommendation",
          "quick_win_approach": "The single fastest path to a usable v1",
          "reasoning": "Why the primary recommendation is best for this specific product"
        }}

        Do not write anything outside the JSON object.
        """
    ).strip().format(idea=idea, platforms=platforms)


def _sentiment_focus(names: Sequence[str]) -> str:
    if not names:
        return (
            "Focus on what people say about the problem this product solves and about "
            "existing tools in this space in general."
        )
    quoted = ", ".join(f'"{name}"' for name in names)
    return (
        f"Focus on discussions of these specific competitor products: {quoted}. "
        f"Try to cover each of them, and include no more than {MAX_INSIGHTS_PER_COMPETITOR} "
        "insights about any single product. Set \"competitor\" to the exact product name being "
        "discussed, or \"General\" when the discussion is not about one product."
    )


def sentiment_prompt(idea: str, competitor_names: Sequence[str] = ()) -> str:
    """Community voice: pain points, loved features and wishes from real discussions."""

    focus = _sentiment_focus(list(competitor_names))
    return dedent(
        """
        Search Reddit, Hacker News, product reviews, forums, and social media for what real users say about products in this space.

        Product Idea: "{idea}"

        {focus}

        Return ONLY a valid JSON object:
        {{
          "overall_sentiment": "very_positive" | "positive" | "mixed" | "negative" | "very_negative",
          "insights": [
            {{
              "type": "pain_point" | "loved_feature" | "wish",
              "theme": "Short label for the recurring theme",
              "quote": "Representative paraphrase or quote from a user",
              "source": "Reddit r/subreddit / Hacker News / G2 / App Store / etc.",
              "source_url": "https://...",
              "competitor": "Exact product name being discussed, or General"
            }}
          ],
          "summary": "2-3 sentence summary of how users feel about this space"
        }}

        Include between 6 and 9 insights. Do not write anything outside the JSON object.
        """
    ).strip().format(idea=idea, focus=focus)


# ---------------------------------------------------------------------------
# Cross-stage helpers
# ---------------------------------------------------------------------------


def competitor_names(market: Dict[str, Any] | None, limit: int = MAX_COMPETITOR_NAMES) -> List[str]:
    """Harvest distinct competitor names from a market stage result."""

    if not market:
        return []
    competitors = market.get("competitors")
    if not isinstance(competitors, list):
        return []

    names: List[str] = []
    seen = set()
    for entry in _iter_mappings(competitors):
        name = entry.get("name")
        if not isinstance(name, str) or not name.strip():
            continue
        key = name.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        names.append(name.strip())
        if len(names) >= limit:
            break
    return names


def _iter_mappings(items: Iterable[Any]) -> Iterable[Dict[str, Any]]:
    for item in items:
        if isinstance(item, dict):
            yield item
