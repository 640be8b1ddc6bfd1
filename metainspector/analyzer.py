"""
Meta tag analysis for MetaInspector.
Classifies extracted tags, scores them and collects recommendations.

Scoring philosophy:
- Essential tags (title, description, canonical, robots) carry the most weight
- Social tags (Open Graph, Twitter Card) decide how shares look
- Structure and performance are coarse, fixed estimates for a single fetch

Everything here is pure: no network, no clock, no global state.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .config import ScoringConfig
from .extractor import ExtractedMeta, extract_meta
from .validators import is_valid_url

STATUS_GOOD = "good"
STATUS_WARNING = "warning"
STATUS_ERROR = "error"
STATUS_INFO = "info"

TAG_TITLE = "title"
TAG_DESCRIPTION = "meta[description]"
TAG_CANONICAL = "link[canonical]"
TAG_ROBOTS = "meta[robots]"
TAG_OG_TITLE = "meta[og:title]"
TAG_OG_DESCRIPTION = "meta[og:description]"
TAG_OG_IMAGE = "meta[og:image]"
TAG_TWITTER_CARD = "meta[twitter:card]"
TAG_VIEWPORT = "meta[viewport]"
TAG_CHARSET = "meta[charset]"

ESSENTIAL_TAGS = (TAG_TITLE, TAG_DESCRIPTION, TAG_CANONICAL, TAG_ROBOTS)
SOCIAL_TAGS = (TAG_OG_TITLE, TAG_OG_DESCRIPTION, TAG_OG_IMAGE, TAG_TWITTER_CARD)
TECHNICAL_TAGS = (TAG_VIEWPORT, TAG_CHARSET)


@dataclass
class MetaTag:
    """One analyzed tag."""
    name: str
    content: Optional[str]
    status: str
    status_message: str

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "content": self.content,
            "status": self.status,
            "statusMessage": self.status_message,
        }


@dataclass
class Recommendation:
    """Human-readable fix for a non-good tag."""
    type: str  # "warning", "error", "info"
    title: str
    description: str

    def to_dict(self) -> Dict:
        return {"type": self.type, "title": self.title, "description": self.description}


@dataclass
class Score:
    """Category scores (0-10) and the overall percentage (0-100)."""
    overall: int
    essential: float
    social: float
    structure: float
    performance: float

    def to_dict(self) -> Dict:
        return {
            "overall": self.overall,
            "essential": self.essential,
            "social": self.social,
            "structure": self.structure,
            "performance": self.performance,
        }


@dataclass
class AnalysisResult:
    """Full result of analyzing one page."""
    url: str
    title: Optional[str]
    description: Optional[str]
    canonical: Optional[str]
    meta_tags: List[MetaTag]
    score: Score
    recommendations: List[Recommendation] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "canonical": self.canonical,
            "metaTags": [tag.to_dict() for tag in self.meta_tags],
            "score": self.score.to_dict(),
            "recommendations": [rec.to_dict() for rec in self.recommendations],
        }

    def get_tag(self, name: str) -> Optional[MetaTag]:
        for tag in self.meta_tags:
            if tag.name == name:
                return tag
        return None


# Tag rule -> recommendation. Keys are (tag name, rule id).
RECOMMENDATIONS: Dict[Tuple[str, str], Dict[str, str]] = {
    (TAG_TITLE, "missing"): {
        "type": STATUS_ERROR,
        "title": "Missing title tag",
        "description": "Your page doesn't have a title tag. This is critical for SEO.",
    },
    (TAG_TITLE, "too_short"): {
        "type": STATUS_WARNING,
        "title": "Title tag is too short",
        "description": "Your title tag is under {min} characters. For better SEO, aim for 50-{max} characters.",
    },
    (TAG_TITLE, "too_long"): {
        "type": STATUS_WARNING,
        "title": "Title tag is too long",
        "description": "Your title tag exceeds {max} characters. It may be truncated in search results.",
    },
    (TAG_DESCRIPTION, "missing"): {
        "type": STATUS_ERROR,
        "title": "Missing meta description",
        "description": "Your page doesn't have a meta description. This is important for CTR in search results.",
    },
    (TAG_DESCRIPTION, "too_short"): {
        "type": STATUS_WARNING,
        "title": "Meta description is too short",
        "description": "Your meta description is under {min} characters. Aim for {min}-{max} characters.",
    },
    (TAG_DESCRIPTION, "too_long"): {
        "type": STATUS_WARNING,
        "title": "Meta description is too long",
        "description": "Your meta description exceeds {max} characters. It may be truncated in search results.",
    },
    (TAG_CANONICAL, "missing"): {
        "type": STATUS_WARNING,
        "title": "Missing canonical URL",
        "description": "Your page doesn't have a canonical URL. This helps prevent duplicate content issues.",
    },
    (TAG_CANONICAL, "invalid"): {
        "type": STATUS_ERROR,
        "title": "Invalid canonical URL",
        "description": "Your canonical link is not an absolute URL. Search engines may ignore it; use the full https:// address of the preferred page.",
    },
    (TAG_ROBOTS, "noindex"): {
        "type": STATUS_WARNING,
        "title": "Page is set to noindex",
        "description": "Your page is set to not be indexed by search engines. If this is intentional, you can ignore this warning.",
    },
    (TAG_OG_TITLE, "missing"): {
        "type": STATUS_WARNING,
        "title": "Missing Open Graph title",
        "description": "Add og:title meta tag for better social media sharing.",
    },
    (TAG_OG_DESCRIPTION, "missing"): {
        "type": STATUS_WARNING,
        "title": "Missing Open Graph description",
        "description": "Add og:description meta tag for better social media sharing.",
    },
    (TAG_OG_IMAGE, "missing"): {
        "type": STATUS_ERROR,
        "title": "Missing Open Graph image",
        "description": "Add og:image meta tag for better social media sharing. Without an image, your content will be less engaging on social platforms.",
    },
    (TAG_TWITTER_CARD, "missing"): {
        "type": STATUS_WARNING,
        "title": "Missing Twitter card",
        "description": "Add twitter:card meta tag (recommended: summary_large_image) for better Twitter sharing.",
    },
}


def _has_noindex(robots: Optional[str]) -> bool:
    return bool(robots) and "noindex" in robots.lower()


def _is_absolute(url: Optional[str]) -> bool:
    return bool(url) and url.lower().startswith("http")


def _check_length(
    value: Optional[str],
    min_length: int,
    max_length: int,
    missing_message: str,
) -> Tuple[str, str, str]:
    """Shared length rule for title and description. Returns (status, message, rule)."""
    if not value:
        return STATUS_ERROR, missing_message, "missing"
    length = len(value)
    if length < min_length:
        return STATUS_WARNING, f"Too short (under {min_length} characters)", "too_short"
    if length > max_length:
        return STATUS_WARNING, f"Too long (over {max_length} characters)", "too_long"
    return STATUS_GOOD, "Good length and format", "ok"


def analyze_title(title: Optional[str], config: ScoringConfig) -> Tuple[str, str, str]:
    return _check_length(
        title, config.title_min_length, config.title_max_length, "Missing title tag"
    )


def analyze_description(description: Optional[str], config: ScoringConfig) -> Tuple[str, str, str]:
    return _check_length(
        description,
        config.description_min_length,
        config.description_max_length,
        "Missing meta description",
    )


def analyze_canonical(canonical: Optional[str]) -> Tuple[str, str, str]:
    if not canonical:
        return STATUS_WARNING, "Missing canonical URL", "missing"
    if not is_valid_url(canonical):
        return STATUS_ERROR, "Invalid canonical URL format", "invalid"
    return STATUS_GOOD, "Canonical URL is properly set", "ok"


def analyze_robots(robots: Optional[str]) -> Tuple[str, str, str]:
    if not robots:
        return STATUS_INFO, "Not specified (defaults to index, follow)", "missing"
    if _has_noindex(robots):
        return STATUS_WARNING, "Contains noindex directive", "noindex"
    return STATUS_GOOD, "Properly set", "ok"


def _analyze_presence(
    value: Optional[str],
    label: str,
    missing_status: str,
) -> Tuple[str, str, str]:
    if not value:
        return missing_status, f"Missing {label}", "missing"
    return STATUS_GOOD, f"{label} is set", "ok"


def analyze_viewport(viewport: Optional[str]) -> Tuple[str, str, str]:
    if not viewport:
        return STATUS_INFO, "Not specified (page may not scale on mobile)", "missing"
    if "width=device-width" in viewport.replace(" ", "").lower():
        return STATUS_GOOD, "Responsive viewport is set", "ok"
    return STATUS_INFO, "Set without width=device-width", "fixed"


def analyze_charset(charset: Optional[str]) -> Tuple[str, str, str]:
    if not charset:
        return STATUS_INFO, "Not declared in the document", "missing"
    return STATUS_GOOD, f"Declared as {charset}", "ok"


def _build_recommendation(tag_name: str, rule: str, config: ScoringConfig) -> Optional[Recommendation]:
    template = RECOMMENDATIONS.get((tag_name, rule))
    if template is None:
        return None
    if tag_name == TAG_TITLE:
        bounds = {"min": config.title_min_length, "max": config.title_max_length}
    elif tag_name == TAG_DESCRIPTION:
        bounds = {"min": config.description_min_length, "max": config.description_max_length}
    else:
        bounds = {}
    return Recommendation(
        type=template["type"],
        title=template["title"],
        description=template["description"].format(**bounds),
    )


def classify_tags(
    meta: ExtractedMeta,
    config: ScoringConfig,
) -> Tuple[List[MetaTag], List[Recommendation]]:
    """
    Classify every tag and collect recommendations in tag order.

    Technical tags (viewport, charset) are reported but never produce
    recommendations.
    """
    checks = [
        (TAG_TITLE, meta.title, analyze_title(meta.title, config)),
        (TAG_DESCRIPTION, meta.description, analyze_description(meta.description, config)),
        (TAG_CANONICAL, meta.canonical, analyze_canonical(meta.canonical)),
        (TAG_ROBOTS, meta.robots, analyze_robots(meta.robots)),
        (TAG_OG_TITLE, meta.og_title, _analyze_presence(meta.og_title, "OG title", STATUS_WARNING)),
        (TAG_OG_DESCRIPTION, meta.og_description,
         _analyze_presence(meta.og_description, "OG description", STATUS_WARNING)),
        (TAG_OG_IMAGE, meta.og_image, _analyze_presence(meta.og_image, "OG image", STATUS_ERROR)),
        (TAG_TWITTER_CARD, meta.twitter_card,
         _analyze_presence(meta.twitter_card, "Twitter card", STATUS_WARNING)),
        (TAG_VIEWPORT, meta.viewport, analyze_viewport(meta.viewport)),
        (TAG_CHARSET, meta.charset, analyze_charset(meta.charset)),
    ]

    tags: List[MetaTag] = []
    recommendations: List[Recommendation] = []
    for name, content, (status, message, rule) in checks:
        tags.append(MetaTag(name=name, content=content, status=status, status_message=message))
        if status == STATUS_GOOD or name in TECHNICAL_TAGS:
            continue
        recommendation = _build_recommendation(name, rule, config)
        if recommendation:
            recommendations.append(recommendation)

    return tags, recommendations


def _essential_score(meta: ExtractedMeta, config: ScoringConfig) -> float:
    score = 0.0

    if meta.title:
        if config.title_min_length <= len(meta.title) <= config.title_max_length:
            score += config.weight_title_optimal
        else:
            score += config.weight_title_present

    if meta.description:
        if config.description_min_length <= len(meta.description) <= config.description_max_length:
            score += config.weight_description_optimal
        else:
            score += config.weight_description_present

    if meta.canonical:
        if _is_absolute(meta.canonical):
            score += config.weight_canonical_absolute
        else:
            score += config.weight_canonical_present

    if meta.robots:
        if _has_noindex(meta.robots):
            score += config.weight_robots_noindex
        else:
            score += config.weight_robots_indexable

    return score


def _social_score(meta: ExtractedMeta, config: ScoringConfig) -> float:
    score = 0.0

    if meta.og_title:
        score += config.weight_og_title
    elif meta.title:
        score += config.weight_social_fallback

    if meta.og_description:
        score += config.weight_og_description
    elif meta.description:
        score += config.weight_social_fallback

    if meta.og_image:
        if _is_absolute(meta.og_image):
            score += config.weight_og_image_absolute
        else:
            score += config.weight_og_image_present

    if meta.twitter_card:
        if meta.twitter_card.strip().lower() == config.preferred_twitter_card:
            score += config.weight_twitter_card_large
        else:
            score += config.weight_twitter_card_present

    return score


def calculate_score(meta: ExtractedMeta, config: ScoringConfig = None) -> Score:
    """
    Weighted category scores plus the overall percentage.

    Each category is on a 0-10 scale; the overall score is the weighted
    average of the four categories expressed as a whole percentage.
    """
    config = config or ScoringConfig()

    essential = min(10.0, _essential_score(meta, config))
    social = min(10.0, _social_score(meta, config))

    structure = config.structure_base
    if meta.title and meta.description:
        structure += config.structure_essentials_bonus
    structure = min(10.0, structure)

    performance = min(10.0, config.performance_default)

    weighted = (
        (essential / 10) * config.category_weight_essential
        + (social / 10) * config.category_weight_social
        + (structure / 10) * config.category_weight_structure
        + (performance / 10) * config.category_weight_performance
    )
    overall = max(0, min(100, math.floor(weighted * 100 + 0.5)))

    return Score(
        overall=overall,
        essential=essential,
        social=social,
        structure=structure,
        performance=performance,
    )


def analyze_html(url: str, html: Optional[str], config: ScoringConfig = None) -> AnalysisResult:
    """
    Analyze one HTML document fetched from `url`.

    Deterministic: the same (url, html, config) always gives the same result.
    """
    config = config or ScoringConfig()
    meta = extract_meta(html)
    tags, recommendations = classify_tags(meta, config)

    return AnalysisResult(
        url=url,
        title=meta.title,
        description=meta.description,
        canonical=meta.canonical,
        meta_tags=tags,
        score=calculate_score(meta, config),
        recommendations=recommendations,
    )
