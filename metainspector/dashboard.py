"""
Dashboard rendering for MetaInspector.
Turns an AnalysisResult into the cards of the HTML dashboard using Jinja2 templates.
"""

import math
from datetime import datetime
from typing import Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .analyzer import (
    AnalysisResult,
    MetaTag,
    Recommendation,
    ESSENTIAL_TAGS,
    STATUS_ERROR,
    STATUS_GOOD,
    STATUS_INFO,
    STATUS_WARNING,
    TAG_DESCRIPTION,
    TAG_OG_DESCRIPTION,
    TAG_OG_IMAGE,
    TAG_OG_TITLE,
    TAG_TITLE,
    TAG_TWITTER_CARD,
)
from .config import TEMPLATES_DIR
from .logging_setup import get_logger
from .validators import get_hostname, truncate_text

logger = get_logger("dashboard")

SEARCH_TITLE_LIMIT = 60
SEARCH_DESCRIPTION_LIMIT = 160
RING_RADIUS = 16

CATEGORY_DESCRIPTIONS = {
    "essential": {
        "good": "Essential tags are well-optimized. Your title, description, and canonical tags meet best practices.",
        "average": "Your essential tags need some improvement. Check the recommendations for details.",
        "poor": "Several essential tags are missing or poorly optimized. These are critical for SEO success.",
    },
    "social": {
        "good": "Social sharing tags are properly set up, ensuring good visibility on social platforms.",
        "average": "Your social tags need some improvement to maximize engagement on social platforms.",
        "poor": "Social sharing tags are missing or incomplete, reducing visibility on social media.",
    },
    "structure": {
        "good": "Your page structure is well-optimized for search engines and users.",
        "average": "Page structure has some issues that could be improved for better SEO.",
        "poor": "Page structure needs significant improvement for better search engine visibility.",
    },
    "performance": {
        "good": "Performance metrics look good, which positively impacts your SEO.",
        "average": "Some performance improvements could help boost your SEO rankings.",
        "poor": "Poor performance metrics may be hurting your SEO rankings.",
    },
}

CATEGORY_NAMES = {
    "essential": "Essential Tags",
    "social": "Social Media",
    "structure": "Page Structure",
    "performance": "Performance",
}

STATUS_LABELS = {
    "good": "Good",
    "average": "Needs Improvement",
    "poor": "Poor",
}

TAG_GROUPS = [
    {
        "id": "essential",
        "name": "Essential Tags",
        "description": "Core meta tags that every page should have, like title and description",
    },
    {
        "id": "social",
        "name": "Social Media Tags",
        "description": "Tags that control how your page appears when shared on social media",
    },
    {
        "id": "other",
        "name": "Technical Tags",
        "description": "Additional tags that provide technical information",
    },
]

RECOMMENDATION_GROUPS = [
    (STATUS_ERROR, "Critical Issues"),
    (STATUS_WARNING, "Warnings"),
    (STATUS_INFO, "Suggestions"),
]

# Shortcut buttons under the URL form
EXAMPLE_URLS = [
    "https://example.com",
    "https://twitter.com",
    "https://github.com",
    "https://shopify.com",
]


def category_status(score: float) -> str:
    """Bucket a 0-10 category score."""
    if score >= 8:
        return "good"
    if score >= 6:
        return "average"
    return "poor"


def overall_status(overall: int) -> str:
    """Bucket a 0-100 overall score."""
    if overall >= 80:
        return "good"
    if overall >= 60:
        return "average"
    return "poor"


def overall_verdict(overall: int) -> str:
    status = overall_status(overall)
    if status == "good":
        return "Great work! Your site has strong SEO fundamentals."
    if status == "average":
        return "Good start, but improvements needed for optimal SEO."
    return "Significant SEO improvements needed for better visibility."


def score_ring(overall: int) -> Dict[str, float]:
    """SVG stroke parameters for the circular overall-score gauge."""
    circumference = 2 * math.pi * RING_RADIUS
    return {
        "radius": RING_RADIUS,
        "circumference": round(circumference, 3),
        "offset": round(circumference - (overall / 100) * circumference, 3),
        "status": overall_status(overall),
    }


def build_category_breakdown(result: AnalysisResult) -> List[Dict]:
    breakdown = []
    for category_id, name in CATEGORY_NAMES.items():
        score = getattr(result.score, category_id)
        status = category_status(score)
        breakdown.append({
            "id": category_id,
            "name": name,
            "score": score,
            "percent": round(score * 10),
            "status": status,
            "label": STATUS_LABELS[status],
            "description": CATEGORY_DESCRIPTIONS[category_id][status],
        })
    return breakdown


def tag_group(tag_name: str) -> str:
    if tag_name in ESSENTIAL_TAGS:
        return "essential"
    if "og:" in tag_name or "twitter:" in tag_name:
        return "social"
    return "other"


def _percentage(count: int, total: int) -> int:
    return round(count / total * 100) if total else 0


def build_tag_stats(meta_tags: List[MetaTag]) -> Dict[str, Dict]:
    """Status counts per tag group, plus an "all" bucket."""
    stats = {
        group: {STATUS_GOOD: 0, STATUS_WARNING: 0, STATUS_ERROR: 0, STATUS_INFO: 0, "total": 0}
        for group in ("essential", "social", "other", "all")
    }
    for tag in meta_tags:
        for group in (tag_group(tag.name), "all"):
            stats[group][tag.status] += 1
            stats[group]["total"] += 1

    for group_stats in stats.values():
        total = group_stats["total"]
        group_stats["all_good"] = total > 0 and group_stats[STATUS_GOOD] == total
        group_stats["percentages"] = {
            status: _percentage(group_stats[status], total)
            for status in (STATUS_GOOD, STATUS_WARNING, STATUS_ERROR, STATUS_INFO)
        }
    return stats


def priority_tags(meta_tags: List[MetaTag], limit: int = 3) -> List[MetaTag]:
    """Tags needing attention, errors before warnings, in page order otherwise."""
    flagged = [tag for tag in meta_tags if tag.status in (STATUS_ERROR, STATUS_WARNING)]
    flagged.sort(key=lambda tag: 0 if tag.status == STATUS_ERROR else 1)
    return flagged[:limit]


def group_recommendations(recommendations: List[Recommendation]) -> List[Dict]:
    """Recommendations bucketed by type, errors first. Empty buckets are dropped."""
    groups = []
    for rec_type, label in RECOMMENDATION_GROUPS:
        items = [rec for rec in recommendations if rec.type == rec_type]
        if items:
            groups.append({"type": rec_type, "label": label, "items": items})
    return groups


def _status_of(result: AnalysisResult, tag_name: str) -> Optional[str]:
    tag = result.get_tag(tag_name)
    return tag.status if tag else None


def build_search_preview(result: AnalysisResult) -> Dict:
    return {
        "title": truncate_text(result.title, SEARCH_TITLE_LIMIT) or "No Title",
        "url": result.url,
        "description": (
            truncate_text(result.description, SEARCH_DESCRIPTION_LIMIT)
            or "No description available."
        ),
        "title_status": _status_of(result, TAG_TITLE),
        "description_status": _status_of(result, TAG_DESCRIPTION),
        "title_length": len(result.title or ""),
        "description_length": len(result.description or ""),
    }


def build_social_preview(result: AnalysisResult) -> Dict:
    """Values a share card would show, falling back to plain title/description."""
    og_title = result.get_tag(TAG_OG_TITLE)
    og_description = result.get_tag(TAG_OG_DESCRIPTION)
    og_image = result.get_tag(TAG_OG_IMAGE)
    twitter_card = result.get_tag(TAG_TWITTER_CARD)

    checks = [
        {
            "status": og_image.status if og_image and og_image.content else STATUS_ERROR,
            "title": "OpenGraph Image" if og_image and og_image.content else "Missing og:image tag",
            "detail": (
                "Image is set for social sharing" if og_image and og_image.content
                else "Social shares won't display an image, reducing engagement. Add an og:image tag."
            ),
        },
        {
            "status": twitter_card.status if twitter_card and twitter_card.content else STATUS_WARNING,
            "title": "Twitter Card Type" if twitter_card and twitter_card.content else "Missing twitter:card tag",
            "detail": (
                f"Card type: {twitter_card.content}" if twitter_card and twitter_card.content
                else "Twitter won't display your content optimally. Add twitter:card=\"summary_large_image\"."
            ),
        },
        {
            "status": og_title.status if og_title and og_title.content else STATUS_WARNING,
            "title": "OpenGraph Title" if og_title and og_title.content else "Missing og:title tag",
            "detail": (
                "Title is set for social sharing" if og_title and og_title.content
                else "Your page title will be used as a fallback, but an explicit og:title is recommended."
            ),
        },
    ]

    return {
        "title": (og_title.content if og_title else None) or result.title or "No Title",
        "description": (
            (og_description.content if og_description else None)
            or result.description
            or "No description available."
        ),
        "image": og_image.content if og_image else None,
        "hostname": get_hostname(result.url),
        "platforms": ["Twitter/X", "Facebook", "LinkedIn"],
        "checks": checks,
    }


def build_view_model(result: AnalysisResult) -> Dict:
    """Everything the results section of the dashboard needs."""
    return {
        "result": result,
        "hostname": get_hostname(result.url),
        "ring": score_ring(result.score.overall),
        "verdict": overall_verdict(result.score.overall),
        "categories": build_category_breakdown(result),
        "tag_groups": TAG_GROUPS,
        "tag_stats": build_tag_stats(result.meta_tags),
        "priority_tags": priority_tags(result.meta_tags),
        "search_preview": build_search_preview(result),
        "social_preview": build_social_preview(result),
        "recommendation_groups": group_recommendations(result.recommendations),
    }


_ENV: Optional[Environment] = None


def _get_env() -> Environment:
    global _ENV
    if _ENV is None:
        _ENV = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=select_autoescape(["html"]),
        )
    return _ENV


def render_dashboard(
    result: Optional[AnalysisResult] = None,
    url: str = "",
    error: Optional[str] = None,
) -> str:
    """
    Render the dashboard page.

    With no result the page shows the initial state; with an error it
    shows the error banner above the URL form.
    """
    context = {
        "url": url or (result.url if result else ""),
        "error": error,
        "example_urls": EXAMPLE_URLS,
        "generated_at": datetime.now().strftime("%B %d, %Y %H:%M"),
    }
    if result is not None:
        context.update(build_view_model(result))
        logger.debug(f"Rendering dashboard for {result.url} ({len(result.meta_tags)} tags)")

    template = _get_env().get_template("dashboard.html")
    return template.render(**context)
