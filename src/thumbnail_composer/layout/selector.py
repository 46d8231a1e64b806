"""
Deterministic arrangement selection from per-image features.

Selection is expressed as ordered rule tables. The first grid rule
whose predicate matches wins; a creative (custom-shape) candidate can
replace it when the grid choice is not confident enough. Both tables
are plain data so each rule can be tested on its own.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from thumbnail_composer.layout.catalog import DEFAULT_CATALOG
from thumbnail_composer.logging_utils import logger

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence

    from thumbnail_composer.analysis.features import ImageFeature
    from thumbnail_composer.layout.catalog import ArrangementCatalog

_BOOST_ENTROPY = 6.5
_BOOST_VISUAL_WEIGHT = 80.0
_BOOST_AMOUNT = 0.1
_CREATIVE_MIN_IMAGES = 3
_CREATIVE_MAX_CONFIDENCE = 0.9
_INVALID_CONFIDENCE = 0.5


@dataclass(frozen=True, slots=True)
class AggregateMetrics:
    """Statistics over all successfully analyzed images."""

    image_count: int
    avg_aspect_ratio: float
    aspect_ratio_variance: float
    avg_entropy: float
    avg_visual_weight: float
    portrait_count: int
    landscape_count: int
    square_count: int
    prominent_subject_count: int

    @classmethod
    def from_features(cls, features: Sequence[ImageFeature]) -> AggregateMetrics:
        """Aggregate a non-empty feature list."""
        if not features:
            msg = "Cannot aggregate an empty feature list"
            raise ValueError(msg)
        n = len(features)
        aspects = [f.aspect_ratio for f in features]
        mean_aspect = sum(aspects) / n
        return cls(
            image_count=n,
            avg_aspect_ratio=mean_aspect,
            aspect_ratio_variance=sum((a - mean_aspect) ** 2 for a in aspects) / n,
            avg_entropy=sum(f.entropy for f in features) / n,
            avg_visual_weight=sum(f.visual_weight for f in features) / n,
            portrait_count=sum(f.is_portrait for f in features),
            landscape_count=sum(f.is_landscape for f in features),
            square_count=sum(f.is_square for f in features),
            prominent_subject_count=sum(
                f.has_prominent_subject for f in features
            ),
        )


@dataclass(frozen=True, slots=True)
class LayoutRule:
    """One row of a decision table."""

    name: str
    predicate: Callable[[AggregateMetrics], bool]
    arrangement_id: str
    confidence: float

    def matches(self, metrics: AggregateMetrics) -> bool:
        return self.predicate(metrics)


@dataclass(frozen=True, slots=True)
class LayoutDecision:
    """Chosen arrangement plus how it was reached."""

    arrangement_id: str
    confidence: float
    metrics: AggregateMetrics | None = None
    rule: str | None = None
    error: str | None = None
    fallback: bool = False


def _count(n: int) -> Callable[[AggregateMetrics], bool]:
    return lambda m: m.image_count == n


GRID_RULES: tuple[LayoutRule, ...] = (
    LayoutRule("single", _count(1), "1x1", 1.0),
    LayoutRule(
        "two-wide-landscapes",
        lambda m: (
            m.image_count == 2  # noqa: PLR2004
            and m.landscape_count == 2  # noqa: PLR2004
            and m.avg_visual_weight > 120  # noqa: PLR2004
            and m.avg_aspect_ratio > 2.0  # noqa: PLR2004
        ),
        "2x1",
        0.8,
    ),
    LayoutRule("two-side-by-side", _count(2), "1x2", 0.9),
    LayoutRule(
        "three-portraits",
        lambda m: m.image_count == 3 and m.portrait_count >= 2,  # noqa: PLR2004
        "1x3",
        0.85,
    ),
    LayoutRule(
        "three-varied",
        lambda m: m.image_count == 3 and m.aspect_ratio_variance > 0.5,  # noqa: PLR2004
        "3x1",
        0.8,
    ),
    LayoutRule("three-strip", _count(3), "1x3", 0.75),
    LayoutRule(
        "four-squarish",
        lambda m: m.image_count == 4 and (  # noqa: PLR2004
            m.square_count >= 2  # noqa: PLR2004
            or 0.8 <= m.avg_aspect_ratio <= 1.2  # noqa: PLR2004
        ),
        "2x2",
        0.9,
    ),
    # Legacy: only three slots for four images, so one image is dropped.
    LayoutRule(
        "four-portraits",
        lambda m: m.image_count == 4 and m.portrait_count >= 3,  # noqa: PLR2004
        "1x3",
        0.8,
    ),
    LayoutRule("four-grid", _count(4), "2x2", 0.7),
    LayoutRule(
        "many-subjects",
        lambda m: 5 <= m.image_count <= 6  # noqa: PLR2004
        and m.prominent_subject_count >= 0.6 * m.image_count,  # noqa: PLR2004
        "2x3",
        0.8,
    ),
    LayoutRule(
        "many-varied",
        lambda m: 5 <= m.image_count <= 6  # noqa: PLR2004
        and m.aspect_ratio_variance > 0.5,  # noqa: PLR2004
        "3x2",
        0.75,
    ),
    LayoutRule(
        "many-grid",
        lambda m: 5 <= m.image_count <= 6,  # noqa: PLR2004
        "2x3",
        0.7,
    ),
    LayoutRule("overflow", lambda m: m.image_count > 6, "3x2", 0.6),  # noqa: PLR2004
)

CREATIVE_RULES: tuple[LayoutRule, ...] = (
    LayoutRule(
        "three-banner",
        lambda m: m.image_count == 3  # noqa: PLR2004
        and m.prominent_subject_count >= 1
        and m.avg_aspect_ratio > 1.3,  # noqa: PLR2004
        "banner-split",
        0.85,
    ),
    LayoutRule(
        "three-l-shape",
        lambda m: m.image_count == 3 and m.aspect_ratio_variance > 0.5,  # noqa: PLR2004
        "l-shape",
        0.82,
    ),
    LayoutRule(
        "four-hero",
        lambda m: m.image_count == 4 and m.prominent_subject_count >= 1,  # noqa: PLR2004
        "hero-side",
        0.85,
    ),
    LayoutRule(
        "four-spotlight",
        lambda m: m.image_count == 4 and m.aspect_ratio_variance > 0.3,  # noqa: PLR2004
        "spotlight",
        0.8,
    ),
    LayoutRule(
        "five-corners",
        lambda m: m.image_count == 5 and m.prominent_subject_count >= 1,  # noqa: PLR2004
        "corner-grid",
        0.85,
    ),
    LayoutRule("five-l-shape", _count(5), "l-shape", 0.78),
)


def first_match(
    rules: Sequence[LayoutRule],
    metrics: AggregateMetrics,
) -> LayoutRule | None:
    """Return the first rule whose predicate holds, top to bottom."""
    for rule in rules:
        if rule.matches(metrics):
            return rule
    return None


def fallback_layout_for_count(count: int) -> str:
    """Arrangement used when analysis fails outright."""
    if count == 1:
        return "1x1"
    if count == 2:  # noqa: PLR2004
        return "1x2"
    if count == 4:  # noqa: PLR2004
        return "2x2"
    if count >= 5:  # noqa: PLR2004
        return "2x3"
    return "1x3"


def decide_layout(
    metrics: AggregateMetrics,
    catalog: ArrangementCatalog = DEFAULT_CATALOG,
) -> LayoutDecision:
    """Apply the grid table, confidence boost and creative override."""
    rule = first_match(GRID_RULES, metrics)
    if rule is None:
        msg = f"No layout rule for {metrics.image_count} images"
        raise ValueError(msg)

    arrangement_id = rule.arrangement_id
    rule_name = rule.name
    confidence = rule.confidence
    if (
        metrics.avg_entropy > _BOOST_ENTROPY
        and metrics.avg_visual_weight > _BOOST_VISUAL_WEIGHT
    ):
        confidence = min(confidence + _BOOST_AMOUNT, 1.0)

    if (
        metrics.image_count >= _CREATIVE_MIN_IMAGES
        and confidence < _CREATIVE_MAX_CONFIDENCE
    ):
        creative = first_match(
            [r for r in CREATIVE_RULES if r.arrangement_id in catalog],
            metrics,
        )
        if creative is not None and creative.confidence > confidence:
            arrangement_id = creative.arrangement_id
            rule_name = creative.name
            confidence = creative.confidence

    if arrangement_id not in catalog:
        logger.warning(
            "Invalid layout %s, falling back to default", arrangement_id,
        )
        arrangement_id = "1x3" if metrics.image_count <= 3 else "2x2"  # noqa: PLR2004
        confidence = _INVALID_CONFIDENCE
        rule_name = "invalid-fallback"

    spec = catalog.get(arrangement_id)
    if spec is not None and metrics.image_count > spec.max_images:
        logger.warning(
            "Layout %s holds %d images; %d will not be shown",
            arrangement_id,
            spec.max_images,
            metrics.image_count - spec.max_images,
        )

    return LayoutDecision(
        arrangement_id=arrangement_id,
        confidence=confidence,
        metrics=metrics,
        rule=rule_name,
    )


def select_layout(
    features: Sequence[ImageFeature | None],
    catalog: ArrangementCatalog = DEFAULT_CATALOG,
) -> LayoutDecision:
    """
    Choose an arrangement for the analyzed images.

    ``None`` entries (images whose analysis failed) are excluded from
    the aggregates. If nothing could be analyzed the fixed ``1x3``
    default is returned with zero confidence; any unexpected error
    falls back by the supplied count and records the error.
    """
    valid = [f for f in features if f is not None]
    if not valid:
        return LayoutDecision("1x3", 0.0, fallback=True)
    try:
        return decide_layout(AggregateMetrics.from_features(valid), catalog)
    except Exception as exc:  # noqa: BLE001
        logger.error("Error in smart layout analysis: %s", exc)
        return LayoutDecision(
            fallback_layout_for_count(len(features)),
            0.0,
            error=str(exc),
            fallback=True,
        )
