"""
Assemble the ordered draw list and paint it onto the thumbnail canvas.

The flow is one-way: resolve the arrangement, reconcile the supplied
images with its slot count, compute geometry, process every slot in
parallel, then build the draw list on the calling thread so z-order is
deterministic.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal, TypeVar

from thumbnail_composer.analysis import analyze_images, load_image
from thumbnail_composer.config_defaults import DEFAULT_MAX_WORKERS
from thumbnail_composer.constants import (
    COLOR_MODE_RGBA,
    COLOR_WHITE,
    COSMETIC_BRIGHTNESS,
    COSMETIC_LINEAR,
    COSMETIC_SATURATION,
    COSMETIC_SHARPEN,
    THUMBNAIL_SIZE,
)
from thumbnail_composer.enhancement import enhance_image
from thumbnail_composer.errors import ImageProcessingFailure, InsufficientImages
from thumbnail_composer.layout import (
    DEFAULT_CATALOG,
    compute_geometry,
    select_layout,
)
from thumbnail_composer.logging_utils import logger
from thumbnail_composer.render import raster
from thumbnail_composer.render.dividers import render_dividers
from thumbnail_composer.render.text import render_text_layer

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence
    from pathlib import Path

    from PIL import Image

    from thumbnail_composer.layout import (
        ArrangementCatalog,
        ArrangementSpec,
        LayoutDecision,
        LayoutGeometry,
        SlotRect,
    )
    from thumbnail_composer.render.text import TextOverlay
    from thumbnail_composer.type_defs import RGB, BlendMode, EnhanceLevel

T = TypeVar("T")

OpKind = Literal["image", "divider", "text"]

# Exact-fit grids an undersized auto layout is swapped for
_EXACT_FIT_GRIDS = {1: "1x1", 2: "1x2", 3: "1x3"}


@dataclass(frozen=True, slots=True)
class CompositeOp:
    """One layer in the draw list; later ops are painted on top."""

    layer: Image.Image
    left: int
    top: int
    blend_mode: BlendMode = "over"
    kind: OpKind = "image"


@dataclass(frozen=True, slots=True)
class CompositionPlan:
    """Everything decided before any pixels are processed."""

    spec: ArrangementSpec
    images: tuple[str | Path, ...]
    geometry: LayoutGeometry
    decision: LayoutDecision | None = None


@dataclass(frozen=True, slots=True)
class SlotOptions:
    """Per-slot processing switches shared by every image."""

    enhance: bool = False
    enhance_level: EnhanceLevel | str = "medium"
    cosmetics: bool = True


@dataclass(frozen=True, slots=True)
class Composition:
    """Painted canvas plus the plan and draw list that produced it."""

    image: Image.Image
    plan: CompositionPlan
    ops: tuple[CompositeOp, ...] = field(default=())

    @property
    def layout(self) -> str:
        return self.plan.spec.id

    @property
    def images_used(self) -> int:
        return len(self.plan.geometry.slots)


def resolve_arrangement(
    image_paths: Sequence[str | Path],
    layout_mode: str = "auto",
    *,
    catalog: ArrangementCatalog = DEFAULT_CATALOG,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> tuple[ArrangementSpec, LayoutDecision | None]:
    """
    Pick the arrangement for a request.

    ``auto`` analyzes every image and runs the selector; anything else
    is looked up directly (aliases included) and raises
    :class:`InvalidLayout` when unknown.
    """
    if layout_mode.strip().lower() != "auto":
        return catalog.resolve_mode(layout_mode), None

    features = analyze_images(image_paths, max_workers=max_workers)
    decision = select_layout(features, catalog)
    logger.info(
        "Smart layout recommended %s (confidence: %.2f)",
        decision.arrangement_id,
        decision.confidence,
    )
    return catalog.require(decision.arrangement_id), decision


def cycle_images(images: Sequence[T], count: int) -> list[T]:
    """Repeat ``images`` in order until ``count`` items are produced."""
    return [images[i % len(images)] for i in range(count)]


def reconcile_images(
    images: Sequence[T],
    spec: ArrangementSpec,
    *,
    catalog: ArrangementCatalog = DEFAULT_CATALOG,
    downgrade: bool = True,
) -> tuple[ArrangementSpec, list[T]]:
    """
    Match the supplied images to the arrangement's slot count.

    Extra images are dropped. An undersized grid is swapped for the
    exact-fit ``1x1``/``1x2``/``1x3`` grid when ``downgrade`` is set and
    one to three images remain; otherwise images are repeated
    cyclically to fill every slot. Custom shapes have their own
    geometry for smaller counts and are left as they are.
    """
    if not images:
        msg = "At least 1 image is required to create a thumbnail"
        raise InsufficientImages(msg)

    selected = list(images[: spec.max_images])
    if len(selected) < len(images):
        logger.info(
            "Layout %s uses the first %d of %d images",
            spec.id, spec.max_images, len(images),
        )
    if len(selected) == spec.max_images or not spec.is_grid:
        return spec, selected

    count = len(selected)
    if downgrade and count in _EXACT_FIT_GRIDS:
        fitted = catalog.require(_EXACT_FIT_GRIDS[count])
        logger.info(
            "Layout %s needs %d images but %d were provided, using %s",
            spec.id, spec.max_images, count, fitted.id,
        )
        return fitted, selected[: fitted.max_images]

    filled = cycle_images(selected, spec.max_images)
    logger.info(
        "Filled %d empty slots by repeating images", spec.max_images - count,
    )
    return spec, filled


def plan_composition(  # noqa: PLR0913
    image_paths: Sequence[str | Path],
    layout_mode: str = "auto",
    *,
    delimiter_width: int = 0,
    delimiter_tilt: float = 0.0,
    catalog: ArrangementCatalog = DEFAULT_CATALOG,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> CompositionPlan:
    """Resolve, reconcile and lay out a request without touching pixels."""
    if not image_paths:
        msg = "At least 1 image is required for the thumbnail"
        raise InsufficientImages(msg)

    spec, decision = resolve_arrangement(
        image_paths, layout_mode, catalog=catalog, max_workers=max_workers,
    )
    spec, selected = reconcile_images(
        image_paths, spec, catalog=catalog, downgrade=decision is not None,
    )
    geometry = compute_geometry(
        spec,
        len(selected),
        THUMBNAIL_SIZE[0],
        THUMBNAIL_SIZE[1],
        delimiter_width // 2,
        divider_width=delimiter_width,
        tilt_degrees=delimiter_tilt,
    )
    return CompositionPlan(spec, tuple(selected), geometry, decision)


def apply_cosmetics(img: Image.Image) -> Image.Image:
    """Fixed thumbnail polish: vignette, sharpen, contrast and colour lift."""
    out = raster.apply_vignette(img)
    out = raster.sharpen(out, **COSMETIC_SHARPEN)
    out = raster.linear(out, *COSMETIC_LINEAR)
    return raster.modulate(
        out,
        brightness=COSMETIC_BRIGHTNESS,
        saturation=COSMETIC_SATURATION,
    )


def process_slot(
    path: str | Path,
    index: int,
    rect: SlotRect,
    options: SlotOptions,
) -> Image.Image:
    """
    Load, optionally enhance, and fit one image to its slot.

    Any decode or transform error is re-raised as
    :class:`ImageProcessingFailure` naming the 1-based ``index + 1``.
    """
    try:
        img = load_image(path)
        if options.enhance:
            img = enhance_image(img, options.enhance_level)
        img = raster.cover_fit(img, rect.size)
        if options.cosmetics:
            img = apply_cosmetics(img)
        return img.convert(COLOR_MODE_RGBA)
    except (OSError, ValueError) as exc:
        logger.error("Error processing image %d: %s", index + 1, exc)
        raise ImageProcessingFailure(index + 1, str(exc)) from exc


def process_slots(
    plan: CompositionPlan,
    options: SlotOptions,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> list[Image.Image]:
    """Process every slot concurrently and return buffers in slot order."""
    slots = plan.geometry.slots
    if not slots:
        return []
    workers = max(1, min(max_workers, len(slots)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [
            pool.submit(process_slot, path, i, rect, options)
            for i, (path, rect) in enumerate(
                zip(plan.images, slots, strict=False),
            )
        ]
        return [f.result() for f in futures]


def insert_text_op(
    ops: list[CompositeOp],
    text_op: CompositeOp,
    layer: str,
) -> list[CompositeOp]:
    """Append for ``overlay``; insert at the midpoint for the blended layers."""
    if layer in {"between", "smart-blend"}:
        mid = len(ops) // 2
        return [*ops[:mid], text_op, *ops[mid:]]
    return [*ops, text_op]


def build_draw_list(
    plan: CompositionPlan,
    buffers: Sequence[Image.Image],
    *,
    divider_color: RGB = COLOR_WHITE,
    text_overlay: TextOverlay | None = None,
    canvas_size: tuple[int, int] = THUMBNAIL_SIZE,
) -> list[CompositeOp]:
    """
    Order the layers: slot images, grid dividers, then the text layer.

    Must run on a single thread once every buffer is ready.
    """
    ops = [
        CompositeOp(buf, rect.left, rect.top)
        for buf, rect in zip(buffers, plan.geometry.slots, strict=True)
    ]
    if plan.spec.is_grid:
        ops.extend(
            CompositeOp(g.layer, g.left, g.top, kind="divider")
            for g in render_dividers(plan.geometry.dividers, divider_color)
        )
    if text_overlay is not None and text_overlay.text.strip():
        graphic = render_text_layer(text_overlay, canvas_size)
        blend: BlendMode = (
            "overlay" if text_overlay.layer == "smart-blend" else "over"
        )
        text_op = CompositeOp(
            graphic.layer, graphic.left, graphic.top, blend, kind="text",
        )
        ops = insert_text_op(ops, text_op, text_overlay.layer)
    return ops


def paint(
    ops: Sequence[CompositeOp],
    background: RGB = COLOR_WHITE,
    size: tuple[int, int] = THUMBNAIL_SIZE,
) -> Image.Image:
    """Paint ``ops`` in order onto a background-filled RGBA canvas."""
    canvas = raster.new_canvas(size, background)
    for op in ops:
        raster.paste_layer(canvas, op.layer, (op.left, op.top), op.blend_mode)
    return canvas


def compose(  # noqa: PLR0913
    plan: CompositionPlan,
    *,
    options: SlotOptions | None = None,
    divider_color: RGB = COLOR_WHITE,
    background: RGB = COLOR_WHITE,
    text_overlay: TextOverlay | None = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> Composition:
    """Process the planned slots and paint the finished thumbnail."""
    buffers = process_slots(plan, options or SlotOptions(), max_workers=max_workers)
    ops = build_draw_list(
        plan,
        buffers,
        divider_color=divider_color,
        text_overlay=text_overlay,
    )
    logger.debug("Painting %d layers for layout %s", len(ops), plan.spec.id)
    return Composition(paint(ops, background), plan, tuple(ops))
