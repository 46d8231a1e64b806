"""Closed catalog of canvas arrangements, keyed by arrangement id."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from thumbnail_composer.errors import InvalidLayout

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable

    from thumbnail_composer.type_defs import ArrangementKind

# Earlier split-only vocabulary still accepted as layout modes
LAYOUT_ALIASES: Mapping[str, str] = MappingProxyType({
    "2-split": "1x2",
    "3-split": "1x3",
})


@dataclass(frozen=True, slots=True)
class ArrangementSpec:
    """One way of dividing the canvas into image slots."""

    id: str
    kind: ArrangementKind
    max_images: int
    rows: int | None = None
    cols: int | None = None
    shape_name: str | None = None

    def __post_init__(self) -> None:
        if self.max_images <= 0:
            msg = f"{self.id}: max_images must be positive"
            raise ValueError(msg)
        if self.kind == "grid":
            if not self.rows or not self.cols:
                msg = f"{self.id}: grid arrangements need rows and cols"
                raise ValueError(msg)
            if self.rows * self.cols != self.max_images:
                msg = f"{self.id}: max_images must equal rows * cols"
                raise ValueError(msg)
        elif not self.shape_name:
            msg = f"{self.id}: custom arrangements need a shape name"
            raise ValueError(msg)

    @property
    def is_grid(self) -> bool:
        return self.kind == "grid"


def grid(rows: int, cols: int) -> ArrangementSpec:
    """Grid spec with the conventional ``<rows>x<cols>`` id."""
    return ArrangementSpec(
        id=f"{rows}x{cols}",
        kind="grid",
        max_images=rows * cols,
        rows=rows,
        cols=cols,
    )


def custom(shape_name: str, max_images: int) -> ArrangementSpec:
    """Custom-shape spec whose id is the shape name."""
    return ArrangementSpec(
        id=shape_name,
        kind="custom",
        max_images=max_images,
        shape_name=shape_name,
    )


class ArrangementCatalog(Mapping[str, ArrangementSpec]):
    """
    Immutable mapping of arrangement id to spec.

    Lookups are pure; unknown ids raise :class:`InvalidLayout` from
    :meth:`require` and return ``None`` from :meth:`get`.
    """

    def __init__(self, specs: Iterable[ArrangementSpec]) -> None:
        table: dict[str, ArrangementSpec] = {}
        for spec in specs:
            if spec.id in table:
                msg = f"Duplicate arrangement id: {spec.id}"
                raise ValueError(msg)
            table[spec.id] = spec
        self._specs: Mapping[str, ArrangementSpec] = MappingProxyType(table)

    def __getitem__(self, key: str) -> ArrangementSpec:
        return self._specs[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def require(self, arrangement_id: str) -> ArrangementSpec:
        """Return the spec for ``arrangement_id`` or raise InvalidLayout."""
        try:
            return self._specs[arrangement_id]
        except KeyError as exc:
            raise InvalidLayout(arrangement_id) from exc

    def resolve_mode(self, layout_mode: str) -> ArrangementSpec:
        """Resolve an explicit layout mode (id or alias) to its spec."""
        key = layout_mode.strip().lower()
        return self.require(LAYOUT_ALIASES.get(key, key))


DEFAULT_CATALOG = ArrangementCatalog([
    grid(1, 1),
    grid(2, 1),
    grid(1, 2),
    grid(2, 2),
    grid(3, 1),
    grid(1, 3),
    grid(2, 3),
    grid(3, 2),
    custom("hero-side", 4),
    custom("corner-grid", 5),
    custom("banner-split", 3),
    custom("spotlight", 4),
    custom("l-shape", 5),
])
