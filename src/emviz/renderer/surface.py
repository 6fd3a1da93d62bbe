# MIT License (see LICENSE)
"""
Drawable-surface abstraction for the overlay renderer.

The overlay code never talks to a graphics engine directly. It creates
Drawable primitives through a DrawableSurface, sets their position,
rotation, opacity and colour, and adds or removes them from the surface's
display list. Backends (a canvas scene graph, matplotlib, a web front end)
subclass DrawableSurface; this module ships two headless ones:

    - RecordingSurface: keeps an in-memory display list for tests and
      offline inspection.
    - NullSurface: discards everything, for benchmarking the core.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import numpy as np

from ..util import f64


@dataclass(frozen=True)
class Texture:
    """
    Pre-rendered geometry that sprites can share.

    Attributes:
        key: Cache key the texture was generated for.
        segments: Frozen copy of the source drawable's geometry.
        line_width: Stroke width baked into the texture.
        color: Stroke colour baked into the texture.
    """
    key: tuple
    segments: tuple
    line_width: float
    color: int


@dataclass
class Drawable:
    """
    A renderable unit: vector graphic, text label, marker or sprite.

    Geometry lives in `segments` as (command, *args) tuples in local
    coordinates; position, rotation, alpha and colour are independent
    attributes that can be changed without rebuilding geometry.

    Commands:
        ("line", x0, y0, x1, y1)
        ("polygon", ((x, y), ...))      filled
        ("circle", x, y, r)             filled
    """
    kind: str
    name: str = ""
    position: np.ndarray | tuple[float, float] = (0.0, 0.0)
    rotation: float = 0.0
    alpha: float = 1.0
    color: int = 0xFFFFFF
    line_width: float = 1.0
    z_index: int = 0
    interactive: bool = False
    segments: list[tuple] = field(default_factory=list)
    text: str | None = None
    font_size: float = 12.0
    symbol: str | None = None
    size: float = 0.0
    texture: Texture | None = None

    def __post_init__(self) -> None:
        self.position = f64(self.position)

    def set_position(self, x: float, y: float) -> None:
        self.position[0] = x
        self.position[1] = y

    def line_style(self, width: float, color: int, alpha: float = 1.0) -> None:
        self.line_width = width
        self.color = color
        self.alpha = alpha

    def line(self, x0: float, y0: float, x1: float, y1: float) -> None:
        self.segments.append(("line", x0, y0, x1, y1))

    def polygon(self, points) -> None:
        self.segments.append(("polygon", tuple((float(x), float(y)) for x, y in points)))

    def circle(self, x: float, y: float, r: float) -> None:
        self.segments.append(("circle", x, y, r))

    def clear(self) -> None:
        """Reset geometry and styling so the drawable can be reused."""
        self.name = ""
        self.position[:] = 0.0
        self.rotation = 0.0
        self.alpha = 1.0
        self.color = 0xFFFFFF
        self.line_width = 1.0
        self.z_index = 0
        self.segments.clear()
        self.text = None
        self.symbol = None
        self.size = 0.0
        self.texture = None


class DrawableSurface(ABC):
    """
    Abstract base class for display surfaces.

    Subclasses provide the display list (add/remove/children). Primitive
    creation and texture generation have headless defaults that backends
    may override to build native objects.

    Usage:
        surface = RecordingSurface(800, 600)
        arrow = surface.create_vector()
        arrow.line(0, 0, 30, 0)
        surface.add(arrow)
    """

    def __init__(self, width: float, height: float):
        self.width = width
        self.height = height
        self.textures_generated = 0

    @abstractmethod
    def add(self, drawable: Drawable) -> None:
        """Append a drawable to the display list."""
        ...

    @abstractmethod
    def remove(self, drawable: Drawable) -> None:
        """Remove a drawable from the display list if present."""
        ...

    @property
    @abstractmethod
    def children(self) -> list[Drawable]:
        """Current display list, in insertion order."""
        ...

    def begin_frame(self, time: float) -> None:
        """Hook called before a frame's overlay pass."""

    def end_frame(self) -> None:
        """Hook called after a frame's overlay pass."""

    def resize(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    def create_vector(self) -> Drawable:
        return Drawable(kind="vector")

    def create_text(self, text: str, font_size: float = 12.0, color: int = 0xFFFFFF) -> Drawable:
        return Drawable(kind="text", text=text, font_size=font_size, color=color)

    def create_marker(self, symbol: str, size: float, color: int = 0xFFFFFF, alpha: float = 1.0) -> Drawable:
        return Drawable(kind="marker", symbol=symbol, size=size, color=color, alpha=alpha)

    def generate_texture(self, drawable: Drawable, key: tuple = ()) -> Texture:
        """Render a drawable's geometry once so sprites can reuse it."""
        self.textures_generated += 1
        return Texture(
            key=key,
            segments=tuple(drawable.segments),
            line_width=drawable.line_width,
            color=drawable.color,
        )

    def create_sprite(self, texture: Texture) -> Drawable:
        return Drawable(kind="sprite", texture=texture, color=texture.color)


class RecordingSurface(DrawableSurface):
    """
    In-memory display list.

    Example:
        surface = RecordingSurface(800, 600)
        renderer = VectorOverlayRenderer(surface)
        renderer.draw_electric_field(charges, calc)
        arrows = surface.named("fieldVector")
    """

    def __init__(self, width: float = 800.0, height: float = 600.0):
        super().__init__(width, height)
        self._children: list[Drawable] = []
        self.frames = 0
        self.time = 0.0

    def add(self, drawable: Drawable) -> None:
        self._children.append(drawable)

    def remove(self, drawable: Drawable) -> None:
        for i, child in enumerate(self._children):
            if child is drawable:
                del self._children[i]
                return

    @property
    def children(self) -> list[Drawable]:
        return list(self._children)

    def begin_frame(self, time: float) -> None:
        self.time = time

    def end_frame(self) -> None:
        self.frames += 1

    def named(self, prefix: str) -> list[Drawable]:
        """Children whose name starts with prefix."""
        return [c for c in self._children if c.name.startswith(prefix)]

    def of_kind(self, kind: str) -> list[Drawable]:
        return [c for c in self._children if c.kind == kind]

    def clear(self) -> None:
        self._children.clear()


class NullSurface(DrawableSurface):
    """
    Surface that draws nothing.

    Useful for timing the calculator and aggregator without a backend.
    """

    def __init__(self, width: float = 800.0, height: float = 600.0):
        super().__init__(width, height)

    def add(self, drawable: Drawable) -> None:
        pass

    def remove(self, drawable: Drawable) -> None:
        pass

    @property
    def children(self) -> list[Drawable]:
        return []
