# src/layout/models.py — v1
"""Layout domain models: positioned geometry handed to the renderer.

Coordinates are top-left corners in renderer units; ``Bounds`` covers
every node plus the margins.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from narragraph.config.settings import Settings


class Point(BaseModel):
    """2D point."""

    x: float
    y: float


class PositionedNode(BaseModel):
    """Node rectangle with its top-left corner at (x, y)."""

    id: str
    x: float
    y: float
    w: float = Field(gt=0)
    h: float = Field(gt=0)
    label: str
    type: str | None = None

    @property
    def center(self) -> Point:
        return Point(x=self.x + self.w / 2, y=self.y + self.h / 2)


class PositionedEdge(BaseModel):
    """Routed edge; ``points`` are optional bend points between the endpoints."""

    id: str
    source: str
    target: str
    type: str = "default"
    label: str | None = None
    points: list[Point] | None = None


class Bounds(BaseModel):
    """Canvas extent including margins."""

    width: float
    height: float
    margin_x: float
    margin_y: float


class LayoutData(BaseModel):
    """Complete layout of one diagram."""

    nodes: list[PositionedNode]
    edges: list[PositionedEdge] = Field(default_factory=list)
    bounds: Bounds
    strategy: str
    fallback_used: bool = False

    def node_by_id(self, node_id: str) -> PositionedNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


class LayoutConfig(BaseModel):
    """Geometry parameters shared by all strategies."""

    rank_separation: float = Field(default=50.0, ge=0)
    node_separation: float = Field(default=50.0, ge=0)
    margin_x: float = Field(default=50.0, ge=0)
    margin_y: float = Field(default=50.0, ge=0)
    node_height: float = 60.0
    min_node_width: float = 120.0
    max_node_width: float = 320.0
    char_width: float = 8.0
    node_padding: float = 16.0
    crossing_sweeps: int = 4

    @classmethod
    def from_settings(cls, settings: Settings) -> LayoutConfig:
        return cls(
            rank_separation=settings.layout_rank_separation,
            node_separation=settings.layout_node_separation,
            margin_x=settings.layout_margin_x,
            margin_y=settings.layout_margin_y,
            node_height=settings.layout_node_height,
            min_node_width=settings.layout_min_node_width,
            max_node_width=settings.layout_max_node_width,
            char_width=settings.layout_char_width,
            node_padding=settings.layout_node_padding,
            crossing_sweeps=settings.layout_crossing_sweeps,
        )
