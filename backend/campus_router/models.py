from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class WaypointRecord(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(..., ge=-180, le=180, allow_inf_nan=False)

    @field_validator("id", "name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class ConnectionRecord(BaseModel):
    a: str = Field(..., min_length=1)
    b: str = Field(..., min_length=1)
    dist: float = Field(..., gt=0, allow_inf_nan=False)

    @model_validator(mode="after")
    def no_self_loop(self) -> "ConnectionRecord":
        if self.a == self.b:
            raise ValueError(f"connection endpoints must differ (self-loop on {self.a!r})")
        return self


class GraphSnapshot(BaseModel):
    """Full serialized graph: waypoints, connections and opaque metadata.

    ``metadata`` is carried through unvalidated; only an explicit null becomes ``{}``.
    """

    nodes: list[WaypointRecord]
    edges: list[ConnectionRecord]
    metadata: Any = Field(default_factory=dict)

    @field_validator("metadata", mode="before")
    @classmethod
    def null_metadata_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class LatLng(BaseModel):
    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(..., ge=-180, le=180, allow_inf_nan=False)


class GeoJSONLineString(BaseModel):
    type: Literal["LineString"]
    coordinates: list[tuple[float, float]]  # [lng, lat]


class RouteRequest(BaseModel):
    start_id: str = Field(..., min_length=1)
    end_id: str = Field(..., min_length=1)


class RouteStepModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_name: str = Field(..., alias="from")
    to_name: str = Field(..., alias="to")
    distance: float
    description: str


class RouteResponse(BaseModel):
    found: bool
    start_id: str
    end_id: str
    path: list[str] = Field(default_factory=list)
    distance_m: float | None = None
    distance_display_m: int | None = None
    steps: list[RouteStepModel] = Field(default_factory=list)
    geometry: GeoJSONLineString | None = None
    graph_version: int


class WaypointListResponse(BaseModel):
    waypoints: list[WaypointRecord]
    total: int
    query: str | None = None
    graph_version: int


class GraphSummary(BaseModel):
    status: Literal["ok"] = "ok"
    graph_version: int
    waypoint_count: int
    connection_count: int
    component_count: int
    origin: Literal["source", "default", "import"]
    source: str | None = None


class SavedSnapshotResponse(BaseModel):
    path: str
    graph_version: int
