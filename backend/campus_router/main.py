from __future__ import annotations

import time
import uuid
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from .graph_errors import CampusGraphError, InvalidRequestError, NotFoundError, ValidationError
from .graph_store import Waypoint
from .logging_utils import bind_log_context, log_event
from .models import (
    GeoJSONLineString,
    GraphSnapshot,
    GraphSummary,
    LatLng,
    RouteRequest,
    RouteResponse,
    RouteStepModel,
    SavedSnapshotResponse,
    WaypointListResponse,
    WaypointRecord,
)
from .route_service import CampusRouter, NoRouteFound
from .settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.router = CampusRouter.from_source(settings.graph_source)
    yield


app = FastAPI(title="Campus Router", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def campus_router(request: Request) -> CampusRouter:
    router: CampusRouter | None = getattr(request.app.state, "router", None)  # type: ignore[attr-defined]
    if router is None:
        raise HTTPException(status_code=503, detail="campus graph not initialised")
    return router


RouterDep = Annotated[CampusRouter, Depends(campus_router)]

_STATUS_BY_ERROR: tuple[tuple[type[CampusGraphError], int], ...] = (
    (NotFoundError, 404),
    (InvalidRequestError, 400),
    (ValidationError, 422),
)


def _http_error(exc: CampusGraphError) -> HTTPException:
    status = next((code for kind, code in _STATUS_BY_ERROR if isinstance(exc, kind)), 400)
    return HTTPException(status_code=status, detail=exc.as_detail())


def _waypoint_record(wp: Waypoint) -> WaypointRecord:
    return wp.to_record()


# Handlers are sync on purpose: the graph store blocks on its read/write lock,
# so FastAPI runs them in its threadpool instead of on the event loop.


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "Campus router is running. Visit /docs for the API UI.", "docs": "/docs"}


@app.get("/health", response_model=GraphSummary)
def health(router: RouterDep) -> GraphSummary:
    return GraphSummary(**router.summary())


@app.get("/waypoints", response_model=WaypointListResponse)
def list_waypoints(
    router: RouterDep,
    q: Annotated[str | None, Query(max_length=200)] = None,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> WaypointListResponse:
    if q is not None and q.strip():
        found = router.search(q, limit=limit or settings.search_result_limit)
    else:
        found = router.list_waypoints()
        if limit is not None:
            found = found[:limit]
    return WaypointListResponse(
        waypoints=[_waypoint_record(wp) for wp in found],
        total=len(found),
        query=q,
        graph_version=router.store.version,
    )


@app.get("/waypoints/{waypoint_id}", response_model=WaypointRecord)
def get_waypoint(waypoint_id: str, router: RouterDep) -> WaypointRecord:
    try:
        return _waypoint_record(router.get_waypoint(waypoint_id))
    except CampusGraphError as e:
        raise _http_error(e) from e


@app.patch("/waypoints/{waypoint_id}/position", response_model=WaypointRecord)
def move_waypoint(waypoint_id: str, position: LatLng, router: RouterDep) -> WaypointRecord:
    try:
        moved = router.move_waypoint(waypoint_id, position.lat, position.lng)
    except CampusGraphError as e:
        raise _http_error(e) from e
    return _waypoint_record(moved)


@app.post("/route", response_model=RouteResponse)
def compute_route(req: RouteRequest, router: RouterDep) -> RouteResponse:
    t0 = time.perf_counter()
    with bind_log_context(request_id=str(uuid.uuid4()), start_id=req.start_id, end_id=req.end_id):
        try:
            result = router.find_route(req.start_id, req.end_id)
        except CampusGraphError as e:
            log_event(
                "route_request",
                outcome=e.reason_code,
                duration_ms=round((time.perf_counter() - t0) * 1000, 2),
            )
            raise _http_error(e) from e

        if isinstance(result, NoRouteFound):
            response = RouteResponse(
                found=False,
                start_id=req.start_id,
                end_id=req.end_id,
                graph_version=result.graph_version,
            )
        else:
            response = RouteResponse(
                found=True,
                start_id=req.start_id,
                end_id=req.end_id,
                path=list(result.path),
                distance_m=result.distance,
                distance_display_m=result.display_distance,
                steps=[
                    RouteStepModel(
                        from_name=step.from_name,
                        to_name=step.to_name,
                        distance=step.distance,
                        description=step.description,
                    )
                    for step in result.steps
                ],
                geometry=GeoJSONLineString(type="LineString", coordinates=list(result.coordinates)),
                graph_version=result.graph_version,
            )

        log_event(
            "route_request",
            outcome="found" if response.found else "no_route",
            hop_count=max(len(response.path) - 1, 0),
            distance_m=response.distance_m,
            graph_version=response.graph_version,
            duration_ms=round((time.perf_counter() - t0) * 1000, 2),
        )
    return response


@app.get("/graph/export", response_model=GraphSnapshot)
def export_graph(router: RouterDep) -> GraphSnapshot:
    return router.export_snapshot()


@app.post("/graph/export/save", response_model=SavedSnapshotResponse)
def save_graph(router: RouterDep) -> SavedSnapshotResponse:
    version = router.store.version
    path = router.save_snapshot()
    return SavedSnapshotResponse(path=str(path), graph_version=version)


@app.post("/graph/import", response_model=GraphSummary)
def import_graph(payload: Annotated[Any, Body()], router: RouterDep) -> GraphSummary:
    with bind_log_context(request_id=str(uuid.uuid4())):
        try:
            router.import_snapshot(payload)
        except CampusGraphError as e:
            raise _http_error(e) from e
    return GraphSummary(**router.summary())


@app.post("/graph/reload", response_model=GraphSummary)
def reload_graph(router: RouterDep) -> GraphSummary:
    with bind_log_context(request_id=str(uuid.uuid4())):
        router.reload(settings.graph_source)
    return GraphSummary(**router.summary())
