"""Dashboard Starlette application."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse
from starlette.routing import Mount, Route
from starlette.staticfiles import StaticFiles

from ..brain.parietal import ForceDirectedLayout, filter_graph
from ..container import get_container
from ..domain.models import ProcessingStage

logger = logging.getLogger(__name__)

# Path to static files
STATIC_DIR = Path(__file__).parent / "static"


class BadRequest(Exception):
    """Raised by request parsing helpers; answered with status 400."""


def _bool_param(request: Request, name: str, default: bool) -> bool:
    value = request.query_params.get(name)
    if value is None:
        return default
    return value.lower() not in ("false", "0", "no")


def _int_param(request: Request, name: str, default: int | None) -> int | None:
    value = request.query_params.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as e:
        raise BadRequest(f"{name} must be an integer") from e


def _float_param(request: Request, name: str, default: float | None) -> float | None:
    value = request.query_params.get(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as e:
        raise BadRequest(f"{name} must be a number") from e


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse({"success": False, "error": message}, status_code=400)


async def index(request: Request) -> HTMLResponse:
    """Serve the main dashboard page."""
    html_path = STATIC_DIR / "index.html"
    if html_path.exists():
        return HTMLResponse(html_path.read_text())
    return HTMLResponse("<h1>Dashboard not found</h1>", status_code=404)


async def api_health(request: Request) -> JSONResponse:
    """Liveness check."""
    return JSONResponse({"success": True, "status": "ok"})


async def api_graph(request: Request) -> JSONResponse:
    """Knowledge graph data plus stored statistics (or concept insights)."""
    agent_id = request.path_params["agent_id"]
    try:
        service = get_container().graph_service

        if _bool_param(request, "insights", False):
            insights = service.get_concept_insights(agent_id)
            return JSONResponse({"success": True, "insights": insights.to_dict()})

        data = service.get_knowledge_graph_data(
            agent_id,
            max_nodes=_int_param(request, "maxNodes", None),
            min_link_strength=_float_param(request, "minLinkStrength", None),
            include_memories=_bool_param(request, "includeMemories", True),
        )
        graph = service.get_graph(agent_id)

        return JSONResponse({
            "success": True,
            "graph_data": data.to_dict(),
            "stats": graph.stats.model_dump(mode="json"),
        })
    except BadRequest as e:
        return _bad_request(str(e))
    except Exception as e:
        logger.exception("Error getting memory graph")
        return JSONResponse({"success": False, "error": str(e)}, status_code=500)


async def api_graph_action(request: Request) -> JSONResponse:
    """Run a graph action: rebuild, get_linked or get_relevant."""
    agent_id = request.path_params["agent_id"]
    try:
        body = await request.json()
    except json.JSONDecodeError:
        return _bad_request("Request body must be JSON")
    if not isinstance(body, dict):
        return _bad_request("Request body must be a JSON object")

    try:
        service = get_container().graph_service
        action = body.get("action")

        if action == "rebuild":
            graph = service.rebuild_graph(agent_id)
            return JSONResponse({
                "success": True,
                "stats": graph.stats.model_dump(mode="json"),
            })

        if action == "get_linked":
            memory_id = body.get("memoryId") or body.get("memory_id")
            if not memory_id:
                return _bad_request("memoryId is required")
            linked = service.get_linked_memories(agent_id, memory_id)
            return JSONResponse({
                "success": True,
                "linked_memories": [item.model_dump(mode="json") for item in linked],
            })

        if action == "get_relevant":
            query = body.get("query")
            if not query:
                return _bad_request("query is required")
            max_memories = body.get("maxMemories") or body.get("max_memories") or 10
            try:
                max_memories = int(max_memories)
            except (TypeError, ValueError):
                return _bad_request("maxMemories must be an integer")
            memories = service.get_enhanced_relevant_memories(agent_id, query, max_memories)
            return JSONResponse({
                "success": True,
                "memories": [m.model_dump(mode="json") for m in memories],
            })

        return _bad_request("Invalid action")
    except Exception as e:
        logger.exception("Error processing memory graph request")
        return JSONResponse({"success": False, "error": str(e)}, status_code=500)


async def api_insights(request: Request) -> JSONResponse:
    """Concept insights for an agent."""
    agent_id = request.path_params["agent_id"]
    try:
        insights = get_container().graph_service.get_concept_insights(agent_id)
        return JSONResponse({"success": True, "insights": insights.to_dict()})
    except Exception as e:
        logger.exception("Error getting concept insights")
        return JSONResponse({"success": False, "error": str(e)}, status_code=500)


async def api_layout(request: Request) -> JSONResponse:
    """Force-directed positions of the (filtered) knowledge graph."""
    agent_id = request.path_params["agent_id"]
    try:
        container = get_container()
        data = container.graph_service.get_knowledge_graph_data(
            agent_id,
            max_nodes=_int_param(request, "maxNodes", None),
            min_link_strength=_float_param(request, "minLinkStrength", None),
        )
        engine = ForceDirectedLayout(
            container.config.heuristics.force, seed=_int_param(request, "seed", None)
        )
        kept_nodes, kept_edges = filter_graph(
            data,
            category=request.query_params.get("category", "all"),
            show_memories=_bool_param(request, "showMemories", True),
        )
        nodes = engine.run(
            [n.id for n in kept_nodes],
            [(e.source, e.target, e.strength) for e in kept_edges],
        )
        return JSONResponse({
            "success": True,
            "nodes": [n.model_dump() for n in nodes],
            "edges": [e.model_dump(mode="json") for e in kept_edges],
        })
    except BadRequest as e:
        return _bad_request(str(e))
    except Exception as e:
        logger.exception("Error computing layout")
        return JSONResponse({"success": False, "error": str(e)}, status_code=500)


async def api_frame(request: Request) -> JSONResponse:
    """Current visualization frame of an agent's mind view."""
    agent_id = request.path_params["agent_id"]
    stage_param = request.query_params.get("stage")
    stage = None
    if stage_param is not None:
        try:
            stage = ProcessingStage(stage_param)
        except ValueError:
            return _bad_request(f"Invalid stage: {stage_param}")

    try:
        session = get_container().visualization_session(agent_id)
        frame = session.generate_frame(stage=stage, query=request.query_params.get("query"))
        return JSONResponse({"success": True, "frame": frame.to_dict()})
    except Exception as e:
        logger.exception("Error generating visualization frame")
        return JSONResponse({"success": False, "error": str(e)}, status_code=500)


def create_dashboard_app() -> Starlette:
    """Create the dashboard Starlette application."""
    routes = [
        Route("/", index),
        Route("/api/health", api_health),
        Route("/api/agents/{agent_id}/graph", api_graph, methods=["GET"]),
        Route("/api/agents/{agent_id}/graph", api_graph_action, methods=["POST"]),
        Route("/api/agents/{agent_id}/insights", api_insights),
        Route("/api/agents/{agent_id}/layout", api_layout),
        Route("/api/agents/{agent_id}/frame", api_frame),
    ]

    # Add static files if directory exists
    if STATIC_DIR.exists():
        routes.append(
            Mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
        )

    app = Starlette(routes=routes)
    return app
