"""Looker domain adapter.

Maps each Looker tool to a fixed sequence of REST calls and projects the
upstream payloads into smaller, stable result shapes.
"""

from typing import Any, Mapping, Optional
from urllib.parse import quote

from pydantic import SecretStr

from shared.errors import ToolExecutionError
from shared.logging import get_logger
from shared.models import DomainConfig, ExecutionContext, ToolDefinition
from domains.base import BaseAdapter, ToolHandler, gather_outcomes
from domains.looker.client import LookerClient
from domains.looker.tools import DEFAULT_ROW_LIMIT, TOOLS

logger = get_logger(__name__)

FIELD_KEYS = ("name", "label", "type", "description")


def _segment(value: Any) -> str:
    """Quote a value for use as a single URL path segment."""
    return quote(str(value), safe="")


def _project(items: Optional[list[dict[str, Any]]], keys: tuple[str, ...]) -> list[dict[str, Any]]:
    """Keep only the allow-listed keys of each item."""
    return [{key: item.get(key) for key in keys} for item in items or []]


def row_limit(value: Any, default: Optional[str] = DEFAULT_ROW_LIMIT) -> Optional[str]:
    """Coerce a row limit to the string form Looker expects."""
    if value is None or value == "":
        return default
    return str(value)


def build_query(args: dict[str, Any]) -> dict[str, Any]:
    """Build a Looker query body from tool arguments."""
    query: dict[str, Any] = {
        "model": args.get("model"),
        "view": args.get("explore"),
        "fields": args.get("fields") or [],
        "filters": args.get("filters") or {},
        "sorts": args.get("sorts") or [],
        "pivots": args.get("pivots") or [],
        "limit": row_limit(args.get("limit")),
    }
    if args.get("vis_config"):
        query["vis_config"] = args["vis_config"]
    return query


def element_query_id(element: dict[str, Any]) -> Optional[Any]:
    """Return the id of the query a dashboard element runs, if any."""
    return (
        element.get("query_id")
        or (element.get("query") or {}).get("id")
        or (element.get("result_maker") or {}).get("query_id")
    )


class LookerAdapter(BaseAdapter):
    """
    Looker Domain Adapter.

    Provides tools for:
    - LookML metadata (models, explores, fields)
    - Running and saving queries, looks and dashboards
    - Instance diagnostics (pulse, analyze, vacuum)
    """

    def __init__(
        self,
        config: DomainConfig,
        client: LookerClient,
        api_prefix: str = "/api/4.0"
    ) -> None:
        self.client = client
        self.api_prefix = api_prefix
        self.base_url = config.base_url.rstrip("/")
        self._handlers: dict[str, ToolHandler] = {
            "get_models": self._get_models,
            "get_explores": self._get_explores,
            "get_dimensions": self._get_dimensions,
            "get_measures": self._get_measures,
            "get_filters": self._get_filters,
            "get_parameters": self._get_parameters,
            "query": self._query,
            "query_sql": self._query_sql,
            "query_url": self._query_url,
            "get_looks": self._get_looks,
            "run_look": self._run_look,
            "make_look": self._make_look,
            "get_dashboards": self._get_dashboards,
            "run_dashboard": self._run_dashboard,
            "make_dashboard": self._make_dashboard,
            "health_pulse": self._health_pulse,
            "health_analyze": self._health_analyze,
            "health_vacuum": self._health_vacuum,
        }
        super().__init__(config)

    @property
    def tools(self) -> list[ToolDefinition]:
        return list(TOOLS)

    @property
    def handlers(self) -> Mapping[str, ToolHandler]:
        return self._handlers

    async def _call(
        self,
        credential: SecretStr,
        method: str,
        path: str,
        body: Optional[Any] = None,
        params: Optional[dict[str, Any]] = None
    ) -> Any:
        return await self.client.call(credential, method, f"{self.api_prefix}{path}", body=body, params=params)

    # LookML metadata

    async def _get_models(self, args: dict[str, Any], context: ExecutionContext) -> list[dict[str, Any]]:
        models = await self._call(context.credential, "GET", "/lookml_models")
        return _project(models, ("name", "label", "project_name"))

    async def _get_explores(self, args: dict[str, Any], context: ExecutionContext) -> list[dict[str, Any]]:
        model = await self._call(
            context.credential, "GET", f"/lookml_models/{_segment(args.get('model'))}"
        )
        return _project((model or {}).get("explores"), ("name", "label", "description", "group_label"))

    async def _explore_fields(
        self,
        args: dict[str, Any],
        context: ExecutionContext,
        kind: str
    ) -> list[dict[str, Any]]:
        explore = await self._call(
            context.credential,
            "GET",
            f"/lookml_models/{_segment(args.get('model'))}/explores/{_segment(args.get('explore'))}",
        )
        fields = (explore or {}).get("fields") or {}
        return _project(fields.get(kind), FIELD_KEYS)

    async def _get_dimensions(self, args: dict[str, Any], context: ExecutionContext) -> list[dict[str, Any]]:
        return await self._explore_fields(args, context, "dimensions")

    async def _get_measures(self, args: dict[str, Any], context: ExecutionContext) -> list[dict[str, Any]]:
        return await self._explore_fields(args, context, "measures")

    async def _get_filters(self, args: dict[str, Any], context: ExecutionContext) -> list[dict[str, Any]]:
        return await self._explore_fields(args, context, "filters")

    async def _get_parameters(self, args: dict[str, Any], context: ExecutionContext) -> list[dict[str, Any]]:
        return await self._explore_fields(args, context, "parameters")

    # Queries

    async def _query(self, args: dict[str, Any], context: ExecutionContext) -> Any:
        return await self._call(context.credential, "POST", "/queries/run/json", body=build_query(args))

    async def _query_sql(self, args: dict[str, Any], context: ExecutionContext) -> Any:
        # Looker answers with text/plain here
        return await self._call(context.credential, "POST", "/queries/run/sql", body=build_query(args))

    async def _query_url(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        query = await self._call(context.credential, "POST", "/queries", body=build_query(args))
        url = f"{self.base_url}/explore/{_segment(args.get('model'))}/{_segment(args.get('explore'))}"
        qid = query.get("client_id") or query.get("slug")
        if qid:
            url = f"{url}?qid={quote(str(qid), safe='')}"
        return {"query_id": query.get("id"), "url": url}

    # Looks

    async def _get_looks(self, args: dict[str, Any], context: ExecutionContext) -> Any:
        params = {
            "title": args.get("title") or None,
            "limit": row_limit(args.get("limit"), default=None),
        }
        return await self._call(context.credential, "GET", "/looks/search", params=params)

    async def _run_look(self, args: dict[str, Any], context: ExecutionContext) -> Any:
        return await self._call(
            context.credential,
            "GET",
            f"/looks/{_segment(args.get('look_id'))}/run/json",
            params={"limit": row_limit(args.get("limit"))},
        )

    async def _personal_folder_id(self, context: ExecutionContext) -> Any:
        me = await self._call(context.credential, "GET", "/user")
        folder_id = (me or {}).get("personal_folder_id")
        if folder_id is None:
            raise ToolExecutionError("Could not resolve the personal folder of the current user")
        return folder_id

    async def _create_query(self, args: dict[str, Any], context: ExecutionContext) -> Any:
        query = await self._call(context.credential, "POST", "/queries", body=build_query(args))
        return query["id"]

    async def _make_look(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        folder_id = await self._personal_folder_id(context)
        query_id = await self._create_query(args, context)
        look = await self._call(
            context.credential,
            "POST",
            "/looks",
            body={
                "title": args.get("title"),
                "description": args.get("description") or "",
                "query_id": query_id,
                "folder_id": folder_id,
            },
        )
        logger.info("Look created", look_id=look["id"], request_id=context.request_id)
        return {"id": look["id"], "url": f"{self.base_url}/looks/{look['id']}"}

    # Dashboards

    async def _get_dashboards(self, args: dict[str, Any], context: ExecutionContext) -> Any:
        params = {
            "title": args.get("title") or None,
            "limit": row_limit(args.get("limit"), default=None),
        }
        return await self._call(context.credential, "GET", "/dashboards", params=params)

    async def _run_dashboard(self, args: dict[str, Any], context: ExecutionContext) -> list[dict[str, Any]]:
        dashboard_id = _segment(args.get("dashboard_id"))
        limit = row_limit(args.get("limit"))
        elements = await self._call(
            context.credential, "GET", f"/dashboards/{dashboard_id}/dashboard_elements"
        )

        runnable = [e for e in elements or [] if element_query_id(e)]
        runs = {
            str(position): self._call(
                context.credential,
                "GET",
                f"/queries/{_segment(element_query_id(element))}/run/json",
                params={"limit": limit},
            )
            for position, element in enumerate(runnable)
        }
        outcomes = await gather_outcomes(runs)

        results = []
        for position, element in enumerate(runnable):
            outcome = outcomes[str(position)]
            entry = {
                "element_id": element.get("id"),
                "title": element.get("title") or element.get("title_text"),
            }
            if outcome.ok:
                entry["data"] = outcome.data
            else:
                entry["error"] = outcome.error
            results.append(entry)
        return results

    async def _make_dashboard(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        folder_id = await self._personal_folder_id(context)
        query_id = await self._create_query(args, context)
        dashboard = await self._call(
            context.credential,
            "POST",
            "/dashboards",
            body={
                "title": args.get("title"),
                "description": args.get("description") or "",
                "folder_id": folder_id,
            },
        )
        element = await self._call(
            context.credential,
            "POST",
            "/dashboard_elements",
            body={
                "dashboard_id": dashboard["id"],
                "query_id": query_id,
                "type": "vis",
                "title": args.get("element_title") or args.get("title"),
            },
        )
        logger.info("Dashboard created", dashboard_id=dashboard["id"], request_id=context.request_id)
        return {
            "id": dashboard["id"],
            "url": f"{self.base_url}/dashboards/{dashboard['id']}",
            "element_id": element.get("id") if element else None,
        }

    # Diagnostics: every section is best effort

    async def _sections(self, calls: dict[str, Any]) -> dict[str, Any]:
        # an unreadable payload fails only its own section
        outcomes = await gather_outcomes(calls, failures=(Exception,))
        return {key: outcome.as_section() for key, outcome in outcomes.items()}

    async def _health_pulse(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        credential = context.credential

        async def version() -> dict[str, Any]:
            versions = await self._call(credential, "GET", "/versions")
            return {
                "looker_release_version": versions.get("looker_release_version"),
                "api_version": (versions.get("current_version") or {}).get("version"),
            }

        async def connections() -> list[dict[str, Any]]:
            items = await self._call(credential, "GET", "/connections")
            return _project(items, ("name", "dialect_name", "host", "database"))

        async def schedules() -> dict[str, Any]:
            plans = await self._call(credential, "GET", "/scheduled_plans", params={"all_users": "true"})
            plans = plans or []
            return {
                "total": len(plans),
                "disabled": sum(1 for p in plans if p.get("enabled") is False),
                "plans": _project(plans, ("id", "name", "enabled", "crontab")),
            }

        return await self._sections({
            "version": version(),
            "connections": connections(),
            "schedules": schedules(),
        })

    async def _health_analyze(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        credential = context.credential
        only_model = args.get("model")

        async def projects() -> list[dict[str, Any]]:
            items = await self._call(credential, "GET", "/projects")
            return _project(items, ("id", "name", "git_production_branch_name"))

        async def models() -> list[dict[str, Any]]:
            items = await self._call(credential, "GET", "/lookml_models")
            return [
                {
                    "name": m.get("name"),
                    "project_name": m.get("project_name"),
                    "explore_count": len(m.get("explores") or []),
                    "hidden_explore_count": sum(1 for e in m.get("explores") or [] if e.get("hidden")),
                }
                for m in items or []
                if not only_model or m.get("name") == only_model
            ]

        return await self._sections({"projects": projects(), "models": models()})

    async def _health_vacuum(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        credential = context.credential
        limit = row_limit(args.get("limit"), default=None)

        async def search(path: str, **filters: str) -> list[dict[str, Any]]:
            items = await self._call(
                credential, "GET", path, params={**filters, "fields": "id,title", "limit": limit}
            )
            return _project(items, ("id", "title"))

        return await self._sections({
            "deleted_dashboards": search("/dashboards/search", deleted="true"),
            "deleted_looks": search("/looks/search", deleted="true"),
            "unviewed_dashboards": search("/dashboards/search", view_count="0"),
        })
