"""Looker tool descriptors.

Declaration order here is the order tools/list reports.
"""

from shared.models import ToolDefinition
from shared.schema import (
    integer_prop,
    object_prop,
    object_schema,
    string_list_prop,
    string_prop,
)

DEFAULT_ROW_LIMIT = "500"

MODEL = string_prop("The model containing the explore")
EXPLORE = string_prop("The explore containing the fields")

_QUERY_PROPERTIES = {
    "model": MODEL,
    "explore": string_prop("The explore to be queried"),
    "fields": string_list_prop("The fields to retrieve"),
    "filters": object_prop("The filters for the query, keyed by field name"),
    "sorts": string_list_prop("Sort fields, e.g. 'orders.count desc'"),
    "pivots": string_list_prop("Fields to pivot on"),
    "limit": integer_prop(f"Row limit (default {DEFAULT_ROW_LIMIT})"),
}
_QUERY_REQUIRED = ["model", "explore", "fields"]


def _explore_tool(name: str, kind: str) -> ToolDefinition:
    return ToolDefinition(
        name=name,
        description=f"Get {kind} for an explore",
        input_schema=object_schema(
            {"model": MODEL, "explore": EXPLORE},
            required=["model", "explore"],
        ),
    )


TOOLS: list[ToolDefinition] = [
    ToolDefinition(
        name="get_models",
        description="Get all available LookML models",
        input_schema=object_schema(),
    ),
    ToolDefinition(
        name="get_explores",
        description="Get explores for a given model",
        input_schema=object_schema(
            {"model": string_prop("The model containing the explores")},
            required=["model"],
        ),
    ),
    _explore_tool("get_dimensions", "dimensions"),
    _explore_tool("get_measures", "measures"),
    _explore_tool("get_filters", "filter-only fields"),
    _explore_tool("get_parameters", "parameters"),
    ToolDefinition(
        name="query",
        description="Run a query against a Looker explore",
        input_schema=object_schema(_QUERY_PROPERTIES, required=_QUERY_REQUIRED),
    ),
    ToolDefinition(
        name="query_sql",
        description="Generate the SQL Looker would run for a query, without running it",
        input_schema=object_schema(_QUERY_PROPERTIES, required=_QUERY_REQUIRED),
    ),
    ToolDefinition(
        name="query_url",
        description="Create a query and return a link to open it in the Looker explore UI",
        input_schema=object_schema(_QUERY_PROPERTIES, required=_QUERY_REQUIRED),
    ),
    ToolDefinition(
        name="get_looks",
        description="Search for saved looks",
        input_schema=object_schema({
            "title": string_prop("Look title to search"),
            "limit": integer_prop("Number of results"),
        }),
    ),
    ToolDefinition(
        name="run_look",
        description="Run a saved look and return its rows",
        input_schema=object_schema(
            {
                "look_id": string_prop("The id of the look"),
                "limit": integer_prop(f"Row limit (default {DEFAULT_ROW_LIMIT})"),
            },
            required=["look_id"],
        ),
    ),
    ToolDefinition(
        name="make_look",
        description="Save a query as a new look in the current user's personal folder",
        input_schema=object_schema(
            {
                "title": string_prop("Title of the new look"),
                "description": string_prop("Description of the new look"),
                **_QUERY_PROPERTIES,
                "vis_config": object_prop("Visualization settings for the query"),
            },
            required=["title", *_QUERY_REQUIRED],
        ),
    ),
    ToolDefinition(
        name="get_dashboards",
        description="Search for dashboards",
        input_schema=object_schema({
            "title": string_prop("Dashboard title to search"),
            "limit": integer_prop("Number of results"),
        }),
    ),
    ToolDefinition(
        name="run_dashboard",
        description=(
            "Run every query tile on a dashboard. Each tile reports its own "
            "data or error; one failing tile does not fail the others"
        ),
        input_schema=object_schema(
            {
                "dashboard_id": string_prop("The id of the dashboard"),
                "limit": integer_prop(f"Row limit per tile (default {DEFAULT_ROW_LIMIT})"),
            },
            required=["dashboard_id"],
        ),
    ),
    ToolDefinition(
        name="make_dashboard",
        description=(
            "Create a dashboard with one query tile in the current user's "
            "personal folder"
        ),
        input_schema=object_schema(
            {
                "title": string_prop("Title of the new dashboard"),
                "description": string_prop("Description of the new dashboard"),
                "element_title": string_prop("Title of the tile (defaults to the dashboard title)"),
                **_QUERY_PROPERTIES,
                "vis_config": object_prop("Visualization settings for the tile"),
            },
            required=["title", *_QUERY_REQUIRED],
        ),
    ),
    ToolDefinition(
        name="health_pulse",
        description=(
            "Check instance health: release version, database connections "
            "and scheduled plans. Sections that fail report an error"
        ),
        input_schema=object_schema(),
    ),
    ToolDefinition(
        name="health_analyze",
        description=(
            "Summarize LookML projects and models, optionally for a single "
            "model. Sections that fail report an error"
        ),
        input_schema=object_schema({"model": string_prop("Only analyze this model")}),
    ),
    ToolDefinition(
        name="health_vacuum",
        description=(
            "Find content that can be cleaned up: soft-deleted dashboards "
            "and looks, and dashboards that were never viewed"
        ),
        input_schema=object_schema({
            "limit": integer_prop("Maximum items per section"),
        }),
    ),
]
