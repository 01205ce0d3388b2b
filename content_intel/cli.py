"""
content-intel command line interface.

Usage examples:

  # Entity types, bundles and fields of a content dump
  content-intel --content content.yaml types
  content-intel --content content.yaml fields node article

  # Intel report of one entity, restricted to a field and a plugin
  content-intel --content content.yaml entity node 1 --fields title --plugins word_count

  # Reports for the ten newest articles, as YAML
  content-intel --content content.yaml --format yaml batch node --bundle article

  # Persist the enabled-plugin allow-list
  content-intel --config content_intel.yaml settings --enable word_count entity_age

Exit codes:
  0 = success
  1 = entity not found, unknown plugin or data source error
  2 = malformed arguments or invalid configuration
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

import yaml

from . import __version__
from .framework.configuration import (
    ConfigurationBuilder, ContentIntelConfiguration, load_configuration_from_file
)
from .framework.content_intel_framework import (
    ContentIntelFramework, configure_logging, create_content_intel_framework
)
from .infrastructure.exceptions import (
    ConfigurationError, ContentIntelException, DataStoreError, EntityNotFoundError, UnknownPluginError
)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


class UsageError(Exception):
    """Malformed command line arguments detected after parsing."""


def parse_list(value: Optional[str], option: str) -> List[str]:
    """Split a comma separated option; empty items are rejected."""
    if value is None:
        return []
    items = [item.strip() for item in value.split(',')]
    if any(not item for item in items):
        raise UsageError(f"{option} contains an empty item: {value!r}")
    return items


def parse_id(value: str) -> Any:
    return int(value) if value.isdigit() else value


def to_data(value: Any) -> Any:
    """Convert models to JSON-shaped data."""
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    if isinstance(value, list):
        return [to_data(item) for item in value]
    if isinstance(value, dict):
        return {key: to_data(item) for key, item in value.items()}
    return value


def render_table(rows: List[Dict[str, Any]]) -> str:
    if not rows:
        return "(no rows)"
    columns = list(rows[0].keys())
    for row in rows[1:]:
        columns.extend(key for key in row if key not in columns)

    def cell(value: Any) -> str:
        if isinstance(value, (list, dict)):
            return json.dumps(value, ensure_ascii=False)
        return "" if value is None else str(value)

    cells = [[cell(row.get(column)) for column in columns] for row in rows]
    widths = [max(len(column), *(len(line[i]) for line in cells)) for i, column in enumerate(columns)]

    lines = ["  ".join(column.ljust(widths[i]) for i, column in enumerate(columns))]
    lines.append("  ".join("-" * width for width in widths))
    lines.extend("  ".join(value.ljust(widths[i]) for i, value in enumerate(line)) for line in cells)
    return "\n".join(lines)


def render(data: Any, output_format: str) -> str:
    data = to_data(data)
    if output_format == "json":
        return json.dumps(data, indent=2, ensure_ascii=False, default=str)
    if output_format == "table" and isinstance(data, list) and all(isinstance(row, dict) for row in data):
        return render_table(data)
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True).rstrip()


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="content-intel", description="Content intelligence for content entities")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument("--config", help="YAML configuration file")
    ap.add_argument("--content", help="YAML or JSON content dump (overrides content_path)")
    ap.add_argument("--format", choices=["json", "yaml", "table"], default="json", help="Output format")

    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("types", help="List content entity types")

    p = sub.add_parser("bundles", help="List bundles of an entity type")
    p.add_argument("entity_type")

    p = sub.add_parser("fields", help="List fields of an entity type or bundle")
    p.add_argument("entity_type")
    p.add_argument("bundle", nargs="?")

    sub.add_parser("plugins", help="List intel plugins")

    p = sub.add_parser("list", help="List entities, newest first")
    p.add_argument("entity_type")
    p.add_argument("bundle", nargs="?")
    p.add_argument("--limit", type=int, default=50)
    p.add_argument("--offset", type=int, default=0)

    p = sub.add_parser("entity", help="Full intel report of one entity")
    p.add_argument("entity_type")
    p.add_argument("entity_id")
    p.add_argument("--fields", help="Comma separated field names to include")
    p.add_argument("--plugins", help="Comma separated plugin ids to run")

    p = sub.add_parser("summary", help="Summary of one entity")
    p.add_argument("entity_type")
    p.add_argument("entity_id")

    p = sub.add_parser("batch", help="Intel reports of several entities")
    p.add_argument("entity_type")
    p.add_argument("--bundle")
    p.add_argument("--ids", help="Comma separated entity ids")
    p.add_argument("--limit", type=int, default=10)
    p.add_argument("--plugins", help="Comma separated plugin ids to run")

    p = sub.add_parser("search-top", help="Most frequent search queries")
    p.add_argument("--limit", type=int, default=50)

    p = sub.add_parser("search-gaps", help="Search queries that find little or no content")
    p.add_argument("--limit", type=int, default=50)
    p.add_argument("--max-results", type=int, default=0)

    p = sub.add_parser("settings", help="Show or change which plugins are enabled")
    p.add_argument("--enable", nargs="+", default=[], metavar="PLUGIN_ID")
    p.add_argument("--disable", nargs="+", default=[], metavar="PLUGIN_ID")

    return ap


def load_configuration(args: argparse.Namespace) -> ContentIntelConfiguration:
    if args.config:
        configuration = load_configuration_from_file(args.config)
    else:
        configuration = ConfigurationBuilder().add_defaults().build()
    if args.content:
        configuration.set('content_path', args.content)
    return configuration


def cmd_types(app: ContentIntelFramework, args: argparse.Namespace) -> Any:
    return app.collector.get_entity_types()


def cmd_bundles(app: ContentIntelFramework, args: argparse.Namespace) -> Any:
    return app.collector.get_bundles(args.entity_type)


def cmd_fields(app: ContentIntelFramework, args: argparse.Namespace) -> Any:
    return app.collector.get_fields(args.entity_type, args.bundle)


def cmd_plugins(app: ContentIntelFramework, args: argparse.Namespace) -> Any:
    return app.collector.get_plugins()


def cmd_list(app: ContentIntelFramework, args: argparse.Namespace) -> Any:
    return app.collector.list_entities(args.entity_type, args.bundle, limit=args.limit, offset=args.offset)


def cmd_entity(app: ContentIntelFramework, args: argparse.Namespace) -> Any:
    fields = parse_list(args.fields, "--fields")
    plugins = parse_list(args.plugins, "--plugins")
    return asyncio.run(
        app.collector.collect_intel_for(args.entity_type, parse_id(args.entity_id), fields, plugins)
    )


def cmd_summary(app: ContentIntelFramework, args: argparse.Namespace) -> Any:
    entity = app.collector.require_entity(args.entity_type, parse_id(args.entity_id))
    return app.collector.get_entity_summary(entity)


def cmd_batch(app: ContentIntelFramework, args: argparse.Namespace) -> Any:
    plugins = parse_list(args.plugins, "--plugins")
    if args.ids and args.bundle:
        raise UsageError("--bundle cannot be combined with --ids")
    if args.ids:
        ids = [parse_id(entity_id) for entity_id in parse_list(args.ids, "--ids")]
        entities = app.collector.load_entities(args.entity_type, ids)
    else:
        summaries = app.collector.list_entities(args.entity_type, args.bundle, limit=args.limit)
        entities = app.collector.load_entities(args.entity_type, [summary.id for summary in summaries])
    return asyncio.run(app.collector.collect_batch(entities, plugins=plugins))


def _require_search(app: ContentIntelFramework):
    if app.search is None:
        raise DataStoreError("No search log configured (search_log_db)", operation="search")
    return app.search


def cmd_search_top(app: ContentIntelFramework, args: argparse.Namespace) -> Any:
    search = _require_search(app)
    return {"source": search.get_source(), "queries": search.get_top_queries(args.limit)}


def cmd_search_gaps(app: ContentIntelFramework, args: argparse.Namespace) -> Any:
    search = _require_search(app)
    return {"source": search.get_source(), "gaps": search.get_content_gaps(args.limit, args.max_results)}


def cmd_settings(app: ContentIntelFramework, args: argparse.Namespace) -> Any:
    plugins = {plugin["id"]: plugin for plugin in app.collector.get_plugins()}

    if args.enable or args.disable:
        for plugin_id in [*args.enable, *args.disable]:
            if plugin_id not in plugins:
                raise UnknownPluginError(plugin_id)
        for plugin_id in args.enable:
            if not plugins[plugin_id]["available"]:
                raise UsageError(f"Plugin {plugin_id} is not available and cannot be enabled")
        if not args.config:
            raise UsageError("--config is required to change settings")

        enabled = list(app.configuration.get('enabled_plugins') or [])
        if not enabled:
            # An empty allow-list means every plugin is enabled.
            enabled = [plugin_id for plugin_id, plugin in plugins.items() if plugin["available"]]
        enabled = [plugin_id for plugin_id in enabled if plugin_id not in args.disable]
        enabled.extend(plugin_id for plugin_id in args.enable if plugin_id not in enabled)

        app.configuration.set('enabled_plugins', enabled)
        app.configuration.save(args.config)

    enabled = app.configuration.get('enabled_plugins') or []
    return [
        {
            "id": plugin_id,
            "label": plugin["label"],
            "available": plugin["available"],
            "enabled": plugin["available"] and (not enabled or plugin_id in enabled),
        }
        for plugin_id, plugin in plugins.items()
    ]


COMMANDS = {
    "types": cmd_types,
    "bundles": cmd_bundles,
    "fields": cmd_fields,
    "plugins": cmd_plugins,
    "list": cmd_list,
    "entity": cmd_entity,
    "summary": cmd_summary,
    "batch": cmd_batch,
    "search-top": cmd_search_top,
    "search-gaps": cmd_search_gaps,
    "settings": cmd_settings,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        configuration = load_configuration(args)
    except ConfigurationError as e:
        detail = e.get_detailed_message() if hasattr(e, 'get_detailed_message') else e.message
        print(f"Invalid configuration: {detail}", file=sys.stderr)
        return EXIT_USAGE

    configure_logging(configuration.settings.logging_config)

    app = None
    try:
        app = create_content_intel_framework(configuration)
        result = COMMANDS[args.command](app, args)
    except UsageError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except (EntityNotFoundError, UnknownPluginError, DataStoreError) as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_FAILURE
    except ConfigurationError as e:
        print(f"Invalid configuration: {e.message}", file=sys.stderr)
        return EXIT_USAGE
    except ContentIntelException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_FAILURE
    finally:
        if app is not None:
            app.close()

    print(render(result, args.format))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
