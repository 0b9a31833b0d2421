"""Command line interface for managing resources one at a time."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .config import ProviderConfig
from .core import DELETED, converge, delete, import_resource, reconcile
from .errors import ResourceLifecycleError
from .resource import Phase, ResourceData
from .resources import RESOURCE_HANDLERS, ResourceHandler, build_handler

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Return parsed command line arguments."""

    parser = argparse.ArgumentParser(
        description="Create, read, update, delete and import AWS resources from declarative attributes."
    )
    parser.add_argument("--profile", help="AWS CLI profile to use", default=None)
    parser.add_argument("--region", help="AWS region for API calls", default=None)
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    parser.add_argument(
        "--output",
        dest="output_path",
        help="Write the resulting state to this path instead of stdout",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("types", help="List supported resource types")

    apply_parser = commands.add_parser("apply", help="Create or update a resource")
    apply_parser.add_argument("resource_type", help="Resource type, e.g. aws_location_map")
    apply_parser.add_argument("--config", dest="config_path", required=True, help="JSON file of desired attributes")
    apply_parser.add_argument("--state", dest="state_path", help="JSON state file from a previous run")

    read_parser = commands.add_parser("read", help="Refresh a resource's state from AWS")
    read_parser.add_argument("resource_type")
    read_parser.add_argument("--state", dest="state_path", required=True)

    delete_parser = commands.add_parser("delete", help="Delete a resource")
    delete_parser.add_argument("resource_type")
    delete_parser.add_argument("--state", dest="state_path", required=True)

    import_parser = commands.add_parser("import", help="Adopt an existing resource")
    import_parser.add_argument("resource_type")
    import_parser.add_argument("external_id", help="Identifier, e.g. <asg-name>/<lifecycle-hook-name>")

    return parser.parse_args(argv)


def load_json(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as fh:
        payload = json.load(fh)
    if not isinstance(payload, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return payload


def load_state(path: Optional[str]) -> ResourceData:
    """Read a state file written by :func:`dump_state`."""

    if not path:
        return ResourceData()
    payload = load_json(path)
    return ResourceData(state=dict(payload.get("attributes") or {}), id=payload.get("id") or "")


def dump_state(data: ResourceData) -> str:
    return json.dumps({"id": data.id, "attributes": data.state}, indent=2, sort_keys=True, default=str)


def apply_resource(handler: ResourceHandler, data: ResourceData) -> ResourceData:
    """Refresh, plan and converge *data*, replacing it when a force-new attribute changed."""

    if data.id and reconcile(handler, data) is DELETED:
        logger.info("%s no longer exists and will be recreated", handler.display_name)

    if data.id:
        changed = handler.plan_changes(data)
        if handler.requires_replacement(changed):
            logger.info("Replacing %s %s", handler.display_name, handler.identity(data))
            delete(handler, data)
        elif not changed:
            return data
        else:
            data.changed = changed

    converge(handler, data)
    return data


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point used by ``python -m aws_resource_lifecycle``."""

    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "types":
        for type_name in sorted(RESOURCE_HANDLERS):
            print(type_name)
        return 0

    try:
        config = ProviderConfig.from_env(profile=args.profile, region=args.region)
        handler = build_handler(args.resource_type, config.session(), config)

        if args.command == "import":
            data = ResourceData()
            import_resource(handler, data, args.external_id)
            if reconcile(handler, data, Phase.STEADY_STATE) is DELETED:
                print(
                    f"Error: {handler.display_name} {args.external_id} does not exist",
                    file=sys.stderr,
                )
                return 1
        elif args.command == "read":
            data = load_state(args.state_path)
            reconcile(handler, data)
        elif args.command == "delete":
            data = load_state(args.state_path)
            delete(handler, data)
        else:
            data = load_state(args.state_path)
            data.config = load_json(args.config_path)
            apply_resource(handler, data)
    except (ResourceLifecycleError, ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    output = dump_state(data)
    if args.output_path:
        with open(args.output_path, "w", encoding="utf-8") as fh:
            fh.write(output + "\n")
        print(f"State written to {args.output_path}")
    else:
        print(output)
    return 0


__all__ = ["apply_resource", "dump_state", "load_state", "main", "parse_args"]
