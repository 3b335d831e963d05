#!/usr/bin/env python3
"""
RENOFLOW - CLI Interface
========================
Command-line tool for checking a property's renovation checklist.

Usage:
    renoflow seed property.json
    renoflow evaluate property.json --power power_ready --complete paperwork_pos
    renoflow requirements heating --present paperwork_pos bgas_check isolator heating
"""

import argparse
import sys
import json
import logging

from .schema import PropertyRecord, PropertyTaskList, build_task_seed
from .workflow import DEFAULT_WORKFLOW, AnyOfRequirement, load_workflow_config, requirements_for
from .rules import evaluate, mark_complete
from .manager import format_status_report


def _load_property(path: str) -> PropertyRecord:
    with open(path, 'r') as f:
        data = json.load(f)
    return PropertyRecord.model_validate(data)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="renoflow",
        description="RENOFLOW - Property renovation task workflow",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  renoflow seed property.json                    Show the tasks a property needs
  renoflow seed property.json --json             Same, as JSON
  renoflow evaluate property.json                Checklist with blocked reasons and next actions
  renoflow evaluate property.json -p power_ready -c paperwork_pos bgas_check
  renoflow requirements heating --present paperwork_pos isolator heating
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # SEED command
    seed_parser = subparsers.add_parser("seed", help="Build the task list for a property")
    seed_parser.add_argument("property", help="Property JSON file")
    seed_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # EVALUATE command
    eval_parser = subparsers.add_parser("evaluate", help="Evaluate gates and next actions")
    eval_parser.add_argument("property", help="Property JSON file")
    eval_parser.add_argument("-p", "--power", help="Power status (overrides the file)")
    eval_parser.add_argument("-c", "--complete", nargs="*", default=[], help="Task keys already complete")
    eval_parser.add_argument("--workflow", help="Workflow config JSON file")
    eval_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # REQUIREMENTS command
    req_parser = subparsers.add_parser("requirements", help="Show what a task waits on")
    req_parser.add_argument("task_key", help="Task key")
    req_parser.add_argument("--present", nargs="*", default=[], help="Task keys present on the property")
    req_parser.add_argument("--workflow", help="Workflow config JSON file")

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = DEFAULT_WORKFLOW
        if getattr(args, "workflow", None):
            config = load_workflow_config(args.workflow)
        record = _load_property(args.property) if hasattr(args, "property") else None
    except (OSError, ValueError) as e:
        # json.JSONDecodeError and pydantic's ValidationError are ValueErrors
        print(f"❌ {e}")
        return 1

    # Execute command
    if args.command == "seed":
        tasks = build_task_seed(record)
        if args.json:
            print(json.dumps([t.model_dump(mode='json') for t in tasks], indent=2))
        else:
            print(f"📋 {len(tasks)} tasks")
            for task in tasks:
                power = " ⚡" if task.requires_power else ""
                print(f"  [{task.key}] {task.name}{power}")

    elif args.command == "evaluate":
        if args.power:
            record = record.model_copy(
                update={"power_status": PropertyRecord(power_status=args.power).power_status}
            )

        tasks = build_task_seed(record)
        for key in args.complete:
            tasks = mark_complete(tasks, key)
        tasks = evaluate(tasks, record.power_status, config)

        task_list = PropertyTaskList(property_id=record.id or args.property, record=record, tasks=tasks)
        if args.json:
            print(json.dumps(task_list.model_dump(mode='json'), indent=2, default=str))
        else:
            print(format_status_report(task_list, config))

    elif args.command == "requirements":
        present = args.present or list(config.order)
        reqs = requirements_for(args.task_key, present, config)
        if not reqs:
            print(f"🔓 {args.task_key} has no earlier stages to wait on")
        for req in reqs:
            if isinstance(req, AnyOfRequirement):
                print(f"  - any of: {', '.join(req.keys)}")
            else:
                print(f"  - {req.key}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
