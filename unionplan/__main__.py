import argparse
import json
import logging
import sys

from .errors import ModelError
from .loader import load_union
from .operations import synthesize
from .report import render_model, render_operations


def parse_args(argv):
    parser = argparse.ArgumentParser(
        prog="unionplan",
        description="Plans the storage layout and operations of tagged unions.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log planner decisions")
    commands = parser.add_subparsers(dest="command", required=True)

    describe = commands.add_parser("describe", help="print the layout and operations of a union")
    describe.add_argument("file", help="JSON description of the union")
    describe.add_argument(
        "--no-share-reference-slots",
        dest="share_reference_slots",
        action="store_false",
        default=None,
        help="give every reference value its own overlay position",
    )

    operations = commands.add_parser("operations", help="list the operation signatures of a union")
    operations.add_argument("file", help="JSON description of the union")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )

    overrides = {}
    if getattr(args, "share_reference_slots", None) is not None:
        overrides["share_reference_slots"] = args.share_reference_slots

    try:
        with open(args.file, encoding="utf-8") as f:
            data = json.load(f)
        model = load_union(data, overrides)
    except (OSError, json.JSONDecodeError, ModelError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.command == "describe":
        sys.stdout.write(render_model(model))
    else:
        sys.stdout.write(render_operations(synthesize(model)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
