import argparse
import json
import logging
import sys

from dateutil import parser as dateutil_parser

import chatstamp
from chatstamp.formats import TIME_FORMATS, format_timestamp, to_markup


def _parse_base(value):
    return dateutil_parser.isoparse(value)


def entrance(argv=None):
    chatstamp_argparse = argparse.ArgumentParser(
        description="chatstamp: find the dates and times in a chat message."
    )
    chatstamp_argparse.add_argument(
        "text",
        nargs="*",
        help="Message to annotate; read from stdin when omitted",
    )
    chatstamp_argparse.add_argument(
        "--format",
        choices=list(TIME_FORMATS),
        help="Print every timestamp in this presentation",
    )
    chatstamp_argparse.add_argument(
        "--markup",
        action="store_true",
        help="Print the message with each timestamp replaced by <t:UNIX:CODE> markup",
    )
    chatstamp_argparse.add_argument(
        "--json",
        action="store_true",
        help="Print the annotation as JSON",
    )
    chatstamp_argparse.add_argument(
        "--base",
        help="ISO 8601 datetime missing fields are filled from (default: now)",
    )
    chatstamp_argparse.add_argument(
        "--verbose",
        action="store_true",
        help="Log discarded and widened spans",
    )

    args = chatstamp_argparse.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    settings = {}
    if args.base:
        try:
            settings["RELATIVE_BASE"] = _parse_base(args.base)
        except ValueError:
            chatstamp_argparse.error("chatstamp: --base must be an ISO 8601 datetime")

    text = " ".join(args.text) if args.text else sys.stdin.read().rstrip("\n")
    result = chatstamp.annotate(text, settings=settings or None)
    logging.info("chatstamp: found %d timestamp(s)", len(result.timestamps))

    code = args.format or "f"
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif args.markup:
        print("".join(
            to_markup(segment.timestamp, code) if segment.is_timestamp else segment.text
            for segment in result
        ))
    else:
        for segment in result.timestamps:
            print("%s\t%s" % (segment.text, format_timestamp(segment.timestamp, code)))

    return 0
