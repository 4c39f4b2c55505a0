#!/usr/bin/env python3
"""
Yard OCR CLI - Command Line Interface
=====================================

Main CLI entry point for inventory list operations.

Usage:
    yard-ocr parse <textfile>          Parse OCR text (use - for stdin)
    yard-ocr scan <image> [<image>...] OCR and parse inventory sheet images
    yard-ocr query "<vehicle>"         Build a negative-keyword search query
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from . import __version__
from .config import get_config
from .core import ExclusionList, SearchRequest, VehicleParser


def _setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def _print_vehicles(vehicles) -> None:
    if not vehicles:
        print("No vehicles found")
        return
    for i, vehicle in enumerate(vehicles, 1):
        print(f"{i:3d}. {vehicle.full_text}")


def cmd_parse(args):
    """Parse OCR text from a file or stdin."""
    if args.file == '-':
        text = sys.stdin.read()
    else:
        path = Path(args.file)
        if not path.exists():
            print(f"Error: File not found: {path}", file=sys.stderr)
            return 1
        text = path.read_text(encoding='utf-8')

    parser_config = get_config().parser
    cutoff = args.century_cutoff if args.century_cutoff is not None else parser_config.century_cutoff
    parser = VehicleParser(century_cutoff=cutoff, min_line_length=parser_config.min_line_length)

    vehicles = parser.parse(text)

    if args.json:
        print(json.dumps([v.to_dict() for v in vehicles], indent=2))
    else:
        _print_vehicles(vehicles)

    return 0


def cmd_scan(args):
    """OCR and parse one or more inventory sheet images."""
    from .pipeline import YardListPipeline

    missing = [img for img in args.images if not Path(img).exists()]
    if missing:
        for img in missing:
            print(f"Error: Image not found: {img}", file=sys.stderr)
        return 1

    pipeline = YardListPipeline(provider_type=args.provider)
    results = pipeline.recognize_batch(args.images)

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(results, f, indent=2)
        print(f"Results saved to: {args.output}")

    if args.json:
        print(json.dumps(results, indent=2))
    else:
        for result in results:
            print(f"\n{result['file']}")
            if result['error']:
                print(f"  Error: {result['error']}")
                continue
            print(f"  Confidence: {result['confidence']:.2%}")
            for i, vehicle in enumerate(result['vehicles'], 1):
                print(f"  {i:3d}. {vehicle['full_text']}")

    return 1 if any(r['error'] for r in results) else 0


def cmd_query(args):
    """Print the marketplace query for one vehicle."""
    search_config = get_config().search
    limit = args.limit if args.limit is not None else search_config.default_limit

    exclusions = ExclusionList(min_length=search_config.min_exclude_length)
    for word in args.exclude:
        if word not in exclusions:
            exclusions.toggle(word)

    request = SearchRequest(query=args.vehicle, exclude_keywords=list(exclusions), limit=limit)

    if args.json:
        print(json.dumps(request.to_params(), indent=2))
    else:
        print(request.full_query)

    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='yard-ocr',
        description='Yard List OCR - Extract YEAR MAKE MODEL records from vehicle inventory lists',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Parse command
    parse_parser = subparsers.add_parser('parse', help='Parse OCR text')
    parse_parser.add_argument('file', help='Path to text file, or - for stdin')
    parse_parser.add_argument('--century-cutoff', type=int,
                              help='Two-digit years up to this value are read as 20xx')
    parse_parser.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    # Scan command
    scan_parser = subparsers.add_parser('scan', help='OCR and parse inventory images')
    scan_parser.add_argument('images', nargs='+', help='Path to image file(s)')
    scan_parser.add_argument('--provider', default='paddleocr', help='OCR provider (default: paddleocr)')
    scan_parser.add_argument('--output', '-o', help='Output JSON file')
    scan_parser.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    # Query command
    query_parser = subparsers.add_parser('query', help='Build a marketplace search query')
    query_parser.add_argument('vehicle', help='Vehicle text, e.g. "2015 CHEVROLET IMPALA"')
    query_parser.add_argument('--exclude', '-x', nargs='+', action='extend', default=[],
                              help='Keywords to exclude from results (repeatable)')
    query_parser.add_argument('--limit', '-l', type=int, help='Maximum number of results')
    query_parser.add_argument('--json', '-j', action='store_true', help='Output request parameters as JSON')

    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        'parse': cmd_parse,
        'scan': cmd_scan,
        'query': cmd_query,
    }

    return commands[args.command](args)


if __name__ == '__main__':
    sys.exit(main())
