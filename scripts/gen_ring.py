#!/usr/bin/env python3
"""
gen_ring.py - Ring binding generator entry point

Generates a binding module (and a .ring API listing) for each
declaration file.

Usage:
    python scripts/gen_ring.py DECLS... [--out DIR] [--native MODULE] [--strict]
                               [--ignore NAME ...] [--no-stubs]
"""

import argparse
import os
import sys

# Add scripts directory to path
script_dir = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, script_dir)

from ring_bindgen import Generator, GenerationError


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Generate Ring bindings')
    parser.add_argument('inputs', nargs='+',
                        help='Declaration files (.json IR or declaration text)')
    parser.add_argument('--out', default='gen',
                        help='Output directory (default: gen)')
    parser.add_argument('--native', default=None,
                        help="Python module implementing the declarations (overrides 'native')")
    parser.add_argument('--strict', action='store_true',
                        help='Reject types that would fall back to a numeric cast')
    parser.add_argument('--ignore', action='append', default=[], metavar='NAME',
                        help='External name to skip (repeatable)')
    parser.add_argument('--no-stubs', action='store_true',
                        help='Do not write the .ring API listing')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    gen = Generator(
        output_root=args.out,
        strict=args.strict,
        native=args.native,
        stubs=not args.no_stubs,
    )
    gen.ignore(*args.ignore)

    try:
        gen.generate_all(args.inputs)
    except (GenerationError, OSError) as e:
        print(f'error: {e}', file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
