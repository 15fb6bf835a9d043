# coding: utf-8
# pylint: disable=F0401,C0111,W0232,E1101,E1103,C0301,C0103,W0614,W0401,E0202

# Copyright 2026 by Leipzig University Library, http://ub.uni-leipzig.de
#                   The Finc Authors, http://finc.info
#
# This file is part of some open source application.
#
# Some open source application is free software: you can redistribute
# it and/or modify it under the terms of the GNU General Public
# License as published by the Free Software Foundation, either
# version 3 of the License, or (at your option) any later version.
#
# Some open source application is distributed in the hope that it will
# be useful, but WITHOUT ANY WARRANTY; without even the implied warranty
# of MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with Foobar.  If not, see <http://www.gnu.org/licenses/>.
#
# @license GPL-3.0+ <http://spdx.org/licenses/GPL-3.0+>
"""
Command line entry point.

    $ bibframe2marc -f turtle -d deref.json -o out.xml a.ttl b.ttl
    $ curl -s https://example.org/bf.rdf | bibframe2marc -t marc > out.mrc

Exit status is 0 on normal completion, also if no records were converted, 1
on configuration errors (nothing is written then) and 2 if descriptions were
found but every one of them failed.
"""

import argparse
import logging
import os
import sys
import tempfile

from bibframe2marc import __version__
from bibframe2marc.configuration import Config, load_dereference_config
from bibframe2marc.conversions import Converter
from bibframe2marc.dereference import DEFAULT_TIMEOUT, Fetcher
from bibframe2marc.errors import ConfigurationError
from bibframe2marc.extract import DEFAULT_DEPTH
from bibframe2marc.graph import FORMATS, GraphStore, check_format
from bibframe2marc.marc import OUTPUT_FORMATS, check_output_format, write
from bibframe2marc.transform import Transformer

logger = logging.getLogger('bibframe2marc')


def configure_logging(verbose=False):
    """
    Log to stderr, warnings and up, everything with verbose.
    """
    if not logger.handlers:
        ch = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        ch.setFormatter(formatter)
        logger.addHandler(ch)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def build_parser(config=None):
    if config is None:
        config = Config.instance()

    parser = argparse.ArgumentParser(prog='bibframe2marc',
                                     description='Convert BIBFRAME RDF to MARC records.',
                                     formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    parser.add_argument('sources', nargs='*', metavar='SOURCE',
                        help='input files or URLs, read stdin if none given')
    parser.add_argument('-f', '--informat', default='rdfxml',
                        help='input format, one of: %s' % ', '.join(sorted(FORMATS)))
    parser.add_argument('-t', '--outformat', default='marcxml',
                        help='output format, one of: %s' % ', '.join(OUTPUT_FORMATS))
    parser.add_argument('-o', '--output', help='output file, stdout if not given')
    parser.add_argument('-d', '--dereference', metavar='FILE',
                        help='JSON file with dereference configuration')
    parser.add_argument('-s', '--stylesheet', default=config.get('core', 'stylesheet', fallback=None),
                        help='XSLT stylesheet with the record rules, packaged default if not given')
    parser.add_argument('--depth', type=int, default=config.getint('extract', 'depth', fallback=DEFAULT_DEPTH),
                        help='maximum number of links followed from work and instance')
    parser.add_argument('--timeout', type=float,
                        default=config.getfloat('dereference', 'timeout', fallback=DEFAULT_TIMEOUT),
                        help='timeout in seconds for a single dereference lookup')
    parser.add_argument('-v', '--verbose', action='store_true', help='more output')
    parser.add_argument('--version', action='version', version='%(prog)s ' + __version__)
    return parser


def current_umask():
    mask = os.umask(0)
    os.umask(mask)
    return mask


def write_output(collection, path=None, target_format='marcxml', stdout=None):
    """
    Write the collection to path or stdout. A file is written to a temporary
    location first and moved into place, so it never exists half written. The
    file gets the usual mode for new files, not the private mode of the
    temporary file.
    """
    if path is None:
        stream = stdout or sys.stdout.buffer
        write(collection, stream, target_format=target_format)
        stream.flush()
        return
    directory = os.path.dirname(os.path.abspath(path))
    with tempfile.NamedTemporaryFile(delete=False, dir=directory, prefix='bibframe2marc-') as output:
        try:
            write(collection, output, target_format=target_format)
        except BaseException:
            output.close()
            os.unlink(output.name)
            raise
    os.chmod(output.name, 0o666 & ~current_umask())
    os.replace(output.name, path)


def run(args, config=None, stdin=None, stdout=None):
    """
    Run a conversion as described by parsed command line arguments. Returns
    the report. Raises ConfigurationError before anything is written.
    """
    if config is None:
        config = Config.instance()

    check_format(args.informat)
    check_output_format(args.outformat)
    if args.depth < 1:
        raise ConfigurationError('depth must be positive, got %d' % args.depth)

    dereference = load_dereference_config(args.dereference)
    transformer = Transformer(args.stylesheet)

    store = GraphStore(max_tries=config.getint('input', 'url-max-tries', fallback=3))
    store.load(args.sources, informat=args.informat, stream=stdin,
               wait=config.getfloat('input', 'stdin-wait', fallback=2.0))
    store.freeze()

    fetch = Fetcher(timeout=args.timeout, user_agent=config.get('dereference', 'user-agent', fallback=None))
    converter = Converter(transformer=transformer, dereference=dereference, fetch=fetch, depth=args.depth)
    report = converter.convert(store)

    write_output(report.collection, path=args.output, target_format=args.outformat, stdout=stdout)
    return report


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)
    try:
        report = run(args)
    except ConfigurationError as exc:
        logger.error('%s', exc)
        return 1
    return report.exit_status


if __name__ == '__main__':
    sys.exit(main())
