# coding: utf-8
# pylint: disable=C0301,R0904,W0221

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
Configuration handling, ini format, plus the dereference configuration, which
is a separate JSON file passed per run:

    {
      "dereference": {
        "http://id.loc.gov/ontologies/bibframe/Agent": [
          "http://id.loc.gov/authorities/names/"
        ]
      }
    }

The ini file knows the following sections and keys:

    [core]
    tempdir = /tmp
    stylesheet = /path/to/custom.xsl

    [input]
    stdin-wait = 2
    url-max-tries = 3

    [extract]
    depth = 8

    [dereference]
    timeout = 10
    user-agent = bibframe2marc
"""

import json
import logging
import os
from configparser import ConfigParser
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, ValidationError

from bibframe2marc.errors import ConfigurationError

logger = logging.getLogger('bibframe2marc')


class Config(ConfigParser):
    """
    Access to ini file.
    """
    _instance = None

    # most specific path last
    _config_paths = [
        '/etc/bibframe2marc/bibframe2marc.ini',
        os.path.join(os.path.expanduser('~'), '.config/bibframe2marc/bibframe2marc.ini'),
    ]

    @classmethod
    def instance(cls, *args, **kwargs):
        """ Singleton getter """
        if cls._instance is None:
            cls._instance = cls(*args, **kwargs)
            _ = cls._instance.reload()

        return cls._instance

    def reload(self):
        """ Reload configuration. """
        return self._instance.read(self._config_paths)


class DereferenceFile(BaseModel):
    """
    Shape of the dereference JSON file. Unknown top-level keys are ignored.
    """
    model_config = ConfigDict(extra='ignore')

    dereference: Dict[str, List[str]] = {}


class DereferenceConfig(object):
    """
    Immutable mapping from class IRI to an ordered tuple of IRI prefixes.

    >>> config = DereferenceConfig({"http://ex.org/ClassX": ["http://ex.org/auth/"]})
    >>> config.matches("http://ex.org/ClassX", "http://ex.org/auth/123")
    True
    >>> config.matches("http://ex.org/ClassX", "http://other.org/123")
    False
    """
    __slots__ = ('_mapping',)

    def __init__(self, mapping=None):
        mapping = mapping or {}
        frozen = {}
        for cls, prefixes in mapping.items():
            if isinstance(prefixes, str):
                raise ConfigurationError('prefixes for %s must be a list, not a string' % cls)
            # keep order, drop duplicates
            frozen[str(cls)] = tuple(dict.fromkeys(str(p) for p in prefixes))
        object.__setattr__(self, '_mapping', frozen)

    def __setattr__(self, name, value):
        raise AttributeError('DereferenceConfig is immutable')

    def __bool__(self):
        return bool(self._mapping)

    def __contains__(self, cls):
        return str(cls) in self._mapping

    def __iter__(self):
        return iter(self._mapping)

    def __len__(self):
        return len(self._mapping)

    def __repr__(self):
        return 'DereferenceConfig(%r)' % (self._mapping,)

    def prefixes(self, cls):
        """ Return the prefixes configured for a class IRI, or an empty tuple. """
        return self._mapping.get(str(cls), ())

    def matches(self, cls, iri):
        """
        True, if `iri` starts with one of the prefixes configured for `cls`.
        Plain string prefix match, no patterns.
        """
        iri = str(iri)
        return any(iri.startswith(prefix) for prefix in self.prefixes(cls))


def parse_dereference_config(obj):
    """
    Validate a decoded JSON object and return a DereferenceConfig.
    """
    if obj is None:
        return DereferenceConfig()
    try:
        doc = DereferenceFile.model_validate(obj)
    except ValidationError as exc:
        raise ConfigurationError('invalid dereference configuration: %s' % exc) from exc
    return DereferenceConfig(doc.dereference)


def load_dereference_config(path):
    """
    Load the dereference configuration from a JSON file. Return an empty
    configuration, if path is None. Any problem reading or parsing the file is
    a configuration error.
    """
    if path is None:
        return DereferenceConfig()
    try:
        with open(path, encoding='utf-8') as handle:
            obj = json.load(handle)
    except (OSError, ValueError) as exc:
        raise ConfigurationError('cannot load dereference configuration from %s: %s' % (path, exc)) from exc
    config = parse_dereference_config(obj)
    logger.debug('loaded dereference configuration for %d classes from %s', len(config), path)
    return config
