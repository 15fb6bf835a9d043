# coding: utf-8

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
Exceptions. There are two families:

* ConfigurationError and its subclasses abort the whole run, nothing is
  written to the output.
* DescriptionError and its subclasses are scoped to a single description;
  they are caught at the description boundary, logged and the description is
  skipped.
"""


class Bibframe2MarcError(Exception):
    """ Base class for all errors raised by this package. """


class ConfigurationError(Bibframe2MarcError):
    """
    Invalid format names, unreadable or malformed configuration, missing
    stylesheet.
    """


class SourceError(ConfigurationError):
    """ An input source cannot be read or parsed, or there is no input. """


class ExtractionError(ConfigurationError):
    """ The description query could not be executed. """


class DescriptionError(Bibframe2MarcError):
    """
    Raised while converting a single description. Carries the description, if
    known, so log messages can name the work and instance.
    """

    def __init__(self, message, description=None):
        super(DescriptionError, self).__init__(message)
        self.description = description


class DereferenceError(DescriptionError):
    """ An external resource could not be fetched or parsed. """


class StripingError(DescriptionError):
    """ A description graph cannot be written as striped XML. """


class ConversionError(DescriptionError):
    """ The record transform failed on a striped document. """


class RecordError(DescriptionError):
    """ A MARC-shaped document is structurally invalid. """
