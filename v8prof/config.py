"""
Copyright (c) 2018 Cyberhaven

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
SOFTWARE.
"""


import copy
import logging

import yaml

from v8prof import DEFAULTS
from v8prof.command import CommandError


logger = logging.getLogger('config')


class ConfigError(CommandError):
    """
    The configuration file could not be read or contains invalid settings.
    """


def _merge(defaults, overrides, section=''):
    merged = copy.deepcopy(defaults)

    for key, value in overrides.items():
        name = '%s.%s' % (section, key) if section else key

        if key not in defaults:
            raise ConfigError('Unknown configuration option %s' % name)

        default = defaults[key]
        if isinstance(default, dict):
            if not isinstance(value, dict):
                raise ConfigError('Configuration option %s must be a mapping' % name)
            merged[key] = _merge(default, value, name)
        elif isinstance(default, bool):
            if not isinstance(value, bool):
                raise ConfigError('Configuration option %s must be true or false' % name)
            merged[key] = value
        elif isinstance(default, int):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigError('Configuration option %s must be a non-negative integer' % name)
            merged[key] = value
        else:
            if not isinstance(value, type(default)):
                raise ConfigError('Configuration option %s must be a %s' % (name, type(default).__name__))
            merged[key] = value

    return merged


def load_config(path=None):
    """
    Return the default settings, updated with the settings found in the
    YAML file at ``path`` (if specified).
    """
    if not path:
        return copy.deepcopy(DEFAULTS)

    try:
        with open(path, 'r') as f:
            overrides = yaml.safe_load(f)
    except IOError as e:
        raise ConfigError('Could not read configuration file %s: %s' % (path, e)) from e
    except yaml.YAMLError as e:
        raise ConfigError('Configuration file %s is not valid YAML: %s' % (path, e)) from e

    if overrides is None:
        overrides = {}
    if not isinstance(overrides, dict):
        raise ConfigError('Configuration file %s must contain a mapping' % path)

    logger.debug('Loaded configuration from %s', path)

    return _merge(DEFAULTS, overrides)
