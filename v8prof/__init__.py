import os

import yaml

from v8prof.utils.memoize import memoize

# Registers the SUCCESS log level
from v8prof.utils import log  # pylint: disable=unused-import


# Paths
YAML_CONFIG_PATH = os.path.join(os.path.dirname(__file__), 'dat',
                                'config.yaml')


@memoize
def _load_defaults():
    with open(YAML_CONFIG_PATH, 'r') as f:
        return yaml.safe_load(f)


DEFAULTS = _load_defaults()
