"""Settings for the mutual information estimator

Settings are an AttributeDict holding the DEFAULTS, optionally read from a
YAML file, e.g.

    imgmi:
      bitdepth: 12
"""
import logging

import yaml

from .metrics import DEFAULT_BITDEPTH, InvalidParameterError, validate_bitdepth
from .utils import AttributeDict


log = logging.getLogger(__name__)


DEFAULTS = {'bitdepth': DEFAULT_BITDEPTH}
_section = 'imgmi'


def settings(**overrides):
    '''Return the default settings with overrides applied'''
    unknown = set(overrides) - set(DEFAULTS)
    if unknown:
        raise InvalidParameterError('unknown setting(s): %s' % ', '.join(sorted(unknown)))
    cfg = AttributeDict(dict(DEFAULTS, **overrides))
    cfg.bitdepth = validate_bitdepth(cfg.bitdepth)
    return cfg


def load(path):
    """Read settings from a YAML file
    Args:
        path -- YAML file holding a mapping of settings, either at the top
                level or under an "imgmi" key. An empty file gives the defaults.

    Returns: AttributeDict of settings
    """
    with open(path) as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise InvalidParameterError('settings file %s must contain a mapping' % path)
    if _section in raw:
        raw = raw[_section] or {}
        if not isinstance(raw, dict):
            raise InvalidParameterError('"%s" in %s must be a mapping' % (_section, path))
    log.debug('Loaded settings from %s: %r', path, raw)
    return settings(**raw)
