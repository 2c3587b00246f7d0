"""
default settings for evidence derivation. Any default may be overridden by setting the
environment variable of the same name prefixed with ``SPLITBREAK_``

Example:
    >>> os.environ['SPLITBREAK_MAX_MAPQ'] = '50'
    >>> DEFAULTS.max_mapq
    50
"""
from typing import Dict

from .util import ENV_VAR_PREFIX, get_env_variable


class SettingsNamespace:
    """
    Namespace holding default setting values, their types and definitions

    Example:
        >>> nspace = SettingsNamespace()
        >>> nspace.add('min_mapq', 0, defn='minimum mapping quality')
        >>> nspace.min_mapq
        0
    """

    def __init__(self):
        object.__setattr__(self, '_members', {})
        object.__setattr__(self, '_types', {})
        object.__setattr__(self, '_defns', {})

    def add(self, attr, value, defn=None, cast_type=None):
        """
        Add a setting

        Args:
            attr (str): name of the setting
            value: the default value
            defn (str): definition of the setting
            cast_type (Callable): type used to cast environment overrides, defaults to the type of the value

        Raises:
            AttributeError: the setting already exists
        """
        if attr in self._members:
            raise AttributeError('Cannot respecify existing attribute', attr, self._members[attr])
        self._members[attr] = value
        self._types[attr] = type(value) if cast_type is None else cast_type
        if defn:
            self._defns[attr] = defn

    def get_env_name(self, attr) -> str:
        """
        Example:
            >>> DEFAULTS.get_env_name('min_mapq')
            'SPLITBREAK_MIN_MAPQ'
        """
        return ENV_VAR_PREFIX + attr.upper()

    def define(self, attr, default=None) -> str:
        return self._defns.get(attr, default)

    def type(self, attr):
        return self._types[attr]

    def keys(self):
        return list(self._members.keys())

    def items(self):
        return [(k, self[k]) for k in self.keys()]

    def to_dict(self) -> Dict:
        return dict(self.items())

    def __getitem__(self, attr):
        if attr not in self._members:
            raise KeyError('unknown setting', attr)
        return get_env_variable(attr, self._members[attr], self._types[attr])

    def __getattr__(self, attr):
        try:
            return self[attr]
        except KeyError:
            raise AttributeError(attr)

    def __setattr__(self, attr, value):
        raise AttributeError('settings are added with the add method', attr)

    def __contains__(self, attr):
        return attr in self._members

    def __repr__(self):
        return '{}({})'.format(
            self.__class__.__name__, ', '.join(sorted(['{}={}'.format(k, repr(v)) for k, v in self.items()]))
        )


DEFAULTS = SettingsNamespace()
"""
- min_mapq
- max_mapq
- junction_flank
- default_base_quality
- min_clip_length
"""
DEFAULTS.add(
    'min_mapq', 0,
    defn='breakpoints where either alignment has a mapping quality below this threshold are given a breakpoint quality of zero')
DEFAULTS.add(
    'max_mapq', 60,
    defn='mapping qualities above this value are capped when scoring evidence')
DEFAULTS.add(
    'junction_flank', 5,
    defn='number of read bases either side of the junction whose base qualities contribute to the evidence quality')
DEFAULTS.add(
    'default_base_quality', 20,
    defn='base quality assumed for reads which do not report base qualities')
DEFAULTS.add(
    'min_clip_length', 1,
    defn='minimum number of soft clipped bases required to report soft clip breakend evidence')
