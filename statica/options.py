from dataclasses import dataclass, field, fields
from typing import Union


@dataclass
class StaticOptions:
    gzip: bool = field(default=True)
    gzip_level: int = field(default=9)

    def __post_init__(self):
        if isinstance(self.gzip_level, bool) or not isinstance(self.gzip_level, int) \
                or not 0 <= self.gzip_level <= 9:
            raise ValueError(f'gzip_level must be an integer from 0 to 9, got {self.gzip_level!r}')

    @classmethod
    def make(cls, options: Union['StaticOptions', dict, None] = None) -> 'StaticOptions':
        """
        Accepts options object, plain dict or None. Keys that are missing in
        dict are taken by default, so {} and None both mean gzip is enabled
        """

        if options is None:
            return cls()

        if isinstance(options, cls):
            return options

        known = {option.name for option in fields(cls)}
        unknown = set(options) - known

        if unknown:
            raise TypeError(f'unknown static options: {", ".join(sorted(unknown))}')

        return cls(**options)
