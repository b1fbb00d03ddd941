"""Codec configuration."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CodecOptions:
    """
    Options shared by the decode and encode engines.

    Properties:
        tag:
            Key of `dataclasses.field(metadata=...)` holding the key name
            of a field. Fields without it fall back to the lower-cased
            attribute name.

        sort_map_keys:
            Emit mapping entries sorted by key instead of in the mapping's
            own iteration order.
    """

    tag: str = "properties"
    sort_map_keys: bool = False


DEFAULT_OPTIONS = CodecOptions()
