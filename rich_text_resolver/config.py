"""
This module contains variables that can permitted to be tweaked by the system environment. Constants
do NOT belong in this module. Constants are values that are names for common options (e.g. tag
names) or settings that should not be altered without making a code change. Those live next to the
code that uses them.
"""

import os
from dataclasses import dataclass


@dataclass
class ENVConfig:
    """class for configuring enviorment parameters"""

    def _get_string(self, var: str, default_value: str = "") -> str:
        """attempt to get the value of var from the os environment; if not present return the
        default_value"""
        return os.environ.get(var, default_value)

    def _get_int(self, var: str, default_value: int) -> int:
        if value := self._get_string(var):
            return int(value)
        return default_value

    def _get_bool(self, var: str, default_value: bool) -> bool:
        if value := self._get_string(var):
            return value.lower() in ("true", "1", "t")
        return default_value

    @property
    def KEY_LENGTH(self) -> int:
        """number of hex characters in a generated `_key`; measured in characters"""
        return self._get_int("RICH_TEXT_KEY_LENGTH", 12)

    @property
    def MAX_TREE_DEPTH(self) -> int:
        """deepest element nesting the markup parser accepts before giving up

        The transformer is recursive so this bounds its stack use as well.
        """
        return self._get_int("RICH_TEXT_MAX_TREE_DEPTH", 256)

    @property
    def RENDER_UNKNOWN_MARKS_AS_TEXT(self) -> bool:
        """render the children of a mark without a resolver instead of raising KeyError"""
        return self._get_bool("RICH_TEXT_RENDER_UNKNOWN_MARKS_AS_TEXT", True)


env_config = ENVConfig()
