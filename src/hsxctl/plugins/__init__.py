"""Extension layer — plugin system via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus single-file plugins from the local plugin directory.
INVARIANT: Plugin failures are warnings, never errors.
"""

from hsxctl.plugins.manager import PluginManager

__all__ = ["PluginManager"]
