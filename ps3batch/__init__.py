"""ps3batch package root.

Scans PS3 game folders, reads their PARAM.SFO metadata and writes one RPCS3
batch launcher per game. Keep this file small so `import ps3batch` stays
lightweight.
"""

from . import config

__version__ = "1.0.0"

__all__ = [
    "config",
    "__version__",
]
