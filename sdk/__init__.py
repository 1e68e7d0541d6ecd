"""sdk - Software Development Kit for termbook

Contains reusable modules for:
    - logging: Hierarchical logging with rotation and request context
"""

__version__ = "1.0"
__versionInfo__ = (1, 0, 0)
