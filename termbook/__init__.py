"""termbook - user-editable chat dictionary

Packages:
    - core: term table, codec, persisted store
    - server: command handlers, dispatch, profile, localized strings
"""

__version__ = "1.0.0"
