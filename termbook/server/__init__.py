"""
termbook Server

Chat-facing side: command dispatch, the dictionary command handlers, bot
profile and localized strings.
"""

from .dispatch import (
    CommandHandler,
    CommandSet,
    Message,
    Request,
    Response,
    ResponseWriter
)
from .dictionaryModule import DictionaryModule
from .profile import Profile, loadProfile

__all__ = [
    'CommandHandler',
    'CommandSet',
    'Message',
    'Request',
    'Response',
    'ResponseWriter',
    'DictionaryModule',
    'Profile',
    'loadProfile'
]
