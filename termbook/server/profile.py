"""
Bot profile

JSON configuration for one bot instance: data root, command prefix, whitelist
of sender masks allowed to run restricted commands, reply language and what to
do when the dictionary file cannot be loaded.

Example profile.json:
{
  "root": "./data",
  "commandPrefix": "!",
  "whitelist": ["*!*@trusted.example.org"],
  "language": "en",
  "onLoadFailure": "abort",
  "logging": {"logDir": "./logs", "level": "INFO"}
}
"""

import fnmatch
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import orjson

DICTIONARY_FILENAME = 'dictionary.dat'

# onLoadFailure values
ON_LOAD_FAILURE_ABORT = 'abort'
ON_LOAD_FAILURE_START_EMPTY = 'startEmpty'
VALID_ON_LOAD_FAILURE = {ON_LOAD_FAILURE_ABORT, ON_LOAD_FAILURE_START_EMPTY}


@dataclass
class Profile:
    root: Path = Path('./data')
    commandPrefix: str = '!'
    whitelist: List[str] = field(default_factory=list)
    language: str = 'en'
    onLoadFailure: str = ON_LOAD_FAILURE_ABORT
    logging: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.root = Path(self.root)
        if self.onLoadFailure not in VALID_ON_LOAD_FAILURE:
            raise ValueError(f"onLoadFailure must be one of {sorted(VALID_ON_LOAD_FAILURE)}, "
                             f"got {self.onLoadFailure!r}")
        if not self.commandPrefix:
            raise ValueError("commandPrefix must not be empty")

    @property
    def dictionaryPath(self) -> Path:
        return self.root / DICTIONARY_FILENAME

    def isWhitelisted(self, senderMask: str) -> bool:
        """True if the sender mask (nick!user@host) matches any whitelist pattern."""
        mask = senderMask.lower()
        return any(fnmatch.fnmatchcase(mask, pattern.lower()) for pattern in self.whitelist)

    @classmethod
    def fromDict(cls, data: Dict[str, Any]) -> 'Profile':
        """Build a profile from parsed JSON, ignoring unknown keys."""
        known = {'root', 'commandPrefix', 'whitelist', 'language', 'onLoadFailure', 'logging'}
        return cls(**{k: v for k, v in data.items() if k in known})


def loadProfile(configPath) -> Profile:
    """Load a profile from a JSON file"""
    with open(configPath, 'rb') as f:
        return Profile.fromDict(orjson.loads(f.read()))
