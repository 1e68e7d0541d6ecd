"""
termbook entry point.

Runs the dictionary module against a line-based console: every stdin line is
treated as one chat message, replies are printed to stdout.

Line format:
    <nick>!<user>@<host> <target> <text>    message from a chat user
    <text>                                  message from the local operator

Usage:
    python -m termbook.main --config path/to/profile.json

Exit codes:
    0  stdin closed
    1  dictionary could not be loaded and onLoadFailure is 'abort'

Property of Uncompromising Sensors LLC.
"""

import argparse
import sys
from typing import Optional

from sdk.logging import getLogger, configureLogging
from termbook.core import LoadStatus
from termbook.server.dispatch import Message, ResponseWriter
from termbook.server.dictionaryModule import DictionaryModule
from termbook.server.profile import Profile, loadProfile, ON_LOAD_FAILURE_ABORT

CONSOLE_MASK = 'console!operator@localhost'
CONSOLE_TARGET = 'console'


class ConsoleWriter(ResponseWriter):
    """Prints replies as '<target>: <text>'."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout

    def privMsg(self, target: str, text: str):
        self.stream.write(f"{target}: {text}\n")
        self.stream.flush()


def parseLine(line: str) -> Optional[Message]:
    """Message for one console line, or None for a blank line."""
    line = line.strip()
    if not line:
        return None

    parts = line.split(None, 2)
    if len(parts) == 3 and '!' in parts[0] and '@' in parts[0]:
        mask, target, text = parts
        return Message(senderName=mask.split('!', 1)[0], senderMask=mask, target=target, text=text)

    return Message(senderName=CONSOLE_TARGET, senderMask=CONSOLE_MASK, target=CONSOLE_TARGET, text=line)


def startModule(profile: Profile) -> Optional[DictionaryModule]:
    """
    Load the dictionary module and apply the profile's onLoadFailure policy.

    Returns:
        The loaded module, or None when startup must abort
    """
    log = getLogger('termbook.main')
    module = DictionaryModule()
    result = module.load(profile)

    if result.status != LoadStatus.FAILED:
        return module

    if profile.onLoadFailure == ON_LOAD_FAILURE_ABORT:
        log.error(f"[Main] Dictionary load failed, aborting: {result.error}")
        module.unload()
        return None

    moved = module.store.quarantine()
    log.warning(f"[Main] Dictionary load failed, starting empty (old file: {moved})")
    return module


def run(module: DictionaryModule, stream, writer: ResponseWriter):
    """Dispatch every line of stream until it is exhausted."""
    helpCommand = f"{module.commands.prefix}help"

    for line in stream:
        message = parseLine(line)
        if message is None:
            continue

        if message.text.split(None, 1)[0].lower() == helpCommand:
            request = module.commands.parse(message)
            module.help(writer, request)
            continue

        module.onMessage(writer, message)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='termbook dictionary bot (console host)')
    parser.add_argument('--config', default='profile.json', help='Path to profile JSON')
    args = parser.parse_args(argv)

    profile = loadProfile(args.config)
    configureLogging(**profile.logging)
    log = getLogger('termbook.main')
    log.info(f"[Main] Starting with root {profile.root}")

    module = startModule(profile)
    if module is None:
        return 1

    try:
        run(module, sys.stdin, ConsoleWriter())
    except KeyboardInterrupt:
        pass
    finally:
        module.unload()

    log.info("[Main] Stopped")
    return 0


if __name__ == '__main__':
    sys.exit(main())
