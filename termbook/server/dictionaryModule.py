"""
Dictionary module

Lets chat users look up term definitions, and whitelisted users add and
remove them.

Commands (names from the localized string table):
- define <term>                        anyone, reply goes to the channel
- add-define <term> <definition...>    whitelisted, reply goes to the sender
- remove-define <term>                 whitelisted, reply goes to the sender

Unknown/duplicate terms are ordinary replies. A failed save is logged as an
error and reported to the sender; the store has already rolled it back.

Property of Uncompromising Sensors LLC.
"""

from typing import Callable, Optional

from sdk.logging import getLogger, installRequestContextFilter
from termbook.core import (
    TermStore, LoadResult,
    NotFoundError, AlreadyExistsError, StorageError, EncodeError, TermStoreError
)

from . import tr
from .dispatch import CommandHandler, CommandSet, Message, Request, Response, ResponseWriter, RegAny
from .profile import Profile


class DictionaryCommand(CommandHandler):
    """Common base: store access, reply language and the authorization predicate."""

    def __init__(self, store: TermStore, language: str, isAuthorized: Callable[[str], bool],
                 nameKey: str, descKey: str, restricted: bool):
        super().__init__(tr.tr(nameKey, language), tr.tr(descKey, language), restricted)
        self.store = store
        self.language = language
        self.isAuthorized = isAuthorized
        self.log = getLogger()

    def authorize(self, request: Request) -> bool:
        if not self.restricted:
            return True
        return self.isAuthorized(request.senderMask)

    def _text(self, key: str, **values) -> str:
        return tr.tr(key, self.language, **values)

    def _saveFailed(self, request: Request, term: str, error: TermStoreError) -> Response:
        self.log.error(f"[Dictionary] {self.name} {term!r} not saved: {error}")
        return Response(request.senderName, self._text(tr.DefineSaveFailed, term=term))


class DefineCommand(DictionaryCommand):
    def __init__(self, store, language, isAuthorized):
        super().__init__(store, language, isAuthorized, tr.DefineName, tr.DefineDesc, False)
        self.add(self._text(tr.DefineTermName), self._text(tr.DefineTermDesc), True, RegAny)

    def handle(self, request: Request) -> Response:
        term = request.string(0)
        try:
            definition = self.store.define(term)
        except NotFoundError:
            return Response(request.target, self._text(
                tr.DefineNotFound, sender=request.senderName, term=term))

        return Response(request.target, self._text(
            tr.DefineDisplayText, sender=request.senderName, definition=definition))


class AddDefineCommand(DictionaryCommand):
    def __init__(self, store, language, isAuthorized):
        super().__init__(store, language, isAuthorized, tr.AddDefineName, tr.AddDefineDesc, True)
        self.add(self._text(tr.AddDefineTermName), self._text(tr.AddDefineTermDesc), True, RegAny)
        self.add(self._text(tr.AddDefineDefinitionName), self._text(tr.AddDefineDefinitionDesc), True, RegAny)

    def handle(self, request: Request) -> Response:
        term = request.string(0)
        try:
            self.store.addDefine(term, request.remainder(1))
        except AlreadyExistsError:
            return Response(request.senderName, self._text(tr.AddDefineAlreadyUsed, term=term))
        except EncodeError:
            self.log.warning(f"[Dictionary] Rejected undecodable text from {request.senderMask!r}")
            return Response(request.senderName, self._text(tr.AddDefineInvalidText))
        except StorageError as e:
            return self._saveFailed(request, term, e)

        return Response(request.senderName, self._text(tr.AddDefineDisplayText, term=term))


class RemoveDefineCommand(DictionaryCommand):
    def __init__(self, store, language, isAuthorized):
        super().__init__(store, language, isAuthorized, tr.RemoveDefineName, tr.RemoveDefineDesc, True)
        self.add(self._text(tr.RemoveDefineTermName), self._text(tr.RemoveDefineTermDesc), True, RegAny)

    def handle(self, request: Request) -> Response:
        term = request.string(0)
        try:
            self.store.removeDefine(term)
        except NotFoundError:
            return Response(request.senderName, self._text(tr.RemoveDefineNotFound, term=term))
        except (StorageError, EncodeError) as e:
            return self._saveFailed(request, term, e)

        return Response(request.senderName, self._text(tr.RemoveDefineDisplayText, term=term))


class DictionaryModule:
    """
    Bot module wiring the term store to chat commands.

    load() creates the store for the profile's data root, loads it and binds
    the commands; unload() unbinds them. The module keeps no state besides the
    store and its command set.
    """

    def __init__(self):
        self.log = getLogger()
        self.store: Optional[TermStore] = None
        self.commands: Optional[CommandSet] = None

    def load(self, profile: Profile, store: Optional[TermStore] = None) -> LoadResult:
        """
        Bind commands and load the dictionary.

        Args:
            profile: Bot profile (data root, prefix, whitelist, language)
            store: Store to use instead of one at profile.dictionaryPath

        Returns:
            Outcome of loading the dictionary file; the host decides what to do on failure
        """
        self.store = store if store is not None else TermStore(profile.dictionaryPath)
        self.commands = CommandSet(profile.commandPrefix, profile.language)

        installRequestContextFilter(self.log)
        installRequestContextFilter(self.store.log)
        installRequestContextFilter(self.commands.log)

        language = profile.language
        for handlerClass in (DefineCommand, AddDefineCommand, RemoveDefineCommand):
            handler = self.commands.bind(handlerClass(self.store, language, profile.isWhitelisted))
            installRequestContextFilter(handler.log)

        result = self.store.load()
        self.log.info(f"[Dictionary] Loaded: status={result.status.value}, terms={result.count}")
        return result

    def unload(self):
        if self.commands is not None:
            self.commands.clear()
        self.log.info("[Dictionary] Unloaded")

    def onMessage(self, w: ResponseWriter, message: Message) -> bool:
        """Entry point for every incoming chat message."""
        if self.commands is None:
            return False
        return self.commands.dispatch(w, message)

    def help(self, w: ResponseWriter, request: Request):
        self.commands.helpHandler(w, request)
