"""
Command dispatch

Turns chat messages into command requests for bound handlers.

Lifecycle of one message:
1. Strip the command prefix, split off the command name
2. Find the handler whose matches(name) is true (unknown names are ignored)
3. Validate required parameters against their patterns
4. Ask the handler to authorize the request
5. handle(request) -> Response, written through the ResponseWriter

Handlers own their semantics; this module owns parsing, validation, help and
the access-denied reply.

Property of Uncompromising Sensors LLC.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Pattern

from sdk.logging import getLogger, setRequestContext, clearRequestContext

from . import tr

# Parameter patterns
RegAny = re.compile(r'.+', re.DOTALL)
RegWord = re.compile(r'\S+')


class ResponseWriter(ABC):
    """Outbound side of the chat connection."""

    @abstractmethod
    def privMsg(self, target: str, text: str):
        """Send text to a channel or user."""


@dataclass
class Message:
    """Incoming chat message."""
    senderName: str
    senderMask: str
    target: str
    text: str


@dataclass
class Response:
    """Reply produced by a command handler."""
    target: str
    text: str


@dataclass
class Request:
    """A parsed command invocation."""
    senderName: str
    senderMask: str
    target: str
    command: str
    argText: str
    args: List[str] = field(default_factory=list)

    def string(self, index: int) -> str:
        """Argument at index, or '' when absent."""
        return self.args[index] if index < len(self.args) else ''

    def remainder(self, index: int) -> str:
        """Argument text from argument index to the end, original spacing kept."""
        spans = [m.start() for m in RegWord.finditer(self.argText)]
        if index >= len(spans):
            return ''
        return self.argText[spans[index]:].rstrip()


@dataclass
class Param:
    name: str
    description: str
    required: bool = True
    pattern: Pattern = RegAny


class CommandHandler(ABC):
    """
    A bindable command.

    Subclasses set name/description/restricted and declare params with add().
    """

    def __init__(self, name: str, description: str, restricted: bool = False):
        self.name = name
        self.description = description
        self.restricted = restricted
        self.params: List[Param] = []

    def add(self, name: str, description: str, required: bool = True,
            pattern: Pattern = RegAny) -> 'CommandHandler':
        """Declare the next positional parameter. Returns self for chaining."""
        self.params.append(Param(name, description, required, pattern))
        return self

    def matches(self, name: str) -> bool:
        return name.lower() == self.name.lower()

    @abstractmethod
    def authorize(self, request: Request) -> bool:
        """True if the sender may run this command."""

    @abstractmethod
    def handle(self, request: Request) -> Optional[Response]:
        """Run the command and return the reply (None for no reply)."""


class CommandSet:
    """Registry of command handlers sharing one prefix."""

    def __init__(self, prefix: str, language: str = tr.DEFAULT_LANGUAGE):
        self.prefix = prefix
        self.language = language
        self.log = getLogger()
        self._handlers: List[CommandHandler] = []

    def bind(self, handler: CommandHandler) -> CommandHandler:
        if self.find(handler.name):
            raise ValueError(f"Command already bound: {handler.name}")
        self._handlers.append(handler)
        self.log.debug(f"[CommandSet] Bound {self.prefix}{handler.name}")
        return handler

    def clear(self):
        self._handlers = []

    def find(self, name: str) -> Optional[CommandHandler]:
        for handler in self._handlers:
            if handler.matches(name):
                return handler
        return None

    def __len__(self) -> int:
        return len(self._handlers)

    def parse(self, message: Message) -> Optional[Request]:
        """Request for a prefixed message, or None if it is not a command."""
        text = message.text.strip()
        if not text.startswith(self.prefix):
            return None

        body = text[len(self.prefix):]
        parts = body.split(None, 1)
        if not parts:
            return None

        argText = parts[1] if len(parts) > 1 else ''
        return Request(
            senderName=message.senderName,
            senderMask=message.senderMask,
            target=message.target,
            command=parts[0].lower(),
            argText=argText,
            args=argText.split()
        )

    def dispatch(self, w: ResponseWriter, message: Message) -> bool:
        """
        Run the command in message, if any.

        Returns:
            True if a bound command handled (or rejected) the message
        """
        request = self.parse(message)
        if request is None:
            return False

        handler = self.find(request.command)
        if handler is None:
            return False

        setRequestContext(request.senderMask, handler.name)
        try:
            error = self._validate(handler, request)
            if error:
                w.privMsg(request.senderName, error)
                return True

            if not handler.authorize(request):
                self.log.warning(f"[CommandSet] Denied {handler.name} for {request.senderMask}")
                w.privMsg(request.senderName,
                          tr.tr(tr.AccessDenied, self.language, command=handler.name))
                return True

            response = handler.handle(request)
            if response is not None:
                w.privMsg(response.target, response.text)
            return True
        finally:
            clearRequestContext()

    def _validate(self, handler: CommandHandler, request: Request) -> Optional[str]:
        """Reply text for the first missing/invalid parameter, or None."""
        lastIndex = len(handler.params) - 1
        for index, param in enumerate(handler.params):
            # The last parameter takes the rest of the line
            value = request.remainder(index) if index == lastIndex else request.string(index)
            if not value:
                if param.required:
                    return tr.tr(tr.MissingParam, self.language, param=param.name, command=handler.name)
                continue
            if not param.pattern.fullmatch(value):
                return tr.tr(tr.InvalidParam, self.language, param=param.name, command=handler.name)
        return None

    def helpHandler(self, w: ResponseWriter, request: Request):
        """Send the command list (or one command's parameters) to the requester."""
        name = request.string(0)
        handlers = [self.find(name)] if name else list(self._handlers)

        for handler in handlers:
            if handler is None:
                continue
            w.privMsg(request.senderName, tr.tr(
                tr.HelpCommand, self.language,
                prefix=self.prefix, command=handler.name, description=handler.description
            ))
            if name:
                for param in handler.params:
                    w.privMsg(request.senderName, tr.tr(
                        tr.HelpParam, self.language,
                        param=param.name, description=param.description
                    ))
