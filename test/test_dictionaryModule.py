"""
Dictionary Module Tests

Chat-facing behavior of define / add-define / remove-define:
- define replies to the channel, add/remove reply to the sender
- add/remove are restricted to whitelisted sender masks
- expected outcomes (unknown term, duplicate) are replies, not errors
- save failures are reported and leave the dictionary unchanged

Also covers command dispatch (prefix, parameters, help), the profile and the
console host.
"""

import io
import logging
import sys
import tempfile
import shutil
from pathlib import Path

import orjson
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from termbook.core import LoadStatus, TermStore
from termbook.server import tr
from sdk.logging import getRequestContext
from sdk.logging.context import RequestContextFilter
from termbook.server.dispatch import CommandHandler, CommandSet, Message, Request, Response, ResponseWriter
from termbook.server.dictionaryModule import DictionaryModule
from termbook.server.profile import Profile, loadProfile
from termbook.main import parseLine, startModule, run, CONSOLE_MASK


ADMIN_MASK = 'alice!alice@trusted.example.org'
GUEST_MASK = 'mallory!m@elsewhere.example.net'
CHANNEL = '#chat'


class RecordingWriter(ResponseWriter):
    """Collects (target, text) replies"""

    def __init__(self):
        self.sent = []

    def privMsg(self, target: str, text: str):
        self.sent.append((target, text))

    @property
    def last(self):
        return self.sent[-1] if self.sent else None


@pytest.fixture
def tempDir():
    dirPath = Path(tempfile.mkdtemp())
    yield dirPath
    shutil.rmtree(dirPath, ignore_errors=True)


@pytest.fixture
def profile(tempDir):
    return Profile(root=tempDir, commandPrefix='!', whitelist=['*!*@trusted.example.org'])


@pytest.fixture
def module(profile):
    dictionary = DictionaryModule()
    result = dictionary.load(profile)
    assert result.status == LoadStatus.MISSING
    yield dictionary
    dictionary.unload()


@pytest.fixture
def writer():
    return RecordingWriter()


def say(module, writer, text, mask=ADMIN_MASK, target=CHANNEL):
    """Send one chat message through the module"""
    message = Message(senderName=mask.split('!')[0], senderMask=mask, target=target, text=text)
    return module.onMessage(writer, message)


# ============================================================================
# Commands
# ============================================================================

class TestDefine:

    def test_define_unknown_term_replies_to_channel(self, module, writer):
        assert say(module, writer, '!define nothing', mask=GUEST_MASK) is True
        assert writer.last == (CHANNEL, 'mallory: I do not know "nothing".')

    def test_define_known_term(self, module, writer):
        module.store.addDefine("irc", "Internet Relay Chat")
        say(module, writer, '!define IRC', mask=GUEST_MASK)
        assert writer.last == (CHANNEL, 'mallory: Internet Relay Chat')

    def test_define_needs_no_whitelist(self, module, writer):
        module.store.addDefine("open", "to everyone")
        say(module, writer, '!define open', mask='anyone!x@y')
        assert writer.last[1] == 'anyone: to everyone'


class TestAddDefine:

    def test_add_replies_to_sender(self, module, writer):
        say(module, writer, '!add-define Hello a friendly greeting')
        assert writer.last == ('alice', 'The term "Hello" has been added.')
        assert module.store.define("hello") == "a friendly greeting"

    def test_definition_keeps_inner_spacing(self, module, writer):
        say(module, writer, '!add-define spaced one  two   three')
        assert module.store.define("spaced") == "one  two   three"

    def test_duplicate_add(self, module, writer):
        say(module, writer, '!add-define term first')
        say(module, writer, '!add-define TERM second')
        assert writer.last == ('alice', 'The term "TERM" is already defined.')
        assert module.store.define("term") == "first"

    def test_add_denied_for_guest(self, module, writer):
        say(module, writer, '!add-define term sneaky', mask=GUEST_MASK)
        assert writer.last == ('mallory', 'Access to "add-define" denied.')
        assert len(module.store) == 0

    def test_add_missing_definition(self, module, writer):
        say(module, writer, '!add-define lonely')
        assert writer.last == ('alice', 'Missing parameter "definition" for "add-define".')
        assert len(module.store) == 0

    def test_add_is_persisted(self, module, writer, profile):
        say(module, writer, '!add-define x y')

        reloaded = TermStore(profile.dictionaryPath)
        reloaded.load()
        assert reloaded.define("x") == "y"

    def test_save_failure_is_reported(self, module, writer, tempDir):
        blocker = tempDir / 'blocker'
        blocker.write_text('file')
        module.store.filePath = blocker / 'dictionary.dat'

        say(module, writer, '!add-define term definition')
        assert writer.last == ('alice', 'The dictionary could not be saved; "term" was not changed.')
        assert len(module.store) == 0

    def test_unstorable_text_is_rejected(self, module, writer, profile):
        say(module, writer, '!add-define ok fine')
        say(module, writer, '!add-define caf\udce9 coffee')
        assert writer.last == ('alice', 'The term or definition contains characters that cannot be stored.')
        assert module.store.terms() == ["ok"]

        reloaded = TermStore(profile.dictionaryPath)
        reloaded.load()
        assert reloaded.terms() == ["ok"]


class TestRemoveDefine:

    def test_remove(self, module, writer):
        module.store.addDefine("gone", "soon")
        say(module, writer, '!remove-define GONE')
        assert writer.last == ('alice', 'The term "GONE" has been removed.')
        assert len(module.store) == 0

    def test_remove_unknown(self, module, writer):
        say(module, writer, '!remove-define ghost')
        assert writer.last == ('alice', 'The term "ghost" is not defined.')

    def test_remove_denied_for_guest(self, module, writer):
        module.store.addDefine("kept", "safe")
        say(module, writer, '!remove-define kept', mask=GUEST_MASK)
        assert writer.last == ('mallory', 'Access to "remove-define" denied.')
        assert module.store.define("kept") == "safe"

    def test_scenario(self, module, writer):
        say(module, writer, '!add-define hello a greeting')
        say(module, writer, '!define HELLO')
        assert writer.last == (CHANNEL, 'alice: a greeting')
        say(module, writer, '!remove-define hello')
        say(module, writer, '!define hello')
        assert writer.last == (CHANNEL, 'alice: I do not know "hello".')


# ============================================================================
# Dispatch
# ============================================================================

class TestDispatch:

    def test_non_command_ignored(self, module, writer):
        assert say(module, writer, 'define irc') is False
        assert writer.sent == []

    def test_unknown_command_ignored(self, module, writer):
        assert say(module, writer, '!weather today') is False
        assert writer.sent == []

    def test_bare_prefix_ignored(self, module, writer):
        assert say(module, writer, '!') is False

    def test_command_name_is_case_insensitive(self, module, writer):
        say(module, writer, '!DEFINE nothing')
        assert writer.last[0] == CHANNEL

    def test_custom_prefix(self, tempDir, writer):
        dictionary = DictionaryModule()
        dictionary.load(Profile(root=tempDir, commandPrefix='.'))
        assert say(dictionary, writer, '!define x') is False
        assert say(dictionary, writer, '.define x') is True

    def test_unload_clears_commands(self, module, writer):
        module.unload()
        assert len(module.commands) == 0
        assert say(module, writer, '!define x') is False

    def test_double_bind_rejected(self, module):
        handler = module.commands.find('define')
        with pytest.raises(ValueError):
            module.commands.bind(handler)

    def test_request_remainder(self):
        request = Request('n', 'n!u@h', '#c', 'cmd', 'a  b   c ', ['a', 'b', 'c'])
        assert request.string(0) == 'a'
        assert request.string(5) == ''
        assert request.remainder(1) == 'b   c'
        assert request.remainder(3) == ''

    def test_help_lists_commands(self, module, writer):
        request = module.commands.parse(Message('alice', ADMIN_MASK, CHANNEL, '!help'))
        module.help(writer, request)
        lines = [text for _, text in writer.sent]
        assert '!define: Displays the definition for a given term.' in lines
        assert len(lines) == 3

    def test_help_for_one_command(self, module, writer):
        request = module.commands.parse(Message('alice', ADMIN_MASK, CHANNEL, '!help add-define'))
        module.help(writer, request)
        lines = [text for _, text in writer.sent]
        assert lines == [
            '!add-define: Adds a new term definition.',
            '  <term> The term to define.',
            '  <definition> The definition for the term.',
        ]

    def test_localized_replies(self, tempDir, writer):
        dictionary = DictionaryModule()
        dictionary.load(Profile(root=tempDir, language='nl'))
        say(dictionary, writer, '!define kaas')
        assert writer.last == (CHANNEL, 'alice: ik ken "kaas" niet.')

    def test_request_context_set_while_handling(self, writer):
        seen = []

        class RecordingCommand(CommandHandler):
            def authorize(self, request):
                return True

            def handle(self, request):
                seen.append(getRequestContext())
                record = logging.LogRecord('t', logging.INFO, __file__, 0, 'msg', None, None)
                RequestContextFilter().filter(record)
                seen.append((record.sender, record.command))
                return Response(request.target, 'done')

        commands = CommandSet('!')
        commands.bind(RecordingCommand('ping', 'Replies.'))
        commands.dispatch(writer, Message('alice', ADMIN_MASK, CHANNEL, '!ping'))

        assert seen == [
            {'sender': ADMIN_MASK, 'command': 'ping'},
            (ADMIN_MASK, 'ping'),
        ]
        assert getRequestContext() == {'sender': None, 'command': None}


class TestTr:

    def test_fallback_to_english(self):
        assert tr.tr(tr.DefineName, 'nl') == 'define'
        assert tr.tr(tr.DefineName, 'xx') == 'define'

    def test_unknown_key(self):
        with pytest.raises(KeyError):
            tr.tr('NoSuchMessage')


# ============================================================================
# Profile
# ============================================================================

class TestProfile:

    def test_defaults(self):
        profile = Profile()
        assert profile.commandPrefix == '!'
        assert profile.onLoadFailure == 'abort'
        assert profile.dictionaryPath == Path('./data') / 'dictionary.dat'

    def test_whitelist_matching(self):
        profile = Profile(whitelist=['*!*@Trusted.example.org', 'bob!*@*'])
        assert profile.isWhitelisted('alice!a@trusted.EXAMPLE.org')
        assert profile.isWhitelisted('bob!b@anywhere')
        assert not profile.isWhitelisted('eve!e@untrusted.org')
        assert not Profile().isWhitelisted(ADMIN_MASK)

    def test_invalid_on_load_failure(self):
        with pytest.raises(ValueError):
            Profile(onLoadFailure='ignore')

    def test_load_from_json(self, tempDir):
        configPath = tempDir / 'profile.json'
        configPath.write_bytes(orjson.dumps({
            'root': str(tempDir / 'data'),
            'commandPrefix': '?',
            'whitelist': ['op!*@*'],
            'onLoadFailure': 'startEmpty',
            'unrelated': True
        }))

        profile = loadProfile(configPath)
        assert profile.root == tempDir / 'data'
        assert profile.commandPrefix == '?'
        assert profile.onLoadFailure == 'startEmpty'
        assert profile.isWhitelisted('op!x@y')


# ============================================================================
# Console host
# ============================================================================

class TestConsoleHost:

    def test_parse_chat_line(self):
        message = parseLine('bob!b@host #room !define irc')
        assert message.senderName == 'bob'
        assert message.senderMask == 'bob!b@host'
        assert message.target == '#room'
        assert message.text == '!define irc'

    def test_parse_operator_line(self):
        message = parseLine('!add-define a b')
        assert message.senderMask == CONSOLE_MASK
        assert message.text == '!add-define a b'
        assert parseLine('   ') is None

    def test_abort_on_corrupt_file(self, tempDir):
        (tempDir / 'dictionary.dat').write_bytes(b'corrupt')
        assert startModule(Profile(root=tempDir)) is None

    def test_start_empty_on_corrupt_file(self, tempDir):
        (tempDir / 'dictionary.dat').write_bytes(b'corrupt')
        dictionary = startModule(Profile(root=tempDir, onLoadFailure='startEmpty'))

        assert dictionary is not None
        assert len(dictionary.store) == 0
        assert list(tempDir.glob('dictionary.dat.corrupt-*'))

    def test_run_lines(self, tempDir, writer):
        dictionary = startModule(Profile(root=tempDir, whitelist=['console!*@localhost']))
        lines = io.StringIO('!add-define tea hot leaves\n\nbob!b@h #room !define TEA\n!help\n')
        run(dictionary, lines, writer)

        assert ('console', 'The term "tea" has been added.') in writer.sent
        assert ('#room', 'bob: hot leaves') in writer.sent
        assert len(writer.sent) == 5
