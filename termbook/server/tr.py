"""
Localized strings

Command names, descriptions and reply templates, keyed by message id per
language. Templates use str.format placeholders.
"""

from typing import Dict

DEFAULT_LANGUAGE = 'en'

# Message ids
DefineName = 'DefineName'
DefineDesc = 'DefineDesc'
DefineTermName = 'DefineTermName'
DefineTermDesc = 'DefineTermDesc'
DefineNotFound = 'DefineNotFound'
DefineDisplayText = 'DefineDisplayText'

AddDefineName = 'AddDefineName'
AddDefineDesc = 'AddDefineDesc'
AddDefineTermName = 'AddDefineTermName'
AddDefineTermDesc = 'AddDefineTermDesc'
AddDefineDefinitionName = 'AddDefineDefinitionName'
AddDefineDefinitionDesc = 'AddDefineDefinitionDesc'
AddDefineAlreadyUsed = 'AddDefineAlreadyUsed'
AddDefineDisplayText = 'AddDefineDisplayText'
AddDefineInvalidText = 'AddDefineInvalidText'

RemoveDefineName = 'RemoveDefineName'
RemoveDefineDesc = 'RemoveDefineDesc'
RemoveDefineTermName = 'RemoveDefineTermName'
RemoveDefineTermDesc = 'RemoveDefineTermDesc'
RemoveDefineNotFound = 'RemoveDefineNotFound'
RemoveDefineDisplayText = 'RemoveDefineDisplayText'

DefineSaveFailed = 'DefineSaveFailed'
AccessDenied = 'AccessDenied'
MissingParam = 'MissingParam'
InvalidParam = 'InvalidParam'
HelpCommand = 'HelpCommand'
HelpParam = 'HelpParam'


STRINGS: Dict[str, Dict[str, str]] = {
    'en': {
        DefineName: 'define',
        DefineDesc: 'Displays the definition for a given term.',
        DefineTermName: 'term',
        DefineTermDesc: 'The term to look up.',
        DefineNotFound: '{sender}: I do not know "{term}".',
        DefineDisplayText: '{sender}: {definition}',

        AddDefineName: 'add-define',
        AddDefineDesc: 'Adds a new term definition.',
        AddDefineTermName: 'term',
        AddDefineTermDesc: 'The term to define.',
        AddDefineDefinitionName: 'definition',
        AddDefineDefinitionDesc: 'The definition for the term.',
        AddDefineAlreadyUsed: 'The term "{term}" is already defined.',
        AddDefineDisplayText: 'The term "{term}" has been added.',
        AddDefineInvalidText: 'The term or definition contains characters that cannot be stored.',

        RemoveDefineName: 'remove-define',
        RemoveDefineDesc: 'Removes an existing term definition.',
        RemoveDefineTermName: 'term',
        RemoveDefineTermDesc: 'The term to remove.',
        RemoveDefineNotFound: 'The term "{term}" is not defined.',
        RemoveDefineDisplayText: 'The term "{term}" has been removed.',

        DefineSaveFailed: 'The dictionary could not be saved; "{term}" was not changed.',
        AccessDenied: 'Access to "{command}" denied.',
        MissingParam: 'Missing parameter "{param}" for "{command}".',
        InvalidParam: 'Invalid value for parameter "{param}" of "{command}".',
        HelpCommand: '{prefix}{command}: {description}',
        HelpParam: '  <{param}> {description}',
    },
    'nl': {
        DefineDesc: 'Toont de definitie van een term.',
        DefineTermDesc: 'De term om op te zoeken.',
        DefineNotFound: '{sender}: ik ken "{term}" niet.',
        AddDefineDesc: 'Voegt een nieuwe definitie toe.',
        AddDefineTermDesc: 'De term om te definiëren.',
        AddDefineDefinitionDesc: 'De definitie van de term.',
        AddDefineAlreadyUsed: 'De term "{term}" is al gedefinieerd.',
        AddDefineDisplayText: 'De term "{term}" is toegevoegd.',
        AddDefineInvalidText: 'De term of definitie bevat tekens die niet kunnen worden opgeslagen.',
        RemoveDefineDesc: 'Verwijdert een bestaande definitie.',
        RemoveDefineTermDesc: 'De term om te verwijderen.',
        RemoveDefineNotFound: 'De term "{term}" is niet gedefinieerd.',
        RemoveDefineDisplayText: 'De term "{term}" is verwijderd.',
        DefineSaveFailed: 'Het woordenboek kon niet worden opgeslagen; "{term}" is niet gewijzigd.',
        AccessDenied: 'Toegang tot "{command}" geweigerd.',
        MissingParam: 'Parameter "{param}" ontbreekt voor "{command}".',
        InvalidParam: 'Ongeldige waarde voor parameter "{param}" van "{command}".',
    },
}


def tr(key: str, language: str = DEFAULT_LANGUAGE, **values) -> str:
    """
    Look up a string and fill in its placeholders.

    Falls back to English for unknown languages or untranslated ids.

    Raises:
        KeyError: key is not a known message id
    """
    table = STRINGS.get(language, {})
    template = table.get(key)
    if template is None:
        template = STRINGS[DEFAULT_LANGUAGE][key]
    return template.format(**values) if values else template
