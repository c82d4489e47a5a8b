from typing import TypedDict


class RuleRegistryEntry(TypedDict, total=False):
    symbol: str
    display_name: str
    short_description: str
    message_template: str
    manual_instructions: str
    fixable: bool
    severity: str
    category: str
    help_uri: str
    fix_title: str
