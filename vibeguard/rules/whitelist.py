"""Whitelist filter and inline suppression directives.

Two independent strategies decide whether a match is suppressed:

1. Context check on the enclosing line: the rule's own whitelist patterns plus
   built-in patterns for line comments and environment variable references.
2. Lexical check on the matched text: a fixed list of placeholder and
   env-reference substrings, compared case-insensitively, plus upper-case
   ``${NAME}`` placeholders.

This is a line-oriented heuristic. A match inside a multi-line block comment
is only suppressed when its own line starts with a comment continuation
marker (``*`` or ``/*``). ``#`` only starts a comment in hash-comment
languages.
"""

import re
from dataclasses import dataclass

from .base import RULE_ID, Rule
from .languages import HASH_COMMENT_LANGUAGES

# Matched text containing any of these is never reported
GLOBAL_WHITELIST = (
    "process.env.",
    "import.meta.env",
    "os.environ",
    "os.getenv",
    "your-api-key-here",
    "your_api_key",
    "your-api-key",
    "api-key-placeholder",
    "secret-placeholder",
    "password-placeholder",
    "sk-example",
    "sk-your",
    "demo-key",
    "test-key",
    "sample-key",
    "[api_key]",
    "<api_key>",
    "{api_key}",
    "api_key_here",
    "changeme",
)

# ${NAME} env placeholder; lower-case ${expr} is template interpolation
ENV_PLACEHOLDER = re.compile(r"\$\{[A-Z_][A-Z0-9_]*(?::-[^}]*)?\}")

# Comment marker between line start and the match
LINE_COMMENT_PREFIX = re.compile(r"(?:^|\s)(?://|<!--)|(?:^|\s)--(?:\s|$)|^\s*/?\*")
HASH_COMMENT_PREFIX = re.compile(r"(?:^|\s)#")

# Environment variable references anywhere on the line
ENV_REFERENCE_PATTERNS = (
    re.compile(r"process\.env\b"),
    re.compile(r"import\.meta\.env\b"),
    re.compile(r"\bos\.environ\b"),
    re.compile(r"\bos\.getenv\s*\("),
    re.compile(r"\bSystem\.getenv\s*\("),
    re.compile(r"\bEnvironment\.GetEnvironmentVariable\s*\("),
    re.compile(r"\bENV\s*\["),
    ENV_PLACEHOLDER,
    re.compile(r"\$env:", re.IGNORECASE),
)

IGNORE_NEXT_LINE = "vibeguard-ignore-next-line"
DISABLE = "vibeguard-disable"

_COMMENT_OPENERS = r"(?://|#|--|/\*|<!--)"
_IGNORE_DIRECTIVE = re.compile(_COMMENT_OPENERS + r"\s*" + re.escape(IGNORE_NEXT_LINE) + r"\b")
_DISABLE_DIRECTIVE = re.compile(
    _COMMENT_OPENERS + r"\s*" + re.escape(DISABLE) + r"(?![\w-])(?P<ids>[^\n]*)"
)


def enclosing_line(text: str, offset: int) -> tuple[int, str]:
    """Return the start offset and text of the line containing ``offset``."""
    line_start = text.rfind("\n", 0, offset) + 1
    line_end = text.find("\n", offset)
    if line_end == -1:
        line_end = len(text)
    return line_start, text[line_start:line_end].rstrip("\r")


@dataclass(frozen=True)
class SuppressionDirectives:
    """Inline ``vibeguard-*`` comments found in one document.

    ``disabled_rules`` is None when a bare ``vibeguard-disable`` turns off
    every rule for the document.
    """

    ignored_lines: frozenset[int] = frozenset()
    disabled_rules: frozenset[str] | None = frozenset()

    @classmethod
    def parse(cls, text: str) -> "SuppressionDirectives":
        if IGNORE_NEXT_LINE not in text and DISABLE not in text:
            return cls()

        ignored: set[int] = set()
        disabled: set[str] = set()
        disable_all = False

        for line_no, line in enumerate(text.split("\n")):
            if _IGNORE_DIRECTIVE.search(line):
                ignored.add(line_no + 1)
                continue
            match = _DISABLE_DIRECTIVE.search(line)
            if match:
                ids = RULE_ID.findall(match.group("ids"))
                if ids:
                    disabled.update(ids)
                else:
                    disable_all = True

        return cls(
            ignored_lines=frozenset(ignored),
            disabled_rules=None if disable_all else frozenset(disabled),
        )

    def disables(self, rule_id: str) -> bool:
        return self.disabled_rules is None or rule_id in self.disabled_rules

    def ignores_line(self, line: int) -> bool:
        return line in self.ignored_lines


class WhitelistFilter:
    """Decides whether a rule match should be dropped."""

    def __init__(
        self,
        global_whitelist: tuple[str, ...] = GLOBAL_WHITELIST,
        check_comments: bool = True,
        check_env_references: bool = True,
    ):
        self.global_whitelist = tuple(s.lower() for s in global_whitelist)
        self.check_comments = check_comments
        self.check_env_references = check_env_references

    def is_suppressed(self, text: str, match: re.Match, rule: Rule, language_id: str = "") -> bool:
        """Either strategy suffices to suppress the match."""
        return self.matches_global_whitelist(match.group(0)) or self.matches_context(
            text, match, rule, language_id
        )

    def matches_global_whitelist(self, matched_text: str) -> bool:
        if ENV_PLACEHOLDER.search(matched_text):
            return True
        lowered = matched_text.lower()
        return any(token in lowered for token in self.global_whitelist)

    def matches_context(self, text: str, match: re.Match, rule: Rule, language_id: str = "") -> bool:
        line_start, line = enclosing_line(text, match.start())

        if self.check_comments:
            prefix = line[: match.start() - line_start]
            if LINE_COMMENT_PREFIX.search(prefix):
                return True
            if language_id.lower() in HASH_COMMENT_LANGUAGES and HASH_COMMENT_PREFIX.search(prefix):
                return True

        if self.check_env_references and any(p.search(line) for p in ENV_REFERENCE_PATTERNS):
            return True

        return any(p.search(line) for p in rule.compiled_whitelist)
