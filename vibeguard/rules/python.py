"""Python specific code-injection and unsafe-setting rules."""

import re

from . import fixes
from .base import Category, EffortLevel, ImpactLevel, LiteralFix, Rule, Severity, TransformFix
from .languages import PYTHON


def rules() -> list[Rule]:
    return [
        Rule(
            id="PY_PICKLE_LOAD",
            category=Category.CODE_INJECTION,
            severity=Severity.ERROR,
            pattern=r"\b(?:pickle|cPickle|dill)\.loads?\s*\(",
            message="Unpickling untrusted data executes arbitrary code.",
            description="Use json or another data-only format for anything that crosses a trust boundary.",
            languages=PYTHON,
            effort=EffortLevel.MEDIUM,
            tags=("python", "deserialization"),
        ),
        Rule(
            id="PY_OS_SYSTEM",
            category=Category.CODE_INJECTION,
            severity=Severity.ERROR,
            pattern=r"\bos\.(?:system|popen)\s*\(",
            message="os.system/os.popen run their argument through the shell.",
            description="Use subprocess.run() with an argument list so no shell parses the command.",
            quick_fix=LiteralFix("subprocess.run(", title="Use subprocess.run()"),
            languages=PYTHON,
            tags=("python", "command-injection"),
        ),
        Rule(
            id="PY_SUBPROCESS_SHELL",
            category=Category.CODE_INJECTION,
            severity=Severity.WARNING,
            pattern=(
                r"\bsubprocess\.(?:run|call|check_call|check_output|Popen)\s*\("
                r"[^)]*\bshell\s*=\s*True"
            ),
            message="subprocess called with shell=True.",
            description="shell=True hands the command string to /bin/sh; pass a list and drop the shell.",
            quick_fix=TransformFix(fixes.disable_shell, title="Set shell=False"),
            languages=PYTHON,
            tags=("python", "command-injection"),
        ),
        Rule(
            id="PY_EVAL",
            category=Category.CODE_INJECTION,
            severity=Severity.ERROR,
            pattern=r"(?<![.\w])eval\s*\(",
            message="eval() executes arbitrary Python expressions.",
            description="ast.literal_eval() safely parses literals without running code.",
            quick_fix=LiteralFix("ast.literal_eval(", title="Use ast.literal_eval()"),
            languages=PYTHON,
            tags=("python", "rce"),
        ),
        Rule(
            id="PY_EXEC",
            category=Category.CODE_INJECTION,
            severity=Severity.ERROR,
            pattern=r"(?<![.\w])exec\s*\(",
            message="exec() runs arbitrary Python code.",
            description="Replace dynamic code execution with explicit dispatch tables or imports.",
            languages=PYTHON,
            effort=EffortLevel.HARD,
            tags=("python", "rce"),
        ),
        Rule(
            id="PY_YAML_UNSAFE_LOAD",
            category=Category.CODE_INJECTION,
            severity=Severity.WARNING,
            pattern=r"\byaml\.load\s*\((?![^)]*Loader\s*=\s*(?:yaml\.)?(?:Safe|Base)Loader)",
            message="yaml.load() without SafeLoader can construct arbitrary Python objects.",
            description="yaml.safe_load() only builds plain data types.",
            quick_fix=LiteralFix("yaml.safe_load(", title="Use yaml.safe_load()"),
            languages=PYTHON,
            effort=EffortLevel.TRIVIAL,
            tags=("python", "deserialization"),
        ),
        Rule(
            id="PY_SQL_FSTRING",
            category=Category.DESTRUCTIVE_SQL,
            severity=Severity.WARNING,
            pattern=(
                r"""\.(?:execute|executemany|raw)\s*\(\s*f(["'])[^"'\n]*"""
                r"""\b(?:SELECT|INSERT|UPDATE|DELETE)\b[^"'\n]*\{"""
            ),
            flags=re.IGNORECASE | re.MULTILINE,
            message="SQL query formatted with an f-string. Pass parameters to execute() instead.",
            description="Interpolated values are not escaped; use placeholders and a parameter tuple.",
            languages=PYTHON,
            impact=ImpactLevel.HIGH,
            effort=EffortLevel.MEDIUM,
            tags=("python", "injection"),
        ),
        Rule(
            id="CONFIG_DEBUG_ENABLED",
            category=Category.CONFIG_ERROR,
            severity=Severity.WARNING,
            pattern=r"(?:^[ \t]*DEBUG\s*=\s*True\b|\bdebug\s*=\s*True\b)",
            message="Debug mode is hardcoded on.",
            description="Debug pages leak stack traces, settings and sometimes an interactive console.",
            quick_fix=TransformFix(fixes.debug_from_environment, title="Read DEBUG from the environment"),
            languages=PYTHON,
            effort=EffortLevel.TRIVIAL,
            tags=("python", "debug"),
        ),
    ]
