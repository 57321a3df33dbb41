"""Browser and Node.js code-injection rules."""

import re

from . import fixes
from .base import Category, EffortLevel, Rule, Severity, TransformFix
from .languages import BROWSER, JS_FAMILY, MARKUP

_USER_DATA = r"(?:input|param|request|req\.|user|form|query|body|filename|args)"


def rules() -> list[Rule]:
    return [
        Rule(
            id="CODE_INJECTION_EVAL",
            category=Category.CODE_INJECTION,
            severity=Severity.ERROR,
            pattern=r"(?<![.\w$])eval\s*\(",
            message="eval() executes arbitrary code. Never pass it data you do not control.",
            description="eval() turns any string into running code, the most direct injection sink.",
            quick_fix=TransformFix(fixes.eval_to_json_parse, title="Parse data with JSON.parse()"),
            whitelist=(r"""(["'`])[^"'`]*\beval\b[^"'`]*\1""",),
            languages=BROWSER,
            tags=("rce",),
        ),
        Rule(
            id="CODE_INJECTION_INNERHTML",
            category=Category.CODE_INJECTION,
            severity=Severity.ERROR,
            pattern=r"\.innerHTML\s*=(?!=)\s*[^;\n]+",
            message="Assigning to innerHTML renders injected markup and scripts (XSS).",
            description="Use textContent for text, or sanitize HTML with DOMPurify before assigning it.",
            quick_fix=TransformFix(fixes.inner_html_to_text_content, title="Use textContent"),
            whitelist=(
                r"""\.innerHTML\s*=\s*(["'`])\s*\1""",
                r"""\.innerHTML\s*=\s*(["'`])<[^"'`+$]*>[^"'`+$]*</[^"'`+$]*>\1\s*;?\s*$""",
                r"DOMPurify\.sanitize\s*\(",
            ),
            languages=BROWSER,
            tags=("xss",),
        ),
        Rule(
            id="CODE_INJECTION_CHILD_PROCESS",
            category=Category.CODE_INJECTION,
            severity=Severity.ERROR,
            pattern=rf"(?:child_process\.|(?<![.\w$]))exec(?:Sync)?\s*\([^)]*{_USER_DATA}[^)]*\)",
            flags=re.MULTILINE | re.IGNORECASE,
            message="Shell command built from user input. Attackers can run any command on the host.",
            description="Use execFile() or spawn() with an argument array and validate every argument.",
            whitelist=(
                r"\brequire\s*\(",
                r"^\s*import\b",
                r"""exec(?:Sync)?\s*\(\s*(["'`])[^"'`${}+]*\1\s*[,)]""",
            ),
            languages=JS_FAMILY,
            effort=EffortLevel.MEDIUM,
            tags=("rce", "command-injection"),
        ),
        Rule(
            id="CODE_INJECTION_DOCUMENT_WRITE",
            category=Category.CODE_INJECTION,
            severity=Severity.WARNING,
            pattern=r"\bdocument\.write(?:ln)?\s*\(",
            message="document.write() can inject unescaped markup into the page.",
            description="Build DOM nodes with createElement/textContent instead of writing raw HTML.",
            whitelist=(r"""document\.write(?:ln)?\s*\(\s*(["'`])[^<>{}$"'`]*\1\s*\)""",),
            languages=BROWSER,
            effort=EffortLevel.MEDIUM,
            tags=("xss",),
        ),
        Rule(
            id="CODE_INJECTION_FUNCTION_CONSTRUCTOR",
            category=Category.CODE_INJECTION,
            severity=Severity.WARNING,
            pattern=r"\bnew\s+Function\s*\(",
            message="The Function constructor compiles strings into code, just like eval().",
            description="Only construct functions from fully static strings.",
            whitelist=(r"""new\s+Function\s*\(\s*(["'`])[^"'`${}+]*\1\s*\)""",),
            languages=BROWSER,
            effort=EffortLevel.MEDIUM,
            tags=("rce",),
        ),
        Rule(
            id="CODE_INJECTION_SETTIMEOUT_STRING",
            category=Category.CODE_INJECTION,
            severity=Severity.WARNING,
            pattern=r"""\b(?:setTimeout|setInterval)\s*\(\s*(?:["'][^"'\n]*["']\s*\+|`[^`]*\$\{)""",
            message="setTimeout/setInterval with a built string evaluates it as code.",
            description="Pass a function instead: setTimeout(() => handler(value), delay).",
            languages=BROWSER,
            tags=("rce",),
        ),
        Rule(
            id="CODE_INJECTION_SCRIPT_TAG",
            category=Category.CODE_INJECTION,
            severity=Severity.ERROR,
            pattern=(
                r"<script\b[^>]*>(?:(?!</script>).)*?"
                r"\b(?:input|param|request|user|form|query|body)\w*"
                r"(?:(?!</script>).)*?</script>"
            ),
            flags=re.IGNORECASE | re.DOTALL,
            message="Script tag built from user-controlled data (XSS).",
            description="Pass data to scripts through data attributes or JSON, never by templating script bodies.",
            languages=MARKUP | JS_FAMILY,
            effort=EffortLevel.MEDIUM,
            tags=("xss",),
        ),
    ]
