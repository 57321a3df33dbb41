"""React, Vue and Angular specific risks."""

import re

from . import fixes
from .base import Category, EffortLevel, Rule, Severity, TransformFix
from .languages import JS_FAMILY, REACT, VUE

_FLAGS = re.IGNORECASE | re.MULTILINE

_TEMPLATE_DATA = r"(?:input|param|user|form|query|request|data|\$data|\$props)"
_SAFE_INTERPOLATIONS = (
    r"\{\{\s*[\w.]+\.(?:length|id|index|key)\s*\}\}",
    r"\{\{\s*\d+\s*\}\}",
    r"\{\{\s*(?:true|false)\s*\}\}",
    r"\{\{[^}]*\|[^}]*\}\}",
)


def rules() -> list[Rule]:
    return [
        Rule(
            id="FRAMEWORK_REACT_DANGEROUS_INNERHTML",
            category=Category.FRAMEWORK_RISK,
            severity=Severity.WARNING,
            pattern=(
                r"dangerouslySetInnerHTML\s*=\s*\{\s*\{\s*__html\s*:\s*[^}]*"
                r"(?:props|state|input|param|user|form|query|request|data)[^}]*\}\s*\}"
            ),
            flags=_FLAGS,
            message="dangerouslySetInnerHTML with dynamic data opens an XSS hole.",
            description="Sanitize HTML with DOMPurify.sanitize() before handing it to React.",
            quick_fix=TransformFix(fixes.sanitize_inner_html, title="Sanitize with DOMPurify"),
            whitelist=(r"DOMPurify\.sanitize", r"sanitizeHtml\s*\(", r"\bxss\s*\("),
            languages=REACT,
            tags=("react", "xss"),
        ),
        Rule(
            id="FRAMEWORK_VUE_V_HTML",
            category=Category.FRAMEWORK_RISK,
            severity=Severity.WARNING,
            pattern=rf"""v-html\s*=\s*["']?[^"'>]*{_TEMPLATE_DATA}[^"'>]*["']?""",
            flags=_FLAGS,
            message="v-html renders user data as raw HTML (XSS).",
            description="Prefer v-text or mustache interpolation; sanitize when HTML is required.",
            quick_fix=TransformFix(fixes.v_html_to_v_text, title="Use v-text"),
            whitelist=(r"sanitize", r"DOMPurify", r"\bxss\s*\("),
            languages=VUE | frozenset({"html"}),
            tags=("vue", "xss"),
        ),
        Rule(
            id="FRAMEWORK_REACT_USEEFFECT_LOOP",
            category=Category.FRAMEWORK_RISK,
            severity=Severity.WARNING,
            pattern=(
                r"useEffect\s*\(\s*\(\s*\)\s*=>\s*\{[^}]*\b(?:set[A-Z]\w*|setState|dispatch)\s*\("
                r"[^}]*\}\s*\)"
            ),
            message="useEffect updates state without a dependency array and re-runs on every render.",
            description="An effect that sets state with no dependency list triggers an endless render loop.",
            quick_fix=TransformFix(fixes.add_empty_dependencies, title="Add a dependency array"),
            languages=REACT,
            effort=EffortLevel.TRIVIAL,
            confidence=0.7,
            tags=("react", "performance"),
        ),
        Rule(
            id="FRAMEWORK_ANGULAR_BYPASS_SECURITY",
            category=Category.FRAMEWORK_RISK,
            severity=Severity.WARNING,
            pattern=(
                r"bypassSecurityTrust(?:Html|Script|Style|Url|ResourceUrl)\s*\("
                r"[^)]*(?:input|param|user|form|query|request|data|content)[^)]*\)"
            ),
            flags=_FLAGS,
            message="bypassSecurityTrust* disables Angular's sanitizer for dynamic data.",
            description="Only bypass Angular sanitization for values you have sanitized yourself.",
            whitelist=(
                r"""bypassSecurityTrust\w*\s*\(\s*(["'`])[^"'`${}]*\1\s*\)""",
                r"sanitize",
            ),
            languages=JS_FAMILY,
            effort=EffortLevel.MEDIUM,
            tags=("angular", "xss"),
        ),
        Rule(
            id="FRAMEWORK_REACT_PROPS_XSS",
            category=Category.FRAMEWORK_RISK,
            severity=Severity.WARNING,
            pattern=(
                r"<\w+[^>]*?\b(?:href|src|action|formAction)\s*=\s*\{[^}]*"
                r"(?:props|state|input|param|user|form|query|request)[^}]*\}"
            ),
            flags=_FLAGS,
            message="URL attribute bound to user data can carry javascript: URLs.",
            description="Validate URLs against an allow-list of protocols before binding them.",
            whitelist=(
                r"""(?:href|src)\s*=\s*\{[^}]*(["'`])/[^"'`]*\1[^}]*\}""",
                r"""href\s*=\s*\{[^}]*(["'`])(?:#|mailto:)[^"'`]*\1[^}]*\}""",
            ),
            languages=REACT,
            effort=EffortLevel.MEDIUM,
            confidence=0.7,
            tags=("react", "xss"),
        ),
        Rule(
            id="FRAMEWORK_VUE_TEMPLATE_INJECTION",
            category=Category.FRAMEWORK_RISK,
            severity=Severity.WARNING,
            pattern=rf"\{{\{{[^}}]*{_TEMPLATE_DATA}[^}}]*\}}\}}",
            flags=_FLAGS,
            message="Template interpolates user data: {match}",
            description="Filter or compute user data before rendering it in templates.",
            whitelist=_SAFE_INTERPOLATIONS,
            languages=VUE,
            confidence=0.6,
            tags=("vue", "template"),
        ),
        Rule(
            id="FRAMEWORK_ANGULAR_TEMPLATE_INJECTION",
            category=Category.FRAMEWORK_RISK,
            severity=Severity.WARNING,
            pattern=rf"\{{\{{[^}}]*{_TEMPLATE_DATA}[^}}]*\}}\}}",
            flags=_FLAGS,
            message="Template interpolates user data: {match}",
            description="Run user data through a pipe or component method before rendering it.",
            whitelist=_SAFE_INTERPOLATIONS,
            languages=frozenset({"html"}),
            confidence=0.6,
            tags=("angular", "template"),
        ),
    ]
