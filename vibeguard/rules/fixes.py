"""Pure text transforms used as quick-fix generators."""

import re

_QUOTED_VALUE = re.compile(r"""(["'`])[^"'`]*\1""")
_DECLARATION = re.compile(r"^(?:(?:export|const|let|var|final|private|public|static)\b\s*)+")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_NON_IDENT = re.compile(r"[^A-Z0-9_]")


def env_var_name(key: str) -> str:
    """Turn an identifier such as ``apiKey`` or ``db-password`` into ``API_KEY``."""
    key = key.strip().strip("\"'`")
    key = _DECLARATION.sub("", key)
    key = key.split(".")[-1]
    key = _CAMEL_BOUNDARY.sub("_", key).upper()
    key = re.sub(r"[-\s]+", "_", key)
    return _NON_IDENT.sub("", key) or "SECRET"


def _split_assignment(matched: str) -> tuple[str, str]:
    separator = re.search(r"[:=]", matched)
    if separator is None:
        return "", matched
    return matched[: separator.end()], matched[separator.end():]


def replace_assigned_value(matched: str, replacement: str | None = None) -> str:
    """Swap the quoted value of ``key = "value"`` for an env var reference.

    When ``replacement`` is None the variable is named after the key.
    """
    key_part, value_part = _split_assignment(matched)
    reference = replacement or f"process.env.{env_var_name(key_part.rstrip(':='))}"
    return key_part + _QUOTED_VALUE.sub(lambda _: reference, value_part, count=1)


def replace_config_value(matched: str) -> str:
    """Swap a quoted config value for a ``${KEY}`` placeholder."""
    key_part, value_part = _split_assignment(matched)
    placeholder = "${" + env_var_name(key_part.rstrip(":=")) + "}"
    return key_part + _QUOTED_VALUE.sub(
        lambda m: f"{m.group(1)}{placeholder}{m.group(1)}", value_part, count=1
    )


def _split_trailing(body: str) -> tuple[str, str]:
    """Separate closing quotes and parentheses that belong to the host code."""
    end = len(body)
    while end > 0:
        ch = body[end - 1]
        segment = body[:end]
        if ch.isspace():
            end -= 1
        elif ch in "\"'`" and segment.count(ch) % 2 == 1:
            end -= 1
        elif ch == ")" and segment.count(")") > segment.count("("):
            end -= 1
        else:
            break
    return body[:end].rstrip(), body[end:].strip()


def append_where_clause(statement: str) -> str:
    """Add a placeholder WHERE clause before any trailing quote or semicolon."""
    body = statement.rstrip()
    had_semicolon = body.endswith(";")
    core, tail = _split_trailing(body.rstrip(";"))
    return f"{core} WHERE id = ?{tail}{';' if had_semicolon else ''}"


def comment_out_drop(statement: str) -> str:
    """Comment out a DROP statement behind a backup reminder."""
    target = statement.split()[-1]
    return (
        f"-- DANGER: this permanently removes {target}. Take a backup first:\n"
        f"-- BACKUP {target} TO 'backup_location';\n"
        f"-- Uncomment once the backup is verified:\n"
        f"-- {statement.strip()}"
    )


def truncate_to_delete(statement: str) -> str:
    """Rewrite TRUNCATE as a DELETE that can be rolled back."""
    table = statement.split()[-1].rstrip(";")
    return f"DELETE FROM {table}"


def inner_html_to_text_content(assignment: str) -> str:
    return re.sub(r"\.innerHTML\s*=", ".textContent =", assignment, count=1)


def eval_to_json_parse(call: str) -> str:
    return re.sub(r"eval\s*\(", "JSON.parse(", call, count=1)


def sanitize_inner_html(attribute: str) -> str:
    """Wrap the ``__html`` value of dangerouslySetInnerHTML in DOMPurify.sanitize()."""
    match = re.search(r"__html\s*:\s*([^}]+?)\s*\}", attribute)
    if not match:
        return attribute
    value = match.group(1)
    return attribute[: match.start(1)] + f"DOMPurify.sanitize({value})" + attribute[match.end(1):]


def v_html_to_v_text(directive: str) -> str:
    return directive.replace("v-html", "v-text", 1)


def add_empty_dependencies(effect: str) -> str:
    """Give a useEffect call an explicit empty dependency array."""
    body = effect.rstrip()
    if body.endswith(")"):
        body = body[:-1].rstrip()
    return f"{body}, [])"


def http_to_https(value: str) -> str:
    return value.replace("http://", "https://", 1)


def restrict_origin(value: str) -> str:
    index = value.rfind("*")
    return value[:index] + "https://app.example.com" + value[index + 1:]


_FALSE_TO_TRUE = {"false": "true", "False": "True", "FALSE": "TRUE", "0": "1", "no": "yes"}


def enable_verification(setting: str) -> str:
    """Flip a disabled TLS verification flag back on."""
    match = re.search(r"(false|False|FALSE|0|no)(?=\W*$)", setting)
    if not match:
        return setting
    return setting[: match.start()] + _FALSE_TO_TRUE[match.group(1)] + setting[match.end():]


def debug_from_environment(setting: str) -> str:
    return re.sub(r"True\b", 'os.getenv("DEBUG") == "1"', setting, count=1)


def disable_shell(call: str) -> str:
    return re.sub(r"shell\s*=\s*True", "shell=False", call, count=1)
