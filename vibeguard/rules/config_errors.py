"""Unsafe configuration in Dockerfiles, package manifests, env files and settings."""

import re

from . import fixes
from .base import Category, EffortLevel, ImpactLevel, LiteralFix, Rule, Severity, TransformFix
from .languages import CONFIG_FILES, DOCKERFILE, DOTENV, PACKAGE_JSON

_FLAGS = re.IGNORECASE | re.MULTILINE
_DANGEROUS_PORTS = r"(?:22|3306|5432|27017|6379|1433|1521)"


def rules() -> list[Rule]:
    return [
        Rule(
            id="CONFIG_CLOUD_CREDENTIALS",
            category=Category.CONFIG_ERROR,
            severity=Severity.ERROR,
            pattern=(
                r"""(?:aws[_-]?(?:access[_-]?key[_-]?id|secret[_-]?access[_-]?key)"""
                r"""|azure[_-]?storage[_-]?account[_-]?key)["']?\s*[:=]\s*["'][^"'\s]+["']"""
            ),
            flags=_FLAGS,
            message="Cloud provider credential stored in configuration.",
            description="Cloud keys in config files leak through images, logs and repositories.",
            quick_fix=TransformFix(fixes.replace_config_value, title="Reference an environment variable"),
            whitelist=(r"your[_-]", r"example", r"x{8,}"),
            impact=ImpactLevel.CRITICAL,
            tags=("cloud", "secret"),
        ),
        Rule(
            id="CONFIG_REDIS_NO_PASSWORD",
            category=Category.CONFIG_ERROR,
            severity=Severity.WARNING,
            pattern=r"""\bredis://(?![^/\s"'`]*@)[^/\s"'`]+""",
            message="Redis connection without a password: {match}",
            description="Unauthenticated Redis instances are routinely scanned and taken over.",
            whitelist=(r"redis://(?:localhost|127\.0\.0\.1|redis)(?::\d+)?(?:/|\s|[\"'`]|$)",),
            effort=EffortLevel.MEDIUM,
            tags=("redis", "authentication"),
        ),
        Rule(
            id="CONFIG_DOCKER_EXPOSED_PORT",
            category=Category.CONFIG_ERROR,
            severity=Severity.ERROR,
            pattern=rf"^[ \t]*EXPOSE\s+(?:\d+(?:/\w+)?\s+)*{_DANGEROUS_PORTS}\b",
            flags=_FLAGS,
            message="Container exposes an SSH or database port.",
            description="Keep SSH and database ports on private networks instead of publishing them.",
            languages=DOCKERFILE,
            effort=EffortLevel.MEDIUM,
            tags=("docker", "network"),
        ),
        Rule(
            id="CONFIG_NPM_LIFECYCLE_SCRIPT",
            category=Category.CONFIG_ERROR,
            severity=Severity.ERROR,
            pattern=(
                r""""(?:preinstall|install|postinstall|preuninstall)"\s*:\s*"[^"]*"""
                r"""\b(?:rm\s+-rf|curl|wget|eval|node\s+-e)"""
            ),
            message="Install hook downloads or runs arbitrary code: {match}",
            description="Lifecycle scripts run on every install; malicious packages hide payloads here.",
            languages=PACKAGE_JSON,
            impact=ImpactLevel.CRITICAL,
            effort=EffortLevel.MEDIUM,
            tags=("npm", "supply-chain"),
        ),
        Rule(
            id="CONFIG_DOCKER_ROOT_USER",
            category=Category.CONFIG_ERROR,
            severity=Severity.WARNING,
            pattern=r"^[ \t]*USER\s+(?:root|0)\b",
            flags=_FLAGS,
            message="Container runs as root.",
            description="A compromised process running as root owns the whole container.",
            quick_fix=LiteralFix("USER nobody", title="Run as an unprivileged user"),
            languages=DOCKERFILE,
            tags=("docker", "privileges"),
        ),
        Rule(
            id="CONFIG_NPM_HTTP_REGISTRY",
            category=Category.CONFIG_ERROR,
            severity=Severity.WARNING,
            pattern=r"""\bregistry["']?\s*[=:]\s*["']?http://""",
            flags=_FLAGS,
            message="Package registry is fetched over plain HTTP.",
            description="Packages downloaded without TLS can be swapped in transit.",
            quick_fix=TransformFix(fixes.http_to_https, title="Use HTTPS"),
            languages=CONFIG_FILES,
            effort=EffortLevel.TRIVIAL,
            tags=("npm", "tls"),
        ),
        Rule(
            id="CONFIG_ENV_SECRET",
            category=Category.CONFIG_ERROR,
            severity=Severity.WARNING,
            pattern=(
                r"^[ \t]*(?:export[ \t]+)?[A-Z0-9_]*"
                r"(?:PASSWORD|SECRET|PRIVATE[_-]?KEY|TOKEN|CREDENTIALS?|API[_-]?KEY)[A-Z0-9_]*"
                r"[ \t]*=[ \t]*[^\s#]+"
            ),
            flags=_FLAGS,
            message="Secret value in an environment file. Make sure the file is never committed.",
            description="Keep .env files out of version control and ship a .env.example instead.",
            whitelist=(r"=\s*[\"']{2}\s*$", r"=\s*<[^>]*>", r"changeme", r"your[_-]"),
            languages=DOTENV,
            confidence=0.7,
            tags=("environment", "secret"),
        ),
        Rule(
            id="CONFIG_CORS_WILDCARD",
            category=Category.CONFIG_ERROR,
            severity=Severity.WARNING,
            pattern=(
                r"""(?:Access-Control-Allow-Origin["']?\s*[:,=]\s*"""
                r"""|cors\.origin\s*[:=]\s*"""
                r"""|\ballow_origins\s*=\s*\[\s*"""
                r"""|\bCORS_ALLOWED_ORIGINS\s*[:=]\s*\[?\s*)["']?\*["']?"""
            ),
            message="CORS allows every origin.",
            description="A wildcard origin lets any site call the API from a user's browser.",
            quick_fix=TransformFix(fixes.restrict_origin, title="Allow a specific origin"),
            effort=EffortLevel.TRIVIAL,
            tags=("cors",),
        ),
        Rule(
            id="CONFIG_TLS_VERIFY_DISABLED",
            category=Category.CONFIG_ERROR,
            severity=Severity.WARNING,
            pattern=(
                r"""\b(?:verify[_-]?ssl|ssl[_-]?verify|reject[_-]?unauthorized"""
                r"""|NODE_TLS_REJECT_UNAUTHORIZED|verify)["']?\s*[:=]\s*["']?(?:false|0|no)\b"""
            ),
            flags=_FLAGS,
            message="TLS certificate verification is disabled.",
            description="Without certificate checks any network attacker can intercept the connection.",
            quick_fix=TransformFix(fixes.enable_verification, title="Enable certificate verification"),
            effort=EffortLevel.TRIVIAL,
            tags=("tls",),
        ),
    ]
