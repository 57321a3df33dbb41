"""Language groups used to scope rules."""

JS_FAMILY = frozenset({"javascript", "javascriptreact", "typescript", "typescriptreact"})
REACT = frozenset({"javascriptreact", "typescriptreact", "javascript", "typescript"})
VUE = frozenset({"vue"})
MARKUP = frozenset({"html", "vue", "php"})
BROWSER = JS_FAMILY | MARKUP

# Languages that build SQL strings in application code
SQL_HOSTS = JS_FAMILY | frozenset({"python", "php", "java", "csharp", "go", "ruby"})

PYTHON = frozenset({"python"})
DOCKERFILE = frozenset({"dockerfile"})
DOTENV = frozenset({"dotenv"})
PACKAGE_JSON = frozenset({"json"})
CONFIG_FILES = frozenset({"json", "yaml", "dotenv", "properties", "dockerfile", "shellscript"})

# Languages whose line comments start with '#'
HASH_COMMENT_LANGUAGES = frozenset({
    "python", "dockerfile", "yaml", "dotenv", "properties", "shellscript", "ruby",
})
