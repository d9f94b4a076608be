"""Shared constant values for the Gale compiler and interpreter."""

ENTRY_FUNCTION = "main"

# Every parameter of the entry function is bound to this number before it
# runs; there is no argument passing from the host yet.
MAIN_PARAMETER_SEED = 3

# Name under which native functions receive their single argument.
NATIVE_PARAMETER = "in"

# Prefix for the names given to lambdas lifted out of call position.
LIFTED_LAMBDA_PREFIX = "lambda"

BUILTIN_TYPE_NAMES = {
    "ui8": "UI8",
    "string": "Text",
}

KEYWORDS = {
    "type": "TYPE",
    "true": "TRUE",
    "false": "FALSE",
    "match": "MATCH",
    "module": "MODULE",
    "public": "PUBLIC",
    "ref": "REF",
    "import": "IMPORT",
    "if": "IF",
    "while": "WHILE",
    "fn": "FUNCTION",
    "let": "LET",
    "elseif": "ELSEIF",
    "else": "ELSE",
}

PUNCTUATION = {
    "->": "RIGHT_ARROW",
    "=>": "FAT_RIGHT_ARROW",
    "[": "LEFT_SQUARE",
    "]": "RIGHT_SQUARE",
    "(": "LEFT_ROUND",
    ")": "RIGHT_ROUND",
    "{": "LEFT_CURLY",
    "}": "RIGHT_CURLY",
    ":": "COLON",
    ";": "SEMICOLON",
    ",": "COMMA",
    "|": "PIPE",
    "==": "DOUBLE_EQUALS",
    "=": "EQUALS",
    "\\": "BACKSLASH",
    "<": "SMALLER_THAN",
    ">": "GREATER_THAN",
    "%": "MODULO",
    "||": "OR",
    "+": "PLUS",
    "*": "MUL",
    "-": "MINUS",
    "!!": "ARR_INDEX",
    "!": "NOT",
}

NODE_COLORS = {
    "File": "#B0BEC5",
    "Function": "#9575CD",
    "Seq": "#FFEB3B",
    "Let": "#FF7043",
    "Apply": "#8BC34A",
    "type": "#90CAF9",
    "value": "#ECEFF1",
}

SCOPE_COLOR = "#FFE082"

__all__ = [
    "ENTRY_FUNCTION",
    "MAIN_PARAMETER_SEED",
    "NATIVE_PARAMETER",
    "LIFTED_LAMBDA_PREFIX",
    "BUILTIN_TYPE_NAMES",
    "KEYWORDS",
    "PUNCTUATION",
    "NODE_COLORS",
    "SCOPE_COLOR",
]
