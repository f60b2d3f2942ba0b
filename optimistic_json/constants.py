WHITESPACE_CHARS = " \r\n\t"
NUMBER_CHARS = "0123456789.-"

# exponent markers only matter for the int/float decision, the greedy scan never consumes them
FLOAT_MARKERS = ".eE"

TRUE_LITERAL = "true"
FALSE_LITERAL = "false"
NULL_LITERAL = "null"
