"""
Fixed conversion rules.

Separators are addressed by name on the command line and in the HTTP API;
everything downstream works with the literal character.
"""

SEPARATORS = {
    "comma": ",",
    "semicolon": ";",
}
DEFAULT_SEPARATOR = "comma"

INPUT_EXTENSION = ".csv"
OUTPUT_EXTENSION = ".json"

OUTPUT_ENCODING = "utf-8"  # no BOM on output
ENCODING_CHUNK_SIZE = 64 * 1024

PRETTY_INDENT = 4
