"""Settings for lhr-model.

Thresholds follow the report's rating bands. Change the binary version only
together with a change to the binary layout.
"""

# Score rating bands
PASS_THRESHOLD = 0.9
AVERAGE_THRESHOLD = 0.5

# Binary form
BINARY_FORMAT_VERSION = 1
BINARY_SUFFIXES = (".lhrb", ".msgpack")
JSON_SUFFIXES = (".json",)

# CLI
LOG_LEVEL_ENV = "LHR_MODEL_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_INDENT = 2
