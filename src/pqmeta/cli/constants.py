# src/pqmeta/cli/constants.py
# Exit codes (stable for scripting)
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 2  # bad options, or an input that cannot be resolved
EXIT_RUNTIME_ERROR = 3
