"""
Standard exit codes for repomirror commands.

Following Unix/POSIX conventions for command-line tools.
"""

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, bad URL, etc.)

# Application-specific exit codes (64-113 are typically available)
NOT_FOUND = 64           # Repository not found or not visible to the token
API_ERROR = 65           # GitHub API call failed
CONFIG_ERROR = 66        # Configuration file error
PERMISSION_ERROR = 67    # Repository visibility forbids the mirror
NETWORK_ERROR = 68       # Network connection failed
AUTH_ERROR = 69          # Token rejected
DATA_ERROR = 70          # Malformed API response
PARTIAL_SUCCESS = 71     # Some secondary branches failed to replicate
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for exceptions that do not carry their own code
EXCEPTION_EXIT_CODES = {
    'PermissionError': PERMISSION_ERROR,
    'ConnectionError': NETWORK_ERROR,
    'TimeoutError': NETWORK_ERROR,
    'ValueError': DATA_ERROR,
    'KeyError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: BaseException) -> int:
    """
    Get the appropriate exit code for an exception.

    MirrorError subclasses carry their own ``exit_code``; anything else
    is looked up by class name.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    code = getattr(exc, 'exit_code', None)
    if isinstance(code, int):
        return code
    return EXCEPTION_EXIT_CODES.get(exc.__class__.__name__, GENERAL_ERROR)
