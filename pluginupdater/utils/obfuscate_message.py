"""
This module is to be used with loguru to remove potentially sensitive information
such as the user's name or a GitHub token.
"""

import re

# Bearer tokens and GitHub token formats (classic and fine-grained)
_TOKEN_PATTERNS = (
    re.compile(r"(Bearer\s+)[A-Za-z0-9_\-\.]+"),
    re.compile(r"\b(gh[pousr]_)[A-Za-z0-9]{20,}\b"),
    re.compile(r"\b(github_pat_)[A-Za-z0-9_]{20,}\b"),
    re.compile(r"""("githubToken"\s*:\s*")[^"]+"""),
)


def obfuscate_message(
    message: str, anonymize_path: bool = True, redact_tokens: bool = True
) -> str:
    """
    Obfuscate the message such that it does not reveal user information.

    Args:
        message: The message to obfuscate.
        anonymize_path: Whether to anonymize paths in the message.
        redact_tokens: Whether to redact access tokens in the message.

    Returns:
        The obfuscated message.
    """
    if anonymize_path:
        message = _anonymize_path(message)
    if redact_tokens:
        message = _redact_tokens(message)

    return message


def _anonymize_path(message: str) -> str:
    """
    Anonymize paths in the message so they do not reveal usernames.

    OS agnostic.
    """
    # Windows - Only remove the username, keep the drive letter
    message = re.sub(r"([A-Z]:\\Users\\)[^\\]+\\", r"\1...\\", message)
    # Linux - Only remove the username
    message = re.sub(r"/home/[^/]+/", r"/home/.../", message)
    # macOS
    message = re.sub(r"/Users/[^/]+/", r"/Users/.../", message)

    return message


def _redact_tokens(message: str) -> str:
    for pattern in _TOKEN_PATTERNS:
        message = pattern.sub(r"\1***", message)
    return message
