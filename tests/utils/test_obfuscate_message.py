from pluginupdater.utils.obfuscate_message import (
    _anonymize_path,
    _redact_tokens,
    obfuscate_message,
)


def test__anonymize_path_windows_path() -> None:
    message = r"Installed C:\Users\steve\server\plugins\ViaVersion.jar"
    expected = r"Installed C:\Users\...\server\plugins\ViaVersion.jar"
    assert _anonymize_path(message) == expected


def test__anonymize_path_linux_path() -> None:
    message = "Unable to list /home/steve/server/plugins: denied"
    expected = "Unable to list /home/.../server/plugins: denied"
    assert _anonymize_path(message) == expected


def test__anonymize_path_macos_path() -> None:
    assert _anonymize_path("/Users/steve/mc/plugins") == "/Users/.../mc/plugins"


def test__redact_tokens() -> None:
    assert _redact_tokens("Authorization: Bearer abc.def-123") == (
        "Authorization: Bearer ***"
    )
    assert _redact_tokens("token ghp_" + "a" * 36 + " rejected") == (
        "token ghp_*** rejected"
    )
    assert _redact_tokens('{"githubToken": "secret"}') == '{"githubToken": "***"}'


def test_obfuscate_message_flags() -> None:
    message = "/home/steve/x Bearer abc"
    assert obfuscate_message(message) == "/home/.../x Bearer ***"
    assert obfuscate_message(message, anonymize_path=False) == "/home/steve/x Bearer ***"
    assert obfuscate_message(message, redact_tokens=False) == "/home/.../x Bearer abc"
