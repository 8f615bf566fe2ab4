"""Command-line text for choco invocations."""

from __future__ import annotations


def quote_tool_path(tool_path: str) -> str:
    """Double-quote a tool path containing whitespace.

    The quoted form reads correctly both as a Windows command line and
    under POSIX shlex rules.
    """
    if any(c.isspace() for c in tool_path) and not tool_path.startswith('"'):
        return f'"{tool_path}"'
    return tool_path


def build_command(tool_path: str, *parts: str) -> str:
    """Join command parts with single spaces, dropping empty ones.

    Options are free-form text and may be empty; an empty options
    string must not leave a double space in the command.  Options are
    passed through verbatim, quotes included.

    >>> build_command("choco.exe", "install", "-y", "", "git")
    'choco.exe install -y git'
    """
    return " ".join(p for p in (quote_tool_path(tool_path), *parts) if p and p.strip())
