"""Textual scope codec for answer keys and target specifiers.

A scoped reference is ``[cluster[:project]:]key``.  There is no
escaping: a key containing ``:`` cannot be represented.
"""

from __future__ import annotations


def concat_scope(scope: str, key: str) -> str:
    """Join *scope* and *key* as ``scope:key``."""
    return f"{scope}:{key}"


def parse_scope(ref: str) -> tuple[str, str]:
    """Split *ref* on its first ``:`` into ``(scope, key)``.

    A reference without ``:`` has an empty scope.
    """
    scope, sep, key = ref.partition(":")
    if not sep:
        return "", ref
    return scope, key
