"""Parser for raw process environment blocks.

An environment block is a run of ``KEY=VALUE`` records separated by NUL
characters, as found in ``/proc/<pid>/environ``. The final record may or may
not carry a trailing NUL.
"""

from collections.abc import Iterator

NUL = "\0"


def _decode(block: bytes | str) -> str:
    if isinstance(block, bytes):
        # surrogateescape keeps undecodable bytes instead of failing the whole block
        return block.decode("utf-8", errors="surrogateescape")
    return block


def iter_environ(block: bytes | str) -> Iterator[tuple[str, str]]:
    """Yield ``(key, value)`` pairs from a raw environment block, in order.

    Records are split once on the first ``=``; everything after it is value
    content, so values may themselves contain ``=``. Records with no ``=``,
    an empty key, or an empty value are dropped silently.

    Duplicated keys are yielded as often as they appear. Callers that want
    first-occurrence semantics should stop at the first match.
    """
    for record in _decode(block).split(NUL):
        key, sep, value = record.partition("=")
        if not sep or not key or not value:
            continue
        yield key, value


def parse_environ(block: bytes | str) -> list[tuple[str, str]]:
    """Parse a raw environment block into a list of ``(key, value)`` pairs."""
    return list(iter_environ(block))
