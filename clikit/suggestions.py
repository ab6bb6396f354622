"""Similarity-based suggestions for mistyped flags and commands."""

from __future__ import annotations

import math
from typing import Any, Iterable

SUGGEST_DID_YOU_MEAN_TEMPLATE = "Did you mean {}?"

HELP_NAME = "help"
HELP_ALIAS = "h"
HELP_FLAG_NAMES: tuple[str, ...] | None = (HELP_NAME, HELP_ALIAS)


def jaro_distance(a: str, b: str) -> float:
    """Jaro similarity of two strings: 1 for identical, 0 for nothing in common."""
    ab, bb = a.encode("utf-8"), b.encode("utf-8")
    if not ab and not bb:
        return 1.0
    if not ab or not bb:
        return 0.0

    len_a, len_b = float(len(ab)), float(len(bb))
    hash_a = [False] * len(ab)
    hash_b = [False] * len(bb)
    max_distance = int(max(0.0, math.floor(max(len_a, len_b) / 2.0) - 1))

    matches = 0.0
    for i, ca in enumerate(ab):
        start = max(0, i - max_distance)
        end = int(min(len_b - 1, float(i + max_distance)))
        for j in range(start, end + 1):
            if hash_b[j]:
                continue
            if ca == bb[j]:
                hash_a[i] = True
                hash_b[j] = True
                matches += 1
                break
    if matches == 0:
        return 0.0

    matched_b = (cb for cb, hit in zip(bb, hash_b) if hit)
    matched_a = (ca for ca, hit in zip(ab, hash_a) if hit)
    transpositions = float(sum(1 for x, y in zip(matched_a, matched_b) if x != y))
    transpositions /= 2
    return ((matches / len_a) + (matches / len_b) + ((matches - transpositions) / matches)) / 3.0


def jaro_winkler(a: str, b: str) -> float:
    """Jaro similarity boosted for a shared prefix of up to four bytes."""
    boost_threshold = 0.7
    prefix_size = 4

    dist = jaro_distance(a, b)
    if dist <= boost_threshold:
        return dist

    ab, bb = a.encode("utf-8"), b.encode("utf-8")
    prefix = min(len(ab), prefix_size, len(bb))
    prefix_match = 0.0
    for x, y in zip(ab[:prefix], bb[:prefix]):
        if x != y:
            break
        prefix_match += 1
    return dist + 0.1 * prefix_match * (1.0 - dist)


def _best_match(names: Iterable[str], provided: str) -> str:
    distance = 0.0
    suggestion = ""
    for name in names:
        new_distance = jaro_winkler(name, provided)
        if new_distance > distance:
            distance = new_distance
            suggestion = name
    return suggestion


def suggest_flag(flags: Iterable[Any], provided: str, hide_help: bool) -> str:
    """Suggest the flag name closest to ``provided``, with its dashes, or ``""``."""

    def candidates():
        for flag in flags:
            yield from flag.names()
            if not hide_help and HELP_FLAG_NAMES is not None:
                yield from HELP_FLAG_NAMES

    suggestion = _best_match(candidates(), provided)
    if len(suggestion) == 1:
        return "-" + suggestion
    if len(suggestion) > 1:
        return "--" + suggestion
    return suggestion


def suggest_command(commands: Iterable[Any], provided: str) -> str:
    """Suggest the command name closest to ``provided``, or ``""``."""

    def candidates():
        for command in commands:
            yield from command.names()
            yield HELP_NAME
            yield HELP_ALIAS

    return _best_match(candidates(), provided)


def _quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def did_you_mean(suggestion: str) -> str:
    """Format a suggestion as a 'did you mean' hint."""
    return SUGGEST_DID_YOU_MEAN_TEMPLATE.format(_quote(suggestion))