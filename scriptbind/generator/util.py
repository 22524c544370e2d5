"""Naming helpers for generated code."""

import re

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def to_snake_case(name: str) -> str:
    """`PlayerStatus` -> `player_status`"""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def to_constant_case(name: str) -> str:
    """`PlayerStatus` -> `PLAYER_STATUS`"""
    return to_snake_case(name).upper()
