"""Runtime support: conversion, adapters, registration and the reference engine."""

from .adapter import Adapter as Adapter
from .adapter import synthesize as synthesize
from .convert import Converter as Converter
from .engine import ScriptEngine as ScriptEngine
from .engine import ScriptError as ScriptError
from .errors import BindingError as BindingError
from .errors import ErrorKind as ErrorKind
from .registry import Registry as Registry
from .values import DynamicValue as DynamicValue
from .values import UserData as UserData
from .values import ValueKind as ValueKind
