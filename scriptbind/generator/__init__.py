"""scriptbind binding generator."""

from .builder import TypeBuilder as TypeBuilder
from .builder import validate_selection as validate_selection
from .builder import validate_type as validate_type
from .errors import BuildError as BuildError
from .errors import BuildErrorKind as BuildErrorKind
from .parser import parse as parse
from .parser import parse_file as parse_file
from .types import *
