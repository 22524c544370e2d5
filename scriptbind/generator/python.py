"""Python code generator for binding declarations.

Renders a module holding the descriptors as literals and a `register`
entry point the host calls once per engine at start-up.
"""

from jinja2 import Environment, PackageLoader

from .types import Bindings, ExposureSelection, ValueType
from .util import to_constant_case

env = Environment(
    loader=PackageLoader("scriptbind.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("python.py.j2")


def _value_type(t: ValueType | None) -> str:
    """Python source for a ValueType literal."""
    if t is None:
        return "None"
    if t.optional:
        return f"ValueType({t.name!r}, optional=True)"
    return f"ValueType({t.name!r})"


def _selection(selection: ExposureSelection) -> str:
    return ", ".join(f"Facet.{facet.name}" for facet in selection.ordered())


def render(bindings: Bindings, source: str = "", runtime_import: str = "scriptbind") -> str:
    """Render parsed bindings to Python source code."""
    return template.render(
        types=bindings.types,
        compiled=bindings.compiled(),
        source=source,
        runtime_import=runtime_import,
        const_name=to_constant_case,
        value_type=_value_type,
        selection=_selection,
        BLANK_LINE="",
    )
