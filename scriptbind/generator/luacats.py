"""
LuaCATS type definition generation

Generates a .lua file with annotations describing the exposed script
surface, for IDE autocompletion in script editors.
"""

from .types import (
    FLOAT_TYPES,
    INTEGER_RANGES,
    Bindings,
    ExposureSelection,
    Facet,
    MethodDescriptor,
    TypeDescriptor,
    ValueType,
    resolve_self,
)

# Lua reserved keywords
LUA_KEYWORDS = {
    "and", "break", "do", "else", "elseif", "end", "false", "for",
    "function", "goto", "if", "in", "local", "nil", "not", "or",
    "repeat", "return", "then", "true", "until", "while"
}


def lua_type(t: ValueType, owner: str) -> str:
    """LuaCATS spelling of a value type"""
    t = resolve_self(t, owner)
    if t.name in INTEGER_RANGES:
        name = "integer"
    elif t.name in FLOAT_TYPES:
        name = "number"
    elif t.name == "bool":
        name = "boolean"
    elif t.name == "text":
        name = "string"
    else:
        name = t.name
    return f"{name}?" if t.optional else name


def lua_name(name: str) -> str:
    """Avoid reserved words in parameter names"""
    return f"{name}_" if name in LUA_KEYWORDS else name


class LuaCATSGenerator:
    """Generates LuaCATS type definition files"""

    def __init__(self, bindings: Bindings):
        self.bindings = bindings

    def generate(self) -> str:
        """Generate the complete definition file"""
        lines = []
        lines.append("---@meta")
        lines.append("-- LuaCATS type definitions generated by scriptbind")
        lines.append("-- Auto-generated, do not edit")
        lines.append("")

        for descriptor, selection in self.bindings.compiled():
            lines.extend(self._gen_type(descriptor, selection))
            lines.append("")

        return "\n".join(lines)

    def _gen_type(self, descriptor: TypeDescriptor, selection: ExposureSelection) -> list[str]:
        name = descriptor.name
        lines = [f"---@class {name}"]

        if Facet.FIELDS in selection:
            for field in descriptor.fields:
                lines.append(f"---@field {field.name} {lua_type(field.value_type, name)}")

        if Facet.VARIANTS in selection:
            for variant in descriptor.variants:
                if variant.is_unit:
                    lines.append(f"---@field {variant.name} {name}")
                else:
                    params = ", ".join(
                        f"{lua_name(f.name)}: {lua_type(f.value_type, name)}"
                        for f in variant.payload_fields
                    )
                    lines.append(f"---@field {variant.name} fun({params}): {name}")

        lines.append(f"{name} = {{}}")

        if Facet.METHODS in selection:
            for method in descriptor.methods:
                lines.append("")
                lines.extend(self._gen_method(name, method))

        return lines

    def _gen_method(self, owner: str, method: MethodDescriptor) -> list[str]:
        lines = []
        for param in method.parameters:
            lines.append(f"---@param {lua_name(param.name)} {lua_type(param.value_type, owner)}")

        if method.return_type is not None:
            lines.append(f"---@return {lua_type(method.return_type, owner)}")

        # Static functions use ".", instance methods receive self through ":"
        sep = "." if method.is_static else ":"
        param_names = ", ".join(lua_name(p.name) for p in method.parameters)
        lines.append(f"function {owner}{sep}{method.name}({param_names}) end")
        return lines


def render(bindings: Bindings) -> str:
    """Render parsed bindings to a LuaCATS definition file."""
    return LuaCATSGenerator(bindings).generate()
