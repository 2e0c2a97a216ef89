"""
commandtree printer: tab-indented text and rich trees of a command tree.

Text layout, one block per command in registration order:

    serve<TAB>start the server
    <TAB><--port><TAB>-p<TAB>(int)<TAB>listen port
    <blank line>
    <TAB>child ...            (children indented one more tab)

Parameters print as <--name>/[--name] (prefixed, required/optional) or
<name>/[name] (raw), followed by the short name, the value kind and the help
when present.
"""
from rich.text import Text
from rich.tree import Tree


def _kind(value):
    return getattr(value, "kind", type(value).__name__.lower())


def _fields(parameter):
    fields = [parameter.usage]
    if parameter.short:
        fields.append("-" + parameter.short)
    if parameter.value is not None:
        fields.append("(%s)" % _kind(parameter.value))
    if parameter.help:
        fields.append(parameter.help)
    return fields


def _block(command, indent):
    padding = "\t" * indent
    yield padding + command.name + ("\t" + command.help if command.help else "")
    for parameter in command.parameters:
        yield padding + "\t" + "\t".join(_fields(parameter))
    yield ""
    for child in command.commands:
        yield from _block(child, indent + 1)


def render_text(node, /):
    """
    Render a Command (with its subtree), a Commands scope or a Parser as text.
    """
    if hasattr(node, "parameters"):
        lines = _block(node, 0)
    else:
        lines = (line for command in getattr(node, "commands", node) for line in _block(command, 0))
    return "".join(line + "\n" for line in lines)


def _label(command):
    label = Text(command.name or "(global)", style="bold")
    if command.raw:
        label.append(" …", style="dim")
    if command.help:
        label.append("  " + command.help, style="dim")
    return label


def _populate(branch, command):
    for parameter in command.parameters:
        fields = _fields(parameter)
        branch.add(Text.assemble((fields[0], "cyan"), *("  " + field for field in fields[1:])))
    for child in command.commands:
        _populate(branch.add(_label(child)), child)
    return branch


def render_tree(node, /):
    """
    Build a rich Tree for a Command, a Commands scope or a Parser.
    """
    if hasattr(node, "parameters"):
        return _populate(Tree(_label(node)), node)
    root = Tree(Text(getattr(node, "name", "") or "commands", style="bold"))
    for command in getattr(node, "commands", node):
        _populate(root.add(_label(command)), command)
    return root


__all__ = (
    "render_text",
    "render_tree",
)
