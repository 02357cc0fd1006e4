"""
Documentation directives embedded in comment prose as [key] or [key: value]
"""

from .symbols import OverloadGroups, Symbol

PROSE_FIELDS = ("brief_description", "detailed_description", "inbody_description")


def process_directives(symbol: Symbol, groups: OverloadGroups):
    """Apply and remove the directives found in the three prose fields of a symbol"""
    for attribute in PROSE_FIELDS:
        setattr(symbol, attribute, process_text(symbol, getattr(symbol, attribute), groups))


def process_text(symbol: Symbol, text: str, groups: OverloadGroups) -> str:
    """
    Scan text for directives, applying recognized ones to symbol.

    Args:
        symbol: Symbol receiving the directive values
        text: Prose field to scan
        groups: Overload grouping index used by similaroverload

    Returns:
        The text with every consumed directive cut out
    """
    text = text.strip()
    start = 0
    while start < len(text):
        open_idx = text.find("[", start)
        if open_idx == -1:
            break
        close_idx = text.find("]", open_idx + 1)
        if close_idx == -1:
            break

        directive = text[open_idx + 1:close_idx].strip()
        parts = directive.split(":")
        param = parts[1].strip() if len(parts) == 2 else ""

        if _apply(symbol, directive.lower(), param, groups):
            text = cut_directive(text, open_idx, close_idx + 1)
            start = 0
        else:
            start = close_idx + 1
    return text


def _apply(symbol: Symbol, key: str, param: str, groups: OverloadGroups) -> bool:
    if key.startswith("similaroverload") and param:
        if symbol.parent is not None:
            target = symbol.parent.find_child_by_name(param, exclude=symbol)
            if target is not None:
                groups.link(symbol, target)
        return True
    if key.startswith("indextitle") and param:
        symbol.index_title = param
        return True
    if key.startswith("hideindex"):
        symbol.index_title = ""
        return True
    if key.startswith("category"):
        symbol.category = param
        return True
    if key.startswith("groupsyntax"):
        symbol.group_syntax = True
        return True
    return False


def cut_directive(text: str, start: int, end: int) -> str:
    """
    Remove text[start:end] along with the period ending the directive's sentence.

    That period either follows the span directly, or closes the field when
    no other sentence comes after the directive.
    """
    before = text[:start].rstrip()
    after = text[end:].lstrip()
    if after.startswith("."):
        after = after[1:].lstrip()
    elif after.endswith(".") and after.count(".") == 1:
        after = after[:-1].rstrip()
    if before and after:
        return f"{before} {after}"
    return (before or after).strip()
