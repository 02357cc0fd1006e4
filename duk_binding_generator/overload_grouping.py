"""
Documentation grouping of undocumented same-named overloads
"""

from .symbols import OverloadGroups, Symbol

GROUPED_KINDS = ("class", "struct")


def group_similar_overloads(compounds, groups: OverloadGroups) -> int:
    """
    Link same-named class members so their documentation is shown together.

    A later member joins an earlier same-named one when it has no prose of
    its own or asks for it with [groupsyntax]. A documented overload ends
    the search for that master.

    Returns:
        Number of links made
    """
    linked = 0
    for compound in compounds:
        if compound.kind not in GROUPED_KINDS:
            continue
        linked += _group_children(compound.children, groups)
    return linked


def _group_children(children: list[Symbol], groups: OverloadGroups) -> int:
    linked = 0
    for i, master in enumerate(children):
        for child in children[i + 1:]:
            if groups.is_similar_overload(master) or groups.is_similar_overload(child):
                continue
            if groups.has_other_overloads(child):
                continue
            if master.name != child.name:
                continue
            if not child.has_comments() or child.group_syntax:
                if groups.link(child, master):
                    linked += 1
            else:
                break
    return linked
