"""Translation of parsed rules into entries that map directly to Gmail filters."""

from __future__ import annotations

from collections.abc import Iterable

from gmailctl.criteria import (
    CriteriaAST,
    FunctionType,
    Leaf,
    Node,
    OperationType,
    Rule,
    Visitor,
)
from gmailctl.criteria import Actions as RuleActions
from gmailctl.filter import Actions, Criteria, Filter, Filters

# There's no documented limit on filter size on Gmail, but this educated guess
# is better than nothing.
DEFAULT_SIZE_LIMIT = 20

_NEEDS_QUOTES = frozenset(" \t{}()")


def from_rules(rules: Iterable[Rule]) -> Filters:
    """Translate rules into Gmail filters, using the default size limit."""
    return from_rules_with_limit(rules, DEFAULT_SIZE_LIMIT)


def from_rules_with_limit(rules: Iterable[Rule], size_limit: int) -> Filters:
    """Translate rules into Gmail filters, splitting those bigger than size_limit."""
    res = Filters()
    for i, rule in enumerate(rules):
        try:
            res.extend(from_rule(rule, size_limit))
        except ValueError as err:
            raise ValueError(f"generating rule #{i}: {err}") from err
    return res


def from_rule(rule: Rule, size_limit: int) -> Filters:
    """Translate a single rule into Gmail filters."""
    if size_limit < 1:
        raise ValueError(f"size limit must be positive, got {size_limit}")
    crits = []
    for c in _split_criteria(rule.criteria, size_limit):
        try:
            crits.append(generate_criteria(c))
        except ValueError as err:
            raise ValueError(f"generating criteria: {err}") from err

    try:
        actions = _generate_actions(rule.actions)
    except ValueError as err:
        raise ValueError(f"generating actions: {err}") from err

    return Filters(Filter(criteria=c, action=a) for c in crits for a in actions)


def generate_criteria(crit: CriteriaAST) -> Criteria:
    """Translate a criteria tree into a single Gmail filter criteria."""
    if isinstance(crit, Node):
        return _generate_node(crit)
    if isinstance(crit, Leaf):
        return _generate_leaf(crit)
    raise ValueError("found unknown criteria node")


def _generate_node(node: Node) -> Criteria:
    if node.operation == OperationType.OR:
        query = ""
        for child in node.children:
            query = _join_queries(query, _criteria_as_string(child))
        return Criteria(query=f"{{{query}}}")

    if node.operation == OperationType.AND:
        res = Criteria()
        for child in node.children:
            res = _join_criteria(res, generate_criteria(child))
        return res

    if node.operation == OperationType.NOT:
        if len(node.children) != 1:
            raise ValueError(
                f"after 'not' got {len(node.children)} children, expected 1"
            )
        return Criteria(query=f"-{_criteria_as_string(node.children[0])}")

    raise ValueError(f"unknown node operation {int(node.operation)}")


def _leaf_query(leaf: Leaf) -> str:
    need_escape = leaf.function != FunctionType.QUERY and not leaf.is_raw
    query = _join_strings(need_escape, leaf.args)
    if len(leaf.args) > 1:
        query = _group_with_operation(query, leaf.grouping)
    return query


def _generate_leaf(leaf: Leaf) -> Criteria:
    query = _leaf_query(leaf)
    function = leaf.function
    if function == FunctionType.FROM:
        return Criteria(from_=query)
    if function == FunctionType.TO:
        return Criteria(to=query)
    if function == FunctionType.SUBJECT:
        return Criteria(subject=query)
    if function == FunctionType.CC:
        return Criteria(query=f"cc:{query}")
    if function == FunctionType.BCC:
        return Criteria(query=f"bcc:{query}")
    if function == FunctionType.REPLY_TO:
        return Criteria(query=f"replyto:{query}")
    if function == FunctionType.LIST:
        return Criteria(query=f"list:{query}")
    if function in (FunctionType.HAS, FunctionType.QUERY):
        return Criteria(query=query)
    raise ValueError(f"unknown function type {int(function)}")


def _criteria_as_string(crit: CriteriaAST) -> str:
    if isinstance(crit, Node):
        query = ""
        for child in crit.children:
            query = _join_queries(query, _criteria_as_string(child))
        return _group_with_operation(query, crit.operation)
    if isinstance(crit, Leaf):
        query = _leaf_query(crit)
        if crit.function in (FunctionType.HAS, FunctionType.QUERY):
            return query
        return f"{crit.function}:{query}"
    raise ValueError("found unknown criteria node")


def _group_with_operation(query: str, op: OperationType) -> str:
    if op == OperationType.OR:
        return f"{{{query}}}"
    if op == OperationType.AND:
        return f"({query})"
    if op == OperationType.NOT:
        return f"-{query}"
    raise ValueError(f"unknown node operation {int(op)}")


def _join_criteria(c1: Criteria, c2: Criteria) -> Criteria:
    return Criteria(
        from_=_join_queries(c1.from_, c2.from_),
        to=_join_queries(c1.to, c2.to),
        subject=_join_queries(c1.subject, c2.subject),
        query=_join_queries(c1.query, c2.query),
    )


def _join_queries(f1: str, f2: str) -> str:
    # Queries are logical operations or functions: no escaping needed.
    if not f1:
        return f2
    if not f2:
        return f1
    return f"{f1} {f2}"


def _join_strings(escape: bool, args: Iterable[str]) -> str:
    if escape:
        return " ".join(_quote(a) for a in args)
    return " ".join(args)


def _quote(a: str) -> str:
    if any(ch in _NEEDS_QUOTES for ch in a):
        return f'"{a}"'
    # A plus sign means OR to Gmail, unless it is part of a full address.
    if "+" in a and "@" not in a:
        return f'"{a}"'
    return a


class _SplitVisitor(Visitor):
    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.res: list[CriteriaAST] = []

    def _chunks(self, items: list) -> list[list]:
        chunks = []
        rem = items
        while len(rem) > self.limit:
            chunks.append(rem[: self.limit])
            rem = rem[self.limit :]
        chunks.append(rem)
        return chunks

    def visit_node(self, n: Node) -> None:
        self.res.extend(Node(n.operation, chunk) for chunk in self._chunks(n.children))

    def visit_leaf(self, n: Leaf) -> None:
        self.res.extend(
            Leaf(n.function, n.grouping, chunk, n.is_raw)
            for chunk in self._chunks(n.args)
        )


class _CountVisitor(Visitor):
    def __init__(self) -> None:
        self.res = 0

    def visit_node(self, n: Node) -> None:
        for child in n.children:
            child.accept_visitor(self)
        self.res += 1

    def visit_leaf(self, n: Leaf) -> None:
        # Imprecise for raw leaves, which hold several operands in one argument.
        self.res += len(n.args)


def _count_nodes(tree: CriteriaAST) -> int:
    visitor = _CountVisitor()
    tree.accept_visitor(visitor)
    return visitor.res


def _split_with(tree: CriteriaAST, limit: int) -> list[CriteriaAST]:
    visitor = _SplitVisitor(limit)
    tree.accept_visitor(visitor)
    return visitor.res


def _split_criteria(tree: CriteriaAST, limit: int) -> list[CriteriaAST]:
    return [
        piece
        for c in _split_root_or(tree)
        for piece in _split_big_criteria(c, limit)
    ]


def _split_root_or(tree: CriteriaAST) -> list[CriteriaAST]:
    # Every matching filter applies, so a top-level OR becomes one rule per child.
    if isinstance(tree, Node) and tree.operation == OperationType.OR:
        return list(tree.children)
    return [tree]


def _split_big_criteria(tree: CriteriaAST, limit: int) -> list[CriteriaAST]:
    # Gmail silently ignores filters past some size, so big ones get split.
    if _count_nodes(tree) < limit:
        return [tree]
    if tree.root_operation() == OperationType.OR:
        return _split_with(tree, limit)
    if tree.root_operation() == OperationType.AND:
        return _split_nested_and(tree, limit)
    return [tree]


def _split_nested_and(root: CriteriaAST, limit: int) -> list[CriteriaAST]:
    if not isinstance(root, Node):
        return [root]

    max_children = 0
    child_id = -1
    for i, child in enumerate(root.children):
        count = _count_nodes(child)
        if count > max_children and child.root_operation() == OperationType.OR:
            child_id = i
            max_children = count
    if child_id < 0:
        return [root]
    big_child = root.children[child_id]

    siblings_size = _count_nodes(root) - max_children
    new_limit = max(limit - siblings_size, 1)
    pieces = _split_with(big_child, new_limit)

    siblings = [c for i, c in enumerate(root.children) if i != child_id]
    return [
        Node(OperationType.AND, [piece] + [s.clone() for s in siblings])
        for piece in pieces
    ]


def _from_optional_bool(opt: bool | None, positive: bool) -> bool:
    if opt is None:
        return False
    return opt == positive


def _generate_actions(actions: RuleActions) -> list[Actions]:
    if _from_optional_bool(actions.mark_spam, True):
        raise ValueError("gmail filters don't allow one to send messages to spam directly")

    labels = list(actions.labels)
    first = Actions(
        add_label=labels[0] if labels else "",
        archive=actions.archive,
        delete=actions.delete,
        mark_important=_from_optional_bool(actions.mark_important, True),
        mark_not_important=_from_optional_bool(actions.mark_important, False),
        mark_read=actions.mark_read,
        category=actions.category,
        mark_not_spam=_from_optional_bool(actions.mark_spam, False),
        star=actions.star,
        forward=actions.forward,
    )
    # Each Gmail filter can apply a single label only.
    return [first] + [Actions(add_label=label) for label in labels[1:]]