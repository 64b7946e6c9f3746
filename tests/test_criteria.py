import pytest

from gmailctl.criteria import (
    Actions,
    FunctionType,
    Leaf,
    Node,
    OperationType,
    Rule,
    Visitor,
    simplify_criteria,
    sort_tree,
)
from gmailctl.gmail import Category


def and_(*children):
    return Node(OperationType.AND, list(children))


def or_(*children):
    return Node(OperationType.OR, list(children))


def not_(child):
    return Node(OperationType.NOT, [child])


def fn(ftype, op, *args):
    return Leaf(ftype, op, list(args))


def fn1(ftype, arg):
    return fn(ftype, OperationType.NONE, arg)


def test_simplify():
    expr = or_(
        fn1(FunctionType.FROM, "a"),
        fn1(FunctionType.FROM, "b"),
        fn1(FunctionType.SUBJECT, "c"),
        and_(
            fn1(FunctionType.LIST, "d"),
            and_(
                fn1(FunctionType.FROM, "e"),
                not_(not_(fn1(FunctionType.LIST, "f"))),
            ),
        ),
    )
    expected = or_(
        and_(
            fn(FunctionType.LIST, OperationType.AND, "f", "d"),
            fn(FunctionType.FROM, OperationType.AND, "e"),
        ),
        fn(FunctionType.SUBJECT, OperationType.OR, "c"),
        fn(FunctionType.FROM, OperationType.OR, "a", "b"),
    )
    got = simplify_criteria(expr)
    sort_tree(expected)
    sort_tree(got)
    assert got == expected


def test_simplify_sorted_order():
    expr = or_(
        fn1(FunctionType.SUBJECT, "c"),
        and_(fn1(FunctionType.TO, "x"), fn1(FunctionType.FROM, "y")),
        fn1(FunctionType.FROM, "a"),
    )
    got = simplify_criteria(expr)
    assert got == or_(
        fn(FunctionType.FROM, OperationType.OR, "a"),
        fn(FunctionType.SUBJECT, OperationType.OR, "c"),
        and_(
            fn(FunctionType.FROM, OperationType.AND, "y"),
            fn(FunctionType.TO, OperationType.AND, "x"),
        ),
    )


def test_double_not_removed():
    got = simplify_criteria(not_(not_(fn1(FunctionType.TO, "x"))))
    assert got == fn1(FunctionType.TO, "x")


def test_single_not_kept():
    got = simplify_criteria(not_(fn1(FunctionType.TO, "x")))
    assert got == not_(fn1(FunctionType.TO, "x"))


def test_raw_preserved_when_grouping():
    expr = and_(
        Leaf(FunctionType.FROM, OperationType.NONE, ["a b"], is_raw=True),
        fn1(FunctionType.FROM, "c"),
    )
    got = simplify_criteria(expr)
    assert got == Leaf(FunctionType.FROM, OperationType.AND, ["a b", "c"], True)


def test_single_child_collapses():
    assert simplify_criteria(or_(fn1(FunctionType.LIST, "l"))) == fn1(
        FunctionType.LIST, "l"
    )


def test_clone_is_deep():
    tree = and_(fn1(FunctionType.FROM, "a"), or_(fn1(FunctionType.TO, "b")))
    copy = tree.clone()
    assert copy == tree
    copy.children[1].children[0].args.append("z")
    assert tree.children[1].children[0].args == ["b"]


def test_visitor():
    class Counter(Visitor):
        def __init__(self):
            self.count = 0

        def visit_node(self, n):
            self.count += 1
            for c in n.children:
                c.accept_visitor(self)

        def visit_leaf(self, n):
            self.count += len(n.args)

    counter = Counter()
    and_(fn(FunctionType.FROM, OperationType.OR, "a", "b"), fn1(FunctionType.TO, "c")).accept_visitor(counter)
    assert counter.count == 4


def test_root_accessors():
    leaf = fn(FunctionType.CC, OperationType.OR, "a", "b")
    node = and_(leaf)
    assert leaf.root_operation() == OperationType.OR
    assert leaf.root_function() == FunctionType.CC
    assert leaf.is_leaf() is True
    assert node.root_operation() == OperationType.AND
    assert node.root_function() == FunctionType.NONE
    assert node.is_leaf() is False


@pytest.mark.parametrize(
    "value, text",
    [
        (OperationType.NONE, "<none>"),
        (OperationType.AND, "and"),
        (OperationType.OR, "or"),
        (OperationType.NOT, "<unknown>"),
        (FunctionType.REPLY_TO, "replyto"),
        (FunctionType.FROM, "from"),
        (FunctionType.QUERY, "query"),
    ],
)
def test_enum_strings(value, text):
    assert str(value) == text
    assert f"{value}" == text


def test_actions_empty():
    assert Actions().empty() is True
    assert Actions(archive=True).empty() is False
    assert Actions(category=Category.FORUMS).empty() is False
    assert Actions(mark_spam=False).empty() is False


def test_rule_defaults():
    rule = Rule(fn1(FunctionType.FROM, "a"))
    assert rule.actions.empty() is True
    assert rule.criteria.args == ["a"]