from cliroute.arity import Arity
from cliroute.pattern_compiler import (
    compile_schema,
    option_fragment,
    option_group_name,
    segment_group_name,
)
from cliroute.ranker import DEFAULT_OPTIMAL_WEIGHT, group_by_rank, rank, score, top_group
from cliroute.schema import OptionSpec, Schema

TAG = OptionSpec("--tag|-t", arity=Arity.VECTOR)
HOST = OptionSpec("--host")
FORCE = OptionSpec("--force|-f", arity=Arity.FLAG)
SET = OptionSpec("--set", arity=Arity.MAP)


def deploy_schema():
    return Schema("deploy <target>", options=(TAG, HOST, FORCE, SET))


def groups(schema):
    segment_groups = [
        segment_group_name(index, segment) for index, segment in enumerate(schema.segments)
    ]
    option_groups = {option.dest: option_group_name(option) for option in schema.options}
    return segment_groups, option_groups


def test_compilation_is_deterministic():
    first = compile_schema(deploy_schema())
    second = compile_schema(deploy_schema())
    assert first.expression == second.expression
    assert first.scanner_expression == second.scanner_expression
    assert first.segment_groups == second.segment_groups


def test_group_names_are_stable_identifiers():
    segment_groups, option_groups = groups(deploy_schema())
    assert all(name.startswith("seg_") for name in segment_groups)
    assert all(name.startswith("opt_") for name in option_groups.values())
    assert len(set(segment_groups)) == 2


def test_optimal_match_binds_route_and_options():
    schema = deploy_schema()
    pattern = compile_schema(schema)
    (literal, target), options = groups(schema)

    match = pattern.match("prog deploy web --tag a b -t c --host h1 -f --set.x 1")
    assert match.optimal
    assert match.program == "prog"
    assert match.captures(literal) == ["deploy"]
    assert match.captures(target) == ["web"]
    assert [capture.split() for capture in match.captures(options["tag"])] == [
        ["a", "b"],
        ["c"],
    ]
    assert [capture.strip() for capture in match.captures(options["host"])] == ["h1"]
    assert match.captures(options["force"]) == ["-f"]
    assert match.captures(options["set"]) == [".x 1"]


def test_options_may_precede_the_route():
    pattern = compile_schema(deploy_schema())
    assert pattern.is_match("prog --host h1 deploy web")
    assert pattern.is_match("prog -f deploy --tag a web")


def test_literals_are_case_insensitive():
    pattern = compile_schema(deploy_schema())
    assert pattern.is_match("prog DEPLOY web")


def test_argument_does_not_swallow_a_literal():
    pattern = compile_schema(Schema("remote <name> remove"))
    assert not pattern.is_match("prog remote remove")
    assert pattern.is_match("prog remote origin remove")


def test_unknown_option_is_not_optimal():
    pattern = compile_schema(deploy_schema())
    match = pattern.match("prog deploy web --bogus")
    assert not match.optimal
    assert "--bogus" in match.unmatched


def test_longer_alias_wins():
    option = OptionSpec("--t|--timeout")
    fragment = option_fragment(option)
    assert fragment.index("timeout") < fragment.index("\\-\\-t)")


def test_fuzzy_match_counts_partial_route():
    pattern = compile_schema(deploy_schema())
    match = pattern.match("prog deploy")
    assert not match.optimal
    assert match.successful_groups == 1


def test_fuzzy_argument_requires_context():
    schema = Schema("deploy <target>")
    pattern = compile_schema(schema)
    (literal, target), _ = groups(schema)

    in_context = pattern.match_fuzzy("prog deploy web extra")
    assert in_context.captures(target) == ["web"]
    assert in_context.unmatched == ("extra",)

    out_of_context = pattern.match_fuzzy("prog web")
    assert not out_of_context.succeeded(target)
    assert out_of_context.unmatched == ("web",)


def test_score_weights_optimal_matches():
    pattern = compile_schema(Schema("status", options=(FORCE,)))
    optimal = pattern.match("prog status -f")
    assert score(optimal) == DEFAULT_OPTIMAL_WEIGHT * 3
    assert rank(pattern, "prog status") == DEFAULT_OPTIMAL_WEIGHT * 2
    assert rank(pattern, "prog stat") == 0


def test_group_by_rank_is_stable():
    items = [("a", 1), ("b", 3), ("c", 1), ("d", 3)]
    grouped = group_by_rank(items, key=lambda item: item[1])
    assert grouped == [(3, [("b", 3), ("d", 3)]), (1, [("a", 1), ("c", 1)])]
    assert top_group([], key=lambda item: item) == (0, [])
