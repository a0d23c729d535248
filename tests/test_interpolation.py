"""Test cases for variable interpolation."""

import threading
from decimal import Decimal

import pytest

from propconf import CyclicReferenceError, InterpolationEngine, interpolate


def test_interpolate_string(make_lookup):
    """Test simple interpolation.

    Given a lookup with two plain values
    When interpolating a template referencing both
    Then both placeholders are replaced
    """
    lookup = make_lookup({"animal": "quick brown fox", "target": "lazy dog"})

    result = interpolate("The ${animal} jumps over the ${target}.", lookup)

    assert result == "The quick brown fox jumps over the lazy dog."


def test_interpolate_object(make_lookup):
    """Test that non-string values pass through untouched."""
    value = Decimal("42")
    assert interpolate(value, make_lookup({})) is value
    assert interpolate(42, make_lookup({})) == 42
    assert interpolate(None, make_lookup({})) is None


def test_interpolate_recursive(make_lookup):
    """Test interpolation where values contain further variables.

    Given variables whose values reference other variables
    When interpolating a template
    Then references are expanded transitively
    """
    lookup = make_lookup(
        {
            "animal": "${animal_attr} fox",
            "target": "${target_attr} dog",
            "animal_attr": "quick brown",
            "target_attr": "lazy",
        }
    )

    result = interpolate("The ${animal} jumps over the ${target}.", lookup)

    assert result == "The quick brown fox jumps over the lazy dog."


def test_cyclic_interpolation(make_lookup):
    """Test that a cycle is detected.

    Given a variable that references itself through another variable
    When interpolating
    Then CyclicReferenceError is raised and names the cycle
    """
    lookup = make_lookup(
        {
            "animal": "${animal_attr} ${species}",
            "animal_attr": "quick brown",
            "species": "${animal}",
        }
    )

    with pytest.raises(CyclicReferenceError) as exc_info:
        interpolate("This is a ${animal}", lookup)

    assert exc_info.value.cycle_path == ["animal", "species", "animal"]
    assert "animal → species → animal" in str(exc_info.value)


def test_self_reference(make_lookup):
    """Test that a variable referencing itself directly is a cycle."""
    with pytest.raises(CyclicReferenceError):
        interpolate("${a}", make_lookup({"a": "x${a}"}))


def test_interpolation_unknown_variable(make_lookup):
    """Test that unknown variables are left in place."""
    lookup = make_lookup({"animal": "quick brown fox"})

    result = interpolate("The ${animal} jumps over ${target}.", lookup)

    assert result == "The quick brown fox jumps over ${target}."


def test_unknown_variable_inside_resolved_value(make_lookup):
    """Test that unknown variables nested in a resolved value are kept as well."""
    lookup = make_lookup({"path": "${root}/logs"})

    assert interpolate("dir=${path}", lookup) == "dir=${root}/logs"


def test_same_variable_on_sibling_branches(make_lookup):
    """Test that repeating a variable outside a nesting is not a cycle.

    Given a value referencing the same variable twice, directly and through another one
    When interpolating
    Then every occurrence is expanded
    """
    lookup = make_lookup({"x": "1", "pair": "${x}-${x}", "triple": "${pair}-${x}"})

    assert interpolate("${triple} ${x} ${pair}", lookup) == "1-1-1 1 1-1"


def test_interpolation_is_idempotent(make_lookup):
    """Test that a fully resolved string comes back unchanged."""
    lookup = make_lookup({"a": "b"})
    resolved = interpolate("value ${a}", lookup)

    assert interpolate(resolved, lookup) == resolved
    assert interpolate("no markers at all", lookup) == "no markers at all"


def test_non_string_values_are_stringified(make_lookup):
    """Test that looked up numbers and booleans are substituted as text."""
    lookup = make_lookup({"port": 8080, "ratio": 0.5})

    assert interpolate("${port}:${ratio}", lookup) == "8080:0.5"


def test_unterminated_marker_is_literal(make_lookup):
    """Test that an opening marker without closing brace is copied verbatim."""
    lookup = make_lookup({"a": "A"})

    assert interpolate("${a} and ${b", lookup) == "A and ${b"


def test_deep_chain_without_cycle(make_lookup):
    """Test that long acyclic chains resolve without a depth limit."""
    data = {f"v{i}": f"${{v{i + 1}}}" for i in range(200)}
    data["v200"] = "end"

    assert interpolate("${v0}", make_lookup(data)) == "end"


def test_very_deep_chain_without_cycle(make_lookup):
    """Test that chains deeper than the recursion limit still resolve.

    Given 1000 variables each referencing the next one
    When interpolating the first of them inside a template
    Then the value at the end of the chain is substituted
    """
    data = {f"v{i}": f"${{v{i + 1}}}" for i in range(1000)}
    data["v1000"] = "end"

    assert interpolate("<${v0}>", make_lookup(data)) == "<end>"


def test_cycle_at_the_end_of_a_deep_chain(make_lookup):
    """Test that a cycle far down a long chain is still detected."""
    data = {f"v{i}": f"${{v{i + 1}}}" for i in range(1000)}
    data["v1000"] = "${v998}"

    with pytest.raises(CyclicReferenceError) as exc_info:
        interpolate("${v0}", make_lookup(data))

    assert exc_info.value.cycle_path == ["v998", "v999", "v1000", "v998"]


def test_engine_is_reusable_after_cycle(make_lookup):
    """Test that a failed call leaves no state behind.

    Given an engine whose lookup contains a cycle and an unrelated variable
    When a cyclic interpolation fails
    Then later calls on the same engine still succeed
    """
    engine = InterpolationEngine(make_lookup({"a": "${b}", "b": "${a}", "c": "ok"}))

    with pytest.raises(CyclicReferenceError):
        engine.interpolate("${a}")

    assert engine.interpolate("${c}") == "ok"


def test_concurrent_interpolation(make_lookup):
    """Test that one engine serves concurrent calls independently."""
    engine = InterpolationEngine(make_lookup({"a": "${b}${b}", "b": "${c}", "c": "z"}))
    results = []

    def worker():
        for _ in range(100):
            results.append(engine.interpolate("${a}"))

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results == ["zz"] * 400
