"""Test cases for property reference expansion."""

import pytest

from propconf import Combined, Expander, Properties, PropertyGetter


def make_expander(values, **kwargs) -> Expander:
    return Expander(Properties(values), **kwargs)


def test_defaults():
    source = Properties()
    expander = Expander(source)

    assert expander.prefix == "${"
    assert expander.suffix == "}"
    assert expander.limit == 0
    assert expander.source is source
    assert isinstance(expander, PropertyGetter)


@pytest.mark.parametrize("value", ["foo", "bar${", "baz}", "", "}${"])
def test_values_without_references_are_unchanged(value: str):
    expander = make_expander({"key": value})

    assert expander.get("key") == (value, True)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("foo${one}bar", "foo1bar"),
        ("${one}foobar", "1foobar"),
        ("foobar${one}", "foobar1"),
        ("${one}", "1"),
        ("foo${one}${two}bar", "foo12bar"),
        ("${one}${two}foobar", "12foobar"),
        ("foobar${one}${two}", "foobar12"),
        ("foo${one}bar${two}", "foo1bar2"),
        ("foo${zzz}bar", "foo${zzz}bar"),
        ("${zzz}foobar", "${zzz}foobar"),
        ("foobar${zzz}", "foobar${zzz}"),
        ("${zzz}", "${zzz}"),
    ],
)
def test_single_expansion(value: str, expected: str):
    expander = make_expander({"one": "1", "two": "2", "key": value})

    assert expander.get("key") == (expected, True)


NESTED = {
    "one": "1",
    "two": "2",
    "four": "4",
    "one2": "A",
    "three4": "B",
    "twoB": "C",
    "oneC": "D",
    "exp": "${exp2}",
    "exp2": "${exp3}",
    "exp3": "ZZZ",
    "recurse": "${recurse}",
    "cycle": "${cycle2}",
    "cycle2": "${cycle3}",
    "cycle3": "${cycle}",
}


@pytest.mark.parametrize(
    "value, expected",
    [
        ("foo${one${two}}bar", "fooAbar"),
        ("${one${two}}foobar", "Afoobar"),
        ("foobar${one${two}}", "foobarA"),
        ("foobar${one${two${three${four}}}}", "foobarD"),
        ("foo${exp}bar", "fooZZZbar"),
        ("foo${recurse}bar", "foo${recurse}bar"),
        ("foo${cycle}bar", "foo${cycle}bar"),
    ],
)
def test_nested_expansion(value: str, expected: str):
    """Given references nested inside reference names and chains of references
    When the value is expanded
    Then inner names resolve first and cycles stop at the original text
    """
    expander = make_expander({**NESTED, "key": value})

    assert expander.get("key") == (expected, True)


def test_two_way_cycle_terminates():
    expander = make_expander({"a": "${b}", "b": "${a}"})

    assert expander.get("a") == ("${b}", True)
    assert expander.get("b") == ("${a}", True)
    assert expander.expand("${a}") == "${a}"


@pytest.mark.parametrize(
    "values, name, expected",
    [
        ({"path": "${path}:/extra"}, "path", "${path}:/extra"),
        ({"path": "/bin:${path}"}, "path", "/bin:${path}"),
        ({"a": "${b}x", "b": "${a}y"}, "a", "${a}yx"),
        ({"list": "${list},${list}"}, "list", "${list},${list}"),
    ],
)
def test_growing_self_reference_terminates(values, name: str, expected: str):
    """Given a property whose reference grows the value on every round
    When it is expanded
    Then expansion stops at the unexpanded value instead of recursing forever
    """
    expander = make_expander(values)

    assert expander.get(name) == (expected, True)


def test_unresolved_nested_name_does_not_stop_expansion():
    expander = make_expander({"b": "c", "key": "${a${missing}} ${b}"})

    assert expander.get("key") == ("${a${missing}} c", True)


def test_growing_self_reference_with_limit():
    expander = make_expander({"path": "${path}:/extra"}, limit=1000)

    assert expander.get("path") == ("${path}:/extra", True)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("foo@one@bar", "foo1bar"),
        ("@one@foobar", "1foobar"),
        ("foobar@one@", "foobar1"),
        ("foo@one@two@@", "foo1two@@"),
    ],
)
def test_same_prefix_and_suffix(value: str, expected: str):
    expander = make_expander({"one": "1", "key": value}, prefix="@", suffix="@")

    assert expander.get("key") == (expected, True)


def test_get_default():
    expander = make_expander({"key": "val", "ref": "${key}"})

    assert expander.get_default("key", "none") == "val"
    assert expander.get_default("key2", "none") == "none"
    assert expander.get_default("key2", "<${ref}>") == "<val>"


def test_missing_property():
    expander = make_expander({"one": "1"})

    assert expander.get("missing") == ("", False)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("foo${one}bar", "foo1bar"),
        ("foo${two}bar", "foo20bar"),
        ("foo${three}bar", "foo${thirtyOne}bar"),
    ],
)
def test_limit(value: str, expected: str):
    """Given a limit of two rewrite rounds and a three level chain
    When the value is expanded
    Then expansion stops one level short and leaves the innermost reference
    """
    values = {
        "one": "1",
        "two": "${twenty}",
        "twenty": "20",
        "three": "${thirty}",
        "thirty": "${thirtyOne}",
        "thirtyOne": "31",
        "key": value,
    }
    expander = make_expander(values, limit=2)

    assert expander.get("key") == (expected, True)


def test_names_delegate_to_source():
    values = {"one": "1", "two": "${twenty}", "twenty": "20"}
    expander = make_expander(values)

    assert sorted(expander.names()) == ["one", "twenty", "two"]


def test_empty_value_is_substituted_when_found():
    expander = make_expander({"empty": "", "key": "a${empty}b"})

    assert expander.get("key") == ("ab", True)


def test_unterminated_reference_is_kept():
    expander = make_expander({"one": "1", "key": "x}${one}${one"})

    assert expander.get("key") == ("x}1${one", True)


@pytest.mark.parametrize(
    "value",
    [
        "foo${one${two}}bar",
        "foo${cycle}bar",
        "${exp} and ${zzz}",
        "foobar${one${two${three${four}}}}",
        "no references",
    ],
)
def test_expansion_is_idempotent(value: str):
    expander = make_expander(NESTED)

    once = expander.expand(value)

    assert expander.expand(once) == once


def test_expanding_a_combined_source():
    """Given references that span several sources
    When looked up through an expander over the combined sources
    Then references resolve against the whole combination
    """
    overrides = Properties({"host": "prod.example.com"})
    defaults = Properties({"host": "localhost", "url": "http://${host}:${port}/", "port": "8080"})
    expander = Expander(Combined([overrides, defaults]))

    assert expander.get("url") == ("http://prod.example.com:8080/", True)
