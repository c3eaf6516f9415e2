import pytest

from minishell.environment import (
    Environment,
    lookup_in_lines,
    split_append,
    split_assignment,
)


def test_entries_round_trip_through_lines():
    entries = ["A=1", "B=two", "PATH=/bin:/usr/bin"]
    env = Environment(entries)
    assert env.lines() == entries
    assert len(env) == 3


def test_iteration_yields_pairs_in_order():
    env = Environment(["A=1", "B"])
    assert list(env) == [("A", "1"), ("B", None)]


def test_value_keeps_later_equals_signs():
    env = Environment(["X=1=2"])
    assert env.get("X") == "1=2"


def test_lines_stop_at_first_variable_without_value():
    env = Environment(["A=1", "X", "B=2"])
    assert env.lines() == ["A=1"]


def test_get_is_exact_match():
    env = Environment(["PATHX=/a", "PATH=/bin"])
    assert env.get("PATH") == "/bin"
    assert env.path() == "/bin"
    assert env.get("PAT") is None


def test_path_missing():
    assert Environment(["HOME=/home/u"]).path() is None


def test_set_adds_at_end():
    env = Environment(["A=1"])
    env.set("B", "2")
    assert list(env) == [("A", "1"), ("B", "2")]


def test_set_replaces_existing():
    env = Environment(["A=1", "B=2"])
    env.set("A", "9")
    assert list(env) == [("A", "9"), ("B", "2")]


def test_set_matches_by_prefix_and_renames():
    env = Environment(["PATH=/bin"])
    env.set("PA", "x")
    assert list(env) == [("PA", "x")]


def test_assign_without_value_clears_value():
    env = Environment(["A=1"])
    env.assign("A")
    assert list(env) == [("A", None)]


def test_assign_parses_text():
    env = Environment()
    env.assign("NAME=value")
    assert env.get("NAME") == "value"


def test_append_joins_values():
    env = Environment(["A=1"])
    env.append("A", "2")
    assert env.get("A") == "12"


def test_append_to_missing_variable_does_nothing():
    env = Environment(["A=1"])
    env.append("B", "2")
    assert list(env) == [("A", "1")]


def test_append_to_unvalued_variable_stays_unvalued():
    env = Environment(["A"])
    env.append("A", "x")
    assert env.get("A") is None


def test_append_assignment():
    env = Environment(["A=x"])
    env.append_assignment("A+=y")
    assert env.get("A") == "x" + "y"


def test_append_assignment_requires_plus():
    with pytest.raises(ValueError):
        Environment(["A=1"]).append_assignment("A=2")


def test_unset_removes_first_match():
    env = Environment(["A=1", "B=2"])
    assert env.unset("A") is True
    assert list(env) == [("B", "2")]


def test_unset_missing_reports_false():
    env = Environment(["A=1"])
    assert env.unset("Z") is False
    assert len(env) == 1


def test_split_assignment():
    assert split_assignment("K=V") == ("K", "V")
    assert split_assignment("K") == ("K", None)
    assert split_assignment("K=") == ("K", "")


def test_split_append():
    assert split_append("A+=b") == ("A", "b")
    assert split_append("A") == ("A", None)


def test_lookup_in_lines_uses_name_before_equals():
    lines = ["AB=1", "A=2"]
    assert lookup_in_lines("A", lines) == "2"
    assert lookup_in_lines("A=ignored", lines) == "2"
    assert lookup_in_lines("C", lines) is None
    assert lookup_in_lines("A", None) is None