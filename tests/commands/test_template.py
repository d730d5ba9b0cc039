"""Tests for positional placeholder expansion."""

from relaybot.core.commands.template import expand


class TestExpand:
    def test_replaces_placeholders(self):
        print("\n INPUT: 'snapshot {0} at {1}'")
        result = expand("snapshot {0} at {1}", {0: "front", 1: "noon"})
        print(f" OUTPUT: {result}")
        assert result == "snapshot front at noon"

    def test_repeated_placeholder(self):
        assert expand("{0}-{0}", {0: "x"}) == "x-x"

    def test_missing_argument_left_in_place(self):
        assert expand("go {0} {1}", {0: "north"}) == "go north {1}"

    def test_values_are_not_rescanned(self):
        result = expand("hello {0} and {0}", {0: "{1}", 1: "oops"})
        assert result == "hello {1} and {1}"

    def test_no_placeholders(self):
        assert expand("plain text", {0: "unused"}) == "plain text"

    def test_multi_digit_index(self):
        args = {i: str(i) for i in range(12)}
        assert expand("{10}{11}", args) == "1011"
