"""
Text protocol parsing and response formatting.
"""
import pytest

from barista import protocol
from barista.client import is_valid_command
from barista.exceptions import InvalidOrder
from barista.protocol import CommandKind
from barista.schemas import StageCounts


class TestParseCommand:

    @pytest.mark.parametrize("line, kind, argument", [
        ("order 2 tea", CommandKind.ORDER, "2 tea"),
        ("  ORDER 1 Coffee and 2 TEA \n", CommandKind.ORDER, "1 coffee and 2 tea"),
        ("order status", CommandKind.STATUS, ""),
        ("Order   Status", CommandKind.STATUS, ""),
        ("collect", CommandKind.COLLECT, ""),
        ("EXIT\n", CommandKind.EXIT, ""),
        ("order", CommandKind.ORDER, ""),
    ])
    def test_known_commands(self, line, kind, argument):
        command = protocol.parse_command(line)

        assert command.kind == kind
        assert command.argument == argument

    @pytest.mark.parametrize("line", ["", "   ", "hello", "orders 2 tea", "collect now", "exit please"])
    def test_unknown_commands(self, line):
        assert protocol.parse_command(line).kind == CommandKind.UNKNOWN


class TestParseOrderDetails:

    def test_single_part(self):
        assert protocol.parse_order_details("2 tea") == [(2, "tea")]

    def test_several_parts(self):
        assert protocol.parse_order_details("1 tea and 2 coffee and 3 tea") == [
            (1, "tea"), (2, "coffee"), (3, "tea"),
        ]

    def test_values_are_not_checked_here(self):
        assert protocol.parse_order_details("abc juice") == [("abc", "juice")]

    @pytest.mark.parametrize("quantity", ["1_0", "+2", "2.0", "-1", "\u00b2"])
    def test_only_plain_digits_become_numbers(self, quantity):
        assert protocol.parse_order_details(f"{quantity} tea") == [(quantity, "tea")]

    @pytest.mark.parametrize("details", ["", "tea", "2", "2 tea and", "and 2 tea", "2 large tea", "2 tea 3 coffee"])
    def test_malformed_shapes(self, details):
        with pytest.raises(InvalidOrder):
            protocol.parse_order_details(details)


class TestResponses:

    def test_status_report_without_ready_items(self):
        lines = protocol.status_report("alice", StageCounts(waiting=1, preparing=2, ready=0))

        assert lines == [
            "Order status for alice:",
            "--> 1 items in the waiting area",
            "--> 2 items being prepared",
            "--> 0 items in the tray",
        ]

    def test_status_report_mentions_ready_items(self):
        lines = protocol.status_report("alice", StageCounts(ready=2))

        assert lines[-1] == protocol.READY_TO_COLLECT

    def test_greeting_and_confirmation(self):
        assert protocol.greeting("bob") == "Welcome bob! What would you like to order today?"
        assert protocol.order_received("bob", "1 tea") == "Order received for bob (1 tea)"


class TestClientFilter:

    @pytest.mark.parametrize("command, valid", [
        ("order 1 tea", True),
        ("Order Status", True),
        ("collect", True),
        ("exit", True),
        ("order", False),
        ("dance", False),
    ])
    def test_is_valid_command(self, command, valid):
        assert is_valid_command(command) is valid
