"""
Participant Selection Tests

The required/optional sets are mutually exclusive after any sequence
of toggles.
"""

from hypothesis import given, strategies as st

from slotify_client.contracts import ParticipantCategory
from slotify_client.state import ParticipantSelectionSet


REQUIRED = ParticipantCategory.REQUIRED
OPTIONAL = ParticipantCategory.OPTIONAL


class TestToggle:

    def test_required_then_optional_moves_participant(self):
        selection = ParticipantSelectionSet(["Alice", "Bob"])

        selection.toggle("Alice", REQUIRED)
        selection.toggle("Alice", OPTIONAL)

        assert "Alice" not in selection.required_names()
        assert "Alice" in selection.optional_names()
        assert selection.category_of("Alice") is OPTIONAL

    def test_optional_then_required_moves_participant(self):
        selection = ParticipantSelectionSet(["Alice"])

        selection.toggle("Alice", OPTIONAL)
        selection.toggle("Alice", REQUIRED)

        assert selection.required_names() == frozenset({"Alice"})
        assert selection.optional_names() == frozenset()

    def test_uncheck_clears_to_none(self):
        selection = ParticipantSelectionSet(["Alice"])
        selection.toggle("Alice", REQUIRED)

        selection.toggle("Alice", REQUIRED, checked=False)

        assert selection.category_of("Alice") is ParticipantCategory.NONE
        assert len(selection) == 0

    def test_toggle_none_clears(self):
        selection = ParticipantSelectionSet(["Alice"])
        selection.toggle("Alice", OPTIONAL)

        selection.toggle("Alice", ParticipantCategory.NONE)

        assert selection.optional_names() == frozenset()

    def test_unknown_participant_defaults_to_none(self):
        assert ParticipantSelectionSet().category_of("Zed") is ParticipantCategory.NONE

    def test_ordered_follows_participant_list(self):
        selection = ParticipantSelectionSet(["Carol", "Alice", "Bob"])
        selection.toggle("Bob", REQUIRED)
        selection.toggle("Carol", REQUIRED)
        selection.toggle("Dave", REQUIRED)

        assert selection.ordered(REQUIRED) == ("Carol", "Bob", "Dave")

    def test_reset_with_new_participants(self):
        selection = ParticipantSelectionSet(["Alice"])
        selection.toggle("Alice", REQUIRED)

        selection.reset(["Bob"])

        assert selection.participants == ("Bob",)
        assert selection.required_names() == frozenset()


names = st.sampled_from(["Alice", "Bob", "Carol", "Dave"])
toggles = st.tuples(names, st.sampled_from(list(ParticipantCategory)), st.booleans())


@given(st.lists(toggles, max_size=50))
def test_selection_exclusivity(operations):
    """No name is ever both required and optional."""
    selection = ParticipantSelectionSet(["Alice", "Bob", "Carol", "Dave"])
    for name, category, checked in operations:
        selection.toggle(name, category, checked)
        assert not (selection.required_names() & selection.optional_names())


@given(st.lists(toggles, min_size=1, max_size=50))
def test_last_checked_category_wins(operations):
    selection = ParticipantSelectionSet()
    for name, category, checked in operations:
        selection.toggle(name, category, checked)

    name, category, checked = operations[-1]
    expected = category if checked else ParticipantCategory.NONE
    assert selection.category_of(name) is expected
