"""Unit and property-based tests for prompt composition."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from dmprompt.composer import PromptComposer, assemble
from dmprompt.errors import ValidationError
from dmprompt.fragments import FragmentSet

CANONICAL_TITLES = [
    "CHARACTER CARDS",
    "CHARACTER STATUS",
    "GAME LOG",
    "MODULE SNIPPET",
    "ITEMS",
    "DM PRIVATE",
    "OTHER",
    "CURRENT PROMPT",
]

blank_text = st.text(alphabet=" \t\n", max_size=5)
filled_text = st.text(min_size=1).filter(lambda s: s.strip() and "===" not in s)
optional_text = st.one_of(blank_text, filled_text)
optional_mapping = st.one_of(
    st.just({}),
    st.dictionaries(st.text(min_size=1, max_size=5), st.integers(), min_size=1, max_size=3),
)


@st.composite
def fragment_sets(draw, prompt=filled_text):
    return FragmentSet(
        current_prompt=draw(prompt),
        game_log=draw(optional_text),
        module_snippet=draw(optional_text),
        dm_private=draw(optional_text),
        char_status=draw(optional_mapping),
        system_prompt=draw(optional_text),
        character_cards=draw(optional_mapping),
        items=draw(optional_mapping),
        other=draw(optional_text),
    )


def header_titles(user_message: str) -> list[str]:
    return [
        line[4:-4]
        for line in user_message.split("\n")
        if line.startswith("=== ") and line.endswith(" ===")
    ]


class TestAssemble:
    """Tests for PromptComposer.assemble."""

    def test_prompt_only(self):
        composed = assemble(FragmentSet(current_prompt="Roll initiative?"))

        assert composed.system_message is None
        assert composed.user_message == "=== CURRENT PROMPT ===\nRoll initiative?"

    def test_full_layout(self, full_blocks):
        composed = assemble(full_blocks)

        assert composed.system_message == "You are an experienced D&D 5e dungeon master."
        assert header_titles(composed.user_message) == CANONICAL_TITLES
        assert "SYSTEM" not in composed.user_message
        assert composed.user_message.endswith(
            "=== CURRENT PROMPT ===\n"
            "What does the goblin chief do when the party bursts in?"
        )

    def test_structured_fields_are_pretty_printed(self):
        blocks = FragmentSet(current_prompt="go", char_status={"Mira": {"hp": 7}})
        composed = assemble(blocks)

        expected = (
            "=== CHARACTER STATUS ===\n"
            "{\n"
            '  "Mira": {\n'
            '    "hp": 7\n'
            "  }\n"
            "}\n"
            "\n"
            "=== CURRENT PROMPT ===\n"
            "go"
        )
        assert composed.user_message == expected

    def test_malformed_json_text_is_verbatim(self):
        blocks = FragmentSet(current_prompt="go", items='{"rope": 1,')
        composed = assemble(blocks)

        assert '=== ITEMS ===\n{"rope": 1,\n\n' in composed.user_message

    def test_blank_fields_are_omitted(self):
        blocks = FragmentSet(
            current_prompt="go",
            game_log="   ",
            other="\n",
            items={},
            system_prompt="  "
        )
        composed = assemble(blocks)

        assert composed.system_message is None
        assert header_titles(composed.user_message) == ["CURRENT PROMPT"]

    def test_system_prompt_kept_verbatim(self):
        composed = assemble(FragmentSet(current_prompt="go", system_prompt="  Be terse.\n"))
        assert composed.system_message == "  Be terse.\n"

    @pytest.mark.parametrize("prompt", ["", " ", "\n\t"])
    def test_blank_prompt_raises(self, prompt):
        with pytest.raises(ValidationError) as exc_info:
            assemble(FragmentSet(current_prompt=prompt, game_log="lots of context"))
        assert exc_info.value.field == "current_prompt"

    def test_to_messages(self, full_blocks):
        messages = assemble(full_blocks).to_messages()

        assert [m.role for m in messages] == ["system", "user"]
        assert messages[0].content == full_blocks.system_prompt

    def test_to_messages_without_system(self):
        messages = assemble(FragmentSet(current_prompt="go")).to_messages()
        assert [m.role for m in messages] == ["user"]

    @given(fragment_sets(prompt=blank_text))
    def test_blank_prompt_always_raises(self, blocks: FragmentSet):
        """Property test: blank current_prompt never composes."""
        with pytest.raises(ValidationError):
            assemble(blocks)

    @given(fragment_sets())
    def test_assemble_is_deterministic(self, blocks: FragmentSet):
        """Property test: identical input yields identical output."""
        copy = FragmentSet.from_json(blocks.to_json())
        assert assemble(blocks) == assemble(blocks)
        assert assemble(blocks) == assemble(copy)

    @given(fragment_sets())
    def test_sections_follow_canonical_order(self, blocks: FragmentSet):
        """Property test: sections appear in canonical order, prompt last."""
        titles = header_titles(assemble(blocks).user_message)

        assert titles[-1] == "CURRENT PROMPT"
        positions = [CANONICAL_TITLES.index(t) for t in titles]
        assert positions == sorted(positions)


class TestSections:
    """Tests for PromptComposer.sections."""

    def test_sections_skip_blank_fields(self):
        composer = PromptComposer()
        sections = composer.sections(FragmentSet(current_prompt="go", dm_private="secret door"))

        assert sections == [("DM PRIVATE", "secret door"), ("CURRENT PROMPT", "go")]
