"""Testes da validação estrutural de definições de comando."""

from __future__ import annotations

import pytest

from app.constants.discord import ApplicationCommandType, OptionType
from app.domain.commands import Choice, CommandDefinition, OptionSchema
from utils.errors import RegistrationError


async def _noop(ctx) -> None:
    return None


def test_valid_definition() -> None:
    definition = CommandDefinition(
        name="echo",
        description="Repete o texto",
        handler=_noop,
        options=(
            OptionSchema("text", OptionType.STRING, "Texto", required=True),
            OptionSchema("times", OptionType.INTEGER, "Vezes"),
        ),
    )

    assert definition.path == ("echo",)
    assert definition.option("times").type is OptionType.INTEGER
    assert definition.option("missing") is None


@pytest.mark.parametrize("name", ["Echo", "", "a" * 33, "has space", "dot.name"])
def test_invalid_chat_input_names(name: str) -> None:
    with pytest.raises(RegistrationError, match="invalid_command_name"):
        CommandDefinition(name=name, description="d", handler=_noop)


def test_context_menu_allows_spaces_and_case() -> None:
    definition = CommandDefinition(
        name="Report Message",
        description="",
        handler=_noop,
        command_type=ApplicationCommandType.MESSAGE,
    )

    assert definition.name == "Report Message"


def test_context_menu_rejects_options() -> None:
    with pytest.raises(RegistrationError, match="context_menu_with_options"):
        CommandDefinition(
            name="Inspect",
            description="",
            handler=_noop,
            command_type=ApplicationCommandType.USER,
            options=(OptionSchema("x", OptionType.STRING, "x"),),
        )


def test_description_length() -> None:
    with pytest.raises(RegistrationError, match="invalid_description_length"):
        CommandDefinition(name="x", description="d" * 101, handler=_noop)


def test_required_after_optional() -> None:
    with pytest.raises(RegistrationError, match="required_after_optional"):
        CommandDefinition(
            name="x",
            description="d",
            handler=_noop,
            options=(
                OptionSchema("a", OptionType.STRING, "a"),
                OptionSchema("b", OptionType.STRING, "b", required=True),
            ),
        )


def test_duplicate_option_names() -> None:
    with pytest.raises(RegistrationError, match="duplicate_option"):
        CommandDefinition(
            name="x",
            description="d",
            handler=_noop,
            options=(
                OptionSchema("a", OptionType.STRING, "a"),
                OptionSchema("a", OptionType.INTEGER, "a"),
            ),
        )


def test_nesting_deeper_than_group_is_rejected() -> None:
    with pytest.raises(RegistrationError, match="nesting_too_deep"):
        CommandDefinition(name="x", description="d", handler=_noop, parent=("a", "b", "c"))


class TestOptionSchema:
    def test_choices_only_for_scalar_types(self) -> None:
        with pytest.raises(RegistrationError, match="choices_not_supported"):
            OptionSchema("b", OptionType.BOOLEAN, "b", choices=(Choice("s", 1),))

    def test_choices_and_autocomplete_are_exclusive(self) -> None:
        with pytest.raises(RegistrationError, match="choices_with_autocomplete"):
            OptionSchema(
                "q", OptionType.STRING, "q", choices=(Choice("a", "a"),), autocomplete=True
            )

    def test_choice_value_must_match_type(self) -> None:
        with pytest.raises(RegistrationError, match="invalid_choice_value"):
            OptionSchema("n", OptionType.INTEGER, "n", choices=(Choice("a", "1"),))

    def test_subcommand_type_is_not_an_option(self) -> None:
        with pytest.raises(RegistrationError, match="subcommand_as_option"):
            OptionSchema("sub", OptionType.SUB_COMMAND, "s")

    def test_to_dict(self) -> None:
        schema = OptionSchema("q", OptionType.STRING, "Consulta", required=True, autocomplete=True)

        assert schema.to_dict() == {
            "type": 3,
            "name": "q",
            "description": "Consulta",
            "required": True,
            "autocomplete": True,
        }
