"""Player action models.

Each action carries a ``type`` discriminator. Field names accept both the
camelCase wire names and the snake_case attribute names.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter


class _Action(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class DrawAction(_Action):
    """Draw from the deck, or take the top discard to complete a meld."""

    type: Literal["draw"] = "draw"
    from_deck: bool = Field(True, alias="fromDeck")
    meld_indices: list[int] = Field(default_factory=list, alias="meldIndices")


class DiscardAction(_Action):
    """Discard one card and end the turn."""

    type: Literal["discard"] = "discard"
    card_index: int = Field(alias="cardIndex")


class MeldAction(_Action):
    """Expose a new meld from hand cards."""

    type: Literal["meld"] = "meld"
    card_indices: list[int] = Field(alias="cardIndices")


class SapawTarget(_Action):
    """Exposed meld to lay off on."""

    seat: int = Field(validation_alias=AliasChoices("seat", "playerIndex"))
    meld_index: int = Field(alias="meldIndex")


class SapawAction(_Action):
    """Lay off hand cards onto an exposed meld."""

    type: Literal["sapaw"] = "sapaw"
    target: SapawTarget
    card_indices: list[int] = Field(alias="cardIndices")


class CallDrawAction(_Action):
    type: Literal["callDraw"] = "callDraw"


class UpdateSelectedIndicesAction(_Action):
    type: Literal["updateSelectedIndices"] = "updateSelectedIndices"
    indices: list[int] = Field(default_factory=list)


class AutoSortAction(_Action):
    type: Literal["autoSort"] = "autoSort"


class ShuffleAction(_Action):
    type: Literal["shuffle"] = "shuffle"


class NextGameAction(_Action):
    type: Literal["nextGame"] = "nextGame"


class ResetGameAction(_Action):
    type: Literal["resetGame"] = "resetGame"


Action = Annotated[
    Union[
        DrawAction,
        DiscardAction,
        MeldAction,
        SapawAction,
        CallDrawAction,
        UpdateSelectedIndicesAction,
        AutoSortAction,
        ShuffleAction,
        NextGameAction,
        ResetGameAction,
    ],
    Field(discriminator="type"),
]

_action_adapter: TypeAdapter[Action] = TypeAdapter(Action)

# Actions still accepted after the round has ended
POST_ROUND_ACTIONS = frozenset(
    {"updateSelectedIndices", "autoSort", "shuffle", "nextGame", "resetGame"}
)


def parse_action(data: dict[str, Any]) -> Action:
    """Build an action from its wire representation.

    Raises:
        pydantic.ValidationError: If the payload is malformed or the type is unknown.
    """
    return _action_adapter.validate_python(data)
