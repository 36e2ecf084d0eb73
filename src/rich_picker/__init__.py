"""Multi-source interactive selection engine with a Rich.Live front end.

Candidates come from independent named sources, are filtered incrementally
as the user types, can be marked in batches, and are handed to per-source
actions.

Example:
    from rich_picker import InteractivePicker, SelectionSession, Source, sort_by_display

    def fruits():
        return Source(
            "Fruits",
            ["banana", "apple"],
            actions=[("Eat", lambda names: print("eating", names))],
            transformer=sort_by_display,
        )

    session = SelectionSession.open([fruits])
    InteractivePicker(session, title="Fruit").show()
"""

from .dispatch import ActionDispatcher, DispatchResult, Notice
from .errors import (
    ActionFailure,
    AllSourcesFailure,
    PickerError,
    SourceBuildFailure,
    UnknownAction,
)
from .keys import (
    is_action_menu,
    is_backspace,
    is_cancel,
    is_down,
    is_enter,
    is_escape,
    is_mark,
    is_persistent,
    is_query_char,
    is_up,
)
from .matcher import (
    NEUTRAL_SCORE,
    SCORE_FUZZY,
    SCORE_PREFIX,
    SCORE_SUBSTRING,
    MatchResult,
    filter_candidates,
    match_text,
)
from .picker import InteractivePicker, choose_action_with_menu
from .session import Row, SelectionSession, SessionState
from .sources import Action, Candidate, Source, SourceBuilder, sort_by_display
from .themes import DEFAULT_THEME, THEMES, Theme, get_theme

__all__ = [
    # Engine
    "Source",
    "Candidate",
    "Action",
    "SourceBuilder",
    "sort_by_display",
    "SelectionSession",
    "SessionState",
    "Row",
    "ActionDispatcher",
    "DispatchResult",
    "Notice",
    # Matching
    "MatchResult",
    "filter_candidates",
    "match_text",
    "NEUTRAL_SCORE",
    "SCORE_FUZZY",
    "SCORE_SUBSTRING",
    "SCORE_PREFIX",
    # Errors
    "PickerError",
    "SourceBuildFailure",
    "AllSourcesFailure",
    "UnknownAction",
    "ActionFailure",
    # Front end
    "InteractivePicker",
    "choose_action_with_menu",
    "Theme",
    "THEMES",
    "DEFAULT_THEME",
    "get_theme",
    # Key helpers
    "is_enter",
    "is_escape",
    "is_cancel",
    "is_up",
    "is_down",
    "is_backspace",
    "is_mark",
    "is_action_menu",
    "is_persistent",
    "is_query_char",
]
