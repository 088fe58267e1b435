"""Error messages for API responses."""

ERROR_MESSAGES = {
    "season_not_found": "Season not found",
    "stage_not_found": "Stage not found",
    "match_not_found": "Match not found",
    "wrong_stage_kind": "Operation is not available for this competition stage",
    "invalid_cursor": "Invalid pagination cursor",
    "indeterminate_outcome": "Match result cannot be determined from its games",
    "tied_game_score": "A game in this match ended in a tie",
    "incomplete_data": "Match is marked completed but its scores are incomplete",
    "no_stages_found": "No stages found for the specified filters.",
}


def get_error_message(error_key: str) -> str:
    """Get error message.

    Args:
        error_key: Key for the error message

    Returns:
        Message text, or the key itself when unknown
    """
    return ERROR_MESSAGES.get(error_key, error_key)
