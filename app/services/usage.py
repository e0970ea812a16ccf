from typing import Any


def add_usage(conversation: Any, *, tokens: int, cost: int = 0) -> None:
    """Accumulate one turn's usage onto a conversation's running totals.

    Cost is always zero today: no pricing table backs it, the column only
    reserves the place for per-model billing in cents.
    """
    conversation.total_tokens = (conversation.total_tokens or 0) + tokens
    conversation.total_cost = (conversation.total_cost or 0) + cost


def turn_cost(model: str, prompt_tokens: int, completion_tokens: int) -> int:
    # Unpriced until real per-model rates are wired in
    return 0
