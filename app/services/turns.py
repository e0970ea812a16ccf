from typing import Iterable, List
from app.models.message import Message, MessageRole
from app.schemas.chat import Turn


def assemble_turns(history: Iterable[Message], new_message: str) -> List[Turn]:
    """Full persisted history, oldest first, followed by the new user turn.

    Nothing is truncated or summarised; long conversations are resent whole.
    """
    turns = [Turn(role=MessageRole(m.role), content=m.content) for m in history]
    turns.append(Turn(role=MessageRole.USER, content=new_message))
    return turns
