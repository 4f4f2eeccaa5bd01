from dataclasses import dataclass, field, replace

from .config import CHAT_MESSAGES_MAX


@dataclass(frozen=True)
class ChatLog:
    """Most recent chat messages, oldest first, at most ``capacity`` of them."""

    capacity: int = CHAT_MESSAGES_MAX
    messages: tuple[str, ...] = field(default_factory=tuple)

    def append(self, text: str) -> "ChatLog":
        messages = self.messages + (text,)
        if len(messages) > self.capacity:
            messages = messages[len(messages) - self.capacity:]
        return replace(self, messages=messages)

    def cleared(self) -> "ChatLog":
        return replace(self, messages=())

    def lines(self) -> list[str]:
        return list(self.messages)

    def __len__(self) -> int:
        return len(self.messages)

    def __iter__(self):
        return iter(self.messages)
