"""User-visible notifications.

Views report outcomes here instead of raising; the front end drains the
queue and shows each message to the user.
"""
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"


@dataclass
class Notification:
    level: str      # SUCCESS | ERROR
    message: str


class Notifier:
    def __init__(self):
        self.items: list[Notification] = []

    def success(self, message: str) -> None:
        logger.info(message)
        self.items.append(Notification(SUCCESS, message))

    def error(self, message: str) -> None:
        logger.warning(message)
        self.items.append(Notification(ERROR, message))

    @property
    def errors(self) -> list[Notification]:
        return [n for n in self.items if n.level == ERROR]

    def drain(self) -> list[Notification]:
        items, self.items = self.items, []
        return items
