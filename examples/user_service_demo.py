#!/usr/bin/env python3
"""Drive a small service against a mocked repository and print what happened."""

from __future__ import annotations

import abc
import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Optional

from mocklite import It, Mock, MockOptions, Times


@dataclass(frozen=True)
class User:
    user_id: str
    name: str


class UserRepository(abc.ABC):
    @abc.abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        ...

    @abc.abstractmethod
    async def save(self, user: User) -> None:
        ...

    @property
    @abc.abstractmethod
    def is_active(self) -> bool:
        ...


class UserService:
    def __init__(self, users: UserRepository) -> None:
        self.users = users

    def display_name(self, user_id: str) -> str:
        if not self.users.is_active:
            return "offline"
        user = self.users.get_user(user_id)
        return user.name if user is not None else "unknown"

    async def rename(self, user_id: str, name: str) -> bool:
        if self.users.get_user(user_id) is None:
            return False
        await self.users.save(User(user_id, name))
        return True


def main() -> None:
    logging.basicConfig(level=logging.WARNING)
    users = Mock(UserRepository, MockOptions(name="users"))
    users.setup(lambda m: m.get_user("123"), returns=User("123", "Ada"))
    users.returns_get(lambda m: m.is_active, True)
    saved: list[str] = []
    users.on_call(lambda m: m.save, lambda user: saved.append(user.name))

    service = UserService(users.object)
    names = [service.display_name("123"), service.display_name("999")]
    renamed = asyncio.run(service.rename("123", "Grace"))

    users.verify(lambda m: m.get_user("123"), Times.exactly(2))
    users.verify(lambda m: m.get_user(It.is_any(str)), Times.exactly(3))
    users.verify(lambda m: m.save, Times.once)

    print(
        json.dumps(
            {
                "names": names,
                "renamed": renamed,
                "saved": saved,
                "calls": [inv.name for inv in users.invocations],
            }
        )
    )


if __name__ == "__main__":
    main()
