"""
Character approval workflow.

Players propose characters; admins and testers accept or reject them.
Proposed rows are mutable and deletable, accepted rows are terminal here.
Accepting bumps the owner's character count in the same unit of work.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from ucp.db.models import DEFAULT_SKINS, MAX_CHARACTERS, Gender
from ucp.db.repository import DuplicateRow, RowNotFound, StorageError
from ucp.errors import (
    CharacterNotAccepted,
    CharacterNotFound,
    DuplicateCharacterName,
    InternalError,
    MissingCharacterName,
    QuotaExceeded,
)
from ucp.validators import (
    validate_character_age,
    validate_character_name,
    validate_character_origin,
)

if TYPE_CHECKING:
    from ucp.db.repository import CharacterRecord, UcpRepository
    from ucp.email.dispatch import NotificationDispatcher


def skin_for_gender(gender: int) -> int:
    """Default skin: 98 for male characters, 93 otherwise."""
    return DEFAULT_SKINS[Gender.MALE] if gender == Gender.MALE else DEFAULT_SKINS[Gender.FEMALE]


class CharacterService:
    def __init__(
        self,
        repository: UcpRepository,
        notifier: NotificationDispatcher,
        logger: Any,
    ) -> None:
        self.repository = repository
        self.notifier = notifier
        self.logger = logger

    @contextmanager
    def _storage(self, action: str, **context: Any) -> Iterator[None]:
        try:
            yield
        except StorageError as e:
            self.logger.exception("storage_failed", action=action, step=e.action, **context)
            raise InternalError from e

    async def propose(self, owner: str, name: str, age: int, gender: int, origin: str) -> None:
        """
        Submit a new character for review.

        Raises:
            ValidationError: Bad name, origin or age.
            QuotaExceeded: The owner already holds the maximum number of characters.
            DuplicateCharacterName: The name is taken.
        """
        validate_character_name(name)
        validate_character_origin(origin)
        validate_character_age(age)

        with self._storage("propose", owner=owner, character=name):
            if await self.repository.get_character_count(owner) >= MAX_CHARACTERS:
                raise QuotaExceeded
            if await self.repository.character_exists(name):
                raise DuplicateCharacterName
            try:
                await self.repository.create_character(
                    owner=owner,
                    name=name,
                    age=age,
                    gender=gender,
                    origin=origin,
                    skin=skin_for_gender(gender),
                )
            except DuplicateRow as e:
                raise DuplicateCharacterName from e

        self.logger.info("character_proposed", owner=owner, character=name)

    async def list_waiting(self) -> list[CharacterRecord]:
        with self._storage("list_waiting"):
            return await self.repository.list_proposed_characters()

    async def accept(self, reviewer: str, owner: str, name: str) -> None:
        """
        Accept a proposed character, then notify its owner in the background.

        Raises:
            MissingCharacterName: ``name`` is empty.
            CharacterNotAccepted: The character is not proposed by ``owner``,
                or the owner is already at the cap. Nothing is changed.
        """
        if not name:
            raise MissingCharacterName

        with self._storage("accept", reviewer=reviewer, owner=owner, character=name):
            try:
                await self.repository.accept_character(reviewer, owner, name)
            except RowNotFound:
                self.logger.info("character_accept_refused", reviewer=reviewer, owner=owner, character=name)
                raise CharacterNotAccepted from None
            email = await self.repository.get_email(owner)

        self.logger.info("character_accepted", reviewer=reviewer, owner=owner, character=name)
        if email:
            self.notifier.dispatch(email, "character_accepted", username=owner, character=name, reviewer=reviewer)

    async def reject(self, reviewer: str, owner: str, name: str, reason: str) -> None:
        """Delete a proposed character and tell its owner why."""
        if not name:
            raise MissingCharacterName

        with self._storage("reject", reviewer=reviewer, owner=owner, character=name):
            try:
                await self.repository.delete_proposed_character(owner, name)
            except RowNotFound:
                raise CharacterNotFound from None
            email = await self.repository.get_email(owner)

        self.logger.info("character_rejected", reviewer=reviewer, owner=owner, character=name)
        if email:
            self.notifier.dispatch(
                email,
                "character_rejected",
                username=owner,
                character=name,
                reviewer=reviewer,
                reason=reason or "-",
            )

    async def fetch(self, name: str) -> CharacterRecord:
        if not name:
            raise MissingCharacterName
        with self._storage("fetch", character=name):
            record = await self.repository.get_character(name)
        if record is None:
            raise CharacterNotFound
        return record
