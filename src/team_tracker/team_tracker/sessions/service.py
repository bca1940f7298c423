from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..common.links import extract_links
from ..common.validators import require_max_length, require_non_empty
from ..core.constants import MAX_TAG_LENGTH, MAX_TASK_LENGTH
from ..core.exceptions import (
    AlreadyActiveError,
    AuthorizationError,
    InvalidTaskError,
    NotActiveError,
    SessionClosedError,
    ValidationError,
)
from ..users.model import Actor
from .model import NewNote, Session
from .repository import SessionRepository

logger = logging.getLogger(__name__)


class SessionService:
    """Check-in/check-out state machine: NONE -> OPEN -> CLOSED.

    Every rule is checked before the store is touched, so a rejected call
    never leaves a partial write behind. The store repeats the open-session
    checks atomically in its own write path to close concurrent races.
    """

    def __init__(self, sessions: SessionRepository):
        self._sessions = sessions

    def get_active(self, user_id: int) -> Optional[Session]:
        return self._sessions.get_active_for_user(int(user_id))

    def check_in(
        self,
        actor: Actor,
        task: str,
        *,
        tags: Iterable[str] = (),
        note_at_start: Optional[str] = None,
    ) -> Session:
        if task is not None and not isinstance(task, str):
            raise InvalidTaskError("Task must be text")
        task = (task or "").strip()
        if not task:
            raise InvalidTaskError("Task must not be empty")
        if len(task) > MAX_TASK_LENGTH:
            raise InvalidTaskError(f"Task must be at most {MAX_TASK_LENGTH} characters")

        clean_tags = self._clean_tags(tags)
        first_note = None
        if note_at_start and note_at_start.strip():
            first_note = self._new_note(actor, note_at_start)

        if self._sessions.get_active_for_user(actor.user_id) is not None:
            raise AlreadyActiveError("Check out of the current task before starting a new one")

        session = self._sessions.create_session(
            user_id=actor.user_id,
            user_name=actor.display_name,
            user_email=actor.email,
            task=task,
            tags=clean_tags,
            first_note=first_note,
        )
        logger.info("User %s checked in session %s", actor.user_id, session.session_id)
        return session

    def add_note(self, actor: Actor, session_id: int, text: str) -> None:
        session = self._require_open(actor, session_id)
        self._sessions.append_note(session_id=session.session_id, note=self._new_note(actor, text))

    def add_tag(self, actor: Actor, session_id: int, tag: str) -> None:
        session = self._require_open(actor, session_id)
        tag = require_max_length(require_non_empty(tag, "Tag"), "Tag", MAX_TAG_LENGTH)
        if tag in session.tags:
            return
        self._sessions.add_tag(session_id=session.session_id, tag=tag)

    def check_out(self, actor: Actor, session_id: int, summary: str = "") -> None:
        session = self._sessions.get_by_id(int(session_id))
        if session is None or not session.is_open:
            raise NotActiveError("No active session to check out")
        self._require_owner(actor, session)

        self._sessions.close_session(session_id=session.session_id, summary=(summary or "").strip())
        logger.info("User %s checked out session %s", actor.user_id, session.session_id)

    def _require_open(self, actor: Actor, session_id: int) -> Session:
        session = self._sessions.get_by_id(int(session_id))
        if session is None or not session.is_open:
            raise SessionClosedError("Session is not open")
        self._require_owner(actor, session)
        return session

    @staticmethod
    def _require_owner(actor: Actor, session: Session) -> None:
        if session.user_id != actor.user_id:
            raise AuthorizationError("Only the owner can modify this session")

    @staticmethod
    def _new_note(actor: Actor, text: str) -> NewNote:
        text = require_non_empty(text, "Note")
        return NewNote(text=text, links=tuple(extract_links(text)), author=actor.display_name)

    @staticmethod
    def _clean_tags(tags: Iterable[str]) -> tuple[str, ...]:
        if isinstance(tags, str):
            raise ValidationError("Tags must be a list of strings")
        out: list[str] = []
        for tag in tags or ():
            if tag is not None and not isinstance(tag, str):
                raise ValidationError("Tags must be a list of strings")
            tag = (tag or "").strip()
            if not tag or tag in out:
                continue
            out.append(require_max_length(tag, "Tag", MAX_TAG_LENGTH))
        return tuple(out)
