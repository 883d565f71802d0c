"""
Session Service - modeling session lifecycle with hooks

A session binds one design model (and its name) for the duration of work in
the host tool. Components whose state must not outlive the session register
a ``SessionHook`` and reset themselves when the session closes.

Usage:
    sessions = SessionService()
    sessions.add_hook(mapping_configuration_hook)

    sessions.open("Satellite", design_model)
    ...
    sessions.close()    # hooks receive on_session_closed
"""

import logging
from typing import List, Optional

from ..core.design_model import DesignModel

logger = logging.getLogger(__name__)


class SessionHook:
    """Base class for session lifecycle event handlers.

    Subclass and override the events you care about.
    """

    def on_session_opened(self, session: "SessionService") -> None:
        """Called after a session is opened."""
        pass

    def on_session_closed(self, session: "SessionService") -> None:
        """Called after a session is closed."""
        pass

    def on_session_saved(self, session: "SessionService") -> None:
        """Called after the session's model is saved."""
        pass


class SessionService:
    """Tracks the open modeling session and notifies hooks of lifecycle events."""

    def __init__(self):
        self._design_model: Optional[DesignModel] = None
        self._hooks: List[SessionHook] = []

    @property
    def is_session_open(self) -> bool:
        return self._design_model is not None

    @property
    def design_model(self) -> Optional[DesignModel]:
        return self._design_model

    @property
    def project_name(self) -> Optional[str]:
        return self._design_model.name if self._design_model is not None else None

    def add_hook(self, hook: SessionHook) -> None:
        if hook not in self._hooks:
            self._hooks.append(hook)

    def remove_hook(self, hook: SessionHook) -> None:
        if hook in self._hooks:
            self._hooks.remove(hook)

    def open(self, name: str, design_model: Optional[DesignModel] = None) -> DesignModel:
        """Open a session on ``design_model`` (a new empty model if omitted).

        An already open session is closed first.
        """
        if self.is_session_open:
            self.close()

        self._design_model = design_model or DesignModel(name)
        self._design_model.name = name

        logger.info(f"Session opened on design model {name}")
        self._dispatch("on_session_opened")
        return self._design_model

    def close(self) -> None:
        """Close the open session; does nothing when none is open."""
        if not self.is_session_open:
            return

        name = self._design_model.name
        self._design_model = None

        logger.info(f"Session on design model {name} closed")
        self._dispatch("on_session_closed")

    def save(self) -> None:
        if not self.is_session_open:
            logger.warning("Save requested with no open session")
            return

        self._dispatch("on_session_saved")

    def _dispatch(self, event: str) -> None:
        for hook in list(self._hooks):
            try:
                getattr(hook, event)(self)
            except Exception as e:
                logger.warning(f"Session hook {event} failed: {e}")
