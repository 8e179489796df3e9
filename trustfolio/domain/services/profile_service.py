"""Profile settings and account data stored next to the local claims."""

import json
import logging
from typing import Optional, Union

from pydantic import ValidationError

from ..errors import StorageUnavailableError
from ..models.claim_set import ConfirmationAction, ConfirmationRequired
from ..models.profile import ProfileSettings, public_username
from ..models.session import Session
from ..ports.key_value_storage import CLAIMS_KEY, SETTINGS_KEY, KeyValueStorage

logger = logging.getLogger(__name__)

DELETE_CONFIRMATION_WORD = "DELETE"
DELETE_ACCOUNT_PROMPT = (
    "This permanently deletes your achievements and settings. "
    f'Type "{DELETE_CONFIRMATION_WORD}" to confirm.'
)


class ProfileService:
    """Reads and writes the settings slot.

    The settings slot shares the storage and naming convention of the claims
    slot under a different key.
    """

    def __init__(self, storage: KeyValueStorage, key: str = SETTINGS_KEY):
        if key == CLAIMS_KEY:
            raise ValueError("Profile settings cannot share the claims storage key")
        self._storage = storage
        self._key = key

    def _defaults(self, session: Session) -> ProfileSettings:
        return ProfileSettings(display_name=session.name or session.email or "")

    def load_profile(self, session: Session) -> ProfileSettings:
        """Stored settings, or defaults derived from the session."""
        try:
            raw = self._storage.get_item(self._key)
        except StorageUnavailableError as e:
            logger.warning(f"⚠️ Settings storage unavailable: {e}")
            return self._defaults(session)
        if not raw:
            return self._defaults(session)
        try:
            return ProfileSettings.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            logger.warning(f"⚠️ Stored settings unreadable, using defaults: {e}")
            return self._defaults(session)

    def save_profile(self, display_name: str, bio: str = "") -> ProfileSettings:
        """Persist display name and bio.

        Raises:
            ValidationError: If the bio is too long
            StorageUnavailableError: If the settings cannot be written
        """
        settings = ProfileSettings(display_name=display_name, bio=bio).stamped()
        self._storage.set_item(self._key, settings.model_dump_json(by_alias=True))
        logger.info("✅ Profile settings saved")
        return settings

    def delete_account_data(
        self,
        confirmation: Optional[str] = None,
    ) -> Union[bool, ConfirmationRequired]:
        """Remove the local claims and settings once the user typed DELETE.

        Returns:
            True when the data was removed, otherwise a confirmation request
        """
        if confirmation != DELETE_CONFIRMATION_WORD:
            return ConfirmationRequired(
                action=ConfirmationAction.DELETE_ACCOUNT,
                message=DELETE_ACCOUNT_PROMPT,
                details={"expected": DELETE_CONFIRMATION_WORD},
            )
        for key in (CLAIMS_KEY, self._key):
            self._storage.remove_item(key)
        logger.info("🗑️ Local account data deleted")
        return True

    @staticmethod
    def public_portfolio_link(origin: str, session: Session) -> str:
        return f"{origin.rstrip('/')}/p/{public_username(session.email)}"
