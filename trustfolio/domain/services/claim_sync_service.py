"""Mode resolver: decides between the claims API and local storage."""

import logging
from typing import Optional, Union

from ..errors import RemoteStoreError, SessionNotEligibleError
from ..models.claim import AchievementForm, Claim, ClaimInput, ClaimPatch, compose_claim_input
from ..models.claim_set import (
    ClaimSet,
    ConfirmationAction,
    ConfirmationRequired,
    CreateResult,
    DeleteResult,
    Provenance,
    UpdateResult,
)
from ..models.session import Session
from ..normalization import normalize_uri
from ..ports.local_claim_repository import LocalClaimRepository
from ..ports.remote_claims_provider import RemoteClaimsProvider

logger = logging.getLogger(__name__)

FALLBACK_NOTICE = "Using local data (backend unavailable)"
LOCAL_MODE_NOTICE = "Local Storage Mode - sign in to sync to backend"
OAUTH_LOCAL_NOTICE = "OAuth sessions save to local storage"
SAVE_LOCALLY_PROMPT = "Backend error. Save locally instead?"
DELETE_PROMPT = "Delete this achievement? This cannot be undone."

DEFAULT_PAGE_SIZE = 50


class ClaimSyncService:
    """Single decision point for remote-or-local on every read and write.

    Each operation makes at most one remote attempt followed by at most one
    local attempt. Reads fall back to local storage on any remote failure;
    writes surface remote failures so the caller can decide.
    """

    def __init__(
        self,
        remote: RemoteClaimsProvider,
        local: LocalClaimRepository,
        subject_uri_template: str,
        default_subject: str,
    ):
        """Initialize the service.

        Args:
            remote: Remote claims port implementation
            local: Local claim store
            subject_uri_template: Template turning a user id into a subject URI
            default_subject: Subject for claims made without a signed-in user
        """
        self._remote = remote
        self._local = local
        self._subject_uri_template = subject_uri_template
        self._default_subject = default_subject

    @staticmethod
    def local_notice(session: Session) -> str:
        if session.is_local_only:
            return OAUTH_LOCAL_NOTICE
        return LOCAL_MODE_NOTICE

    def _local_set(self, session: Session, fallback: bool = False) -> ClaimSet:
        return ClaimSet(
            claims=self._local.list_local(),
            provenance=Provenance.LOCAL,
            fallback=fallback,
            notice=FALLBACK_NOTICE if fallback else self.local_notice(session),
        )

    async def load_claims(
        self,
        session: Session,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> ClaimSet:
        """Load the signed-in user's claims.

        Args:
            session: Token and identity of the caller
            page: Page of the issuer listing when remote
            limit: Page size when remote

        Returns:
            Claims with their provenance; never raises for remote failures
        """
        if not session.is_remote_eligible:
            logger.info("📦 Session not eligible for backend; loading local claims")
            return self._local_set(session)

        try:
            result = await self._remote.list_by_issuer(session.identity, session.token, page=page, limit=limit)
        except RemoteStoreError as e:
            logger.warning(f"⚠️ Backend load failed, falling back to local claims: {e}")
            return self._local_set(session, fallback=True)

        logger.info(f"✅ Loaded {len(result.claims)} claims from {self._remote.provider_name}")
        return ClaimSet(
            claims=result.claims,
            provenance=Provenance.BACKEND,
            page=result.page,
            limit=result.limit,
            total=result.total,
        )

    async def load_subject_claims(self, session: Session, subject: str) -> ClaimSet:
        """Load claims about a subject, from the backend when possible."""
        subject = normalize_uri(subject)
        if session.is_remote_eligible:
            try:
                claims = await self._remote.list_by_subject(subject, session.token)
                return ClaimSet(claims=claims, provenance=Provenance.BACKEND)
            except RemoteStoreError as e:
                logger.warning(f"⚠️ Backend subject lookup failed, falling back to local claims: {e}")
                fallback = True
        else:
            fallback = False

        claims = [claim for claim in self._local.list_local() if normalize_uri(claim.subject) == subject]
        return ClaimSet(
            claims=claims,
            provenance=Provenance.LOCAL,
            fallback=fallback,
            notice=FALLBACK_NOTICE if fallback else self.local_notice(session),
        )

    def compose_claim(self, session: Session, form: AchievementForm) -> ClaimInput:
        """Turn form values into a create payload for this session."""
        return compose_claim_input(
            form,
            session.identity,
            self._subject_uri_template,
            self._default_subject,
        )

    async def create_claim(
        self,
        session: Session,
        claim_input: ClaimInput,
        save_locally_on_failure: Optional[bool] = None,
    ) -> Union[CreateResult, ConfirmationRequired]:
        """Create a claim in the store the session is entitled to.

        Args:
            session: Token and identity of the caller
            claim_input: Claim payload
            save_locally_on_failure: The caller's answer to the save-locally
                prompt; None means not asked yet

        Returns:
            The created claim, or a confirmation request when the backend
            failed and the caller has not answered yet

        Raises:
            RemoteStoreError: If the backend failed and the caller declined
                the local save
        """
        if not session.is_remote_eligible:
            claim = self._local.create_local(claim_input)
            return CreateResult(claim=claim, provenance=Provenance.LOCAL, notice=self.local_notice(session))

        try:
            claim = await self._remote.create(claim_input, session.token)
            logger.info(f"✅ Created claim {claim.id if claim else '(no echo)'} on {self._remote.provider_name}")
            return CreateResult(claim=claim, provenance=Provenance.BACKEND)
        except RemoteStoreError as e:
            logger.error(f"❌ Backend create failed: {e}")
            if save_locally_on_failure is None:
                return ConfirmationRequired(
                    action=ConfirmationAction.SAVE_LOCALLY,
                    message=SAVE_LOCALLY_PROMPT,
                    details={"error": str(e)},
                )
            if not save_locally_on_failure:
                raise

        claim = self._local.create_local(claim_input)
        return CreateResult(claim=claim, provenance=Provenance.LOCAL, notice="Saved locally")

    def _require_backend(self, session: Session) -> None:
        if not session.is_remote_eligible:
            raise SessionNotEligibleError(
                "These claims came from the backend; a backend session is required to change them"
            )

    async def get_claim(
        self,
        session: Session,
        provenance: Provenance,
        claim_id: int,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Optional[Claim]:
        """Find one claim in the store a loaded set came from.

        Backend claims are looked up on the issuer page the set was loaded
        with, so ``page`` and ``limit`` should match that load.
        """
        if provenance == Provenance.LOCAL:
            return self._local.get_local(claim_id)

        self._require_backend(session)
        result = await self._remote.list_by_issuer(session.identity, session.token, page=page, limit=limit)
        for claim in result.claims:
            if claim.id == claim_id:
                return claim
        return None

    async def update_claim(
        self,
        session: Session,
        provenance: Provenance,
        claim_id: int,
        patch: ClaimPatch,
    ) -> UpdateResult:
        """Update a claim in the store its set was loaded from.

        Raises:
            SessionNotEligibleError: If a backend claim is targeted without a
                backend session
            RemoteStoreError: If the backend update fails
        """
        if provenance == Provenance.LOCAL:
            found = self._local.update_local(claim_id, patch)
            return UpdateResult(claim_id=claim_id, provenance=provenance, found=found)

        self._require_backend(session)
        await self._remote.update(claim_id, patch, session.token)
        logger.info(f"✅ Updated claim {claim_id} on {self._remote.provider_name}")
        return UpdateResult(claim_id=claim_id, provenance=provenance)

    async def delete_claim(
        self,
        session: Session,
        provenance: Provenance,
        claim_id: int,
        confirmed: bool = False,
    ) -> Union[DeleteResult, ConfirmationRequired]:
        """Delete a claim once the caller has confirmed.

        Raises:
            SessionNotEligibleError: If a backend claim is targeted without a
                backend session
            RemoteStoreError: If the backend delete fails
        """
        if not confirmed:
            return ConfirmationRequired(
                action=ConfirmationAction.DELETE_CLAIM,
                message=DELETE_PROMPT,
                details={"claim_id": claim_id, "provenance": provenance.value},
            )

        if provenance == Provenance.LOCAL:
            self._local.delete_local(claim_id)
            return DeleteResult(claim_id=claim_id, provenance=provenance)

        self._require_backend(session)
        await self._remote.delete(claim_id, session.token)
        logger.info(f"🗑️ Deleted claim {claim_id} on {self._remote.provider_name}")
        return DeleteResult(claim_id=claim_id, provenance=provenance)
