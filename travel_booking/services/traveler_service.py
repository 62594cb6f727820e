"""Traveler service: identity lookup, provisioning and activation."""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import utcnow
from ..core.exceptions import ConflictError, NotFoundError
from ..core.security import generate_temporary_password, hash_password
from ..models.traveler import Traveler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TravelerResolution:
    """Outcome of resolving a submitted email to a traveler."""

    traveler_id: UUID
    is_new_account: bool
    # Plaintext, present only when the account was just created
    generated_password: Optional[str] = None


class TravelerService:
    """
    Service for traveler accounts.

    Methods flush but never commit; the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, traveler_id: UUID) -> Traveler | None:
        """Get traveler by ID."""
        stmt = (
            select(Traveler)
            .where(Traveler.traveler_id == traveler_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id_or_raise(self, traveler_id: UUID) -> Traveler:
        """Get traveler by ID or raise NotFoundError."""
        traveler = await self.get_by_id(traveler_id)
        if not traveler:
            logger.warning("Traveler not found", extra={"traveler_id": str(traveler_id)})
            raise NotFoundError(resource_type="traveler", resource_id=str(traveler_id))
        return traveler

    async def get_by_email(self, email: str) -> Traveler | None:
        """Get traveler by email, compared case-insensitively."""
        stmt = (
            select(Traveler)
            .where(func.lower(Traveler.email) == email.strip().lower())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def create(
        self,
        email: str,
        password: str,
        name: str,
        contact: str,
        is_active: bool = False,
        credentials_issued: bool = True,
    ) -> Traveler:
        """
        Insert a traveler with a hashed password.

        Pass ``credentials_issued=False`` when nobody will ever see ``password``;
        the traveler is then sent a fresh one on their next confirmation.

        Raises:
            ConflictError: If a traveler with the same email already exists
        """
        traveler = Traveler(
            email=email.strip().lower(),
            password_hash=hash_password(password),
            name=name,
            contact=contact,
            is_active=is_active,
            credentials_issued_at=utcnow() if credentials_issued else None,
        )
        self.db.add(traveler)
        try:
            await self.db.flush()
        except IntegrityError as e:
            logger.warning(
                "Traveler creation failed - email already exists",
                extra={"email": traveler.email, "error": str(e)}
            )
            raise ConflictError(message="A traveler with this email already exists") from e

        logger.info(
            "Traveler created",
            extra={
                "traveler_id": str(traveler.traveler_id),
                "email": traveler.email,
                "is_active": traveler.is_active
            }
        )
        return traveler

    async def resolve_for_booking(self, email: str, name: str, contact: str) -> TravelerResolution:
        """
        Produce the traveler to attach to a new booking.

        An existing traveler is reused untouched (name, contact and activation
        are left as they are). Otherwise an inactive account is created with a
        random password that nobody is shown; real credentials are issued when
        a booking is confirmed.

        The insert runs in a savepoint. If a concurrent submission created the
        same email first, the savepoint is rolled back and that account is
        reused.

        Args:
            email: Submitted email
            name: Submitted traveler name
            contact: Submitted contact

        Returns:
            TravelerResolution with the traveler ID and whether it is new
        """
        existing = await self.get_by_email(email)
        if existing:
            logger.info(
                "Reusing existing traveler for booking",
                extra={"traveler_id": str(existing.traveler_id)}
            )
            return TravelerResolution(traveler_id=existing.traveler_id, is_new_account=False)

        password = generate_temporary_password()
        try:
            async with self.db.begin_nested():
                traveler = await self.create(
                    email=email,
                    password=password,
                    name=name,
                    contact=contact,
                    credentials_issued=False,
                )
        except ConflictError:
            winner = await self.get_by_email(email)
            if winner is None:
                raise
            logger.info(
                "Traveler provisioned concurrently, reusing it",
                extra={"traveler_id": str(winner.traveler_id)}
            )
            return TravelerResolution(traveler_id=winner.traveler_id, is_new_account=False)

        return TravelerResolution(
            traveler_id=traveler.traveler_id,
            is_new_account=True,
            generated_password=password,
        )

    async def activate(self, traveler_id: UUID) -> bool:
        """
        Set ``is_active`` on a traveler.

        Returns:
            True if the account was inactive and has just been activated,
            False if it was already active
        """
        stmt = (
            update(Traveler)
            .where(Traveler.traveler_id == traveler_id, Traveler.is_active.is_(False))
            .values(is_active=True, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        activated = result.rowcount == 1

        if activated:
            logger.info("Traveler activated", extra={"traveler_id": str(traveler_id)})
        return activated

    async def reset_password(self, traveler_id: UUID, password: str) -> None:
        """Replace the stored password hash."""
        stmt = (
            update(Traveler)
            .where(Traveler.traveler_id == traveler_id)
            .values(password_hash=hash_password(password), updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(stmt)

    async def issue_temporary_password(self, traveler_id: UUID) -> str:
        """Store a freshly generated password and return its plaintext for delivery."""
        password = generate_temporary_password()
        await self.reset_password(traveler_id, password)
        return password

    async def mark_credentials_issued(self, traveler_id: UUID) -> None:
        """Record that the traveler now holds a password they can log in with."""
        stmt = (
            update(Traveler)
            .where(Traveler.traveler_id == traveler_id)
            .values(credentials_issued_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(stmt)

    async def change_password(self, traveler_id: UUID, new_password: str) -> None:
        stmt = (
            update(Traveler)
            .where(Traveler.traveler_id == traveler_id)
            .values(
                password_hash=hash_password(new_password),
                credentials_issued_at=func.coalesce(Traveler.credentials_issued_at, utcnow()),
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(stmt)
        logger.info("Traveler password changed", extra={"traveler_id": str(traveler_id)})

    async def record_login(self, traveler: Traveler) -> None:
        traveler.last_login = utcnow()
        self.db.add(traveler)
        await self.db.flush()

    async def list_travelers(
        self,
        page: int = 1,
        limit: int = 10,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> tuple[list[Traveler], int]:
        """
        List travelers, newest first.

        Returns:
            Tuple of (page of travelers, total matching count)
        """
        conditions = []
        if is_active is not None:
            conditions.append(Traveler.is_active.is_(is_active))
        if search:
            term = f"%{search.lower()}%"
            conditions.append(or_(func.lower(Traveler.name).like(term), func.lower(Traveler.email).like(term)))

        count_stmt = select(func.count()).select_from(Traveler).where(*conditions)
        total = (await self.db.execute(count_stmt)).scalar_one()

        stmt = (
            select(Traveler)
            .where(*conditions)
            .order_by(Traveler.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars()), total
