"""
Parcel store.

Record-level operations on the ``parcel`` table. Address changes and deletion
are only allowed while a parcel is ``registered``; the database is the single
source of truth and every decision re-reads the current row.

Gated mutations (``set_address``, ``delete``) first read the status so a
rejection can report the status the parcel actually has. The write then
repeats the status predicate in its WHERE clause, so a concurrent status
change between the read and the write cannot slip through: the write matches
no row, the status is read again and the caller gets ``WrongStatusError`` (or
``ParcelNotFoundError`` if the row disappeared). The extra read only happens
on the losing side of such a race.
"""

import logging
from typing import Union

from sqlalchemy import select, update, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parceltrack.app.core.exceptions import ParcelNotFoundError, StorageError, WrongStatusError
from parceltrack.app.models.parcel import Parcel
from parceltrack.app.models.parcel_enums import ParcelStatus
from parceltrack.app.schemas.parcel import ParcelCreate, ParcelResponse

logger = logging.getLogger("parceltrack.store")


def _status_value(status: Union[ParcelStatus, str]) -> str:
    if isinstance(status, ParcelStatus):
        return status.value
    return status


class ParcelStore:
    """
    Parcel persistence over an explicitly supplied async session.

    Each mutating call commits its own unit of work. Any database failure
    rolls the session back and is raised as ``StorageError`` naming the
    operation and the parcel number (or client) involved.
    """

    def __init__(self, db: AsyncSession, editable_status: Union[ParcelStatus, str] = ParcelStatus.REGISTERED):
        self.db = db
        self.editable_status = _status_value(editable_status)

    async def add(self, parcel: ParcelCreate) -> int:
        """
        Insert a new parcel and return the number assigned by the database.

        Raises:
            StorageError: insert failed (constraint violation, backend down)
        """
        row = Parcel(
            client=parcel.client,
            status=_status_value(parcel.status),
            address=parcel.address,
            created_at=parcel.created_at,
        )
        try:
            self.db.add(row)
            await self.db.flush()
            number = row.number
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self._fail("add", f"client={parcel.client}", exc)

        if number is None:
            raise StorageError("add", f"client={parcel.client}", reason="no parcel number was generated")

        logger.info("Parcel added", extra={"number": number, "client": parcel.client})
        return number

    async def get(self, number: int) -> ParcelResponse:
        """
        Return the parcel with the given number.

        Raises:
            ParcelNotFoundError: no such parcel
            StorageError: query failed
        """
        query = select(Parcel).where(Parcel.number == number).execution_options(populate_existing=True)
        try:
            result = await self.db.execute(query)
            row = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            await self._fail("get", number, exc)

        if row is None:
            raise ParcelNotFoundError(number)
        return ParcelResponse.model_validate(row)

    async def get_by_client(self, client: int) -> list[ParcelResponse]:
        """Return every parcel owned by ``client``; empty if there are none."""
        query = select(Parcel).where(Parcel.client == client).execution_options(populate_existing=True)
        try:
            result = await self.db.execute(query)
            rows = result.scalars().all()
        except SQLAlchemyError as exc:
            await self._fail("get_by_client", f"client={client}", exc)

        return [ParcelResponse.model_validate(row) for row in rows]

    async def get_status(self, number: int) -> str:
        """
        Read the current status of a parcel straight from the database.

        Raises:
            ParcelNotFoundError: no such parcel
            StorageError: query failed
        """
        try:
            result = await self.db.execute(select(Parcel.status).where(Parcel.number == number))
            status = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            await self._fail("get_status", number, exc)

        if status is None:
            raise ParcelNotFoundError(number)
        return status

    async def set_status(self, number: int, status: Union[ParcelStatus, str]) -> None:
        """
        Move a parcel to ``status``.

        Any status string is accepted; transition rules belong to the caller.
        A missing parcel is detected from the affected row count.
        """
        query = (
            update(Parcel)
            .where(Parcel.number == number)
            .values(status=_status_value(status))
            .execution_options(synchronize_session=False)
        )
        affected = await self._write("set_status", number, query)
        if affected == 0:
            raise ParcelNotFoundError(number)

        logger.info("Parcel status changed", extra={"number": number, "status": _status_value(status)})

    async def set_address(self, number: int, address: str) -> None:
        """
        Change the delivery address of a registered parcel.

        Raises:
            ParcelNotFoundError: no such parcel
            WrongStatusError: parcel is no longer registered
            StorageError: query failed
        """
        await self._require_editable("set_address", number)

        query = (
            update(Parcel)
            .where(Parcel.number == number, Parcel.status == self.editable_status)
            .values(address=address)
            .execution_options(synchronize_session=False)
        )
        affected = await self._write("set_address", number, query)
        if affected == 0:
            await self._raise_lost_race("set_address", number)

        logger.info("Parcel address changed", extra={"number": number})

    async def delete(self, number: int) -> None:
        """
        Permanently remove a registered parcel.

        Raises:
            ParcelNotFoundError: no such parcel
            WrongStatusError: parcel is no longer registered
            StorageError: query failed
        """
        await self._require_editable("delete", number)

        query = (
            delete(Parcel)
            .where(Parcel.number == number, Parcel.status == self.editable_status)
            .execution_options(synchronize_session=False)
        )
        affected = await self._write("delete", number, query)
        if affected == 0:
            await self._raise_lost_race("delete", number)

        logger.info("Parcel deleted", extra={"number": number})

    async def _require_editable(self, operation: str, number: int) -> None:
        current = await self.get_status(number)
        if current != self.editable_status:
            logger.warning(
                "Parcel mutation rejected",
                extra={"operation": operation, "number": number, "status": current},
            )
            raise WrongStatusError(number, current, self.editable_status, operation)

    async def _raise_lost_race(self, operation: str, number: int) -> None:
        # The status check passed but the guarded write matched nothing: the
        # parcel changed status or was removed in between.
        await self._require_editable(operation, number)
        raise StorageError(operation, number, reason="guarded write matched no row")

    async def _write(self, operation: str, number: int, query) -> int:
        try:
            result = await self.db.execute(query)
            affected = result.rowcount
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self._fail(operation, number, exc)

        if affected is None or affected < 0:
            raise StorageError(operation, number, reason="affected row count unavailable")
        return affected

    async def _fail(self, operation: str, identifier, exc: SQLAlchemyError):
        logger.error(
            "Parcel storage failure",
            extra={"operation": operation, "id": identifier},
            exc_info=exc,
        )
        try:
            await self.db.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback failed", extra={"operation": operation, "id": identifier})
        raise StorageError(operation, identifier, reason=str(exc)) from exc
