"""SQLite implementation of client and supplier storage."""

import aiosqlite

from fulfillment.core.entities import Client, Supplier
from fulfillment.core.interfaces import IClientRepository, ISupplierRepository
from fulfillment.infrastructure.storage.sqlite.base import (
    SQLiteRepository,
    from_db_timestamp,
    to_db_timestamp,
)

_PARTY_COLUMNS = "id, name, contact_person, email, phone, address, created_at"


def _party_params(party: Client | Supplier) -> tuple:
    return (
        party.id,
        party.name,
        party.contact_person,
        party.email,
        party.phone,
        party.address,
        to_db_timestamp(party.created_at),
    )


def _party_fields(row: aiosqlite.Row) -> dict:
    return {
        "id": row["id"],
        "name": row["name"],
        "contact_person": row["contact_person"],
        "email": row["email"],
        "phone": row["phone"],
        "address": row["address"],
        "created_at": from_db_timestamp(row["created_at"]),
    }


class SQLiteClientRepository(SQLiteRepository, IClientRepository):
    async def add(self, client: Client) -> Client:
        await self._conn.execute(
            f"INSERT INTO clients ({_PARTY_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
            _party_params(client),
        )
        return client

    async def get(self, client_id: str) -> Client | None:
        row = await self._fetchone("SELECT * FROM clients WHERE id = ?", (client_id,))
        return Client(**_party_fields(row)) if row else None

    async def list_all(self, limit: int = 100, offset: int = 0) -> list[Client]:
        rows = await self._fetchall(
            "SELECT * FROM clients ORDER BY name, id LIMIT ? OFFSET ?", (limit, offset)
        )
        return [Client(**_party_fields(row)) for row in rows]


class SQLiteSupplierRepository(SQLiteRepository, ISupplierRepository):
    async def add(self, supplier: Supplier) -> Supplier:
        await self._conn.execute(
            f"INSERT INTO suppliers ({_PARTY_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
            _party_params(supplier),
        )
        return supplier

    async def get(self, supplier_id: str) -> Supplier | None:
        row = await self._fetchone("SELECT * FROM suppliers WHERE id = ?", (supplier_id,))
        return Supplier(**_party_fields(row)) if row else None

    async def list_all(self, limit: int = 100, offset: int = 0) -> list[Supplier]:
        rows = await self._fetchall(
            "SELECT * FROM suppliers ORDER BY name, id LIMIT ? OFFSET ?", (limit, offset)
        )
        return [Supplier(**_party_fields(row)) for row in rows]
