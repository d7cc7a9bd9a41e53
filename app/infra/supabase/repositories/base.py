"""Generic table repository shared by the concrete Supabase repositories"""
from typing import Generic, TypeVar, Type, Optional, List, Dict, Any
from pydantic import BaseModel
from supabase import Client  # type: ignore

T = TypeVar('T', bound=BaseModel)
CreateT = TypeVar('CreateT', bound=BaseModel)
UpdateT = TypeVar('UpdateT', bound=BaseModel)


def escape_like(value: str) -> str:
    """Make `value` match literally inside a LIKE/ILIKE pattern"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _apply_filters(query, filters: Optional[Dict[str, Any]]):
    for column, value in (filters or {}).items():
        query = query.eq(column, value)
    return query


class BaseRepository(Generic[T, CreateT, UpdateT]):
    """
    Row <-> model mapping plus the equality-filtered CRUD every table needs.
    Subclasses add the table specific queries (ranges, search, counters).

    All primary keys are UUID strings.
    """

    def __init__(self, client: Client, table_name: str, model_class: Type[T]):
        self._client = client
        self._table_name = table_name
        self._model_class = model_class

    def _table(self):
        return self._client.table(self._table_name)

    def _to_model(self, row: Dict[str, Any]) -> T:
        return self._model_class(**row)

    def _to_models(self, rows: List[Dict[str, Any]]) -> List[T]:
        return [self._to_model(row) for row in rows]

    @staticmethod
    def _payload(data: BaseModel) -> Dict[str, Any]:
        # only fields the caller actually set are written
        return data.model_dump(exclude_unset=True, mode='json')

    async def find_by_id(self, id: str) -> Optional[T]:
        return await self.find_one({"id": id})

    async def find_one(self, filters: Dict[str, Any]) -> Optional[T]:
        rows = await self.find_by_filters(filters, limit=1)
        return rows[0] if rows else None

    async def find_by_filters(self, filters: Dict[str, Any], limit: Optional[int] = None) -> List[T]:
        query = _apply_filters(self._table().select("*"), filters)
        if limit:
            query = query.limit(limit)
        return self._to_models(query.execute().data or [])

    async def create(self, data: CreateT) -> T:
        response = self._table().insert(self._payload(data)).execute()
        if not response.data:
            raise ValueError(f"Insert into {self._table_name} returned no row")
        return self._to_model(response.data[0])

    async def update(self, id: str, data: UpdateT) -> Optional[T]:
        """Update one row; an empty update just re-reads it"""
        rows = await self.update_by_filters({"id": id}, data)
        if rows is None:
            return await self.find_by_id(id)
        return rows[0] if rows else None

    async def update_by_filters(self, filters: Dict[str, Any], data: UpdateT) -> Optional[List[T]]:
        """
        Apply the same update to every matching row.

        Returns:
            The updated rows, or None if `data` has no fields set
        """
        payload = self._payload(data)
        if not payload:
            return None
        response = _apply_filters(self._table().update(payload), filters).execute()
        return self._to_models(response.data or [])

    async def delete(self, id: str) -> bool:
        response = self._table().delete().eq("id", id).execute()
        return bool(response.data)

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        response = _apply_filters(self._table().select("id", count="exact"), filters).execute()
        return response.count or 0
