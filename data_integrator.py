import logging
from typing import Dict, List, Any, Tuple, Optional

from supabase import Client

from supabase_client import SCHEMA

logger = logging.getLogger(__name__)

# Tables the dashboard reads and writes
QUOTES_TABLE = "quotes"
ORDERS_TABLE = "orders"
CUSTOMERS_TABLE = "clientes"
EXPENSES_TABLE = "despesas"
PROFILES_TABLE = "profiles"


class RecordStore:
    """
    Generic record store over schema-qualified Supabase tables.

    Every method returns (ok, message, data) and never raises for a
    failed request; callers decide whether a failure is fatal.
    """

    def __init__(self, client: Client, schema: str = SCHEMA):
        self.client = client
        self.schema = schema

    def _table(self, table_name: str):
        return self.client.schema(self.schema).table(table_name)

    def select(
            self,
            table_name: str,
            filters: Optional[Dict[str, Any]] = None,
            order_by: Optional[str] = None,
            desc: bool = True,
            columns: str = "*",
    ) -> Tuple[bool, str, List[Dict[str, Any]]]:
        """
        Fetch rows matching all equality `filters`, optionally ordered.
        Returns (ok, message, rows)
        """
        try:
            query = self._table(table_name).select(columns)

            for col_name, val in (filters or {}).items():
                query = query.eq(col_name, val)

            if order_by:
                query = query.order(order_by, desc=desc)

            resp = query.execute()

            if getattr(resp, "error", None):
                return False, f"Fetch failed: {resp.error}", []

            if not resp.data:
                return True, "No rows found", []

            return True, "Fetched", list(resp.data)

        except Exception as e:
            logger.warning("Select on %s failed: %s", table_name, e)
            return False, f"Unexpected error: {e}", []

    def insert(self, table_name: str, row: Dict[str, Any]) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
        """
        Insert a single row.
        Returns (ok, message, inserted_row)
        """
        try:
            resp = self._table(table_name).insert(row).execute()

            if getattr(resp, "error", None):
                return False, f"Insert failed: {resp.error}", None

            inserted = resp.data[0] if resp.data else None
            return True, "Inserted", inserted

        except Exception as e:
            logger.warning("Insert into %s failed: %s", table_name, e)
            return False, str(e), None

    def update(
            self,
            table_name: str,
            row_id: Any,
            fields: Dict[str, Any],
    ) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
        """
        Update the row with `id == row_id`.
        Returns (ok, message, updated_row). A missing row is reported as a failure.
        """
        try:
            resp = (
                self._table(table_name)
                .update(fields)
                .eq("id", row_id)
                .execute()
            )

            if getattr(resp, "error", None):
                return False, f"Update failed: {resp.error}", None

            if not resp.data:
                return False, f"No row with id {row_id} in {table_name}", None

            return True, "Updated", resp.data[0]

        except Exception as e:
            logger.warning("Update of %s/%s failed: %s", table_name, row_id, e)
            return False, str(e), None

    def delete(self, table_name: str, row_id: Any) -> Tuple[bool, str, None]:
        try:
            resp = (
                self._table(table_name)
                .delete()
                .eq("id", row_id)
                .execute()
            )

            if getattr(resp, "error", None):
                return False, f"Delete failed: {resp.error}", None

            return True, "Deleted", None

        except Exception as e:
            logger.warning("Delete of %s/%s failed: %s", table_name, row_id, e)
            return False, str(e), None

    def upsert(
            self,
            table_name: str,
            rows: List[Dict[str, Any]],
            conflict_cols: List[str],
    ) -> Tuple[bool, str, List[Dict[str, Any]]]:
        """
        Insert-or-update a batch of rows keyed on `conflict_cols`.
        The columns must match a UNIQUE constraint in Postgres.
        """
        try:
            resp = (
                self._table(table_name)
                .upsert(rows, on_conflict=",".join(conflict_cols))
                .execute()
            )

            if getattr(resp, "error", None):
                return False, f"Upsert failed: {resp.error}", []

            return True, "Upserted", list(resp.data or [])

        except Exception as e:
            logger.warning("Upsert into %s failed: %s", table_name, e)
            return False, str(e), []

    def fetch_profile(self, user_id: str) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
        """
        Fetch a user's profile joined with its role name.
        Returns (ok, message, profile_row)
        """
        try:
            resp = (
                self._table(PROFILES_TABLE)
                .select(
                    """
                    id,
                    role_id,
                    full_name,
                    active,
                    roles:role_id ( name )
                    """
                )
                .eq("id", user_id)
                .limit(1)
                .execute()
            )

            if getattr(resp, "error", None):
                return False, f"Fetch profile failed: {resp.error}", None

            if not resp.data:
                return True, "Profile not found", None

            return True, "Fetched", resp.data[0]

        except Exception as e:
            logger.warning("Profile lookup for %s failed: %s", user_id, e)
            return False, str(e), None
