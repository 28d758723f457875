from datetime import datetime
from inspect import Parameter
from typing import Any, Dict, Type

from coffer.base.hydrator import Hydrator


class LedgerHydrator(Hydrator):
    """Hydrator for ledger rows

    SQLite hands timestamps back as text, Postgres as `datetime`. Both end
    up as `datetime` on the models.
    """

    def hydrate(
        self, data: Dict[str, Any], model: Type[object] = Parameter.empty
    ):
        created_at = data.get("created_at")
        if isinstance(created_at, str):
            data = {**data, "created_at": datetime.fromisoformat(created_at)}
        return super().hydrate(data, model)
