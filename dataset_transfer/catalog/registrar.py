from typing import Any

from dataset_transfer.catalog.base import BaseCatalogClient
from dataset_transfer.catalog.exceptions import CatalogConflictError
from dataset_transfer.catalog.models import DatasetRecord, Registration, RegistrationOutcome
from dataset_transfer.catalog.payload import restrict_to_updatable
from dataset_transfer.logging.logger import Log


class DatasetRegistrar:
    """Create-or-update of a catalog record keyed by its deterministic identity.

    Creation is attempted first; a conflict means the dataset was registered by
    an earlier upload, so the mutable fields are patched instead. Concurrent
    registrations of the same identity resolve as last-write-wins.
    """

    def __init__(self, catalog: BaseCatalogClient) -> None:
        self._catalog = catalog

    def register(self, payload: dict[str, Any]) -> Registration:
        record_id = payload["_id"]
        try:
            record = self._catalog.create_record(payload)
        except CatalogConflictError:
            Log.info(f"Dataset {record_id} already exists, updating metadata")
        else:
            Log.info(f"Dataset registered: {record_id}")
            return Registration(record=record, outcome=RegistrationOutcome.CREATED)

        self._catalog.update_record(record_id, restrict_to_updatable(payload))
        Log.info(f"Dataset updated: {record_id}")
        return Registration(
            record=DatasetRecord.from_api(payload),
            outcome=RegistrationOutcome.UPDATED,
        )
