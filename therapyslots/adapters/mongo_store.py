"""
MongoDB record store.
"""

import logging
from typing import Any, List, Optional

from bson import ObjectId
from pymongo import ASCENDING, MongoClient
from pymongo.errors import PyMongoError

from ..domain.exceptions import StoreError
from ..domain.models import Booking, CatalogEntry, Therapist
from . import documents

logger = logging.getLogger(__name__)


def document_key(value: Any) -> Any:
    """
    Key used to look up and write a record id.

    Documents written by other clients usually carry ObjectId keys, which the
    codec reads back as 24-digit hex strings. Such strings are turned back
    into ObjectIds so writes replace the existing document instead of
    upserting a string-keyed copy. Ids minted here (32-digit uuid hex) and
    seed ids stay strings.
    """
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


class MongoStore:
    """
    Store backed by three MongoDB collections.

    Catalog writes replace the whole date document. Therapist and booking
    writes ``$set`` every field the codec knows, so fields written by other
    clients survive, while slot lists are still replaced as a whole. All
    writes upsert and there are no multi-document transactions. Catalog
    dates carry a unique index.
    """

    TIMESLOTS = "timeslots"
    THERAPISTS = "therapists"
    BOOKINGS = "bookings"

    def __init__(self, uri: str, database: str, client: Optional[MongoClient] = None):
        """
        Args:
            uri: MongoDB connection string
            database: Database name
            client: Pre-built client, used instead of connecting to ``uri``
        """
        self.uri = uri
        self.database = database
        self._client = client
        self._db = None

    def connect(self) -> None:
        if self._db is not None:
            return
        try:
            if self._client is None:
                self._client = MongoClient(self.uri, serverSelectionTimeoutMS=5000)
            self._db = self._client[self.database]
            self._db[self.TIMESLOTS].create_index([("date", ASCENDING)], unique=True)
        except PyMongoError as exc:
            raise StoreError(f"Could not connect to MongoDB database '{self.database}': {exc}") from exc
        logger.info("Connected to MongoDB database %s", self.database)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
        self._client = None
        self._db = None

    def __enter__(self) -> "MongoStore":
        self.connect()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _collection(self, name: str):
        if self._db is None:
            raise StoreError("MongoStore is not connected; call connect() first")
        return self._db[name]

    # Catalog

    def find_catalog_entry(self, date: str) -> Optional[CatalogEntry]:
        try:
            doc = self._collection(self.TIMESLOTS).find_one({"date": date})
        except PyMongoError as exc:
            raise StoreError(f"Failed to fetch timeslots for {date}: {exc}") from exc
        return documents.catalog_from_document(doc) if doc else None

    def save_catalog_entry(self, entry: CatalogEntry) -> None:
        try:
            self._collection(self.TIMESLOTS).replace_one(
                {"date": entry.date},
                documents.catalog_to_document(entry),
                upsert=True,
            )
        except PyMongoError as exc:
            raise StoreError(f"Failed to save timeslots for {entry.date}: {exc}") from exc

    # Therapists

    def list_therapists(self) -> List[Therapist]:
        try:
            docs = list(self._collection(self.THERAPISTS).find({}))
        except PyMongoError as exc:
            raise StoreError(f"Failed to fetch therapists: {exc}") from exc
        return [documents.therapist_from_document(doc) for doc in docs]

    def get_therapist(self, therapist_id: str) -> Optional[Therapist]:
        try:
            doc = self._collection(self.THERAPISTS).find_one({"_id": document_key(therapist_id)})
        except PyMongoError as exc:
            raise StoreError(f"Failed to fetch therapist {therapist_id}: {exc}") from exc
        return documents.therapist_from_document(doc) if doc else None

    def save_therapist(self, therapist: Therapist) -> None:
        doc = documents.therapist_to_document(therapist)
        del doc["_id"]
        try:
            self._collection(self.THERAPISTS).update_one(
                {"_id": document_key(therapist.id)}, {"$set": doc}, upsert=True,
            )
        except PyMongoError as exc:
            raise StoreError(f"Failed to save therapist {therapist.id}: {exc}") from exc

    # Bookings

    def save_booking(self, booking: Booking) -> None:
        doc = documents.booking_to_document(booking)
        del doc["_id"]
        for field in ("userId", "therapistId"):
            doc[field] = document_key(doc[field])
        try:
            self._collection(self.BOOKINGS).update_one(
                {"_id": document_key(booking.id)}, {"$set": doc}, upsert=True,
            )
        except PyMongoError as exc:
            raise StoreError(f"Failed to save booking {booking.id}: {exc}") from exc

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        try:
            doc = self._collection(self.BOOKINGS).find_one({"_id": document_key(booking_id)})
        except PyMongoError as exc:
            raise StoreError(f"Failed to fetch booking {booking_id}: {exc}") from exc
        return documents.booking_from_document(doc) if doc else None

    def find_bookings(self, date: str, therapist_id: Optional[str] = None) -> List[Booking]:
        query = {"date": date}
        if therapist_id is not None:
            query["therapistId"] = document_key(therapist_id)
        try:
            docs = list(self._collection(self.BOOKINGS).find(query))
        except PyMongoError as exc:
            raise StoreError(f"Failed to fetch bookings for {date}: {exc}") from exc
        return [documents.booking_from_document(doc) for doc in docs]
