"""
Generic Google Cloud Datastore repository.

``Repo[T]`` exposes read and write operations for one Datastore kind inside
one namespace. Entities are pydantic models: they are dumped to Datastore
properties on write and validated back into the model on read.

Examples:
    >>> class User(BaseModel):
    ...     name: str
    ...     email: str
    >>> users = Repo.create("my-project", "production", "User", User)
    >>> users.upsert("jane", User(name="Jane", email="jane@example.com"))
    >>> users.get("jane")
    User(name='Jane', email='jane@example.com')
    >>> users.insert("jane", User(name="Jane", email="jane@example.com"))
    True

Tags:
    datastore, google-cloud, repository, crud, dusted
"""

from __future__ import annotations

from typing import Generic, TypeVar

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import datastore
from pydantic import BaseModel, ValidationError

from dusted.fault import system_wrap
from dusted.logging import get_logger
from dusted.settings import get_settings

logger = get_logger(__name__)

COMPONENT = "db"

T = TypeVar("T", bound=BaseModel)


class Repo(Generic[T]):
    """Read and write operations on one Datastore kind."""

    def __init__(
        self,
        client: datastore.Client,
        namespace: str | None,
        kind: str,
        model: type[T],
    ):
        self._client = client
        self._namespace = namespace
        self._kind = kind
        self._model = model

    @classmethod
    def create(
        cls,
        project_id: str | None,
        namespace: str | None,
        kind: str,
        model: type[T],
    ) -> Repo[T]:
        """Create a repository with a new Datastore client.

        ``project_id`` falls back to ``DUSTED_GCP_PROJECT``, then to the
        project of the ambient credentials.
        """
        try:
            client = datastore.Client(project=project_id or get_settings().gcp_project)
        except (google_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as exc:
            raise system_wrap(
                exc, COMPONENT, "create", "creating Google Cloud Datastore client failed"
            ) from exc
        return cls(client, namespace, kind, model)

    def _key(self, key: str) -> datastore.Key:
        return self._client.key(self._kind, key, namespace=self._namespace)

    def _to_entity(self, key: str, entity: T) -> datastore.Entity:
        result = datastore.Entity(key=self._key(key))
        result.update(entity.model_dump())
        return result

    def _from_entity(self, entity: datastore.Entity) -> T:
        return self._model.model_validate(dict(entity))

    def new_query(self) -> datastore.Query:
        """Create a new query for the current kind and namespace."""
        return self._client.query(kind=self._kind, namespace=self._namespace)

    def upsert(self, key: str, entity: T) -> None:
        """Create a new entity or update an existing one."""
        try:
            self._client.put(self._to_entity(key, entity))
        except google_exceptions.GoogleAPIError as exc:
            raise system_wrap(
                exc, COMPONENT, "upsert", "writing to Google Cloud Datastore failed"
            ) from exc

    def insert(self, key: str, entity: T) -> bool:
        """Create a new entity unless one with the same key exists.

        Returns:
            True if the key was a duplicate and nothing was written.
        """
        try:
            with self._client.transaction():
                if self._client.get(self._key(key)) is not None:
                    logger.debug("duplicate_key", kind=self._kind, key=key)
                    return True
                self._client.put(self._to_entity(key, entity))
        except google_exceptions.GoogleAPIError as exc:
            raise system_wrap(
                exc, COMPONENT, "insert", "writing to Google Cloud Datastore failed"
            ) from exc
        return False

    def get(self, key: str) -> T | None:
        """Load the entity stored under ``key``, or None if there is none."""
        try:
            entity = self._client.get(self._key(key))
        except google_exceptions.GoogleAPIError as exc:
            raise system_wrap(
                exc, COMPONENT, "get", "reading from Google Cloud Datastore failed"
            ) from exc
        if entity is None:
            return None
        try:
            return self._from_entity(entity)
        except ValidationError as exc:
            raise system_wrap(
                exc, COMPONENT, "get", f"entity '{key}' does not match {self._model.__name__}"
            ) from exc

    def query(self, query: datastore.Query) -> list[T]:
        """Find all entities which match the given query."""
        if self._namespace is not None:
            query.namespace = self._namespace
        try:
            entities = list(query.fetch())
        except google_exceptions.GoogleAPIError as exc:
            raise system_wrap(
                exc, COMPONENT, "query", "reading from Google Cloud Datastore failed"
            ) from exc
        try:
            return [self._from_entity(entity) for entity in entities]
        except ValidationError as exc:
            raise system_wrap(
                exc, COMPONENT, "query", f"entity does not match {self._model.__name__}"
            ) from exc

    def count(self, query: datastore.Query) -> int:
        """Return the number of entities matching the given query."""
        if self._namespace is not None:
            query.namespace = self._namespace
        try:
            aggregation = self._client.aggregation_query(query).count(alias="total")
            for batch in aggregation.fetch():
                for result in batch:
                    if result.alias == "total":
                        return int(result.value)
        except google_exceptions.GoogleAPIError as exc:
            raise system_wrap(
                exc, COMPONENT, "count", "reading from Google Cloud Datastore failed"
            ) from exc
        return 0

    def delete(self, key: str) -> None:
        """Delete the entity stored under ``key``."""
        try:
            self._client.delete(self._key(key))
        except google_exceptions.GoogleAPIError as exc:
            raise system_wrap(
                exc, COMPONENT, "delete", "deleting entity in Google Cloud Datastore failed"
            ) from exc


__all__ = ["Repo"]
