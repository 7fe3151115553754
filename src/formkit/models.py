"""Peewee ORM base model for entities backing relationship options"""

from peewee import DatabaseProxy, Model
from playhouse.shortcuts import ThreadSafeDatabaseMetadata

# Use DatabaseProxy for deferred database binding
database_proxy = DatabaseProxy()


class BaseModel(Model):
    """Base model class - supports thread-safe metadata

    Applications derive their entities from this class and register them with
    an :class:`formkit.entities.EntityRegistry` to use them as option sources.
    """

    class Meta:
        database = database_proxy
        model_metadata_class = ThreadSafeDatabaseMetadata
