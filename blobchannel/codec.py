#
# Copyright (c) 2025, NVIDIA CORPORATION. All rights reserved.
#

from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, TypeVar

from blobchannel.types import BlobId, StorageObject

A = TypeVar("A")
B = TypeVar("B")
C = TypeVar("C")


@dataclass(frozen=True)
class Codec(Generic[A, B]):
    """
    A pair of functions translating between a domain value and its wire form.

    Args:
        encoder (Callable[[A], B]): Domain to wire.
        decoder (Callable[[B], A]): Wire to domain.
    """

    encoder: Callable[[A], B]
    decoder: Callable[[B], A]

    def encode(self, value: A) -> B:
        return self.encoder(value)

    def decode(self, value: B) -> A:
        return self.decoder(value)

    def and_then(self, other: "Codec[B, C]") -> "Codec[A, C]":
        """Compose with a codec whose domain is this codec's wire form."""
        return Codec(
            lambda value: other.encode(self.encode(value)),
            lambda value: self.decode(other.decode(value)),
        )


def _blob_id_encode(blob: BlobId) -> StorageObject:
    return StorageObject(bucket=blob.bucket, name=blob.name, generation=blob.generation)


def _blob_id_decode(obj: StorageObject) -> BlobId:
    return BlobId(obj.bucket, obj.name, obj.generation)


def _storage_object_encode(obj: StorageObject) -> Dict[str, Any]:
    return obj.model_dump(by_alias=True, exclude_none=True)


def _storage_object_decode(payload: Dict[str, Any]) -> StorageObject:
    return StorageObject.model_validate(payload)


# pylint: disable=too-few-public-methods
class ApiaryConversions:
    """
    Conversions between domain types and the JSON API wire model
    """

    _blob_id_codec: Codec[BlobId, StorageObject] = Codec(_blob_id_encode, _blob_id_decode)
    _storage_object_codec: Codec[StorageObject, Dict[str, Any]] = Codec(
        _storage_object_encode, _storage_object_decode
    )

    @classmethod
    def blob_id(cls) -> Codec[BlobId, StorageObject]:
        """Codec between `BlobId` and the `StorageObject` request descriptor."""
        return cls._blob_id_codec

    @classmethod
    def storage_object(cls) -> Codec[StorageObject, Dict[str, Any]]:
        """Codec between `StorageObject` and its JSON payload."""
        return cls._storage_object_codec
