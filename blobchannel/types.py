#
# Copyright (c) 2025, NVIDIA CORPORATION. All rights reserved.
#

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from blobchannel.const import GS_SCHEME
from blobchannel.errors import InvalidArgumentError


@dataclass(frozen=True)
class BlobId:
    """
    Immutable identity of an object: bucket, name and an optional generation.

    Args:
        bucket (str): Name of the bucket containing the object.
        name (str): Name of the object.
        generation (int, optional): Specific generation of the object. None addresses the live version.
    """

    bucket: str
    name: str
    generation: Optional[int] = None

    def __post_init__(self):
        if not self.bucket:
            raise InvalidArgumentError("Bucket name must not be empty")
        if not self.name:
            raise InvalidArgumentError("Object name must not be empty")

    def to_gs_url(self) -> str:
        """Return the `gs://bucket/name` form of this id (generation is not included)."""
        return f"{GS_SCHEME}{self.bucket}/{self.name}"

    @staticmethod
    def from_gs_url(url: str, generation: Optional[int] = None) -> BlobId:
        """
        Parse a `gs://bucket/name` URL.

        Args:
            url (str): URL to parse.
            generation (int, optional): Generation to attach to the resulting id.

        Returns:
            BlobId: Parsed id.

        Raises:
            InvalidArgumentError: If the URL does not have the expected form.
        """
        if not url.startswith(GS_SCHEME):
            raise InvalidArgumentError(f"Expected a '{GS_SCHEME}' URL, got: '{url}'")
        bucket, _, name = url[len(GS_SCHEME) :].partition("/")
        return BlobId(bucket, name, generation)

    def __str__(self) -> str:
        if self.generation is None:
            return self.to_gs_url()
        return f"{self.to_gs_url()}#{self.generation}"


class StorageObject(BaseModel):
    """
    Wire representation of an object, as sent to and received from the JSON API
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    bucket: str
    name: str
    generation: Optional[int] = None
    metageneration: Optional[int] = None
    etag: Optional[str] = None
    size: Optional[int] = None
    content_type: Optional[str] = Field(default=None, alias="contentType")
