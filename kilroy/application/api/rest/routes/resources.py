"""Resource routes.

Each route looks like the static file it corresponds to, and the file
extension is an explicit part of the url. GET streams the named file; PUT
replaces it (hence PUT rather than POST); DELETE removes it.
"""

import json
import logging
from typing import Any

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel
from starlette.datastructures import UploadFile

from kilroy.domain.auth.model.identity import Identity
from kilroy.domain.resource.model.collection import (
    FBUSR,
    MEDIA,
    PLACE,
    REFS,
    THING,
    THUMB,
    Collection,
)
from kilroy.domain.resource.model.value import ResourceId
from kilroy.domain.resource.port.delegated import DelegatedWriteHandler
from kilroy.domain.resource.service.resource import (
    ResourceDeleted,
    ResourceService,
    ResourceWritten,
)
from kilroy.domain.shared.error import ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Resources"], route_class=DishkaRoute)


class Written(BaseModel):
    """Response for a stored resource."""

    path: str
    size: int
    created: bool

    @classmethod
    def of(cls, result: ResourceWritten) -> "Written":
        return cls(path=str(result.resource), size=result.size, created=result.created)


class Deleted(BaseModel):
    """Response for a delete. Deleting a missing resource still succeeds."""

    path: str
    existed: bool

    @classmethod
    def of(cls, result: ResourceDeleted) -> "Deleted":
        return cls(path=str(result.resource), existed=result.existed)


class Accepted(BaseModel):
    path: str


async def _stream(resources: ResourceService, resource: ResourceId) -> StreamingResponse:
    read = await resources.read(resource)
    return StreamingResponse(read.body, media_type=read.media_type, headers=read.headers)


async def _upload_body(request: Request) -> bytes:
    """Raw request body, or the first file part of a multipart upload."""
    if request.headers.get("content-type", "").startswith("multipart/form-data"):
        async with request.form() as form:
            for value in form.values():
                if isinstance(value, UploadFile):
                    return await value.read()
        raise ValidationError("Multipart upload carries no file", field="body")
    return await request.body()


async def _json_body(request: Request) -> Any:
    try:
        return json.loads(await request.body())
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValidationError(f"Body is not valid JSON: {e}", field="body") from e


async def _write(
    resources: ResourceService, collection: Collection, filename: str, request: Request
) -> Written:
    resource = ResourceId.parse(collection, filename)
    content = await _upload_body(request)
    return Written.of(await resources.write(resource, content))


# -----------------------------------------------------------------------------
# Public reads
# -----------------------------------------------------------------------------


@router.api_route("/thing/{filename}", methods=["GET", "HEAD"])
async def get_thing(filename: str, resources: FromDishka[ResourceService]) -> StreamingResponse:
    return await _stream(resources, ResourceId.parse(THING, filename))


@router.api_route("/thumb/{filename}", methods=["GET", "HEAD"])
async def get_thumb(filename: str, resources: FromDishka[ResourceService]) -> StreamingResponse:
    return await _stream(resources, ResourceId.parse(THUMB, filename))


@router.api_route("/place/{filename}", methods=["GET", "HEAD"])
async def get_place(filename: str, resources: FromDishka[ResourceService]) -> StreamingResponse:
    return await _stream(resources, ResourceId.parse(PLACE, filename))


# -----------------------------------------------------------------------------
# Authorized routes
# -----------------------------------------------------------------------------


@router.api_route("/media/{filename}", methods=["GET", "HEAD"])
async def get_media(
    filename: str,
    identity: FromDishka[Identity],
    resources: FromDishka[ResourceService],
) -> StreamingResponse:
    """Media ids include their file ending."""
    return await _stream(resources, ResourceId.parse(MEDIA, filename))


@router.put("/place/{filename}", response_model=Written)
async def put_place(
    filename: str,
    request: Request,
    identity: FromDishka[Identity],
    resources: FromDishka[ResourceService],
) -> Written:
    return await _write(resources, PLACE, filename, request)


@router.put("/thing/{filename}", response_model=Written)
async def put_thing(
    filename: str,
    request: Request,
    identity: FromDishka[Identity],
    resources: FromDishka[ResourceService],
) -> Written:
    return await _write(resources, THING, filename, request)


@router.put("/thumb/{filename}", response_model=Written)
async def put_thumb(
    filename: str,
    request: Request,
    identity: FromDishka[Identity],
    resources: FromDishka[ResourceService],
) -> Written:
    return await _write(resources, THUMB, filename, request)


@router.put("/media/{filename}", response_model=Written)
async def put_media(
    filename: str,
    request: Request,
    identity: FromDishka[Identity],
    resources: FromDishka[ResourceService],
) -> Written:
    return await _write(resources, MEDIA, filename, request)


# No corresponding get, hence post rather than put.


@router.post("/fbusr/{filename}", response_model=Accepted)
async def update_user(
    filename: str,
    request: Request,
    identity: FromDishka[Identity],
    handler: FromDishka[DelegatedWriteHandler],
) -> Accepted:
    resource = ResourceId.parse(FBUSR, filename)
    if resource.extension != "json":
        raise ValidationError("User records are .json resources", field="extension")
    await handler.update_user(resource, await _json_body(request), identity)
    return Accepted(path=str(resource))


@router.post("/pRefs/{filename}", response_model=Accepted)
async def upload_refs(
    filename: str,
    request: Request,
    identity: FromDishka[Identity],
    handler: FromDishka[DelegatedWriteHandler],
) -> Accepted:
    resource = ResourceId.parse(REFS, filename)
    if resource.extension != "json":
        raise ValidationError("Reference lists are .json resources", field="extension")
    await handler.upload_refs(resource, await _json_body(request), identity)
    return Accepted(path=str(resource))


@router.delete("/{collection}/{filename}", response_model=Deleted)
async def delete_resource(
    collection: str,
    filename: str,
    identity: FromDishka[Identity],
    resources: FromDishka[ResourceService],
) -> Deleted:
    resource = ResourceId.parse(collection, filename)
    logger.info("%s deleting %s", identity.idtag, resource)
    return Deleted.of(await resources.delete(resource))
