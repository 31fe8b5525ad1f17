import logging
from typing import Annotated, List, Literal, Optional

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Path,
    Query,
    Request,
)

from typedhash.app.config import HashSettings
from typedhash.app.errors import BadFormatError
from typedhash.app.hashing import Hash, HashProvider
from typedhash.app.schemas.hashes import (
    CompositeHashRequest,
    HashTypeView,
    HashView,
)

logger = logging.getLogger("typedhash.api")

router = APIRouter(tags=["Typed Hashes"])

# =============================================================================
# Dependency providers
# =============================================================================

def get_settings_state(request: Request) -> HashSettings:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        raise RuntimeError("settings not initialized")
    return settings


def get_provider(request: Request) -> HashProvider:
    """
    The provider built at startup.

    Requests share it, so each call takes the lock of its hash type.
    """
    provider = getattr(request.app.state, "hash_provider", None)
    if provider is None:
        raise RuntimeError("hash provider not initialized")
    return provider


async def enforce_payload_limit(
    request: Request,
    settings: Annotated[HashSettings, Depends(get_settings_state)],
) -> None:
    """
    Reject request bodies larger than the configured limit.

    The declared Content-Length is checked first. Chunked bodies carry
    no length header, so the received body is measured as well.
    """
    limit = settings.max_payload_size_bytes

    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise HTTPException(
            status_code=413,
            detail="Payload too large",
        )

    body = await request.body()
    if len(body) > limit:
        raise HTTPException(
            status_code=413,
            detail="Payload too large",
        )


def _bad_format(exc: BadFormatError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail=str(exc),
    )


# =============================================================================
# GET /hash-types
# =============================================================================

@router.get(
    "/hash-types",
    summary="List registered hash types",
    response_model=List[HashTypeView],
)
def list_hash_types(
    provider: Annotated[HashProvider, Depends(get_provider)],
) -> List[HashTypeView]:
    return [
        HashTypeView.from_hash_type(hash_type)
        for hash_type in provider.registry
    ]


# =============================================================================
# POST /hashes/digest
# =============================================================================

@router.post(
    "/hashes/digest",
    summary="Hash the raw request body",
    response_model=HashView,
    dependencies=[Depends(enforce_payload_limit)],
    responses={
        413: {"description": "Payload too large"},
        422: {"description": "Invalid hash type"},
    },
)
async def digest(
    request: Request,
    provider: Annotated[HashProvider, Depends(get_provider)],
    type_id: Annotated[
        Optional[int],
        Query(description="Hash type id (default type when omitted)"),
    ] = None,
) -> HashView:
    body = await request.body()

    try:
        value = provider.get_hash_of(body, type_id=type_id)
    except BadFormatError as exc:
        raise _bad_format(exc) from exc

    logger.info(
        "digest_computed",
        extra={"type_id": value.type_id, "input_bytes": len(body)},
    )
    return HashView.from_hash(value)


# =============================================================================
# POST /hashes/composite
# =============================================================================

@router.post(
    "/hashes/composite",
    summary="Compute a composite hash over ordered parts",
    response_model=HashView,
    dependencies=[Depends(enforce_payload_limit)],
    responses={
        413: {"description": "Payload too large"},
        422: {"description": "Invalid part or hash type"},
    },
)
def composite(
    payload: CompositeHashRequest,
    provider: Annotated[HashProvider, Depends(get_provider)],
) -> HashView:
    try:
        parts = [part.to_part(provider.registry) for part in payload.parts]
    except BadFormatError as exc:
        raise _bad_format(exc) from exc

    if any(isinstance(part, Hash) and part.is_nil for part in parts):
        raise HTTPException(
            status_code=422,
            detail="NIL hash may not be an element of a composite hash",
        )

    try:
        value = provider.get_composite_hash_of(*parts, type_id=payload.type_id)
    except BadFormatError as exc:
        raise _bad_format(exc) from exc

    logger.info(
        "composite_hash_computed",
        extra={"type_id": value.type_id, "part_count": len(parts)},
    )
    return HashView.from_hash(value)


# =============================================================================
# GET /hashes/{encoded}
# =============================================================================

@router.get(
    "/hashes/{encoded:path}",
    summary="Decode and describe an encoded hash",
    response_model=HashView,
    responses={422: {"description": "Malformed hash"}},
)
def describe(
    encoded: Annotated[str, Path(description="Encoded hash value")],
    provider: Annotated[HashProvider, Depends(get_provider)],
    encoding: Annotated[
        Literal["base64", "hex"],
        Query(description="Encoding of the path value"),
    ] = "base64",
) -> HashView:
    try:
        if encoding == "hex":
            value = Hash.of_hex_string(encoded, provider.registry)
        else:
            value = Hash.of_base64_string(encoded, provider.registry)
    except BadFormatError as exc:
        raise _bad_format(exc) from exc

    return HashView.from_hash(value)
