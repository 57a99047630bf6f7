"""Cluster spec assignment endpoints."""

import asyncio
import logging
from typing import Union

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from cloudup.assignments import perform_assignments
from cloudup.errors import (
    AssignmentError,
    NetworkCIDRMissingError,
    SubnetAllocationError,
    UnsupportedCloudError,
)
from cloudup.models import AssignmentErrorResponse, ClusterSpec
from cloudup.services.cloud import CloudProvider
from cloudup.services.vfs import FileReader
from cloudup.settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/assignments", tags=["assignments"])

# Errors the caller can fix by changing the spec; everything else is upstream
_CLIENT_ERRORS = (NetworkCIDRMissingError, SubnetAllocationError, UnsupportedCloudError)


def get_cloud() -> CloudProvider | None:
    """Cloud collaborator; None builds one from the spec."""
    return None


def get_file_reader() -> FileReader | None:
    """File reader; None builds the default one from settings."""
    return None


@router.post(
    "",
    response_model=ClusterSpec,
    summary="Assign cluster defaults",
    description="Fill in the unset fields of a cluster spec and return the resolved spec.",
    responses={
        200: {"description": "Spec resolved"},
        400: {"model": AssignmentErrorResponse, "description": "Spec cannot be resolved as given"},
        502: {"model": AssignmentErrorResponse, "description": "Upstream lookup failed"},
    },
)
async def assign_cluster_spec(
    request: ClusterSpec,
    cloud: CloudProvider | None = Depends(get_cloud),
    reader: FileReader | None = Depends(get_file_reader),
    settings: Settings = Depends(get_settings),
) -> Union[ClusterSpec, JSONResponse]:
    """Run an assignment pass over the submitted spec."""
    try:
        await asyncio.to_thread(perform_assignments, request, cloud, reader, settings)
    except AssignmentError as e:
        status_code = (
            status.HTTP_400_BAD_REQUEST
            if isinstance(e, _CLIENT_ERRORS)
            else status.HTTP_502_BAD_GATEWAY
        )
        logger.warning("Assignment for cluster %s failed: %s", request.name, e)
        return JSONResponse(status_code=status_code, content=e.to_response().model_dump())

    return request
