"""Domain endpoints: register, list with groups, create group, verify, delete. User from auth only."""

from fastapi import APIRouter

from loopy.api.models.domain import Domain
from loopy.api.schemas.domains import (
    DeleteDomainRequest,
    DomainCreate,
    DomainDetailOut,
    DomainOut,
    DomainTreeOut,
    GroupCreate,
    VerificationInstructions,
    VerifyRequest,
    VerifyResponse,
)
from loopy.api.services import domains as domain_service
from loopy.api.services.user_context import UserId

router = APIRouter()


def _detail(row: Domain) -> dict:
    return {
        **DomainOut.model_validate(row).model_dump(),
        "instructions": VerificationInstructions(**domain_service.verification_instructions(row)),
    }


@router.post("", response_model=DomainDetailOut, status_code=201)
async def add_domain(body: DomainCreate, user_id: UserId) -> DomainDetailOut:
    """Register a domain. Response carries the TXT token and the well-known file URL."""
    row = domain_service.add_domain(user_id, body.domain)
    return DomainDetailOut(**_detail(row))


@router.get("", response_model=list[DomainTreeOut])
async def list_domains(user_id: UserId) -> list[DomainTreeOut]:
    """Primary domains (oldest first) with their groups nested."""
    return [
        DomainTreeOut(
            **_detail(tree.root),
            groups=[DomainOut.model_validate(g) for g in tree.groups],
        )
        for tree in domain_service.list_domain_trees(user_id)
    ]


@router.get("/{domain_id}", response_model=DomainDetailOut)
async def get_domain(domain_id: str, user_id: UserId) -> DomainDetailOut:
    return DomainDetailOut(**_detail(domain_service.get_domain(user_id, domain_id)))


@router.post("/{domain_id}/groups", response_model=DomainOut, status_code=201)
async def create_group(domain_id: str, body: GroupCreate, user_id: UserId) -> DomainOut:
    row = domain_service.create_group(user_id, domain_id, body.group_name)
    return DomainOut.model_validate(row)


@router.post("/{domain_id}/verify", response_model=VerifyResponse)
def verify_domain(domain_id: str, body: VerifyRequest, user_id: UserId) -> VerifyResponse:
    """Run one verification attempt. A failed check is 200 with success=false and a reason.
    Plain def: DNS and HTTP lookups block, so FastAPI runs this in its threadpool."""
    result = domain_service.verify_domain(user_id, domain_id, body.method)
    row = domain_service.get_domain(user_id, domain_id)
    return VerifyResponse(
        success=result.success,
        method=result.method,
        reason=result.reason,
        domain=DomainOut.model_validate(row),
    )


@router.delete("/{domain_id}", status_code=204)
async def delete_domain(domain_id: str, body: DeleteDomainRequest, user_id: UserId) -> None:
    domain_service.delete_domain(user_id, domain_id, body.confirmation)
