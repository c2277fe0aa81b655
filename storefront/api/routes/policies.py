from fastapi import APIRouter, Depends

from storefront.api.deps import get_storefront
from storefront.platform import StorefrontClient
from storefront.schemas.content import PolicyOut
from storefront.services.catalog import get_policy, list_policies

router = APIRouter(prefix="/v1/policies", tags=["policies"])


@router.get("", response_model=list[PolicyOut])
async def policies(storefront: StorefrontClient = Depends(get_storefront)) -> list[PolicyOut]:
    return await list_policies(storefront)


@router.get("/{handle}", response_model=PolicyOut)
async def policy(handle: str, storefront: StorefrontClient = Depends(get_storefront)) -> PolicyOut:
    return await get_policy(storefront, handle)
