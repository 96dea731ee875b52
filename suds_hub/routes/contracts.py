from fastapi import APIRouter, Depends

from ..auth.security import get_current_actor
from ..schemas.contracts import ContractCreate, ContractUpdate
from ..services import contracts as contract_service
from ..store.factory import get_store
from ..store.provider import DocumentStore

router = APIRouter(prefix="/contracts", tags=["contracts"])


@router.get("")
def list_contracts(store: DocumentStore = Depends(get_store), actor: str = Depends(get_current_actor)):
    return contract_service.list_contracts(store)


@router.post("", status_code=201)
def create_contract(payload: ContractCreate, store: DocumentStore = Depends(get_store), actor: str = Depends(get_current_actor)):
    return contract_service.add_contract(store, payload.model_dump(), actor_id=actor)


@router.get("/{contract_id}")
def get_contract(contract_id: str, store: DocumentStore = Depends(get_store), actor: str = Depends(get_current_actor)):
    return contract_service.get_contract(store, contract_id)


@router.patch("/{contract_id}")
def update_contract(
    contract_id: str,
    payload: ContractUpdate,
    store: DocumentStore = Depends(get_store),
    actor: str = Depends(get_current_actor),
):
    return contract_service.update_contract(store, contract_id, payload.model_dump(exclude_unset=True), actor_id=actor)


@router.delete("/{contract_id}", status_code=204)
def delete_contract(contract_id: str, store: DocumentStore = Depends(get_store), actor: str = Depends(get_current_actor)):
    contract_service.delete_contract(store, contract_id)
