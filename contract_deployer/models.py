"""
Data models for contract-deployer.
"""
import json
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class NetworkInfo(BaseModel):
    """Network snapshot taken once per run"""
    name: str
    chain_id: int
    block_number: int

    class Config:
        frozen = True


class AccountInfo(BaseModel):
    """Deployer account; balance is in wei"""
    address: str
    balance: int

    class Config:
        frozen = True


class TxReceipt(BaseModel):
    """Confirmed transaction receipt"""
    tx_hash: str = Field(..., alias="transactionHash")
    block_number: int = Field(..., alias="blockNumber")
    status: int
    gas_used: int = Field(..., alias="gasUsed")
    from_address: Optional[str] = Field(None, alias="from")
    contract_address: Optional[str] = Field(None, alias="contractAddress")
    effective_gas_price: Optional[int] = Field(None, alias="effectiveGasPrice")

    class Config:
        populate_by_name = True
        frozen = True


class ReceiptMeta(BaseModel):
    """Gas accounting for a confirmed creation transaction"""
    tx_hash: str
    block_number: int
    gas_limit: int
    gas_price: int
    gas_used: int

    class Config:
        frozen = True


class DeploymentRecord(BaseModel):
    """
    Persisted provenance for one deployment.

    Serialised field names are consumed by frontends and explorers
    and must not change.
    """
    contract_name: str = Field(..., alias="contractName")
    contract_address: str = Field(..., alias="contractAddress")
    deployer: str
    network: str
    chain_id: int = Field(..., alias="chainId")
    block_number: int = Field(..., alias="blockNumber")
    transaction_hash: str = Field(..., alias="transactionHash")
    gas_used: str = Field(..., alias="gasUsed")
    gas_price: str = Field(..., alias="gasPrice")
    deployment_time: str = Field(..., alias="deploymentTime")
    abi: str

    class Config:
        populate_by_name = True
        frozen = True

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)
