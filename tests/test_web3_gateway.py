"""
Tests for the web3.py-backed chain gateway.
"""
import pytest
import requests
import requests_mock
from unittest.mock import MagicMock, PropertyMock
from eth_account import Account
from web3.exceptions import TimeExhausted

from contract_deployer.gateway import (
    GatewayConnectionError,
    GatewayResponseError,
    GatewayTimeoutError,
    Web3Gateway,
)
from conftest import DEPLOYER, PROJECT_ABI, PROJECT_BYTECODE, TEST_PRIV_KEY, TEST_RPC_URL

CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
TX_HASH = b"\x12" * 32


@pytest.fixture
def mock_w3():
    return MagicMock()


@pytest.fixture
def gateway(mock_w3):
    return Web3Gateway(TEST_RPC_URL, w3=mock_w3)


class TestConstruction:

    def test_remote_http_rejected(self):
        with pytest.raises(ValueError, match="https"):
            Web3Gateway("http://rpc.example.com", w3=MagicMock())

    @pytest.mark.parametrize("url", [
        "http://localhost:8545",
        "http://127.0.0.1:8545",
        "https://rpc.example.com",
    ])
    def test_allowed_urls(self, url):
        assert Web3Gateway(url, w3=MagicMock()).rpc_url == url

    def test_invalid_private_key(self):
        with pytest.raises(ValueError, match="Invalid deployer private key"):
            Web3Gateway(TEST_RPC_URL, private_keys=["0x1234"], w3=MagicMock())


class TestAccounts:

    def test_node_accounts_are_checksummed(self, gateway, mock_w3):
        mock_w3.eth.accounts = [DEPLOYER.lower()]
        assert gateway.accounts() == [DEPLOYER]

    def test_local_keys_win_over_node_accounts(self, mock_w3):
        expected = Account.from_key(TEST_PRIV_KEY).address
        gateway = Web3Gateway(TEST_RPC_URL, private_keys=[TEST_PRIV_KEY], w3=mock_w3)

        assert gateway.accounts() == [expected]

    def test_balance(self, gateway, mock_w3):
        mock_w3.eth.get_balance.return_value = 5 * 10**18
        assert gateway.get_balance(DEPLOYER.lower()) == 5 * 10**18
        mock_w3.eth.get_balance.assert_called_once_with(DEPLOYER)


class TestErrorTranslation:

    def test_rpc_error_payload(self, gateway, mock_w3):
        mock_w3.eth.get_balance.side_effect = ValueError(
            {"code": -32000, "message": "header not found"}
        )

        with pytest.raises(GatewayResponseError) as exc_info:
            gateway.get_balance(DEPLOYER)

        assert exc_info.value.error_code == "-32000"
        assert "header not found" in str(exc_info.value)

    def test_connection_error(self, gateway, mock_w3):
        type(mock_w3.eth).chain_id = PropertyMock(side_effect=requests.ConnectionError("refused"))

        with pytest.raises(GatewayConnectionError):
            gateway.chain_id()

    def test_receipt_timeout(self, gateway, mock_w3):
        mock_w3.eth.wait_for_transaction_receipt.side_effect = TimeExhausted("not mined")

        with pytest.raises(GatewayTimeoutError):
            gateway.wait_for_receipt("0xabc", 1)


class TestDeploy:

    def test_unlocked_account_uses_transact(self, gateway, mock_w3):
        constructor = mock_w3.eth.contract.return_value.constructor.return_value
        constructor.transact.return_value = TX_HASH

        tx_hash = gateway.deploy_contract(PROJECT_ABI, PROJECT_BYTECODE, DEPLOYER, [1])

        assert tx_hash == "0x" + "12" * 32
        mock_w3.eth.contract.assert_called_once_with(abi=PROJECT_ABI, bytecode=PROJECT_BYTECODE)
        mock_w3.eth.contract.return_value.constructor.assert_called_once_with(1)
        constructor.transact.assert_called_once_with({"from": DEPLOYER})

    def test_local_key_signs_and_sends_raw(self, mock_w3):
        gateway = Web3Gateway(TEST_RPC_URL, private_keys=[TEST_PRIV_KEY], w3=mock_w3)
        sender = gateway.accounts()[0]
        mock_w3.eth.get_transaction_count.return_value = 3
        constructor = mock_w3.eth.contract.return_value.constructor.return_value
        constructor.build_transaction.return_value = {
            "from": sender,
            "nonce": 3,
            "gas": 1_500_000,
            "gasPrice": 10**9,
            "chainId": 31337,
            "data": PROJECT_BYTECODE,
            "value": 0,
        }
        mock_w3.eth.send_raw_transaction.return_value = TX_HASH

        tx_hash = gateway.deploy_contract(PROJECT_ABI, PROJECT_BYTECODE, sender)

        assert tx_hash == "0x" + "12" * 32
        mock_w3.eth.get_transaction_count.assert_called_once_with(sender, "pending")
        constructor.build_transaction.assert_called_once_with({"from": sender, "nonce": 3})
        constructor.transact.assert_not_called()
        raw = mock_w3.eth.send_raw_transaction.call_args[0][0]
        assert isinstance(raw, bytes) and len(raw) > 0

    def test_rejected_submission(self, gateway, mock_w3):
        constructor = mock_w3.eth.contract.return_value.constructor.return_value
        constructor.transact.side_effect = ValueError(
            {"code": -32000, "message": "insufficient funds for gas * price + value"}
        )

        with pytest.raises(GatewayResponseError) as exc_info:
            gateway.deploy_contract(PROJECT_ABI, PROJECT_BYTECODE, DEPLOYER)

        assert exc_info.value.error_code == "-32000"

    def test_constructor_argument_mismatch_rejected(self):
        # Real ABI encoding: the zero-argument constructor refuses [7]
        gateway = Web3Gateway(TEST_RPC_URL)

        with pytest.raises(GatewayResponseError, match="Contract creation failed"):
            gateway.deploy_contract(PROJECT_ABI, PROJECT_BYTECODE, DEPLOYER, [7])


def test_get_transaction_eip1559_fallback(gateway, mock_w3):
    mock_w3.eth.get_transaction.return_value = {"gas": 21000, "maxFeePerGas": 7}
    assert gateway.get_transaction("0xabc") == {"gas": 21000, "gasPrice": 7}


def test_wait_for_receipt_converts_bytes(gateway, mock_w3):
    mock_w3.eth.wait_for_transaction_receipt.return_value = {
        "transactionHash": TX_HASH,
        "blockNumber": 5,
        "status": 1,
        "gasUsed": 1_350_000,
        "from": DEPLOYER,
        "contractAddress": CONTRACT_ADDRESS,
        "logs": [],
    }

    receipt = gateway.wait_for_receipt("0xabc", 30)

    assert receipt.tx_hash == "0x" + "12" * 32
    assert receipt.contract_address == CONTRACT_ADDRESS
    assert receipt.gas_used == 1_350_000
    mock_w3.eth.wait_for_transaction_receipt.assert_called_once_with(
        "0xabc", timeout=30, poll_latency=0.5
    )


class TestCall:

    def test_view_call(self, gateway, mock_w3):
        functions = mock_w3.eth.contract.return_value.functions
        functions.owner.return_value.call.return_value = DEPLOYER

        assert gateway.call(CONTRACT_ADDRESS, PROJECT_ABI, "owner") == DEPLOYER

    def test_error_inside_call_is_not_a_missing_function(self, gateway, mock_w3):
        functions = mock_w3.eth.contract.return_value.functions
        functions.owner.return_value.call.side_effect = AttributeError("'NoneType' object has no attribute 'hex'")

        with pytest.raises(AttributeError, match="NoneType"):
            gateway.call(CONTRACT_ADDRESS, PROJECT_ABI, "owner")

    def test_missing_function(self, gateway, mock_w3):
        mock_w3.eth.contract.return_value.functions = object()

        with pytest.raises(GatewayResponseError, match="not found in ABI"):
            gateway.call(CONTRACT_ADDRESS, PROJECT_ABI, "owner")


class TestJsonRpcTransport:
    """Runs a real web3 HTTPProvider against a mocked endpoint"""

    def test_chain_id_over_http(self):
        def rpc(request, context):
            body = request.json()
            assert body["method"] == "eth_chainId"
            return {"jsonrpc": "2.0", "id": body["id"], "result": "0x7a69"}

        with requests_mock.Mocker() as m:
            m.post(TEST_RPC_URL, json=rpc)
            assert Web3Gateway(TEST_RPC_URL).chain_id() == 31337

    def test_unknown_transaction_over_http(self):
        def rpc(request, context):
            body = request.json()
            return {"jsonrpc": "2.0", "id": body["id"], "result": None}

        with requests_mock.Mocker() as m:
            m.post(TEST_RPC_URL, json=rpc)

            with pytest.raises(GatewayResponseError, match="eth_getTransactionByHash"):
                Web3Gateway(TEST_RPC_URL).get_transaction("0x" + "ab" * 32)

    def test_node_down(self):
        with requests_mock.Mocker() as m:
            m.post(TEST_RPC_URL, exc=requests.exceptions.ConnectionError)

            with pytest.raises(GatewayConnectionError):
                Web3Gateway(TEST_RPC_URL).block_number()
