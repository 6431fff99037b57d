import base64
import unittest
from unittest.mock import Mock, patch

from solders.pubkey import Pubkey

from airdrop_program.project_constants import SYSTEM_PROGRAM_ID
from airdrop_program.rpc import RpcClient


def _response(payload: dict) -> Mock:
    resp = Mock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


class RpcClientTests(unittest.TestCase):
    def setUp(self) -> None:
        patcher = patch("airdrop_program.rpc.httpx.Client")
        self.client_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.http = self.client_cls.return_value
        self.rpc = RpcClient("http://localhost:8899", timeout_s=5.0)

    def test_get_multiple_accounts_decodes_present_and_missing(self) -> None:
        owner = Pubkey.new_unique()
        present, missing = Pubkey.new_unique(), Pubkey.new_unique()
        self.http.post.return_value = _response(
            {
                "jsonrpc": "2.0",
                "id": 1,
                "result": {
                    "context": {"slot": 1},
                    "value": [
                        {
                            "data": [base64.b64encode(b"\x01\x02\x03").decode(), "base64"],
                            "executable": False,
                            "lamports": 1234,
                            "owner": str(owner),
                            "rentEpoch": 0,
                        },
                        None,
                    ],
                },
            }
        )

        accounts = self.rpc.get_multiple_accounts([present, missing])

        self.client_cls.assert_called_once_with(timeout=5.0)
        sent = self.http.post.call_args.kwargs["json"]
        self.assertEqual(sent["method"], "getMultipleAccounts")
        self.assertEqual(sent["params"][0], [str(present), str(missing)])
        self.assertEqual(sent["params"][1]["encoding"], "base64")

        self.assertEqual(accounts[0].key, present)
        self.assertEqual(accounts[0].lamports, 1234)
        self.assertEqual(bytes(accounts[0].data), b"\x01\x02\x03")
        self.assertEqual(accounts[0].owner, owner)
        self.assertFalse(accounts[0].is_signer)
        self.assertEqual(accounts[1].key, missing)
        self.assertEqual(accounts[1].lamports, 0)
        self.assertEqual(accounts[1].owner, SYSTEM_PROGRAM_ID)

    def test_rpc_error_raises(self) -> None:
        self.http.post.return_value = _response({"jsonrpc": "2.0", "id": 1, "error": {"code": -32602}})
        with self.assertRaisesRegex(RuntimeError, "RPC error"):
            self.rpc.get_minimum_balance_for_rent_exemption(10)

    def test_malformed_result_raises(self) -> None:
        self.http.post.return_value = _response({"jsonrpc": "2.0", "id": 1, "result": {"value": []}})
        with self.assertRaisesRegex(RuntimeError, "malformed"):
            self.rpc.get_multiple_accounts([Pubkey.new_unique()])

    def test_minimum_balance(self) -> None:
        self.http.post.return_value = _response({"jsonrpc": "2.0", "id": 1, "result": 890880})
        self.assertEqual(self.rpc.get_minimum_balance_for_rent_exemption(0), 890880)

    def test_close(self) -> None:
        self.rpc.close()
        self.http.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
