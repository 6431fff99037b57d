from __future__ import annotations

import base64
from typing import Any, Dict, List, Sequence

import httpx
from solders.pubkey import Pubkey

from .accounts import AccountInfo

# getMultipleAccounts accepts at most 100 keys per request
MAX_KEYS_PER_REQUEST = 100


class RpcClient:
    def __init__(self, rpc_url: str, timeout_s: float = 60.0) -> None:
        self.rpc_url = rpc_url
        self.client = httpx.Client(timeout=timeout_s)

    def close(self) -> None:
        self.client.close()

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        resp = self.client.post(self.rpc_url, json=payload)
        resp.raise_for_status()
        data = resp.json()
        if "error" in data:
            raise RuntimeError(f"RPC error: {data['error']}")
        return data

    def get_minimum_balance_for_rent_exemption(self, data_len: int) -> int:
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "getMinimumBalanceForRentExemption",
            "params": [data_len],
        }
        data = self._post(payload)
        return int(data["result"])

    def get_multiple_accounts(
        self, keys: Sequence[Pubkey], commitment: str = "confirmed"
    ) -> List[AccountInfo]:
        """
        Returns one handle per key, in order. Keys with no account on chain
        come back as empty system-owned handles. Signer/writable flags are
        left False; the caller decides them per instruction.
        """
        out: List[AccountInfo] = []
        for start in range(0, len(keys), MAX_KEYS_PER_REQUEST):
            batch = keys[start : start + MAX_KEYS_PER_REQUEST]
            payload = {
                "jsonrpc": "2.0",
                "id": 1,
                "method": "getMultipleAccounts",
                "params": [
                    [str(k) for k in batch],
                    {"encoding": "base64", "commitment": commitment},
                ],
            }
            data = self._post(payload)
            values = data.get("result", {}).get("value")
            if not isinstance(values, list) or len(values) != len(batch):
                raise RuntimeError("getMultipleAccounts returned a malformed result")
            for key, item in zip(batch, values):
                out.append(account_from_rpc(key, item))
        return out


def account_from_rpc(key: Pubkey, item: Dict[str, Any] | None) -> AccountInfo:
    if item is None:
        return AccountInfo(key=key)
    # item['data'] is [base64_str, "base64"]
    raw = base64.b64decode(item["data"][0])
    return AccountInfo(
        key=key,
        lamports=int(item["lamports"]),
        data=bytearray(raw),
        owner=Pubkey.from_string(item["owner"]),
        executable=bool(item.get("executable", False)),
    )
