import threading
import unittest

from airdrop_program.accounts import AccountInfo
from airdrop_program.cpi import RecordingInvoker
from airdrop_program.errors import InvalidAccountData, ReadonlyDataModified, SignerRequired, WriteableRequired
from airdrop_program.instruction import InitializeAirdrop, InitializeAirdropUser, MintOne
from airdrop_program.runtime import execute
from airdrop_program.state import AirdropConfig
from airdrop_program.sysvars import Rent

from builders import (
    INIT_AIRDROP_ORDER,
    INIT_USER_ORDER,
    MINT_ONE_ORDER,
    PROGRAM_ID,
    init_airdrop_accounts,
    init_args,
    init_user_accounts,
    initialized_airdrop,
    mint_one_accounts,
    ordered,
    rent_account,
    snapshot,
)


class ExecuteTests(unittest.TestCase):
    def test_valid_initialization_commits(self) -> None:
        accounts = init_airdrop_accounts()
        data = InitializeAirdrop(init_args(amount=1_000_000, price=50_000, symbol="TOKEN", prefix=bytes(32))).pack()

        result = execute(PROGRAM_ID, ordered(accounts, INIT_AIRDROP_ORDER), data)

        self.assertTrue(result.ok, result.logs)
        config = AirdropConfig.unpack_from_account(accounts["config"])
        self.assertTrue(config.is_initialized)
        self.assertEqual(config.airdrop_amount, 1_000_000)
        self.assertEqual(config.price, 50_000)
        self.assertIn("Program log: Assert airdrop config writeable", result.logs)
        self.assertEqual(result.logs[-1], f"Program {PROGRAM_ID} success")

    def test_unwriteable_config_rejected_and_unchanged(self) -> None:
        accounts = init_airdrop_accounts()
        accounts["config"].is_writable = False
        before = snapshot(ordered(accounts, INIT_AIRDROP_ORDER))

        result = execute(PROGRAM_ID, ordered(accounts, INIT_AIRDROP_ORDER), InitializeAirdrop(init_args()).pack())

        self.assertIsInstance(result.error, WriteableRequired)
        self.assertEqual(snapshot(ordered(accounts, INIT_AIRDROP_ORDER)), before)
        self.assertTrue(result.logs[-1].endswith(str(result.error)))

    def test_unsigned_fee_payer_fails_every_instruction(self) -> None:
        airdrop = init_airdrop_accounts()
        airdrop["fee_payer"].is_signer = False

        live = initialized_airdrop()
        users = init_user_accounts(live)
        users["fee_payer"].is_signer = False

        registered = init_user_accounts(live)
        self.assertTrue(
            execute(PROGRAM_ID, ordered(registered, INIT_USER_ORDER), InitializeAirdropUser().pack()).ok
        )
        mint = mint_one_accounts(live, registered)
        mint["payer"].is_signer = False

        cases = [
            (ordered(airdrop, INIT_AIRDROP_ORDER), InitializeAirdrop(init_args()).pack()),
            (ordered(users, INIT_USER_ORDER), InitializeAirdropUser().pack()),
            (ordered(mint, MINT_ONE_ORDER), MintOne().pack()),
        ]
        for accounts, data in cases:
            with self.subTest(tag=data[0]):
                before = snapshot(accounts)
                result = execute(PROGRAM_ID, accounts, data)
                self.assertIsInstance(result.error, SignerRequired)
                self.assertEqual(snapshot(accounts), before)
                self.assertEqual(result.cpi_calls, [])

    def test_readonly_fee_payer_cannot_be_debited(self) -> None:
        accounts = init_airdrop_accounts()
        accounts["fee_payer"].is_writable = False
        before = snapshot(ordered(accounts, INIT_AIRDROP_ORDER))

        result = execute(PROGRAM_ID, ordered(accounts, INIT_AIRDROP_ORDER), InitializeAirdrop(init_args()).pack())

        self.assertIsInstance(result.error, ReadonlyDataModified)
        self.assertEqual(snapshot(ordered(accounts, INIT_AIRDROP_ORDER)), before)

    def test_duplicate_account_shares_state(self) -> None:
        accounts = init_airdrop_accounts()
        accounts["authority"] = accounts["fee_payer"]
        payer_before = accounts["fee_payer"].lamports

        result = execute(PROGRAM_ID, ordered(accounts, INIT_AIRDROP_ORDER), InitializeAirdrop(init_args()).pack())

        self.assertTrue(result.ok, result.logs)
        self.assertLess(accounts["fee_payer"].lamports, payer_before)
        config = AirdropConfig.unpack_from_account(accounts["config"])
        self.assertEqual(config.authority, accounts["fee_payer"].key)

    def test_duplicate_key_privileges_are_merged(self) -> None:
        accounts = init_airdrop_accounts()
        payer = accounts["fee_payer"]
        accounts["authority"] = AccountInfo(key=payer.key, lamports=payer.lamports)
        payer_before = payer.lamports

        result = execute(PROGRAM_ID, ordered(accounts, INIT_AIRDROP_ORDER), InitializeAirdrop(init_args()).pack())

        self.assertTrue(result.ok, result.logs)
        self.assertLess(payer.lamports, payer_before)
        self.assertEqual(accounts["authority"].lamports, payer.lamports)

    def test_duplicate_key_without_write_privilege_stays_read_only(self) -> None:
        accounts = init_airdrop_accounts()
        payer = accounts["fee_payer"]
        payer.is_writable = False
        accounts["authority"] = AccountInfo(key=payer.key, lamports=payer.lamports)
        before = snapshot(ordered(accounts, INIT_AIRDROP_ORDER))

        result = execute(PROGRAM_ID, ordered(accounts, INIT_AIRDROP_ORDER), InitializeAirdrop(init_args()).pack())

        self.assertIsInstance(result.error, ReadonlyDataModified)
        self.assertEqual(snapshot(ordered(accounts, INIT_AIRDROP_ORDER)), before)

    def test_malformed_rent_sysvar_is_reported(self) -> None:
        accounts = init_airdrop_accounts()
        accounts["rent"] = rent_account(Rent(exemption_threshold=float("nan")))
        before = snapshot(ordered(accounts, INIT_AIRDROP_ORDER))

        result = execute(PROGRAM_ID, ordered(accounts, INIT_AIRDROP_ORDER), InitializeAirdrop(init_args()).pack())

        self.assertIsInstance(result.error, InvalidAccountData)
        self.assertEqual(snapshot(ordered(accounts, INIT_AIRDROP_ORDER)), before)

    def test_concurrent_executions_keep_their_own_logs(self) -> None:
        results = [None] * 4

        def run(slot: int) -> None:
            accounts = init_airdrop_accounts()
            data = InitializeAirdrop(init_args()).pack()
            results[slot] = execute(PROGRAM_ID, ordered(accounts, INIT_AIRDROP_ORDER), data)

        threads = [threading.Thread(target=run, args=(slot,)) for slot in range(len(results))]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        for result in results:
            self.assertTrue(result.ok, result.logs)
            self.assertEqual(result.logs.count("Program log: Assert airdrop config writeable"), 1)
            self.assertEqual(result.logs[-1], f"Program {PROGRAM_ID} success")

    def test_mint_one_returns_cpi_calls(self) -> None:
        live = initialized_airdrop()
        users = init_user_accounts(live)
        execute(PROGRAM_ID, ordered(users, INIT_USER_ORDER), InitializeAirdropUser().pack())
        accounts = mint_one_accounts(live, users)
        invoker = RecordingInvoker()

        result = execute(PROGRAM_ID, ordered(accounts, MINT_ONE_ORDER), MintOne().pack(), invoker)

        self.assertTrue(result.ok, result.logs)
        self.assertEqual(len(result.cpi_calls), 3)
        self.assertEqual(result.cpi_calls, invoker.calls)


if __name__ == "__main__":
    unittest.main()
