import pytest

import contract_store as store


def test_record_keys():
    key = store.new_record_id()
    assert len(key) == 24
    assert store.is_record_key(key)
    assert not store.is_record_key("Token")
    assert not store.is_record_key("")
    assert not store.is_record_key("z" * 24)


def test_insert_and_find_by_key(db, token_contract):
    record_id = store.insert_contract(db, token_contract)
    record = store.find_contract(db, record_id)
    assert record["_id"] == record_id
    assert record["abi"] == token_contract["abi"]
    assert record["settings"]["optimizer"]["runs"] == 500
    assert record["uploadedAt"] and record["createdAt"]


def test_find_by_contract_name_or_name(db, token_contract):
    store.insert_contract(db, dict(token_contract, name="my-token"))
    assert store.find_contract(db, "Token")["contractName"] == "Token"
    assert store.find_contract(db, "my-token")["contractName"] == "Token"


def test_well_formed_missing_key_does_not_fall_back(db, token_contract):
    store.insert_contract(db, token_contract)
    assert store.find_contract(db, "0" * 24) is None


def test_unknown_name(db):
    assert store.find_contract(db, "Nope") is None


def test_list(db, token_contract):
    store.insert_contract(db, token_contract)
    store.insert_contract(db, dict(token_contract, contractName="Other"))
    names = [c["contractName"] for c in store.list_contracts(db)]
    assert sorted(names) == ["Other", "Token"]


def test_delete_by_key_and_by_name(db, token_contract):
    first = store.insert_contract(db, token_contract)
    store.insert_contract(db, dict(token_contract, contractName="Other"))

    assert store.delete_contract(db, first)
    assert store.find_contract(db, first) is None
    assert store.delete_contract(db, "Other")
    assert store.list_contracts(db) == []
    assert not store.delete_contract(db, "Other")
    assert not store.delete_contract(db, first)


def test_abi_required(db):
    with pytest.raises(ValueError):
        store.insert_contract(db, {"contractName": "X"})


class TestTransactions:
    DOC = {
        "name": "approve-and-deposit",
        "functions": [
            {
                "name": "approve",
                "signature": "approve(address,uint256)",
                "contract": "Token",
                "contract_address": "0x" + "11" * 20,
                "params": [
                    {"name": "spender", "type": "address", "value": "0x" + "22" * 20},
                    {"name": "amount", "type": "uint256", "value": "10"},
                ],
            }
        ],
    }

    def test_roundtrip_and_delete(self, db):
        tx_id = store.insert_transaction(db, self.DOC)
        assert store.find_transaction(db, tx_id)["functions"] == self.DOC["functions"]
        assert store.find_transaction(db, "approve-and-deposit")["_id"] == tx_id
        assert store.delete_transaction(db, "approve-and-deposit")
        assert store.find_transaction(db, tx_id) is None

    def test_functions_required(self, db):
        with pytest.raises(ValueError):
            store.insert_transaction(db, {"functions": []})

    def test_separate_from_contracts(self, db, token_contract):
        contract_id = store.insert_contract(db, token_contract)
        assert store.find_transaction(db, contract_id) is None
