from chain.artifacts import (
    extract_bytecode,
    extract_contract_name,
    extract_deployed_bytecode,
    normalize_contract_data,
)


def test_foundry_shape():
    data = {"abi": [], "bytecode": {"object": "0x6080", "sourceMap": ""}, "deployedBytecode": {"object": "0x6081"}}
    assert extract_bytecode(data) == "0x6080"
    assert extract_deployed_bytecode(data) == "0x6081"


def test_plain_shape():
    data = {"abi": [], "bytecode": "0x6080"}
    assert extract_bytecode(data) == "0x6080"
    # deployed falls back to creation bytecode
    assert extract_deployed_bytecode(data) == "0x6080"


def test_bytecode_falls_back_to_deployed():
    assert extract_bytecode({"deployedBytecode": {"object": "0x6081"}}) == "0x6081"
    assert extract_bytecode({"deployedBytecode": "0x6082"}) == "0x6082"
    assert extract_bytecode({}) == ""


def test_contract_name_sources():
    assert extract_contract_name({"contractName": "A", "contractId": "C"}) == "A"
    assert extract_contract_name({"metadata": '{"contractName": "B"}'}) == "B"
    assert extract_contract_name({"metadata": {"contractName": "B2"}}) == "B2"
    assert extract_contract_name({"metadata": "not json", "contractId": "C"}) == "C"
    assert extract_contract_name({}) == "Unknown"


def test_normalize_keeps_other_fields():
    raw = {
        "abi": [{"type": "constructor", "inputs": []}],
        "bytecode": {"object": "0x6080"},
        "deployedBytecode": {"object": "0x6081"},
        "metadata": {"contractName": "DCA"},
        "compilerVersion": "0.8.24",
    }
    out = normalize_contract_data(raw)
    assert out["bytecode"] == "0x6080"
    assert out["deployedBytecode"] == "0x6081"
    assert out["contractName"] == "DCA"
    assert out["compilerVersion"] == "0.8.24"
    assert raw["bytecode"] == {"object": "0x6080"}
