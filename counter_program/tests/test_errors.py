from __future__ import annotations

import json

import pytest

from counter_program import errors as E
from counter_program.types.result import ProcessResult
from counter_program.types.status import ResultStatus


@pytest.mark.parametrize(
    "err,code,category",
    [
        (E.InvalidInstructionData(), "INVALID_INSTRUCTION_DATA", "malformed_input"),
        (E.NotEnoughAccountKeys(), "NOT_ENOUGH_ACCOUNT_KEYS", "malformed_input"),
        (E.InvalidAccountData(), "INVALID_ACCOUNT_DATA", "malformed_input"),
        (E.InvalidArgument(), "INVALID_ARGUMENT", "malformed_input"),
        (E.MissingRequiredSignature(), "MISSING_REQUIRED_SIGNATURE", "authorization"),
        (E.IncorrectProgramId(), "INCORRECT_PROGRAM_ID", "ownership"),
        (E.InvalidSeeds(), "INVALID_SEEDS", "address"),
        (E.MaxSeedLengthExceeded(), "MAX_SEED_LENGTH_EXCEEDED", "address"),
        (E.ArithmeticOverflow(), "ARITHMETIC_OVERFLOW", "overflow"),
        (E.InsufficientFunds(), "INSUFFICIENT_FUNDS", "allocation"),
        (E.AccountAlreadyInUse(), "ACCOUNT_ALREADY_IN_USE", "allocation"),
        (E.InvalidRealloc(), "INVALID_REALLOC", "host"),
        (E.UnsupportedProgramId(), "UNSUPPORTED_PROGRAM_ID", "host"),
        (E.UnbalancedInstruction(), "UNBALANCED_INSTRUCTION", "host"),
        (E.ReadonlyAccountModified(), "READONLY_ACCOUNT_MODIFIED", "host"),
    ],
)
def test_codes_and_categories(err, code, category):
    assert isinstance(err, E.ProgramError)
    assert err.code == code
    assert E.error_category(err) == category
    assert E.error_to_result_fields(err) == {
        "status": "failed",
        "category": category,
        "error": err.to_dict(),
    }


def test_structured_fields_are_merged_into_data():
    err = E.IncorrectProgramId(expected="0xaa", actual="0xbb", data={"slot": 1})
    assert err.data == {"slot": 1, "expected": "0xaa", "actual": "0xbb"}
    assert E.InsufficientFunds(needed=10, available=3).data == {"needed": 10, "available": 3}
    assert E.MissingRequiredSignature().data is None


def test_to_dict_is_json_safe():
    err = E.UnbalancedInstruction(before=5, after=6)
    blob = json.loads(json.dumps(err.to_dict()))
    assert blob["code"] == "UNBALANCED_INSTRUCTION"
    assert blob["data"] == {"before": 5, "after": 6}
    assert "data" not in E.InvalidSeeds().to_dict()


def test_str_includes_code_and_message():
    assert str(E.InvalidSeeds("nope")) == "INVALID_SEEDS: nope"


def test_process_result_serialization():
    ok = ProcessResult.ok(["Program log: hi"])
    assert ok.to_dict() == {"status": "success", "logs": ["Program log: hi"]}

    failed = ProcessResult.failed(E.ArithmeticOverflow(), ["x"])
    d = failed.to_dict()
    assert d["status"] == "failed"
    assert d["category"] == "overflow"
    assert d["error"]["code"] == "ARITHMETIC_OVERFLOW"
    assert d["logs"] == ["x"]


@pytest.mark.parametrize(
    "raw,expected",
    [("ok", ResultStatus.SUCCESS), ("SUCCESS", ResultStatus.SUCCESS), ("rejected", ResultStatus.FAILED)],
)
def test_status_parsing(raw, expected):
    assert ResultStatus.from_str(raw) is expected
    assert ResultStatus.FAILED.code == "FAILED"


def test_status_parsing_unknown():
    with pytest.raises(ValueError):
        ResultStatus.from_str("maybe")
    assert ResultStatus.from_str("maybe", default=ResultStatus.FAILED) is ResultStatus.FAILED
