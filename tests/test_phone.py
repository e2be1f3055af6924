import pytest

from courier_desk.services.phone import digits_only, is_valid_phone, normalize_phone


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("+8801712345678", "01712345678"),
        ("8801712345678", "01712345678"),
        ("+880 1712-345678", "01712345678"),
        ("01712345678", "01712345678"),
        ("(017) 1234 5678", "01712345678"),
    ],
)
def test_normalize_phone_national_format(raw: str, expected: str) -> None:
    assert normalize_phone(raw) == expected


def test_normalize_phone_is_idempotent_for_canonical_numbers() -> None:
    once = normalize_phone("+8801912345678")
    assert normalize_phone(once) == once


def test_normalize_phone_never_raises_on_garbage() -> None:
    assert normalize_phone("") == ""
    assert normalize_phone(None) == ""  # type: ignore[arg-type]
    assert normalize_phone("call me") == ""


def test_is_valid_phone() -> None:
    assert is_valid_phone("01712345678")
    assert is_valid_phone("01312345678")
    assert not is_valid_phone("02712345678")
    assert not is_valid_phone("01212345678")
    assert not is_valid_phone("0171234567")
    assert not is_valid_phone("017123456789")
    assert not is_valid_phone("01712345678\n")
    assert not is_valid_phone("+8801712345678")


def test_digits_only_drops_plus_sign() -> None:
    assert digits_only("+0171-234") == "0171234"
