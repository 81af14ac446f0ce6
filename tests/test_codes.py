import pytest

from otp_service.services.codes import CodeGenerator


@pytest.mark.parametrize("length", [4, 6, 8])
def test_generated_codes_have_configured_length_and_only_digits(length):
    generator = CodeGenerator(length)
    for _ in range(200):
        code = generator.generate()
        assert len(code) == length
        assert code.isdigit()


def test_default_length_is_six():
    assert CodeGenerator().length == 6
    assert len(CodeGenerator().generate()) == 6


def test_leading_zeros_are_preserved(monkeypatch):
    monkeypatch.setattr("otp_service.services.codes.secrets.randbelow", lambda _: 0)
    assert CodeGenerator(6).generate() == "000000"


def test_non_positive_length_is_rejected():
    with pytest.raises(ValueError):
        CodeGenerator(0)
