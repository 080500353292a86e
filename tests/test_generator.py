import pytest

from vaultguard.errors import InvalidPolicy
from vaultguard.generator import (
    CHARSETS, SYMBOLS, CharClass, GeneratorOptions, build_alphabet, generate, length_hint,
)


def test_length_and_alphabet():
    for length in (8, 12, 16, 32):
        pw = generate(length=length)
        assert len(pw) == length
        assert set(pw) <= set("".join(CHARSETS.values()))


def test_no_symbols():
    pw = generate(length=32, classes={CharClass.LOWERCASE, CharClass.UPPERCASE, CharClass.NUMBERS})
    assert len(pw) == 32
    assert not any(c in SYMBOLS for c in pw)


def test_string_class_names_accepted():
    pw = generate(20, ["numbers"])
    assert pw.isdigit() and len(pw) == 20


def test_numbers_and_symbols_only():
    pw = generate(24, {CharClass.NUMBERS, CharClass.SYMBOLS})
    assert set(pw) <= set("0123456789" + SYMBOLS)


def test_alphabet_order_and_symbol_set():
    assert build_alphabet(CharClass) == (
        "abcdefghijklmnopqrstuvwxyz"
        "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
        "0123456789"
        "!@#$%^&*()_+-=[]{}|;:,.<>?"
    )


def test_empty_selection_raises():
    try:
        generate(length=12, classes=[])
        raised = False
    except InvalidPolicy:
        raised = True
    assert raised


def test_needs_lowercase_or_numbers():
    with pytest.raises(InvalidPolicy):
        generate(16, {CharClass.UPPERCASE, CharClass.SYMBOLS})


def test_unknown_class_raises():
    with pytest.raises(InvalidPolicy):
        generate(16, {"emoji"})


def test_invalid_policy_is_value_error():
    with pytest.raises(ValueError):
        generate(16, set())


def test_length_clamped():
    assert len(generate(length=0)) == 8
    assert len(generate(length=-5)) == 8
    assert len(generate(length=100)) == 32


def test_non_integer_length_rejected():
    with pytest.raises(InvalidPolicy):
        generate(length="16")


def test_length_hint():
    assert length_hint(16) == "Strong"
    assert length_hint(12) == "Strong"
    assert length_hint(8) == "Good"
    assert length_hint(7) == "Weak"


def test_options_backstop_lowercase_and_numbers():
    opts = GeneratorOptions()
    opts.set_class(CharClass.NUMBERS, False)
    assert opts.is_enabled(CharClass.LOWERCASE)
    opts.set_class(CharClass.LOWERCASE, False)
    # numbers switched back on so the alphabet never loses both
    assert opts.is_enabled(CharClass.NUMBERS)
    assert not opts.is_enabled(CharClass.LOWERCASE)
    assert opts.generate().isascii()


def test_options_other_classes_have_no_backstop():
    opts = GeneratorOptions(classes={CharClass.LOWERCASE, CharClass.UPPERCASE})
    opts.set_class(CharClass.UPPERCASE, False)
    assert opts.classes() == [CharClass.LOWERCASE]
    pw = opts.generate()
    assert pw.islower()


def test_options_clamp_length_on_assignment():
    opts = GeneratorOptions()
    opts.length = 64
    assert opts.length == 32
    assert len(opts.generate()) == 32
