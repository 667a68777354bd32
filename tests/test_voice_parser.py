from datetime import date

from clearstock.lib.voice_parser import parse_voice_command

TODAY = date(2026, 3, 1)


def test_full_command():
    result = parse_voice_command("Adicionar 5 kg de leite com validade em 3 dias", today=TODAY)

    assert result.quantity == "5"
    assert result.unit == "kg"
    assert result.name == "Leite"
    assert result.expiry_days == 3
    assert result.expiry_date == date(2026, 3, 4)


def test_decimal_comma_and_liquid_units():
    assert parse_voice_command("1,5 litros de natas", today=TODAY).quantity == "1.5"
    assert parse_voice_command("1,5 litros de natas", today=TODAY).unit == "L"
    assert parse_voice_command("500 ml de natas", today=TODAY).unit == "ml"


def test_bare_number_defaults_to_units():
    result = parse_voice_command("12 ovos", today=TODAY)
    assert (result.quantity, result.unit) == ("12", "un")


def test_relative_expiry_cues():
    assert parse_voice_command("3 litros de azeite expira hoje", today=TODAY).expiry_days == 0
    assert parse_voice_command("pão amanhã", today=TODAY).expiry_days == 1
    assert parse_voice_command("queijo daqui a 10 dias", today=TODAY).expiry_days == 10
    assert parse_voice_command("fiambre +4 dias", today=TODAY).expiry_days == 4
    assert parse_voice_command("iogurte 7 dias de validade", today=TODAY).expiry_days == 7


def test_expiry_out_of_range_is_ignored():
    result = parse_voice_command("arroz em 400 dias", today=TODAY)
    assert result.expiry_days is None
    assert result.expiry_date is None


def test_homemade_and_category_hints():
    result = parse_voice_command("2 kg de sopa feita congelado feito em casa", today=TODAY)
    assert result.homemade is True
    assert result.category == "Congelados"


def test_empty_text():
    result = parse_voice_command("", today=TODAY)
    assert result.quantity is None
    assert result.name == ""
    assert result.homemade is False
