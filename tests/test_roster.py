"""Разбор и нормализация строк CSV со списком ящиков."""
from zimbra_cleanup.services.roster import normalize, normalize_created, normalize_last_login, read_roster


def test_normalize_full_row():
    rec = normalize(
        "  Alice@Example.com ;20161007172147.846Z; Closed ; Never_Disable here ; 2024-07-30 10:54:30.123Z ;Alice A\n"
    )
    assert rec.email == "Alice@Example.com"
    assert rec.created_at == "20161007"
    assert rec.status == "closed"
    assert rec.notes == "never_disablehere"
    assert rec.last_login == "2024-07-30 10:54:30"
    assert rec.display_name == "Alice A"


def test_normalize_missing_trailing_fields():
    rec = normalize("bob@example.com;20200101000000Z")
    assert rec.email == "bob@example.com"
    assert rec.created_at == "20200101"
    assert rec.status == ""
    assert rec.notes == ""
    assert rec.last_login == ""
    assert rec.display_name == ""


def test_normalize_created_variants():
    assert normalize_created("20161007172147Z") == "20161007"
    assert normalize_created("20161007172147.846Z") == "20161007"
    assert normalize_created("2016-10-07") == "2016-10-07"
    assert normalize_created("") == ""


def test_normalize_last_login_variants():
    assert normalize_last_login(" 2024-07-30 10:54:30 ") == "2024-07-30 10:54:30"
    assert normalize_last_login("20240730105430.398Z") == "20240730105430"
    assert normalize_last_login("20240730105430Z") == "20240730105430"
    assert normalize_last_login("   ") == ""


def test_read_roster_skips_header_and_blank_lines(tmp_path):
    path = tmp_path / "accounts.csv"
    path.write_text(
        "Email;Дата создания;Статус;Notes;Последний вход;DisplayName\r\n"
        "a@example.com;20200101000000Z;active;;;A\r\n"
        "\r\n"
        "b@example.com;20200101000000Z;closed;;2021-01-01 00:00:00;B\r\n",
        encoding="utf-8",
    )
    records = list(read_roster(path))
    assert [r.email for r in records] == ["a@example.com", "b@example.com"]
    assert records[0].display_name == "A"
    assert records[1].last_login == "2021-01-01 00:00:00"
