from phonebook.config import Settings, load_settings


def test_defaults(monkeypatch):
    for var in ("PORT", "MONGODB_URI", "PHONEBOOK_PORT", "PHONEBOOK_MONGODB_URI"):
        monkeypatch.delenv(var, raising=False)
    s = load_settings()
    assert s.port == 3000
    assert s.page_size == 10
    assert s.search_limit == 10
    assert s.legacy_write_error_status is False


def test_bare_environment_variables(monkeypatch):
    monkeypatch.delenv("PHONEBOOK_PORT", raising=False)
    monkeypatch.delenv("PHONEBOOK_MONGODB_URI", raising=False)
    monkeypatch.setenv("PORT", "4100")
    monkeypatch.setenv("MONGODB_URI", "mongodb://db:27017/contacts")
    s = load_settings()
    assert s.port == 4100
    assert s.mongodb_uri == "mongodb://db:27017/contacts"


def test_prefixed_environment_variables(monkeypatch):
    monkeypatch.setenv("PHONEBOOK_PAGE_SIZE", "25")
    monkeypatch.setenv("PHONEBOOK_LEGACY_WRITE_ERROR_STATUS", "true")
    s = load_settings()
    assert s.page_size == 25
    assert s.legacy_write_error_status is True


def test_safe_summary_hides_connection_string():
    s = Settings(mongodb_uri="mongodb://user:secret@db:27017/phonebook")
    assert "secret" not in str(s.safe_summary())


def test_cors_origins_list():
    s = Settings(cors_origins="http://a.test, http://b.test")
    assert s.cors_origins_list == ["http://a.test", "http://b.test"]
