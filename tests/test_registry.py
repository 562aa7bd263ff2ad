import pytest

from src.config.registry import ConfigRegistry, ConfigType, INITIALIZED_KEY


def test_register_seeds_value_and_source(registry: ConfigRegistry):
    assert registry.register("x.y", "10", "int", "desc", "^[0-9]+$") is True

    assert registry.get("x.y") == "10"
    assert registry.source("x.y") == "default"
    assert registry.default("x.y") == "10"
    assert registry.is_locked("x.y") is False

    entry = registry.entry("x.y")
    assert entry.type is ConfigType.INT
    assert entry.description == "desc"
    assert entry.validation == "^[0-9]+$"


@pytest.mark.parametrize("key,type_", [("", "string"), ("a.b", "float"), ("a.b", "")])
def test_register_rejects_bad_key_or_type(registry: ConfigRegistry, key, type_):
    assert registry.register(key, "1", type_) is False
    assert registry.count() == 0


def test_register_does_not_validate_default(registry: ConfigRegistry):
    assert registry.register("x.n", "abc", "int", "not a number")
    assert registry.get("x.n") == "abc"


def test_reregister_keeps_existing_value(registry: ConfigRegistry):
    registry.register("x.y", "10", "int", "first")
    registry.set("x.y", "20")

    assert registry.register("x.y", "30", "int", "second")
    assert registry.get("x.y") == "20"
    assert registry.source("x.y") == "runtime"
    assert registry.default("x.y") == "30"
    assert registry.entry("x.y").description == "second"


def test_reregister_fills_empty_value(registry: ConfigRegistry):
    registry.register("x.p", "", "path")
    registry.register("x.p", "/opt", "path")
    assert registry.get("x.p") == "/opt"


def test_end_to_end_example(registry: ConfigRegistry):
    registry.register("x.y", "10", "int", "desc", "^[0-9]+$")
    assert registry.get("x.y") == "10"

    assert registry.set("x.y", "20") is True
    assert registry.get("x.y") == "20"
    assert registry.source("x.y") == "runtime"

    assert registry.set("x.y", "abc") is False
    assert registry.get("x.y") == "20"


def test_int_validation(registry: ConfigRegistry):
    registry.register("n.count", "1", "int")

    assert registry.set("n.count", "abc") is False
    assert registry.get("n.count") == "1"
    assert registry.set("n.count", "123") is True
    assert registry.set("n.count", "-5") is True
    assert registry.get("n.count") == "-5"
    assert registry.set("n.count", "1.5") is False


@pytest.mark.parametrize("value", ["12\n", "\n12", "1\n2", "12\r"])
def test_int_validation_rejects_embedded_newlines(registry: ConfigRegistry, value):
    registry.register("n.count", "1", "int")
    assert registry.set("n.count", value) is False
    assert registry.get("n.count") == "1"


def test_pattern_rejects_trailing_newline(registry: ConfigRegistry):
    registry.register("net.timeout", "30", "int", "", "^[0-9]+$")
    registry.register("tmp.mode", "0700", "string", "", "^[0-7]{3,4}$")

    assert registry.set("net.timeout", "12\n") is False
    assert registry.get("net.timeout") == "30"
    assert registry.set("tmp.mode", "0700\n") is False
    assert registry.get("tmp.mode") == "0700"
    assert registry.set("tmp.mode", "0755") is True


def test_bool_validation_is_case_insensitive(registry: ConfigRegistry):
    registry.register("b.flag", "true", "bool")

    for value in ["TRUE", "no", "Yes", "0", "1", "on", "OFF", "false"]:
        assert registry.validate("b.flag", value), value
    for value in ["maybe", "", "2", "enabled"]:
        assert not registry.validate("b.flag", value), value


def test_path_and_string_have_no_intrinsic_check(registry: ConfigRegistry):
    registry.register("p.dir", "/tmp", "path")
    registry.register("s.name", "x", "string")
    registry.register("l.items", "a,b", "list")

    assert registry.validate("p.dir", "")
    assert registry.validate("p.dir", "does/not/exist")
    assert registry.validate("s.name", "")
    assert registry.validate("l.items", "anything at all")


def test_empty_path_skips_pattern(registry: ConfigRegistry):
    registry.register("p.dir", "/tmp", "path", "", "^/")
    assert registry.validate("p.dir", "")
    assert registry.validate("p.dir", "/var")
    assert not registry.validate("p.dir", "relative")


def test_pattern_is_a_search_not_a_full_match(registry: ConfigRegistry):
    registry.register("log.level", "info", "string", "", "debug|info|warn|error|none")

    assert registry.set("log.level", "debug")
    assert registry.set("log.level", "verbose") is False
    # unanchored alternation matches inside a longer value
    assert registry.set("log.level", "xinfox")


def test_type_check_runs_before_pattern(registry: ConfigRegistry):
    registry.register("n.port", "80", "int", "", "^[0-9]{2,5}$")
    assert not registry.validate("n.port", "-80")
    assert not registry.validate("n.port", "8")
    assert registry.validate("n.port", "8080")


def test_invalid_pattern_fails_validation(registry: ConfigRegistry):
    registry.register("bad.rule", "x", "string", "", "([")
    assert registry.validate("bad.rule", "x") is False


def test_unregistered_key_accepts_anything(registry: ConfigRegistry, log_messages):
    assert registry.validate("free.form", "whatever")
    assert registry.set("free.form", "whatever") is True
    assert registry.get("free.form") == "whatever"
    assert registry.source("free.form") == "runtime"
    assert any(m.startswith("WARNING|") and "free.form" in m for m in log_messages)


def test_set_requires_key(registry: ConfigRegistry):
    assert registry.set("", "v") is False
    assert registry.count() == 0


def test_get_fallbacks(registry: ConfigRegistry):
    assert registry.get("missing") == ""
    assert registry.get("missing", "fallback") == "fallback"
    assert registry.get("", "fallback") == "fallback"

    registry.register("e.empty", "", "string")
    assert registry.get("e.empty", "fallback") == "fallback"


@pytest.mark.parametrize("value,expected", [
    ("true", True), ("TRUE", True), ("yes", True), ("1", True), ("On", True),
    ("false", False), ("no", False), ("0", False), ("off", False),
])
def test_get_bool(registry: ConfigRegistry, value, expected):
    registry.register("b.flag", "false", "bool")
    registry.set("b.flag", value)
    assert registry.get_bool("b.flag") is expected


def test_get_bool_for_unset_and_unregistered_values(registry: ConfigRegistry):
    assert registry.get_bool("b.missing") is False
    registry.set("free.flag", "enabled")
    assert registry.get_bool("free.flag") is False


def test_get_int(registry: ConfigRegistry):
    registry.register("n.timeout", "30", "int")
    assert registry.get_int("n.timeout") == 30
    assert registry.get_int("n.missing", 7) == 7
    assert registry.get_int("n.missing") == 0


def test_get_int_returns_default_verbatim(registry: ConfigRegistry):
    registry.register("n.offset", "0", "int")
    registry.set("n.offset", "-3")
    # negative values are valid ints but not unsigned digits
    assert registry.get_int("n.offset", "oops") == "oops"

    registry.set("free.text", "abc")
    assert registry.get_int("free.text", "") == ""

    # unregistered keys accept anything, but only bare digits read as int
    registry.set("free.num", "12\n")
    assert registry.get_int("free.num", 5) == 5


def test_lock_blocks_set_and_reset(registry: ConfigRegistry):
    registry.register("x.y", "10", "int")
    registry.set("x.y", "20")

    assert registry.lock("x.y") is True
    assert registry.set("x.y", "30") is False
    assert registry.reset("x.y") is False
    assert registry.get("x.y") == "20"
    assert registry.source("x.y") == "runtime"

    assert registry.unlock("x.y") is True
    assert registry.set("x.y", "30") is True
    assert registry.get("x.y") == "30"


def test_lock_unlock_without_existing_key(registry: ConfigRegistry):
    assert registry.unlock("never.locked") is True
    assert registry.lock("not.there") is True
    assert registry.set("not.there", "x") is False
    assert registry.lock("") is False
    assert registry.unlock("") is False


def test_reset_restores_default(registry: ConfigRegistry):
    registry.register("x.y", "10", "int")
    registry.set("x.y", "99")

    assert registry.reset("x.y") is True
    assert registry.get("x.y") == "10"
    assert registry.source("x.y") == "default"


def test_reset_fails_without_default(registry: ConfigRegistry):
    registry.register("x.empty", "", "string")
    registry.set("x.empty", "something")
    assert registry.reset("x.empty") is False
    assert registry.get("x.empty") == "something"

    assert registry.reset("never.registered") is False
    assert registry.reset("") is False


def test_has(registry: ConfigRegistry):
    registry.register("x.y", "10", "int")
    registry.register("x.empty", "", "string")
    assert registry.has("x.y")
    assert not registry.has("x.empty")
    assert not registry.has("x.none")


def test_count_and_keys_exclude_internal(registry: ConfigRegistry):
    registry.register("b.two", "2", "int")
    registry.register("a.one", "1", "int")
    registry.set("_hidden", "x")
    registry.set("c.three", "3")

    assert registry.count() == 3
    assert registry.keys() == ["a.one", "b.two", "c.three"]
    assert registry.keys(r"^[ab]\.") == ["a.one", "b.two"]
    assert registry.keys("three") == ["c.three"]


def test_init_registers_catalog_and_locks_marker(initialized: ConfigRegistry):
    assert initialized.initialized
    assert initialized.count() >= 30
    assert initialized.get("log.level") == "info"
    assert initialized.get("net.timeout") == "30"
    assert initialized.get_bool("tmp.cleanup") is True
    assert initialized.get("file.checksum_algo") == "sha256"
    assert initialized.get_bool("security.strict_mode") is True

    assert initialized.is_locked(INITIALIZED_KEY)
    assert initialized.set(INITIALIZED_KEY, "false") is False
    assert INITIALIZED_KEY not in initialized.keys()


def test_init_is_idempotent(initialized: ConfigRegistry):
    initialized.set("net.timeout", "45")
    before = initialized.count()

    assert initialized.init() is True
    assert initialized.get("net.timeout") == "45"
    assert initialized.count() == before


def test_catalog_patterns_are_enforced(initialized: ConfigRegistry):
    assert initialized.set("tmp.mode", "0755")
    assert not initialized.set("tmp.mode", "0999")
    assert not initialized.set("file.checksum_algo", "crc32")
    assert initialized.set("tui.dialog_backend", "whiptail")
    assert not initialized.set("net.retries", "three")
    assert initialized.set("log.color", "auto")


def test_independent_registries():
    first = ConfigRegistry(search_paths=[], environ={})
    second = ConfigRegistry(search_paths=[], environ={})
    first.register("x.y", "1", "int")

    assert second.count() == 0
    assert second.get("x.y") == ""


def test_str(registry: ConfigRegistry):
    registry.register("x.y", "1", "int")
    registry.set("free.key", "v")
    registry.lock("x.y")
    assert str(registry) == "ConfigRegistry(keys=2, registered=1, locked=1, initialized=False)"
    assert repr(registry) == str(registry)


def test_get_registry_is_shared_and_initialized(home, monkeypatch):
    import src.config as config

    monkeypatch.setattr(config, "_registry", None)
    monkeypatch.delenv("UTIL_CONFIG_NET_TIMEOUT", raising=False)

    first = config.get_registry()
    assert first is config.get_registry()
    assert first.initialized
    assert first.get("net.timeout") == "30"
