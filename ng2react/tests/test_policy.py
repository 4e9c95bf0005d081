"""Tests for the pipe and injection policy registry."""

import pytest

from ng2react.core.components import Import
from ng2react.core.errors import ConfigurationError
from ng2react.core.policy import InjectionHandler, PipeHandler, PolicyRegistry, load_policy


class TestDefaults:
    def test_default_pipes(self):
        policy = load_policy()
        assert set(policy.pipe_names) >= {"uppercase", "keyvalue", "text"}
        handler = policy.pipe_handler("uppercase")
        assert handler.transform is None
        assert handler.imports == [Import(names=["uppercase"], file="pipes.ts")]

    def test_templated_pipe(self):
        handler = load_policy().pipe_handler("text")
        assert handler.transform("label", "text") == "<TextComponent name={label} />"

    def test_default_injections(self):
        policy = load_policy()
        handler = policy.injection_handler("ElementRef")
        assert handler.transform("el", "ElementRef", None) == "const el = React.createRef();"
        assert policy.injection_handler("ChangeDetectorRef") is not None

    def test_fallbacks(self):
        policy = load_policy()
        assert policy.pipe_handler("date") is None
        assert policy.default_pipe_handler.transform("x", "date") == "date(x)"
        assert policy.injection_handler("HeroService") is None
        assert (
            policy.default_injection_handler.transform("heroes", "HeroService", None)
            == "const heroes = React.useContext(HeroService);"
        )


class TestOverrides:
    def test_policy_file_overrides_defaults(self, tmp_path):
        policy_file = tmp_path / "policy.yaml"
        policy_file.write_text(
            "pipes:\n"
            "  uppercase:\n"
            "    template: \"$inner.toUpperCase()\"\n"
            "  date:\n"
            "    template: \"formatDate($inner)\"\n"
            "    imports:\n"
            "      - names: formatDate\n"
            "        file: utils/date.ts\n"
            "injections:\n"
            "  Router:\n"
            "    template: \"const $name = useRouter(); // $type\"\n"
            "    imports:\n"
            "      - names: [useRouter]\n"
            "        file: router.ts\n",
            encoding="utf-8",
        )
        policy = load_policy(str(policy_file))

        uppercase = policy.pipe_handler("uppercase")
        assert uppercase.transform("name", "uppercase") == "name.toUpperCase()"
        assert uppercase.imports == []

        date = policy.pipe_handler("date")
        assert date.transform("d", "date") == "formatDate(d)"
        assert date.imports == [Import(names=["formatDate"], file="utils/date.ts")]

        router = policy.injection_handler("Router")
        assert router.transform("router", "Router", None) == "const router = useRouter(); // Router"

        # untouched defaults survive
        assert policy.pipe_handler("keyvalue") is not None

    def test_missing_policy_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_policy(str(tmp_path / "missing.yaml"))

    def test_malformed_policy_file(self, tmp_path):
        policy_file = tmp_path / "policy.yaml"
        policy_file.write_text("pipes: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_policy(str(policy_file))

    def test_section_must_be_mapping(self):
        with pytest.raises(ConfigurationError):
            PolicyRegistry().update({"pipes": ["uppercase"]})

    def test_import_needs_file(self):
        with pytest.raises(ConfigurationError):
            PolicyRegistry().update({"pipes": {"p": {"imports": [{"names": ["p"]}]}}})


class TestCallables:
    def test_register_callables(self):
        policy = PolicyRegistry()
        policy.register_pipe("json", PipeHandler(lambda inner, name: f"JSON.stringify({inner})"))
        policy.register_injection(
            "Store",
            InjectionHandler(lambda name, type_name, node=None: f"const {name} = useStore();"),
        )
        assert policy.pipe_handler("json").transform("x", "json") == "JSON.stringify(x)"
        assert policy.injection_handler("Store").transform("s", "Store") == "const s = useStore();"
        assert policy.pipe_names == ["json"]
        assert policy.injection_names == ["Store"]
